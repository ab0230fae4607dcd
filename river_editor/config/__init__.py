"""
Configuration for the river editor.
"""

from .config import Settings, settings
from .editor_settings import EditorSettings, get_editor_settings

__all__ = ['Settings', 'settings', 'EditorSettings', 'get_editor_settings']
