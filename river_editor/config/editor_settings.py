"""
Configuration settings for the river editor.

Limits for editing sessions and history. The role color table is fixed
and deliberately not configurable here.
"""

from pydantic import BaseModel, Field


class HistorySettings(BaseModel):
    """Settings for undo/redo history."""

    capacity: int = Field(default=50, ge=1, description="Maximum snapshots kept per session")


class SessionSettings(BaseModel):
    """Settings for the in-memory session registry."""

    max_sessions: int = Field(default=16, ge=1, description="Maximum concurrently open sessions")
    max_events_per_request: int = Field(
        default=10000, ge=1, description="Maximum stroke events accepted in one request"
    )


class EditorSettings(BaseModel):
    """Complete editor configuration."""

    history: HistorySettings = Field(default_factory=HistorySettings)
    sessions: SessionSettings = Field(default_factory=SessionSettings)


# Default settings instance
default_editor_settings = EditorSettings()


def get_editor_settings() -> EditorSettings:
    """Get the current editor settings."""
    return default_editor_settings
