"""
Core river network editing functionality.
"""

from .raster import RasterBuffer
from .roles import Role, role_of, cardinal_neighbor_count, role_map, neighbor_counts
from .network import reclassify_region, reclassify_all, detect_junction
from .stroke import Tool, Stroke, StrokeRasterizer, cardinal_path
from .history import HistoryManager
from .bmp import encode_bmp
from .session import EditorSession, SessionState, StrokeEvent, StrokePhase

__all__ = ['RasterBuffer', 'Role', 'role_of', 'cardinal_neighbor_count', 'role_map',
           'neighbor_counts', 'reclassify_region', 'reclassify_all', 'detect_junction',
           'Tool', 'Stroke', 'StrokeRasterizer', 'cardinal_path', 'HistoryManager',
           'encode_bmp', 'EditorSession', 'SessionState', 'StrokeEvent', 'StrokePhase']
