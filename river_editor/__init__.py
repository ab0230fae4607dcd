"""
River network editor.

Draw source, channel and junction pixels onto a raster grid and export
the result as a 24-bit BMP texture.
"""

__version__ = "0.1.0"
