"""
Raster export for generated worlds.
"""

from .debug_image import save_debug_image, world_to_base64, world_to_rgb

__all__ = ["save_debug_image", "world_to_base64", "world_to_rgb"]
