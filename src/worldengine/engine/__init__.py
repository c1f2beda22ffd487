"""
World engine: grid storage and the operation executor.
"""

from .grid_manager import OccupancyMap, TileGrid
from .world_builder import Placement, WorldBuilder, generate, pick_weighted

__all__ = [
    "OccupancyMap",
    "TileGrid",
    "Placement",
    "WorldBuilder",
    "generate",
    "pick_weighted",
]
