"""
Tile grid storage for a single generation run.

Background and foreground layers are numpy object arrays indexed
[y, x]; scatter placement uses a separate byte-per-cell occupancy map.
"""

from typing import List, Optional

import numpy as np


class TileGrid:
    """
    Two parallel tile-id grids, mutated only by the world builder.

    Background starts filled with the first declared background tile,
    foreground starts empty (None).
    """

    def __init__(self, width: int, height: int, default_bg: str):
        self.width = width
        self.height = height
        self.background = np.full((height, width), default_bg, dtype=object)
        self.foreground = np.full((height, width), None, dtype=object)

    def paint_rect(self, x: int, y: int, w: int, h: int, bg: str):
        self.background[y:y + h, x:x + w] = bg

    def new_occupancy(self) -> "OccupancyMap":
        return OccupancyMap(self.width, self.height)

    def to_cells(self) -> List[List[List[Optional[str]]]]:
        """Row-major [[bg, fg|None], ...] rows."""
        return [
            [[bg, fg] for bg, fg in zip(bg_row, fg_row)]
            for bg_row, fg_row in zip(self.background.tolist(), self.foreground.tolist())
        ]


class OccupancyMap:
    """One byte per cell; non-zero cells are covered by a placed prefab."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells = np.zeros((height, width), dtype=np.uint8)

    def can_place(self, x: int, y: int, w: int, h: int) -> bool:
        if x < 0 or y < 0 or x + w > self.width or y + h > self.height:
            return False
        return not self.cells[y:y + h, x:x + w].any()

    def mark(self, x: int, y: int, w: int, h: int):
        self.cells[y:y + h, x:x + w] = 1

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.cells))
