"""
Integer rectangles with neighbor probing and directional growth.

Used by the largest-hole finder to grow free regions one row or column at a
time. Unlike PlacedItem, the far corner of a Rect is inclusive.
"""

from dataclasses import dataclass, replace
from typing import Optional

from .grid import OccupancyGrid
from .item import Hole


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle covering columns x0..x1 and rows y0..y1 inclusive."""

    x0: int
    y0: int
    x1: int
    y1: int

    def hole(self) -> Hole:
        return Hole(width=self.x1 - self.x0 + 1, height=self.y1 - self.y0 + 1)

    def is_obstructed(self, grid: OccupancyGrid) -> bool:
        """True if any covered cell is occupied in the grid."""
        return bool(grid.cells[self.y0:self.y1 + 1, self.x0:self.x1 + 1].any())

    # Neighbor strips: the one-cell-thick row or column just outside each
    # side, or None when that side lies on the grid border.

    def top_neighbors(self) -> Optional["Rect"]:
        if self.y0 == 0:
            return None
        return Rect(self.x0, self.y0 - 1, self.x1, self.y0 - 1)

    def bottom_neighbors(self, bin_height: int) -> Optional["Rect"]:
        if self.y1 + 1 == bin_height:
            return None
        return Rect(self.x0, self.y1 + 1, self.x1, self.y1 + 1)

    def right_neighbors(self, bin_width: int) -> Optional["Rect"]:
        if self.x1 + 1 == bin_width:
            return None
        return Rect(self.x1 + 1, self.y0, self.x1 + 1, self.y1)

    def left_neighbors(self) -> Optional["Rect"]:
        if self.x0 == 0:
            return None
        return Rect(self.x0 - 1, self.y0, self.x0 - 1, self.y1)

    def grow_left(self) -> "Rect":
        return replace(self, x0=self.x0 - 1)

    def grow_right(self) -> "Rect":
        return replace(self, x1=self.x1 + 1)

    def grow_up(self) -> "Rect":
        return replace(self, y0=self.y0 - 1)

    def grow_down(self) -> "Rect":
        return replace(self, y1=self.y1 + 1)
