"""
Occupancy Grid

Dense boolean map of the bin floor. Each cell is True once a placed item
covers it. The grid is stored row-major as a numpy array indexed [y, x], so
rows are the vertical coordinate and columns the horizontal one.
"""

import numpy as np


class OccupancyGrid:
    """
    Fixed-size 2D boolean occupancy grid.

    Attributes:
        width (int): Number of columns (X-dimension)
        height (int): Number of rows (Y-dimension)
        cells (np.ndarray): Boolean array of shape (height, width)
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(
                f"Width and height must both be > 0, got {width}x{height}"
            )

        self.width = width
        self.height = height
        self.cells = np.zeros((height, width), dtype=bool)

    def get(self, x: int, y: int) -> bool:
        """Return True if cell (x, y) is occupied. Caller checks bounds."""
        return bool(self.cells[y, x])

    def set(self, x: int, y: int, value: bool):
        self.cells[y, x] = value

    def clear(self):
        """Reset every cell to free, keeping the allocation."""
        self.cells.fill(False)

    def fill_rect(self, x0: int, y0: int, w: int, h: int):
        """Mark the w x h block with top-left corner (x0, y0) as occupied."""
        self.cells[y0:y0 + h, x0:x0 + w] = True

    def in_bounds(self, x0: int, y0: int, w: int, h: int) -> bool:
        return (0 <= x0 < self.width and 0 <= y0 < self.height and
                x0 + w <= self.width and y0 + h <= self.height)

    def is_region_free(self, x0: int, y0: int, w: int, h: int) -> bool:
        """
        Check that a block lies inside the grid and touches no occupied cell.

        Args:
            x0, y0: Top-left corner
            w, h: Block extent

        Returns:
            True if the block can be occupied
        """
        if not self.in_bounds(x0, y0, w, h):
            return False
        return not self.cells[y0:y0 + h, x0:x0 + w].any()

    def count_empty_neighbors(self, x0: int, y0: int, w: int, h: int) -> int:
        """
        Count free in-grid cells directly adjacent to a block's four sides.

        Corner-diagonal cells are not counted. Sides lying on the grid
        border contribute nothing.

        Args:
            x0, y0: Top-left corner
            w, h: Block extent (block must be in bounds)

        Returns:
            Number of empty neighbor cells
        """
        cells = self.cells
        points = 0
        if x0 > 0:
            points += h - int(cells[y0:y0 + h, x0 - 1].sum())
        if x0 + w < self.width:
            points += h - int(cells[y0:y0 + h, x0 + w].sum())
        if y0 > 0:
            points += w - int(cells[y0 - 1, x0:x0 + w].sum())
        if y0 + h < self.height:
            points += w - int(cells[y0 + h, x0:x0 + w].sum())
        return points

    @property
    def occupied_count(self) -> int:
        return int(self.cells.sum())

    def as_array(self) -> np.ndarray:
        """Copy of the grid for rendering or analysis."""
        return self.cells.copy()

    def __repr__(self) -> str:
        return (f"OccupancyGrid({self.width}x{self.height}, "
                f"occupied={self.occupied_count})")
