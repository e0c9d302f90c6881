"""
Item, PlacedItem and Hole value types for 2D Bin Packing

An Item is a rectangle waiting to be packed. Once the placement engine has
found a spot for it, it is recorded as a PlacedItem carrying the final
position and whether it was turned 90 degrees. A Hole describes the size of
a free rectangular area left in the bin.

The item identifier is opaque: it is never interpreted by the packer, only
copied into the PlacedItem so callers can match results back to inputs.
"""

import numbers
import numpy as np
from typing import Generic, List, Optional, Tuple, TypeVar
from dataclasses import dataclass

I = TypeVar("I")


@dataclass
class Item(Generic[I]):
    """
    Rectangular item for 2D bin packing.

    Attributes:
        w (int): Horizontal extent before rotation
        h (int): Vertical extent before rotation
        allow_rotate (bool): Whether the packer may turn the item 90 degrees
        item_id: Caller-supplied identifier, echoed back in the solution
    """

    w: int
    h: int
    allow_rotate: bool = False
    item_id: Optional[I] = None

    def __post_init__(self):
        """Validate dimensions are positive whole cells."""
        for name in ("w", "h"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(
                    f"Item {name} must be an integer number of cells, got {value!r}"
                )
        if self.w <= 0 or self.h <= 0:
            raise ValueError(
                f"Item dimensions must be positive, got {self.w}x{self.h}"
            )

    @property
    def size(self) -> int:
        """Larger of the two dimensions; used for first-fit-decreasing order."""
        return max(self.w, self.h)

    @property
    def area(self) -> int:
        return self.w * self.h

    def get_dimensions(self, rotated: bool = False) -> Tuple[int, int]:
        """
        Get (width, height) of the item in the requested orientation.

        Args:
            rotated: If True, width and height are swapped

        Returns:
            Tuple of (width, height)
        """
        if rotated:
            return (self.h, self.w)
        return (self.w, self.h)

    def __repr__(self) -> str:
        rot = ", rotatable" if self.allow_rotate else ""
        return f"Item(id={self.item_id!r}, {self.w}x{self.h}{rot})"


@dataclass(frozen=True)
class PlacedItem(Generic[I]):
    """
    An item that has been placed in the bin.

    The item covers the half-open rectangle [x0, x1) x [y0, y1). The far
    corner already takes rotation into account.

    Attributes:
        x0 (int): Leftmost column covered
        y0 (int): Top row covered
        x1 (int): One past the rightmost column covered
        y1 (int): One past the bottom row covered
        rotated (bool): True if the item was turned 90 degrees to fit
        item_id: Identifier copied from the input Item
    """

    x0: int
    y0: int
    x1: int
    y1: int
    rotated: bool
    item_id: Optional[I] = None

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def area(self) -> int:
        return self.width * self.height

    def contains(self, pos: Tuple[int, int]) -> bool:
        """
        Check whether a grid coordinate lies inside the placed rectangle.

        Args:
            pos: (x, y) grid coordinate

        Returns:
            True if the cell is covered by this item
        """
        x, y = pos
        return self.x0 <= x < self.x1 and self.y0 <= y < self.y1

    def overlaps(self, other: "PlacedItem") -> bool:
        """Check whether two placed rectangles share at least one cell."""
        return (self.x0 < other.x1 and other.x0 < self.x1 and
                self.y0 < other.y1 and other.y0 < self.y1)


@dataclass(frozen=True)
class Hole:
    """
    A free, unused rectangular area. Only the size is recorded.

    Attributes:
        width (int): Horizontal extent of the free area
        height (int): Vertical extent of the free area
    """

    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0


def generate_random_items(n_items: int,
                          bin_size: Tuple[int, int],
                          size_range: Tuple[float, float] = (0.1, 0.5),
                          allow_rotate: bool = True,
                          seed: Optional[int] = None) -> List[Item[int]]:
    """
    Generate random items for testing and benchmarking.

    Args:
        n_items: Number of items to generate
        bin_size: Bin dimensions (width, height)
        size_range: Fraction of bin size for item dimensions (min, max)
        allow_rotate: Rotation flag given to every item
        seed: Random seed for reproducibility

    Returns:
        List of randomly generated items, identified 0..n_items-1

    Example:
        >>> items = generate_random_items(10, (100, 100), (0.1, 0.5), seed=0)
        >>> print(f"Generated {len(items)} items")
    """
    rng = np.random.RandomState(seed)

    min_frac, max_frac = size_range
    bin_w, bin_h = bin_size

    items = []
    for i in range(n_items):
        # Round to whole cells, at least one cell in each direction
        w = max(1, int(round(rng.uniform(min_frac, max_frac) * bin_w)))
        h = max(1, int(round(rng.uniform(min_frac, max_frac) * bin_h)))

        items.append(Item(w=w, h=h, allow_rotate=allow_rotate, item_id=i))

    return items
