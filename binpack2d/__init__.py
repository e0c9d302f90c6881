"""
2D Bin Packing with Best-Fit Placement

Packs rectangular items into a single fixed-size bin. Items are placed
first-fit-decreasing at the position where they touch the fewest empty
cells, with up to three passes trying different rotation policies. After
packing, the largest remaining free rectangle is reported.
"""

from .environment import Bin, Hole, Item, PackOutcome, PlacedItem

__version__ = "0.1.0"

__all__ = ["Bin", "Hole", "Item", "PackOutcome", "PlacedItem"]
