"""
2D Bin Packing Environment

This module implements the packing core with:
- Occupancy grid representation of the bin floor
- Items with optional 90 degree rotation
- Best-fit placement engine with a three-pass rotation fallback
- Largest free rectangle (hole) estimation
"""

from .container import Bin, PackOutcome, Strategy
from .grid import OccupancyGrid
from .holes import HOLE_METRICS, calculate_largest_hole, get_hole_metric, hole_area
from .item import Hole, Item, PlacedItem, generate_random_items
from .rect import Rect

__all__ = [
    "Bin",
    "PackOutcome",
    "Strategy",
    "OccupancyGrid",
    "HOLE_METRICS",
    "calculate_largest_hole",
    "get_hole_metric",
    "hole_area",
    "Hole",
    "Item",
    "PlacedItem",
    "generate_random_items",
    "Rect",
]
