"""
Largest-Hole Finder

Estimates the largest free rectangle left in an occupancy grid. Reported by
the bin after packing as a measure of unused capacity.

The search runs in two stages:
1. A discrete chessboard distance transform, seeded from occupied cells and
   from the outside of the grid, marks how deep each free cell sits inside
   its pocket of free space.
2. Every cell at the maximum depth seeds a 1x1 rectangle which is grown
   greedily, one row or column at a time, until every side is blocked.

This is a heuristic: a different growth order or seed can sometimes reach a
bigger rectangle than the one reported.
"""

import logging
import numpy as np
from typing import Any, Callable, Dict, Tuple

from .grid import OccupancyGrid
from .item import Hole
from .rect import Rect

logger = logging.getLogger(__name__)

HoleMetric = Callable[[Hole], Any]

UNSET = -1


def hole_area(hole: Hole) -> int:
    return hole.width * hole.height


def hole_width(hole: Hole) -> int:
    return hole.width


def hole_height(hole: Hole) -> int:
    return hole.height


def hole_min_side(hole: Hole) -> int:
    return min(hole.width, hole.height)


def hole_perimeter(hole: Hole) -> int:
    return 2 * (hole.width + hole.height)


# Named metrics selectable from configuration files
HOLE_METRICS: Dict[str, HoleMetric] = {
    "area": hole_area,
    "width": hole_width,
    "height": hole_height,
    "min_side": hole_min_side,
    "perimeter": hole_perimeter,
}


def get_hole_metric(name: str) -> HoleMetric:
    """
    Look up a named hole metric.

    Args:
        name: One of the keys of HOLE_METRICS

    Returns:
        Metric callable mapping a Hole to a comparable score
    """
    try:
        return HOLE_METRICS[name]
    except KeyError:
        raise ValueError(
            f"Unknown hole metric '{name}', expected one of {sorted(HOLE_METRICS)}"
        ) from None


def distance_transform(grid: OccupancyGrid) -> Tuple[np.ndarray, int]:
    """
    Chessboard distance of every cell to the nearest occupied cell or border.

    Occupied cells get 0. Cells outside the grid count as 0 as well, so a
    free cell on the border gets 1. The map is filled one wavefront at a
    time: a free cell receives d + 1 as soon as any of its 8 neighbors holds
    d.

    Args:
        grid: Occupancy grid to analyse

    Returns:
        (distance map of shape (height, width), maximum distance reached)
    """
    height, width = grid.height, grid.width
    dist = np.where(grid.cells, 0, UNSET).astype(np.int64)

    d = 0
    while True:
        padded = np.pad(dist, 1, mode="constant", constant_values=0)
        reached = np.zeros((height, width), dtype=bool)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                reached |= padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width] == d

        frontier = (dist == UNSET) & reached
        if not frontier.any():
            break
        dist[frontier] = d + 1
        d += 1

    return dist, d


def grow_rect(rect: Rect, grid: OccupancyGrid, metric: HoleMetric) -> Rect:
    """
    Grow a free rectangle until no side can be extended.

    Each step prefers the axis whose growth would score higher under the
    metric (horizontal wins only on a strictly higher score). Within an
    axis, left is tried before right and up before down. If neither side of
    the preferred axis is free, the other axis is tried.

    Args:
        rect: Starting rectangle, assumed free
        grid: Occupancy grid used to test the neighbor strips
        metric: Hole scoring function

    Returns:
        The grown rectangle
    """
    while True:
        if metric(rect.grow_right().hole()) > metric(rect.grow_down().hole()):
            axes = (True, False)
        else:
            axes = (False, True)

        progress = False
        for horizontal in axes:
            if horizontal:
                sides = ((rect.left_neighbors(), rect.grow_left),
                         (rect.right_neighbors(grid.width), rect.grow_right))
            else:
                sides = ((rect.top_neighbors(), rect.grow_up),
                         (rect.bottom_neighbors(grid.height), rect.grow_down))

            for strip, grow in sides:
                if strip is not None and not strip.is_obstructed(grid):
                    rect = grow()
                    progress = True
                    break
            if progress:
                break

        if not progress:
            return rect


def calculate_largest_hole(grid: OccupancyGrid,
                           metric: HoleMetric = hole_area) -> Hole:
    """
    Find (approximately) the largest free rectangle in the grid.

    Args:
        grid: Occupancy grid to analyse
        metric: Hole scoring function; larger scores are better

    Returns:
        Size of the best hole found, or Hole(0, 0) if the grid is full
    """
    dist, max_dist = distance_transform(grid)
    if max_dist == 0:
        return Hole(width=0, height=0)

    best_hole = Hole(width=0, height=0)
    best_score = metric(best_hole)

    seeds = np.argwhere(dist == max_dist)
    for y, x in seeds:
        x, y = int(x), int(y)
        rect = grow_rect(Rect(x, y, x, y), grid, metric)
        hole = rect.hole()
        score = metric(hole)
        if score > best_score:
            best_score = score
            best_hole = hole

    logger.debug("Largest hole %dx%d from %d seeds at depth %d",
                 best_hole.width, best_hole.height, len(seeds), max_dist)
    return best_hole
