"""
Bin Class with Occupancy Grid Representation

Implements the bin (container) for 2D packing and the placement engine that
fills it. Items are placed first-fit-decreasing by their larger side; each
item goes to the free position where it touches the fewest empty cells, so
items hug the walls and each other.

Up to three passes are made over the items, each with a different rotation
policy:
1. DO_NOT_ROTATE: every item in its original orientation
2. ROTATE: every rotatable item turned 90 degrees
3. ROTATE_IF_SUITABLE: whichever orientation fits better, per item
Later passes only run when the earlier ones could not place every item, and
each starts again from an empty bin.
"""

import logging
from enum import Enum
from typing import Callable, Generic, Iterable, List, Optional, Tuple

from .grid import OccupancyGrid
from .holes import HoleMetric, calculate_largest_hole, hole_area
from .item import Hole, I, Item, PlacedItem

logger = logging.getLogger(__name__)

CancelPredicate = Callable[[], bool]


class Strategy(Enum):
    """Which orientations the engine considers during one packing pass."""
    DO_NOT_ROTATE = "do_not_rotate"
    ROTATE = "rotate"
    ROTATE_IF_SUITABLE = "rotate_if_suitable"


class PackOutcome(Enum):
    """Why the last place_all call returned what it did."""
    FIT = "fit"
    NO_FIT = "no_fit"
    CANCELED = "canceled"


def _never_cancel() -> bool:
    return False


class Bin(Generic[I]):
    """
    2D bin with an occupancy grid and a best-fit placement engine.

    The bin owns all packing state: the grid, the placed items in placement
    order, and the largest free hole measured after the last place_all call.

    Cancellation is cooperative. The cancel predicate is polled before each
    rotated pass, once per row of the best-fit scan, and once after every
    item's placement attempt. Once it returns True the current pass stops and
    place_all returns False, leaving the partial solution in place.

    Attributes:
        grid (OccupancyGrid): Cell occupancy of the bin floor
        placed_items (List[PlacedItem]): Placed items in placement order
        largest_hole (Hole): Largest free area after the last place_all
        metric: Function scoring holes; larger is better
        outcome (Optional[PackOutcome]): Result of the last place_all
    """

    def __init__(self, width: int, height: int,
                 metric: Optional[HoleMetric] = None):
        """
        Initialize bin.

        Args:
            width: Number of columns, at least 1
            height: Number of rows, at least 1
            metric: Hole scoring function (default: area)
        """
        if width < 1 or height < 1:
            raise ValueError("Bin dimensions must be positive")

        self.grid = OccupancyGrid(width, height)
        self.placed_items: List[PlacedItem[I]] = []
        self.largest_hole = Hole(width=width, height=height)
        self.metric: HoleMetric = metric if metric is not None else hole_area
        self.outcome: Optional[PackOutcome] = None
        self._canceled = False

    @property
    def width(self) -> int:
        """Bin width, as given at construction."""
        return self.grid.width

    @property
    def height(self) -> int:
        """Bin height, as given at construction."""
        return self.grid.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def placed_area(self) -> int:
        return sum(placed.area for placed in self.placed_items)

    @property
    def utilization(self) -> float:
        """Placed area / bin area."""
        return self.placed_area / self.area

    @property
    def num_placed(self) -> int:
        return len(self.placed_items)

    def solution(self) -> Tuple[PlacedItem[I], ...]:
        """
        Return the placed items.

        If some items could not fit, fewer items are returned than were
        passed to place_all. The solution is not in general optimal.
        """
        return tuple(self.placed_items)

    def take_solution(self) -> List[PlacedItem[I]]:
        """Hand the placed items over to the caller, leaving the bin's list empty."""
        items = self.placed_items
        self.placed_items = []
        return items

    def set_metric(self, metric: HoleMetric):
        """
        Set how holes are measured for get_largest_hole.

        Must be called before place_all to have any effect. Default is area.

        Args:
            metric: Callable mapping a Hole to a comparable score
        """
        self.metric = metric

    def measure(self, hole: Hole):
        return self.metric(hole)

    def get_largest_hole(self) -> Hole:
        """Largest free area found after the most recent place_all."""
        return self.largest_hole

    def calculate_largest_hole(self) -> Hole:
        """Compute the largest free area of the current grid."""
        return calculate_largest_hole(self.grid, self.metric)

    def reset(self):
        """Reset bin to empty state so place_all can be called again."""
        self._clear_placements()
        self.largest_hole = Hole(width=self.width, height=self.height)
        self.outcome = None
        self._canceled = False

    def _clear_placements(self):
        self.grid.clear()
        self.placed_items.clear()

    def _should_stop(self, cancel: CancelPredicate) -> bool:
        # Latches: once canceled, every later poll in this call reports True
        if cancel():
            self._canceled = True
        return self._canceled

    def _keep_larger_hole(self, hole: Hole):
        if self.measure(hole) > self.measure(self.largest_hole):
            self.largest_hole = hole

    def _finish(self, placed: bool) -> bool:
        if placed:
            self.outcome = PackOutcome.FIT
        elif self._canceled:
            self.outcome = PackOutcome.CANCELED
        else:
            self.outcome = PackOutcome.NO_FIT
        logger.debug("place_all finished: %s, %d items placed, largest hole %dx%d",
                     self.outcome.value, self.num_placed,
                     self.largest_hole.width, self.largest_hole.height)
        return placed

    def place_all(self, items: Iterable[Item[I]],
                  cancel: Optional[CancelPredicate] = None) -> bool:
        """
        Place all the given items.

        Args:
            items: Items to pack, in any order
            cancel: Zero-argument predicate; returning True stops packing

        Returns:
            True if every item was placed. The placements are available from
            solution().

        Raises:
            ValueError: If an item has a non-positive dimension
        """
        if cancel is None:
            cancel = _never_cancel
        self._canceled = False

        input_items = sorted(items, key=lambda item: item.size, reverse=True)
        any_rotatable = any(item.allow_rotate for item in input_items)
        logger.debug("Packing %d items into %dx%d bin",
                     len(input_items), self.width, self.height)

        placed = self._place_all_impl(input_items, Strategy.DO_NOT_ROTATE, cancel)
        self.largest_hole = self.calculate_largest_hole()
        if placed:
            return self._finish(True)
        if not any_rotatable:
            # Rotated passes cannot do better when nothing may rotate
            return self._finish(False)
        if self._should_stop(cancel):
            return self._finish(False)

        self._clear_placements()
        if self._place_all_impl(input_items, Strategy.ROTATE, cancel):
            self.largest_hole = self.calculate_largest_hole()
            return self._finish(True)
        self._keep_larger_hole(self.calculate_largest_hole())
        if self._should_stop(cancel):
            return self._finish(False)

        self._clear_placements()
        placed = self._place_all_impl(input_items, Strategy.ROTATE_IF_SUITABLE, cancel)
        self._keep_larger_hole(self.calculate_largest_hole())
        return self._finish(placed)

    def _place_all_impl(self, items: List[Item[I]], strategy: Strategy,
                        cancel: CancelPredicate) -> bool:
        all_fit = True
        for item in items:
            if not self.add_to_best_fit(item, strategy, cancel):
                all_fit = False
            if self._should_stop(cancel):
                logger.debug("Pass %s canceled after %d items placed",
                             strategy.value, self.num_placed)
                return False
        logger.debug("Pass %s placed %d/%d items",
                     strategy.value, self.num_placed, len(items))
        return all_fit

    def place(self, x0: int, y0: int, item: Item[I], rotated: bool):
        """
        Stamp an item into the grid and record it in the solution.

        Args:
            x0, y0: Top-left corner
            item: Item to place
            rotated: Whether the item is turned 90 degrees
        """
        w, h = item.get_dimensions(rotated)
        self.grid.fill_rect(x0, y0, w, h)
        self.placed_items.append(PlacedItem(
            x0=x0,
            y0=y0,
            x1=x0 + w,
            y1=y0 + h,
            rotated=rotated,
            item_id=item.item_id,
        ))

    def evaluate_fit(self, x0: int, y0: int, w: int, h: int) -> Optional[int]:
        """
        Score a candidate placement.

        Args:
            x0, y0: Top-left corner
            w, h: Extent in the orientation being tried

        Returns:
            Number of empty cells touching the candidate's sides (lower is a
            tighter fit), or None if the candidate leaves the bin or overlaps
            an occupied cell
        """
        if not self.grid.is_region_free(x0, y0, w, h):
            return None
        return self.grid.count_empty_neighbors(x0, y0, w, h)

    def add_to_best_fit(self, item: Item[I], strategy: Strategy,
                        cancel: Optional[CancelPredicate] = None) -> bool:
        """
        Place one item at its best-scoring position.

        Anchors are scanned row by row, top to bottom and left to right. At
        each anchor the original orientation is tried before the rotated one,
        and only a strictly lower score replaces the current best, so the
        first of equally good candidates wins. Once a row without any
        occupied cell is finished and a candidate is already known, lower
        rows are not scanned.

        Args:
            item: Item to place
            strategy: Rotation policy of the current pass
            cancel: Cancellation predicate, polled once per row

        Returns:
            True if the item was placed
        """
        if cancel is None:
            cancel = _never_cancel
        if item.w <= 0 or item.h <= 0:
            raise ValueError("Item size must not be 0 in any dimension")
        if item.w > self.width and item.h > self.height:
            return False

        try_original = strategy != Strategy.ROTATE or not item.allow_rotate
        try_rotated = item.allow_rotate and strategy != Strategy.DO_NOT_ROTATE

        smallest_dim = min(item.w, item.h)
        x_limit = max(0, self.width - (smallest_dim - 1))
        y_limit = max(0, self.height - (smallest_dim - 1))

        best_score = None
        best_fit = None
        for y in range(y_limit):
            if self._should_stop(cancel):
                return False
            had_busy = bool(self.grid.cells[y, :x_limit].any())
            for x in range(x_limit):
                if try_original:
                    score = self.evaluate_fit(x, y, item.w, item.h)
                    if score is not None and (best_score is None or score < best_score):
                        best_score = score
                        best_fit = (x, y, False)
                if try_rotated:
                    score = self.evaluate_fit(x, y, item.h, item.w)
                    if score is not None and (best_score is None or score < best_score):
                        best_score = score
                        best_fit = (x, y, True)
            if not had_busy and best_fit is not None:
                break

        if best_fit is None:
            return False
        fit_x, fit_y, rotated = best_fit
        self.place(fit_x, fit_y, item, rotated)
        return True

    def __repr__(self) -> str:
        return (f"Bin({self.width}x{self.height}, placed={self.num_placed}, "
                f"util={self.utilization:.2%})")
