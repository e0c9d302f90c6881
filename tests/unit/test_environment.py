"""Unit tests for the packing environment."""

import itertools

import pytest
import numpy as np

from binpack2d.environment.container import Bin, PackOutcome, Strategy
from binpack2d.environment.grid import OccupancyGrid
from binpack2d.environment.holes import hole_width
from binpack2d.environment.item import Hole, Item, PlacedItem, generate_random_items
from binpack2d.environment.rect import Rect


def placements(bin_):
    return [(p.item_id, p.x0, p.y0, p.x1, p.y1, p.rotated) for p in bin_.solution()]


class TestOccupancyGrid:
    """Test OccupancyGrid class."""

    def test_grid_initialization(self):
        """Test grid starts empty with the requested shape."""
        grid = OccupancyGrid(width=7, height=4)

        assert grid.width == 7
        assert grid.height == 4
        assert grid.cells.shape == (4, 7)
        assert not grid.cells.any()

    @pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(ValueError):
            OccupancyGrid(width, height)

    def test_get_set_uses_x_as_column(self):
        grid = OccupancyGrid(5, 3)
        grid.set(4, 1, True)

        assert grid.get(4, 1) is True
        assert grid.get(1, 1) is False
        assert grid.cells[1, 4]

    def test_clear_keeps_allocation(self):
        """Test clear resets cells in place."""
        grid = OccupancyGrid(4, 4)
        cells = grid.cells
        grid.fill_rect(0, 0, 4, 4)
        grid.clear()

        assert grid.cells is cells
        assert grid.occupied_count == 0

    def test_fill_rect(self):
        grid = OccupancyGrid(10, 10)
        grid.fill_rect(2, 1, 3, 4)

        assert grid.occupied_count == 12
        assert grid.get(2, 1) and grid.get(4, 4)
        assert not grid.get(5, 1)
        assert not grid.get(2, 5)

    def test_is_region_free(self):
        grid = OccupancyGrid(10, 10)
        grid.fill_rect(0, 0, 10, 3)

        assert grid.is_region_free(0, 3, 10, 7)
        assert not grid.is_region_free(0, 2, 10, 2)
        # Out of bounds
        assert not grid.is_region_free(9, 5, 2, 1)
        assert not grid.is_region_free(0, 8, 1, 3)
        assert not grid.is_region_free(10, 0, 1, 1)

    def test_count_empty_neighbors(self):
        grid = OccupancyGrid(10, 10)

        # Against two walls only the right column and bottom row count
        assert grid.count_empty_neighbors(0, 0, 10, 3) == 10
        assert grid.count_empty_neighbors(0, 0, 2, 2) == 4
        # Interior block is exposed on all four sides
        assert grid.count_empty_neighbors(4, 4, 2, 3) == 2 * 3 + 2 * 2

        grid.fill_rect(0, 0, 10, 3)
        assert grid.count_empty_neighbors(0, 3, 10, 3) == 10
        assert grid.count_empty_neighbors(0, 3, 10, 7) == 0

    def test_as_array_is_a_copy(self):
        grid = OccupancyGrid(3, 3)
        snapshot = grid.as_array()
        snapshot[0, 0] = True

        assert not grid.get(0, 0)


class TestRect:
    """Test Rect helper."""

    def test_hole_is_inclusive(self):
        assert Rect(0, 0, 0, 0).hole() == Hole(1, 1)
        assert Rect(2, 3, 5, 3).hole() == Hole(4, 1)

    def test_neighbors_at_border(self):
        rect = Rect(0, 0, 9, 9)

        assert rect.top_neighbors() is None
        assert rect.left_neighbors() is None
        assert rect.right_neighbors(10) is None
        assert rect.bottom_neighbors(10) is None

    def test_neighbor_strips(self):
        rect = Rect(2, 3, 4, 5)

        assert rect.top_neighbors() == Rect(2, 2, 4, 2)
        assert rect.bottom_neighbors(10) == Rect(2, 6, 4, 6)
        assert rect.left_neighbors() == Rect(1, 3, 1, 5)
        assert rect.right_neighbors(10) == Rect(5, 3, 5, 5)

    def test_growth_returns_new_rect(self):
        rect = Rect(2, 3, 4, 5)

        assert rect.grow_left() == Rect(1, 3, 4, 5)
        assert rect.grow_right() == Rect(2, 3, 5, 5)
        assert rect.grow_up() == Rect(2, 2, 4, 5)
        assert rect.grow_down() == Rect(2, 3, 4, 6)
        assert rect == Rect(2, 3, 4, 5)

    def test_is_obstructed(self):
        grid = OccupancyGrid(5, 5)
        grid.set(3, 2, True)

        assert Rect(0, 2, 4, 2).is_obstructed(grid)
        assert Rect(3, 0, 3, 4).is_obstructed(grid)
        assert not Rect(0, 0, 4, 1).is_obstructed(grid)


class TestItem:
    """Test Item, PlacedItem and Hole."""

    def test_item_initialization(self):
        item = Item(w=2, h=5, allow_rotate=True, item_id="x")

        assert item.w == 2
        assert item.h == 5
        assert item.allow_rotate is True
        assert item.item_id == "x"
        assert item.size == 5
        assert item.area == 10

    def test_item_defaults(self):
        item = Item(w=1, h=1)

        assert item.allow_rotate is False
        assert item.item_id is None

    @pytest.mark.parametrize("w,h", [(0, 3), (3, 0), (-2, 2)])
    def test_non_positive_dimensions_rejected(self, w, h):
        with pytest.raises(ValueError):
            Item(w=w, h=h)

    @pytest.mark.parametrize("w,h", [(2.5, 2), (2, 3.0), (True, 2), ("4", 4)])
    def test_fractional_dimensions_rejected(self, w, h):
        with pytest.raises(ValueError, match="integer number of cells"):
            Item(w=w, h=h)

    def test_numpy_integer_dimensions_accepted(self):
        item = Item(w=np.int64(3), h=np.int32(2))

        assert item.area == 6

    def test_get_dimensions(self):
        item = Item(w=2, h=5)

        assert item.get_dimensions() == (2, 5)
        assert item.get_dimensions(rotated=True) == (5, 2)

    def test_placed_item_contains(self):
        placed = PlacedItem(x0=0, y0=9, x1=10, y1=10, rotated=True, item_id="C")

        assert placed.contains((0, 9))
        assert placed.contains((9, 9))
        assert not placed.contains((5, 8))
        assert not placed.contains((10, 9))
        assert not placed.contains((5, 10))
        assert (placed.width, placed.height, placed.area) == (10, 1, 10)

    def test_placed_item_overlaps(self):
        a = PlacedItem(0, 0, 5, 5, False, "a")
        touching = PlacedItem(5, 0, 8, 5, False, "b")
        crossing = PlacedItem(4, 4, 6, 6, False, "c")

        assert not a.overlaps(touching)
        assert a.overlaps(crossing)
        assert crossing.overlaps(a)

    def test_hole(self):
        assert Hole(3, 4).area == 12
        assert Hole(0, 0).is_empty
        assert not Hole(1, 1).is_empty

    def test_generate_random_items(self):
        items = generate_random_items(20, (50, 30), seed=7)
        again = generate_random_items(20, (50, 30), seed=7)

        assert len(items) == 20
        assert items == again
        assert [item.item_id for item in items] == list(range(20))
        assert all(1 <= item.w <= 25 and 1 <= item.h <= 15 for item in items)
        assert all(item.allow_rotate for item in items)


class TestBin:
    """Test Bin construction and accessors."""

    def test_bin_initialization(self):
        bin_ = Bin(12, 7)

        assert bin_.width == 12
        assert bin_.height == 7
        assert bin_.solution() == ()
        assert bin_.get_largest_hole() == Hole(12, 7)
        assert bin_.outcome is None
        assert bin_.utilization == 0.0

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (0, 0)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(ValueError):
            Bin(width, height)

    def test_take_solution(self, empty_bin, planks_items):
        empty_bin.place_all(planks_items)
        taken = empty_bin.take_solution()

        assert isinstance(taken, list)
        assert len(taken) == 4
        assert empty_bin.solution() == ()

    def test_reset(self, empty_bin, planks_items):
        empty_bin.place_all(planks_items)
        empty_bin.reset()

        assert empty_bin.solution() == ()
        assert empty_bin.grid.occupied_count == 0
        assert empty_bin.get_largest_hole() == Hole(10, 10)
        assert empty_bin.outcome is None

        assert empty_bin.place_all(planks_items) is True

    def test_repr(self, empty_bin):
        assert repr(empty_bin) == "Bin(10x10, placed=0, util=0.00%)"


class TestBestFit:
    """Test single-item best-fit placement."""

    def test_first_item_goes_to_corner(self, empty_bin):
        assert empty_bin.add_to_best_fit(Item(2, 2, item_id=1), Strategy.DO_NOT_ROTATE)
        assert placements(empty_bin) == [(1, 0, 0, 2, 2, False)]

    def test_second_item_hugs_first(self, empty_bin):
        """Equal scores keep the first anchor found in row-major order."""
        empty_bin.add_to_best_fit(Item(2, 2, item_id=1), Strategy.DO_NOT_ROTATE)
        empty_bin.add_to_best_fit(Item(2, 2, item_id=2), Strategy.DO_NOT_ROTATE)

        assert placements(empty_bin)[1] == (2, 2, 0, 4, 2, False)

    def test_item_fills_remaining_slot(self, empty_bin):
        empty_bin.grid.fill_rect(0, 0, 10, 9)
        item = Item(10, 1, item_id="row")

        assert empty_bin.add_to_best_fit(item, Strategy.DO_NOT_ROTATE)
        assert placements(empty_bin) == [("row", 0, 9, 10, 10, False)]

    def test_evaluate_fit(self, empty_bin):
        assert empty_bin.evaluate_fit(0, 0, 10, 3) == 10
        assert empty_bin.evaluate_fit(8, 0, 3, 1) is None

        empty_bin.grid.set(5, 5, True)
        assert empty_bin.evaluate_fit(4, 4, 2, 2) is None

    def test_trivial_rejection_skips_scan(self, empty_bin):
        """An item larger than the bin in both directions is not scanned."""
        calls = []

        def cancel():
            calls.append(1)
            return False

        assert not empty_bin.add_to_best_fit(Item(11, 12, allow_rotate=True),
                                             Strategy.ROTATE_IF_SUITABLE, cancel)
        assert calls == []

    def test_do_not_rotate_ignores_rotation(self, empty_bin):
        empty_bin.grid.fill_rect(0, 0, 10, 9)
        item = Item(1, 10, allow_rotate=True)

        assert not empty_bin.add_to_best_fit(item, Strategy.DO_NOT_ROTATE)
        assert empty_bin.add_to_best_fit(item, Strategy.ROTATE_IF_SUITABLE)
        assert empty_bin.solution()[0].rotated

    def test_rotate_strategy_rotates_rotatable_items(self, empty_bin):
        assert empty_bin.add_to_best_fit(Item(3, 2, allow_rotate=True), Strategy.ROTATE)

        placed = empty_bin.solution()[0]
        assert placed.rotated
        assert (placed.width, placed.height) == (2, 3)

    def test_rotate_strategy_keeps_fixed_items_upright(self, empty_bin):
        assert empty_bin.add_to_best_fit(Item(3, 2, allow_rotate=False), Strategy.ROTATE)

        placed = empty_bin.solution()[0]
        assert not placed.rotated
        assert (placed.width, placed.height) == (3, 2)

    def test_rotate_if_suitable_prefers_original_on_tie(self, empty_bin):
        assert empty_bin.add_to_best_fit(Item(10, 3, allow_rotate=True),
                                         Strategy.ROTATE_IF_SUITABLE)
        assert placements(empty_bin) == [(None, 0, 0, 10, 3, False)]

    def test_zero_dimension_is_fatal(self, empty_bin):
        item = Item(2, 2)
        item.w = 0

        with pytest.raises(ValueError):
            empty_bin.add_to_best_fit(item, Strategy.DO_NOT_ROTATE)


class TestPlaceAll:
    """Test the multi-pass packing loop."""

    def test_planks_scenario(self, empty_bin, planks_items, check_solution):
        """Three planks stack in rows; the strip only fits rotated along the bottom."""
        assert empty_bin.place_all(planks_items, lambda: False) is True

        assert placements(empty_bin) == [
            ("D", 0, 0, 10, 3, False),
            ("A", 0, 3, 10, 6, False),
            ("B", 0, 6, 10, 9, False),
            ("C", 0, 9, 10, 10, True),
        ]
        assert empty_bin.outcome == PackOutcome.FIT
        assert empty_bin.utilization == 1.0
        check_solution(empty_bin, planks_items)

    def test_largest_hole_is_best_seen_across_passes(self, empty_bin, planks_items):
        """The full bin of the last pass does not replace an earlier, larger hole."""
        empty_bin.place_all(planks_items)

        assert empty_bin.calculate_largest_hole() == Hole(0, 0)
        assert empty_bin.get_largest_hole() == Hole(10, 1)

    def test_rotated_pass_success_reports_its_own_hole(self):
        """A plank that only fits sideways ends packing after the rotated pass."""
        bin_ = Bin(3, 10)
        calls = []

        def cancel():
            calls.append(1)
            return False

        assert bin_.place_all([Item(10, 3, True, "p")], cancel) is True

        assert placements(bin_) == [("p", 0, 0, 3, 10, True)]
        assert bin_.outcome == PackOutcome.FIT
        # The failed upright pass left the whole bin free; that hole is dropped
        assert bin_.get_largest_hole() == Hole(0, 0)
        # Upright: 8 rows + 1, poll before the rotated pass, rotated: 1 row + 1
        assert len(calls) == 12

    def test_item_larger_than_bin(self):
        bin_ = Bin(1, 1)
        items = [Item(2, 2, allow_rotate=True, item_id="big")]

        assert bin_.place_all(items, lambda: False) is False
        assert bin_.solution() == ()
        assert bin_.outcome == PackOutcome.NO_FIT
        assert bin_.get_largest_hole() == Hole(1, 1)

    def test_overfull_with_width_metric(self, empty_bin, overfull_items, check_solution):
        empty_bin.set_metric(hole_width)

        assert empty_bin.place_all(overfull_items, lambda: False) is False
        assert placements(empty_bin) == [
            ("A", 0, 0, 10, 3, False),
            ("C", 0, 3, 10, 8, False),
        ]
        # Two free rows at the bottom
        assert empty_bin.get_largest_hole().width == 10
        assert empty_bin.get_largest_hole() == Hole(10, 2)
        check_solution(empty_bin, overfull_items)

    def test_metric_from_constructor(self, overfull_items):
        bin_ = Bin(10, 10, metric=hole_width)
        bin_.place_all(overfull_items)

        assert bin_.metric is hole_width
        assert bin_.get_largest_hole() == Hole(10, 2)

    def test_empty_input(self):
        bin_ = Bin(7, 4)

        assert bin_.place_all([]) is True
        assert bin_.solution() == ()
        assert bin_.get_largest_hole() == Hole(7, 4)

    def test_accepts_any_iterable(self, empty_bin, planks_items):
        assert empty_bin.place_all(iter(planks_items)) is True

    def test_sort_is_stable_for_equal_sizes(self):
        bin_ = Bin(6, 6)
        items = [Item(3, 3, item_id=name) for name in "wxyz"]

        assert bin_.place_all(items) is True
        assert [p.item_id for p in bin_.solution()] == list("wxyz")

    def test_larger_items_placed_first(self):
        bin_ = Bin(10, 10)
        items = [Item(1, 1, item_id="small"), Item(4, 2, item_id="mid"),
                 Item(2, 6, item_id="large")]

        bin_.place_all(items)
        assert [p.item_id for p in bin_.solution()] == ["large", "mid", "small"]

    def test_fixed_items_are_never_rotated(self, empty_bin, planks_items, check_solution):
        for item in planks_items:
            item.allow_rotate = False

        assert empty_bin.place_all(planks_items) is False
        assert [p.item_id for p in empty_bin.solution()] == ["D", "A", "B"]
        assert not any(p.rotated for p in empty_bin.solution())
        assert empty_bin.outcome == PackOutcome.NO_FIT
        check_solution(empty_bin, planks_items)

    def test_zero_dimension_is_fatal(self, empty_bin):
        item = Item(2, 2)
        item.h = 0

        with pytest.raises(ValueError):
            empty_bin.place_all([item])

    def test_determinism(self):
        items = generate_random_items(30, (20, 20), seed=3)
        first = Bin(20, 20)
        second = Bin(20, 20)

        first.place_all(items)
        second.place_all(items)

        assert first.solution() == second.solution()
        assert first.get_largest_hole() == second.get_largest_hole()
        assert np.array_equal(first.grid.cells, second.grid.cells)

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_random_solutions_are_valid(self, seed, check_solution):
        items = generate_random_items(25, (16, 12), size_range=(0.1, 0.6), seed=seed)
        items[::3] = [Item(i.w, i.h, False, i.item_id) for i in items[::3]]
        bin_ = Bin(16, 12)

        all_fit = bin_.place_all(items)

        assert all_fit == (bin_.num_placed == len(items))
        check_solution(bin_, items)


class TestCancellation:
    """Test cooperative cancellation."""

    def test_immediate_cancel(self, empty_bin, planks_items):
        assert empty_bin.place_all(planks_items, lambda: True) is False
        assert empty_bin.solution() == ()
        assert empty_bin.outcome == PackOutcome.CANCELED

    def test_polled_per_row_and_per_item(self):
        """One row scanned and one item attempted: two polls."""
        bin_ = Bin(10, 10)
        calls = []

        def cancel():
            calls.append(1)
            return False

        assert bin_.place_all([Item(10, 10)], cancel) is True
        assert len(calls) == 2

    def test_cancel_mid_pass_keeps_partial_state(self, empty_bin, planks_items):
        """The third poll is the first row scan of the second item."""
        counter = itertools.count()

        result = empty_bin.place_all(planks_items, lambda: next(counter) >= 2)

        assert result is False
        assert placements(empty_bin) == [("D", 0, 0, 10, 3, False)]
        assert empty_bin.outcome == PackOutcome.CANCELED

    def test_cancel_before_rotated_pass(self, empty_bin, planks_items):
        """Pass 1 runs to completion and fails; the poll before pass 2 stops it."""
        calls = []

        def cancel():
            calls.append(1)
            # Pass 1 polls: D 1 row + 1, A 4 rows + 1, B 7 rows + 1, C 10 rows + 1
            return len(calls) > 26

        assert empty_bin.place_all(planks_items, cancel) is False
        assert len(calls) == 27
        assert [p.item_id for p in empty_bin.solution()] == ["D", "A", "B"]
        assert empty_bin.outcome == PackOutcome.CANCELED

    def test_cancel_is_not_sticky_across_calls(self, empty_bin, planks_items):
        empty_bin.place_all(planks_items, lambda: True)
        empty_bin.reset()

        assert empty_bin.place_all(planks_items, lambda: False) is True
        assert empty_bin.outcome == PackOutcome.FIT
