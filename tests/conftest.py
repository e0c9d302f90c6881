"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path

from binpack2d.environment.container import Bin
from binpack2d.environment.item import Item
from binpack2d.utils.config import load_config


@pytest.fixture(scope="session")
def test_config():
    """Load the example job, or an equivalent in-memory config."""
    config_path = Path("config/default.yaml")
    if not config_path.exists():
        return {
            "bin": {"width": 10, "height": 10},
            "packing": {"hole_metric": "area", "time_limit": None},
            "items": [
                {"w": 10, "h": 3, "allow_rotate": True, "id": "D"},
                {"w": 10, "h": 3, "allow_rotate": True, "id": "A"},
                {"w": 10, "h": 3, "allow_rotate": True, "id": "B"},
                {"w": 1, "h": 10, "allow_rotate": True, "id": "C"},
            ],
            "output": {"html": None},
        }
    return load_config(str(config_path))


@pytest.fixture
def empty_bin():
    """Fresh 10x10 bin."""
    return Bin(10, 10)


@pytest.fixture
def planks_items():
    """Three 10x3 planks and a 1x10 strip that only fits rotated."""
    return [
        Item(w=10, h=3, allow_rotate=True, item_id="D"),
        Item(w=10, h=3, allow_rotate=True, item_id="A"),
        Item(w=10, h=3, allow_rotate=True, item_id="B"),
        Item(w=1, h=10, allow_rotate=True, item_id="C"),
    ]


@pytest.fixture
def overfull_items():
    """Items that cannot all fit in a 10x10 bin."""
    return [
        Item(w=10, h=3, allow_rotate=True, item_id="A"),
        Item(w=5, h=3, allow_rotate=True, item_id="B"),
        Item(w=10, h=5, allow_rotate=True, item_id="C"),
    ]


def _assert_valid_solution(bin_: Bin, items):
    """Check containment, no overlap, rotation consistency and conservation."""
    placed = bin_.solution()
    by_id = {item.item_id: item for item in items}
    assert len(placed) <= len(items)
    assert len({p.item_id for p in placed}) == len(placed)

    for p in placed:
        assert 0 <= p.x0 < p.x1 <= bin_.width
        assert 0 <= p.y0 < p.y1 <= bin_.height

        item = by_id[p.item_id]
        if p.rotated:
            assert item.allow_rotate
            assert (p.width, p.height) == (item.h, item.w)
        else:
            assert (p.width, p.height) == (item.w, item.h)

    for i, a in enumerate(placed):
        for b in placed[i + 1:]:
            assert not a.overlaps(b), f"{a} overlaps {b}"

    # Grid agrees with the recorded placements
    assert bin_.grid.occupied_count == sum(p.area for p in placed)


@pytest.fixture
def check_solution():
    """Validator for the structural properties every solution must have."""
    return _assert_valid_solution
