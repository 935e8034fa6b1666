import pytest

from conftest import make_layout, make_zone
from services.spatial.arrangement import apply_placements, auto_arrange, distribute_evenly


def positions(placements):
    return {p.zone_id: (p.x, p.y) for p in placements}


def test_distribute_horizontal_equal_gaps():
    zones = [
        make_zone("A", 0, 0, 2, 2),
        make_zone("B", 3, 5, 4, 2),
        make_zone("C", 18, 1, 2, 2),
    ]
    placed = positions(distribute_evenly(zones, "horizontal"))
    # span 20, extents 8, two gaps of 6
    assert placed == {"z-a": (0, 0), "z-b": (8, 5), "z-c": (18, 1)}


def test_distribute_vertical_sorts_by_position():
    zones = [make_zone("C", 0, 20, 2, 2), make_zone("A", 0, 0, 2, 2), make_zone("B", 0, 2, 2, 2)]
    placed = positions(distribute_evenly(zones, "vertical"))
    assert placed == {"z-a": (0, 0), "z-b": (0, 10), "z-c": (0, 20)}


def test_distribute_overlapping_keeps_endpoints():
    zones = [make_zone("A", 0, 0, 4, 2), make_zone("B", 1, 0, 4, 2), make_zone("C", 4, 0, 4, 2)]
    placed = positions(distribute_evenly(zones, "horizontal", spacing=1))
    # span 8, extents 12, two gaps of -2
    assert placed == {"z-a": (0, 0), "z-b": (2, 0), "z-c": (4, 0)}


def test_distribute_ignores_spacing():
    zones = [make_zone("A", 0, 0, 2, 2), make_zone("B", 3, 0, 2, 2), make_zone("C", 10, 0, 2, 2)]
    assert distribute_evenly(zones, spacing=1) == distribute_evenly(zones, spacing=7)


@pytest.mark.parametrize("count", [0, 1])
def test_distribute_needs_two(count):
    zones = [make_zone("A", 3, 4, 2, 2)][:count]
    assert positions(distribute_evenly(zones)) == {z.id: (3, 4) for z in zones}


def test_auto_arrange_shelves_largest_first():
    zones = [make_zone("Small", 0, 0, 2, 2), make_zone("Big", 0, 0, 6, 4), make_zone("Mid", 0, 0, 5, 3)]
    result = auto_arrange(zones, container_width=16, container_height=20, padding=1)
    placed = positions(result.placements)

    assert placed["z-big"] == (1, 1)
    assert placed["z-mid"] == (8, 1)
    # 14 + 2 > 16 - 1, so a new row below the tallest (4) + padding
    assert placed["z-small"] == (1, 6)
    assert not result.overflowed


def test_auto_arrange_overflow_wraps_to_top():
    zones = [make_zone(f"Z{i}", 0, 0, 8, 8) for i in range(3)]
    result = auto_arrange(zones, container_width=10, container_height=20, padding=1)
    ys = [p.y for p in result.placements]
    assert ys == [1, 10, 1]
    assert result.overflow_count == 1
    assert result.to_dict()["overflowed"] is True


def test_apply_placements_copies():
    layout = make_layout(make_zone("A", 0, 0, 2, 2), make_zone("B", 5, 5, 2, 2))
    result = auto_arrange(layout.zones, 40, 30, padding=2)
    moved = apply_placements(layout, result.placements)

    assert layout.get_zone("z-a").position.x == 0
    assert moved.get_zone("z-b").position.x == 6
    assert moved is not layout
