"""
Even distribution and greedy shelf-packing of zones.

Both return new positions only; applying them to a layout is a separate
step (``apply_placements``) that deep-copies.  Placement is advisory:
overlaps and overflow are reported, never rejected.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from schemas import Layout, Point, Zone

logger = logging.getLogger(__name__)


@dataclass
class Placement:
    zone_id: str
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"zone_id": self.zone_id, "x": round(self.x, 4), "y": round(self.y, 4)}


@dataclass
class ArrangeResult:
    placements: List[Placement]
    overflow_count: int = 0     # zones wrapped back to the top (may overlap)

    @property
    def overflowed(self) -> bool:
        return self.overflow_count > 0

    def to_dict(self) -> dict:
        return {
            "placements": [p.to_dict() for p in self.placements],
            "overflow_count": self.overflow_count,
            "overflowed": self.overflowed,
        }


def distribute_evenly(zones: Sequence[Zone], axis: str = "horizontal",
                      spacing: float = 1.0) -> List[Placement]:
    """
    Spread zones along *axis* so the gaps between neighbours are equal.

    The outermost zones keep their positions; the span between them minus
    the zone extents is split into ``n - 1`` gaps.  Zones that already
    overlap along the axis get a negative gap, so the endpoints still stay
    put.  *spacing* is kept for callers of the toolbar signature; the gap
    always comes from the endpoints.  Fewer than two zones are returned
    unchanged.
    """
    if len(zones) < 2:
        logger.debug("distribute_evenly needs at least 2 zones; positions unchanged")
        return [Placement(z.id, z.position.x, z.position.y) for z in zones]

    horizontal = axis == "horizontal"

    def start(z: Zone) -> float:
        return z.position.x if horizontal else z.position.y

    def extent(z: Zone) -> float:
        return z.size.width if horizontal else z.size.height

    ordered = sorted(zones, key=start)
    first, last = ordered[0], ordered[-1]
    span = start(last) + extent(last) - start(first)
    gap = (span - sum(extent(z) for z in ordered)) / (len(ordered) - 1)

    placements = []
    cursor = start(first)
    for zone in ordered:
        if horizontal:
            placements.append(Placement(zone.id, cursor, zone.position.y))
        else:
            placements.append(Placement(zone.id, zone.position.x, cursor))
        cursor += extent(zone) + gap
    return placements


def auto_arrange(zones: Sequence[Zone], container_width: float,
                 container_height: float, padding: float = 2.0) -> ArrangeResult:
    """
    Shelf-pack zones, largest area first, left to right.

    A zone that would cross ``container_width - padding`` starts a new row
    (advanced by the tallest zone in the current row plus padding).  A zone
    that would cross ``container_height - padding`` wraps back to the top
    and is counted as overflow; the caller must re-run overlap checks.
    """
    ordered = sorted(zones, key=lambda z: z.area, reverse=True)
    placements: List[Placement] = []
    overflow = 0

    x = padding
    y = padding
    row_height = 0.0

    for zone in ordered:
        if x + zone.size.width > container_width - padding:
            x = padding
            y += row_height + padding
            row_height = 0.0

        if y + zone.size.height > container_height - padding:
            y = padding
            overflow += 1

        placements.append(Placement(zone.id, x, y))
        x += zone.size.width + padding
        row_height = max(row_height, zone.size.height)

    if overflow:
        logger.warning(f"auto_arrange overflowed container for {overflow} zone(s); overlaps possible")
    return ArrangeResult(placements, overflow)


def apply_placements(layout: Layout, placements: Iterable[Placement]) -> Layout:
    """Deep copy of *layout* with zones moved to *placements*."""
    moved = {p.zone_id: p for p in placements}
    result = layout.model_copy(deep=True)
    for zone in result.zones:
        p = moved.get(zone.id)
        if p is not None:
            zone.position = Point(x=p.x, y=p.y)
    return result
