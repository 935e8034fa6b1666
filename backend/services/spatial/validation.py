"""
Advisory layout checks: overlapping zones, out-of-bounds placement,
duplicate names.

Findings are returned as data.  Provisionally invalid layouts are
normal while editing, so nothing here raises.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List

from shapely.geometry import Polygon, box
from shapely.ops import unary_union

from schemas import Layout, Zone


@dataclass
class ZoneOverlap:
    zone_a_id: str
    zone_b_id: str
    area: float

    def to_dict(self) -> dict:
        return {"zone_a_id": self.zone_a_id, "zone_b_id": self.zone_b_id,
                "area": round(self.area, 4)}


@dataclass
class LayoutReport:
    overlaps: List[ZoneOverlap] = field(default_factory=list)
    out_of_bounds: List[str] = field(default_factory=list)
    duplicate_names: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.overlaps or self.out_of_bounds or self.duplicate_names)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "overlap_count": len(self.overlaps),
            "out_of_bounds_count": len(self.out_of_bounds),
            "overlaps": [o.to_dict() for o in self.overlaps],
            "out_of_bounds": list(self.out_of_bounds),
            "duplicate_names": list(self.duplicate_names),
        }


def zone_polygon(zone: Zone) -> Polygon:
    return box(*zone.bounds)


def detect_zone_overlaps(layout: Layout, tolerance: float = 0.01) -> List[ZoneOverlap]:
    """
    Zone pairs whose intersection area exceeds *tolerance*.

    Zones sharing only an edge are not overlapping.
    """
    polys = [(z.id, zone_polygon(z)) for z in layout.zones]
    overlaps = []
    for i in range(len(polys)):
        for j in range(i + 1, len(polys)):
            inter = polys[i][1].intersection(polys[j][1])
            if inter.area > tolerance:
                overlaps.append(ZoneOverlap(polys[i][0], polys[j][0], inter.area))
    return overlaps


def zones_out_of_bounds(layout: Layout) -> List[str]:
    """Ids of zones not fully inside ``[0, width] x [0, height]``."""
    boundary = box(0, 0, layout.dimensions.width, layout.dimensions.height)
    return [z.id for z in layout.zones if not boundary.covers(zone_polygon(z))]


def duplicate_zone_names(layout: Layout) -> List[str]:
    counts = Counter(z.name for z in layout.zones)
    return sorted(name for name, n in counts.items() if n > 1)


def covered_area(layout: Layout) -> float:
    """Union area of all zones clipped to the layout boundary."""
    if not layout.zones:
        return 0.0
    boundary = box(0, 0, layout.dimensions.width, layout.dimensions.height)
    merged = unary_union([zone_polygon(z) for z in layout.zones])
    return merged.intersection(boundary).area


def validate_layout(layout: Layout, tolerance: float = 0.01) -> LayoutReport:
    return LayoutReport(
        overlaps=detect_zone_overlaps(layout, tolerance),
        out_of_bounds=zones_out_of_bounds(layout),
        duplicate_names=duplicate_zone_names(layout),
    )
