"""
Alignment guides and snapping for zones being dragged on the grid.

Guides are recomputed on every drag frame and never stored on the layout.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import ALIGNMENT_THRESHOLD, SNAP_THRESHOLD
from schemas import Layout, Point, Zone
from .errors import NotFoundError
from .geometry import Rect, distance

logger = logging.getLogger(__name__)

VERTICAL = "vertical"
HORIZONTAL = "horizontal"


@dataclass
class AlignmentGuide:
    """A vertical (x = position) or horizontal (y = position) guide line."""

    type: str
    position: float
    label: str
    snap_points: Tuple[Point, Point]
    anchor: str = "start"   # edge of the dragged rect that matched: start | end | center

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "position": self.position,
            "label": self.label,
            "snap_points": [p.model_dump() for p in self.snap_points],
            "anchor": self.anchor,
        }


@dataclass
class SnapPoint:
    point: Point
    kind: str               # corner | center | midpoint
    label: str

    def to_dict(self) -> dict:
        return {"point": self.point.model_dump(), "kind": self.kind, "label": self.label}


def compute_alignment_guides(
    dragged: Rect,
    others: Iterable[Rect],
    threshold: float = ALIGNMENT_THRESHOLD,
) -> List[AlignmentGuide]:
    """
    Compare the dragged rect's left/right/center-x and top/bottom/center-y
    against every other rect; emit one guide per pair within *threshold*.

    Each guide spans the combined extent of both rects along the
    perpendicular axis.  Vertical and horizontal guides fire independently.
    """
    guides: List[AlignmentGuide] = []

    for other in others:
        vertical = (
            ("start", dragged.left, other.left, f"Left edge of {other.name}"),
            ("end", dragged.right, other.right, f"Right edge of {other.name}"),
            ("center", dragged.center_x, other.center_x, f"Center of {other.name}"),
        )
        for anchor, drag_pos, pos, label in vertical:
            if abs(drag_pos - pos) <= threshold:
                guides.append(AlignmentGuide(
                    type=VERTICAL,
                    position=pos,
                    label=label,
                    snap_points=(
                        Point(x=pos, y=min(dragged.top, other.top)),
                        Point(x=pos, y=max(dragged.bottom, other.bottom)),
                    ),
                    anchor=anchor,
                ))

        horizontal = (
            ("start", dragged.top, other.top, f"Top edge of {other.name}"),
            ("end", dragged.bottom, other.bottom, f"Bottom edge of {other.name}"),
            ("center", dragged.center_y, other.center_y, f"Center of {other.name}"),
        )
        for anchor, drag_pos, pos, label in horizontal:
            if abs(drag_pos - pos) <= threshold:
                guides.append(AlignmentGuide(
                    type=HORIZONTAL,
                    position=pos,
                    label=label,
                    snap_points=(
                        Point(x=min(dragged.left, other.left), y=pos),
                        Point(x=max(dragged.right, other.right), y=pos),
                    ),
                    anchor=anchor,
                ))

    return guides


def _anchor_offset(anchor: str, extent: float) -> float:
    if anchor == "end":
        return extent
    if anchor == "center":
        return extent / 2
    return 0.0


def snap_to_alignment(
    x: float,
    y: float,
    guides: Sequence[AlignmentGuide],
    threshold: float = ALIGNMENT_THRESHOLD,
    width: float = 0.0,
    height: float = 0.0,
) -> Point:
    """
    Move (x, y) onto the FIRST matching guide per axis.

    First match wins, not nearest.  With *width*/*height* given, the
    dragged rect's anchored edge is what lands on the guide; with the
    default zero extents the raw coordinate is compared.
    """
    snapped_x, snapped_y = x, y

    for guide in guides:
        if guide.type != VERTICAL:
            continue
        offset = _anchor_offset(guide.anchor, width)
        if abs(x + offset - guide.position) <= threshold:
            snapped_x = guide.position - offset
            break

    for guide in guides:
        if guide.type != HORIZONTAL:
            continue
        offset = _anchor_offset(guide.anchor, height)
        if abs(y + offset - guide.position) <= threshold:
            snapped_y = guide.position - offset
            break

    return Point(x=snapped_x, y=snapped_y)


def get_snap_points(rect: Rect, label: Optional[str] = None) -> List[SnapPoint]:
    """4 corners, the center, and all 4 edge midpoints of *rect*."""
    label = label if label is not None else rect.name
    x0, y0, x1, y1 = rect.left, rect.top, rect.right, rect.bottom
    cx, cy = rect.center_x, rect.center_y
    return [
        SnapPoint(Point(x=x0, y=y0), "corner", f"{label} - Top Left"),
        SnapPoint(Point(x=x1, y=y0), "corner", f"{label} - Top Right"),
        SnapPoint(Point(x=x0, y=y1), "corner", f"{label} - Bottom Left"),
        SnapPoint(Point(x=x1, y=y1), "corner", f"{label} - Bottom Right"),
        SnapPoint(Point(x=cx, y=cy), "center", f"{label} - Center"),
        SnapPoint(Point(x=cx, y=y0), "midpoint", f"{label} - Top Edge"),
        SnapPoint(Point(x=cx, y=y1), "midpoint", f"{label} - Bottom Edge"),
        SnapPoint(Point(x=x0, y=cy), "midpoint", f"{label} - Left Edge"),
        SnapPoint(Point(x=x1, y=cy), "midpoint", f"{label} - Right Edge"),
    ]


def find_nearest_snap_point(
    point: Point,
    candidates: Iterable[SnapPoint],
    threshold: float = SNAP_THRESHOLD,
) -> Optional[SnapPoint]:
    """Closest candidate within *threshold*; earlier candidates win ties."""
    nearest = None
    min_dist = float("inf")
    for candidate in candidates:
        d = distance(point, candidate.point)
        if d < min_dist and d <= threshold:
            min_dist = d
            nearest = candidate
    return nearest


def layout_snap_points(layout: Layout, exclude_zone_id: Optional[str] = None) -> List[SnapPoint]:
    points: List[SnapPoint] = []
    for zone in layout.zones:
        if zone.id == exclude_zone_id:
            continue
        points.extend(get_snap_points(Rect.from_zone(zone)))
    return points


def _other_rects(zones: Iterable[Zone], zone_id: str) -> List[Rect]:
    return [Rect.from_zone(z) for z in zones if z.id != zone_id]


def guides_for_zone(
    layout: Layout,
    zone_id: str,
    x: float,
    y: float,
    threshold: float = ALIGNMENT_THRESHOLD,
) -> List[AlignmentGuide]:
    """Guides for *zone_id* dragged to (x, y) against every other zone."""
    zone = layout.get_zone(zone_id)
    if zone is None:
        raise NotFoundError("Zone", zone_id)
    dragged = Rect(x, y, zone.size.width, zone.size.height, zone.name)
    return compute_alignment_guides(dragged, _other_rects(layout.zones, zone_id), threshold)


@dataclass
class AlignmentSession:
    """Active guides for a single drag gesture."""

    enabled: bool = True
    threshold: float = ALIGNMENT_THRESHOLD
    snap_to_guides: bool = True
    guides: List[AlignmentGuide] = field(default_factory=list)
    dragged_zone_id: Optional[str] = None

    def update(self, zones: Iterable[Zone], zone_id: str,
               x: float, y: float, width: float, height: float) -> List[AlignmentGuide]:
        if not self.enabled:
            self.guides = []
            return self.guides
        dragged = Rect(x, y, width, height)
        self.guides = compute_alignment_guides(dragged, _other_rects(zones, zone_id), self.threshold)
        self.dragged_zone_id = zone_id
        logger.debug(f"Drag {zone_id} at ({x:.2f},{y:.2f}): {len(self.guides)} guides")
        return self.guides

    def clear(self):
        self.guides = []
        self.dragged_zone_id = None

    def snap(self, x: float, y: float, width: float = 0.0, height: float = 0.0) -> Point:
        if not self.snap_to_guides or not self.guides:
            return Point(x=x, y=y)
        return snap_to_alignment(x, y, self.guides, self.threshold, width, height)

    @property
    def has_active_guide(self) -> Dict[str, bool]:
        return {
            VERTICAL: any(g.type == VERTICAL for g in self.guides),
            HORIZONTAL: any(g.type == HORIZONTAL for g in self.guides),
        }
