"""
Point / rectangle math for the floor-plan grid.

All coordinates are grid units.  Distances and areas are rounded to
2 decimals and angles to 1 decimal so displayed values stay stable
between redraws.  Degenerate input (identical points, zero-length
segments) yields 0 rather than raising.
"""

import math
from dataclasses import dataclass
from typing import Dict

from schemas import Point, Zone


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in grid units (top-left origin)."""

    x: float
    y: float
    width: float
    height: float
    name: str = ""

    @classmethod
    def from_zone(cls, zone: Zone) -> "Rect":
        return cls(zone.position.x, zone.position.y,
                   zone.size.width, zone.size.height, zone.name)

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(x=self.center_x, y=self.center_y)


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return round(math.hypot(p2.x - p1.x, p2.y - p1.y), 2)


def manhattan_distance(p1: Point, p2: Point) -> Dict[str, float]:
    """Horizontal, vertical and total (L1) distance."""
    horizontal = abs(p2.x - p1.x)
    vertical = abs(p2.y - p1.y)
    return {
        "horizontal": round(horizontal, 2),
        "vertical": round(vertical, 2),
        "total": round(horizontal + vertical, 2),
    }


def rectangle_area(width: float, height: float) -> float:
    return round(width * height, 2)


def perimeter(width: float, height: float) -> float:
    return round(2 * (width + height), 2)


def angle(p1: Point, vertex: Point, p3: Point) -> float:
    """
    Angle at *vertex* between rays to *p1* and *p3*, in degrees [0, 180].

    A ray of zero length has direction atan2(0, 0) == 0.
    """
    a1 = math.atan2(p1.y - vertex.y, p1.x - vertex.x)
    a2 = math.atan2(p3.y - vertex.y, p3.x - vertex.x)
    deg = abs(a2 - a1) * 180 / math.pi
    if deg > 180:
        deg = 360 - deg
    return round(deg, 1)


def midpoint(p1: Point, p2: Point) -> Point:
    return Point(x=(p1.x + p2.x) / 2, y=(p1.y + p2.y) / 2)


def distance_to_segment(point: Point, seg_start: Point, seg_end: Point) -> float:
    """
    Shortest distance from *point* to the segment [seg_start, seg_end].

    A zero-length segment degrades to point-to-point distance.
    """
    cx = seg_end.x - seg_start.x
    cy = seg_end.y - seg_start.y
    len_sq = cx * cx + cy * cy

    param = -1.0
    if len_sq != 0:
        param = ((point.x - seg_start.x) * cx + (point.y - seg_start.y) * cy) / len_sq

    if param < 0:
        nearest_x, nearest_y = seg_start.x, seg_start.y
    elif param > 1:
        nearest_x, nearest_y = seg_end.x, seg_end.y
    else:
        nearest_x = seg_start.x + param * cx
        nearest_y = seg_start.y + param * cy

    return round(math.hypot(point.x - nearest_x, point.y - nearest_y), 2)


def is_point_near_segment(point: Point, seg_start: Point, seg_end: Point,
                          threshold: float = 10) -> bool:
    return distance_to_segment(point, seg_start, seg_end) <= threshold


def snap_to_grid(point: Point, grid_size: float) -> Point:
    """Round both coordinates to the nearest multiple of *grid_size* (halves round up)."""
    if grid_size <= 0:
        return point
    return Point(
        x=math.floor(point.x / grid_size + 0.5) * grid_size,
        y=math.floor(point.y / grid_size + 0.5) * grid_size,
    )


def format_measurement(value: float, kind: str, unit: str = "m") -> str:
    """Human label for a measurement value: ``3.5 m``, ``12 m²``, ``90.0°``."""
    if kind == "angle":
        return f"{value}°"
    if kind == "area":
        return f"{value} {unit}²"
    return f"{value} {unit}"
