"""
Measurement session: collects clicks into distance / area / angle
measurements and keeps a history.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from config import DISPLAY_UNIT, GRID_SIZE
from schemas import Point
from .geometry import angle, distance, format_measurement, rectangle_area

logger = logging.getLogger(__name__)

REQUIRED_POINTS = {"distance": 2, "area": 2, "angle": 3}


@dataclass(frozen=True)
class Measurement:
    type: str
    points: Tuple[Point, ...]
    value: float
    unit: str
    label: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "points": [p.model_dump() for p in self.points],
            "value": self.value,
            "unit": self.unit,
            "label": self.label,
        }


@dataclass
class MeasurementSession:
    """
    Click-driven measurement tool.

    ``mode`` is ``None`` when idle.  Once a mode has its required points the
    measurement is recorded, ``points`` resets, and the mode stays armed
    for the next one.  *grid_size* converts grid units to physical units.
    """

    grid_size: float = GRID_SIZE
    unit: str = DISPLAY_UNIT
    mode: Optional[str] = None
    points: List[Point] = field(default_factory=list)
    history: List[Measurement] = field(default_factory=list)

    def start(self, mode: str):
        if mode not in REQUIRED_POINTS:
            raise ValueError(f"Unknown measurement mode: {mode}")
        self.mode = mode
        self.points = []

    def cancel(self):
        self.mode = None
        self.points = []

    @property
    def required_points(self) -> int:
        return REQUIRED_POINTS.get(self.mode, 0)

    @property
    def is_active(self) -> bool:
        return self.mode is not None

    @property
    def needs_more_points(self) -> bool:
        return self.is_active and len(self.points) < self.required_points

    def add_point(self, point: Point) -> Optional[Measurement]:
        """Append a click; returns the measurement when one completes."""
        if self.mode is None:
            return None
        self.points.append(point)
        if len(self.points) < self.required_points:
            return None

        measurement = self._measure(tuple(self.points))
        self.history.append(measurement)
        self.points = []
        logger.debug(f"Recorded {measurement.type} measurement: {measurement.label}")
        return measurement

    def _measure(self, pts: Tuple[Point, ...]) -> Measurement:
        if self.mode == "distance":
            value = round(distance(pts[0], pts[1]) * self.grid_size, 2)
            return Measurement("distance", pts, value, self.unit,
                               format_measurement(value, "distance", self.unit))
        if self.mode == "area":
            # two opposite corners of an axis-aligned rectangle
            width = abs(pts[1].x - pts[0].x) * self.grid_size
            height = abs(pts[1].y - pts[0].y) * self.grid_size
            value = rectangle_area(width, height)
            return Measurement("area", pts, value, self.unit,
                               format_measurement(value, "area", self.unit))
        # angle: the second click is the vertex
        value = angle(pts[0], pts[1], pts[2])
        return Measurement("angle", pts, value, "degrees",
                           format_measurement(value, "angle", "degrees"))

    def clear_history(self):
        self.history = []

    def remove(self, index: int) -> bool:
        if 0 <= index < len(self.history):
            del self.history[index]
            return True
        return False

    @property
    def help_text(self) -> str:
        remaining = self.required_points - len(self.points)
        if not self.mode or remaining <= 0:
            return ""
        if self.mode == "distance":
            return "Click first point" if remaining == 2 else "Click second point to measure distance"
        if self.mode == "area":
            return "Click first corner" if remaining == 2 else "Click opposite corner to measure area"
        if remaining == 3:
            return "Click first point"
        if remaining == 2:
            return "Click vertex (angle point)"
        return "Click third point to measure angle"
