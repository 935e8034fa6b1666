"""
3-D box projection of a layout for preview and mesh export.

The floor plan lies in the X/Z plane; Y is up.  Each zone becomes a box
of height ``wall_height`` whose ``position`` is the box center, so a
mesh library can place a centered primitive directly.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from config import GRID_SIZE, WALL_HEIGHT
from schemas import Layout, Zone

Vector3 = Tuple[float, float, float]

DEFAULT_OPACITY = 0.7


@dataclass
class Zone3D:
    id: str
    name: str
    type: str
    position: Vector3
    size: Vector3
    color: str
    opacity: float = DEFAULT_OPACITY

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "position": dict(zip("xyz", self.position)),
            "size": dict(zip("xyz", self.size)),
            "color": self.color,
            "opacity": self.opacity,
        }


@dataclass
class CameraSettings:
    position: Vector3
    target: Vector3
    fov: float = 50.0

    def to_dict(self) -> dict:
        return {
            "position": dict(zip("xyz", self.position)),
            "target": dict(zip("xyz", self.target)),
            "fov": self.fov,
        }


def zone_to_3d(zone: Zone, grid_size: float = GRID_SIZE,
               wall_height: float = WALL_HEIGHT, opacity: float = DEFAULT_OPACITY) -> Zone3D:
    center = zone.center
    return Zone3D(
        id=zone.id,
        name=zone.name,
        type=zone.type,
        position=(center.x * grid_size, wall_height / 2, center.y * grid_size),
        size=(zone.size.width * grid_size, wall_height, zone.size.height * grid_size),
        color=zone.color,
        opacity=opacity,
    )


def layout_to_3d(layout: Layout, grid_size: float = GRID_SIZE,
                 wall_height: float = WALL_HEIGHT,
                 visible_zone_ids: Optional[set] = None) -> List[Zone3D]:
    zones = layout.zones
    if visible_zone_ids is not None:
        zones = [z for z in zones if z.id in visible_zone_ids]
    return [zone_to_3d(z, grid_size, wall_height) for z in zones]


def camera_position(layout: Layout, grid_size: float = GRID_SIZE) -> CameraSettings:
    """Camera looking at the floor center from far enough to fit it."""
    if not layout.zones:
        return CameraSettings(position=(0.0, 50.0, 50.0), target=(0.0, 0.0, 0.0))

    cx = layout.dimensions.width / 2 * grid_size
    cz = layout.dimensions.height / 2 * grid_size
    reach = max(layout.dimensions.width, layout.dimensions.height) * grid_size * 1.5
    return CameraSettings(
        position=(cx + reach * 0.5, reach * 0.7, cz + reach * 0.5),
        target=(cx, 0.0, cz),
    )
