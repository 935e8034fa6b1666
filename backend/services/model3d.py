"""
3D box model of a lab layout.

Each zone is extruded to a colored box from its 3-D projection, on top of
a thin floor slab covering the whole layout.  Exported as glTF/GLB (or
OBJ) through trimesh.
"""

from pathlib import Path
from typing import List, Optional
import logging

import numpy as np
import trimesh

from config import GRID_SIZE, WALL_HEIGHT
from schemas import Layout
from services.spatial.projection import Zone3D, layout_to_3d

logger = logging.getLogger(__name__)

FLOOR_THICK = 0.1
FLOOR_COLOR = [210, 205, 195, 255]
DEFAULT_COLOR = [200, 200, 200, 255]


def hex_to_rgba(color: str, opacity: float = 1.0) -> List[int]:
    """'#22d3ee' -> [34, 211, 238, alpha].  Unparseable colors fall back to grey."""
    value = (color or "").lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return list(DEFAULT_COLOR[:3]) + [int(round(255 * opacity))]
    try:
        rgb = [int(value[i:i + 2], 16) for i in (0, 2, 4)]
    except ValueError:
        rgb = list(DEFAULT_COLOR[:3])
    return rgb + [int(round(255 * max(0.0, min(1.0, opacity))))]


def _make_box(center, extents) -> trimesh.Trimesh:
    """Box mesh centered at *center* with size *extents*."""
    if min(extents) < 0.01:
        return trimesh.Trimesh()
    mesh = trimesh.creation.box(extents=extents)
    mesh.apply_translation(center)
    return mesh


def _color_mesh(mesh, rgba):
    if mesh is None or mesh.vertices.shape[0] == 0:
        return mesh
    mesh.visual = trimesh.visual.ColorVisuals(mesh=mesh, face_colors=rgba)
    return mesh


def _is_valid_mesh(mesh) -> bool:
    return mesh is not None and hasattr(mesh, "vertices") and mesh.vertices.shape[0] > 0


def zone_mesh(zone3d: Zone3D) -> trimesh.Trimesh:
    mesh = _make_box(np.array(zone3d.position), zone3d.size)
    return _color_mesh(mesh, hex_to_rgba(zone3d.color, zone3d.opacity))


def build_scene(layout: Layout, grid_size: float = GRID_SIZE,
                wall_height: float = WALL_HEIGHT,
                visible_zone_ids: Optional[set] = None) -> trimesh.Scene:
    width = layout.dimensions.width * grid_size
    depth = layout.dimensions.height * grid_size

    meshes = [_color_mesh(
        _make_box([width / 2, -FLOOR_THICK / 2, depth / 2], [width, FLOOR_THICK, depth]),
        FLOOR_COLOR,
    )]
    for zone3d in layout_to_3d(layout, grid_size, wall_height, visible_zone_ids):
        meshes.append(zone_mesh(zone3d))

    valid = [m for m in meshes if _is_valid_mesh(m)]
    return trimesh.Scene(valid)


def generate_3d_model(layout: Layout, output_path: str, grid_size: float = GRID_SIZE,
                      wall_height: float = WALL_HEIGHT) -> str:
    """
    Write the layout's box model to *output_path*.

    The format follows the extension: ``.glb``/``.gltf`` or ``.obj``; any
    other path gets ``.glb`` appended.
    """
    scene = build_scene(layout, grid_size, wall_height)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    if output_path.endswith((".glb", ".gltf")):
        scene.export(output_path, file_type="glb")
    elif output_path.endswith(".obj"):
        scene.export(output_path, file_type="obj")
    else:
        output_path = output_path + ".glb"
        scene.export(output_path, file_type="glb")

    logger.info(f"3D model exported: {output_path} ({len(scene.geometry)} meshes)")
    return output_path
