"""
DXF drawing export for lab layouts.

One CAD layer per zone type, plus BORDER, LABELS, GRID and NOTES.
Coordinates are physical units (grid units x grid_size).
"""

import logging
from pathlib import Path

import ezdxf
from ezdxf.enums import TextEntityAlignment

from config import GRID_SIZE
from schemas import Layout

logger = logging.getLogger(__name__)

# AutoCAD color index per zone type
ZONE_LAYER_COLORS = {
    "compute": 5,
    "workspace": 3,
    "meeting": 2,
    "storage": 8,
    "utility": 1,
    "entrance": 4,
    "break": 6,
}
DEFAULT_ZONE_COLOR = 7


def zone_layer_name(zone_type: str) -> str:
    return f"ZONE_{zone_type.upper()}"


def build_dxf(layout: Layout, grid_size: float = GRID_SIZE, draw_grid: bool = True):
    """Build an in-memory ezdxf document for *layout*."""
    doc = ezdxf.new("R2010")
    msp = doc.modelspace()

    doc.layers.add("BORDER", color=7)
    doc.layers.add("LABELS", color=10)
    doc.layers.add("GRID", color=252)
    doc.layers.add("NOTES", color=9)
    for zone_type in sorted({z.type for z in layout.zones}):
        doc.layers.add(zone_layer_name(zone_type),
                       color=ZONE_LAYER_COLORS.get(zone_type, DEFAULT_ZONE_COLOR))

    width = layout.dimensions.width * grid_size
    height = layout.dimensions.height * grid_size

    msp.add_lwpolyline(
        [(0, 0), (width, 0), (width, height), (0, height)],
        close=True,
        dxfattribs={"layer": "BORDER", "lineweight": 50},
    )

    if draw_grid:
        step = grid_size
        x = step
        while x < width:
            msp.add_line((x, 0), (x, height), dxfattribs={"layer": "GRID"})
            x += step
        y = step
        while y < height:
            msp.add_line((0, y), (width, y), dxfattribs={"layer": "GRID"})
            y += step

    text_height = max(min(width, height) * 0.02, 0.1)
    for zone in layout.zones:
        x0, y0, x1, y1 = (v * grid_size for v in zone.bounds)
        msp.add_lwpolyline(
            [(x0, y0), (x1, y0), (x1, y1), (x0, y1)],
            close=True,
            dxfattribs={"layer": zone_layer_name(zone.type)},
        )
        cx, cy = (x0 + x1) / 2, (y0 + y1) / 2
        msp.add_text(
            zone.name,
            dxfattribs={"layer": "LABELS", "height": text_height},
        ).set_placement((cx, cy + text_height), align=TextEntityAlignment.MIDDLE_CENTER)
        msp.add_text(
            f"{zone.area * grid_size * grid_size:.1f} {layout.dimensions.unit}2",
            dxfattribs={"layer": "LABELS", "height": text_height * 0.6},
        ).set_placement((cx, cy - text_height), align=TextEntityAlignment.MIDDLE_CENTER)

    for i, note in enumerate(layout.notes):
        msp.add_text(
            note,
            dxfattribs={"layer": "NOTES", "height": text_height * 0.8},
        ).set_placement((0, -(i + 2) * text_height * 1.5), align=TextEntityAlignment.LEFT)

    return doc


def generate_dxf(layout: Layout, output_path: str, grid_size: float = GRID_SIZE) -> str:
    doc = build_dxf(layout, grid_size)
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    doc.saveas(output_path)
    logger.info(f"DXF exported: {output_path} ({len(layout.zones)} zones)")
    return output_path
