import ezdxf
import pytest
import trimesh

from conftest import make_layout, make_zone
from services.cad_export import build_dxf, generate_dxf, zone_layer_name
from services.model3d import build_scene, generate_3d_model, hex_to_rgba
from services.spatial.projection import camera_position, layout_to_3d, zone_to_3d


def test_zone_projection_complete():
    zone = make_zone("Bench", 2, 4, 6, 2, color="#ff0000")
    box = zone_to_3d(zone, grid_size=0.5, wall_height=3.0)
    assert box.position == (2.5, 1.5, 2.5)
    assert box.size == (3.0, 3.0, 1.0)
    assert box.color == "#ff0000"
    assert set(box.to_dict()) == {"id", "name", "type", "position", "size", "color", "opacity"}


def test_layout_projection_filters_visible(lab_layout):
    assert len(layout_to_3d(lab_layout)) == 3
    assert [z.id for z in layout_to_3d(lab_layout, visible_zone_ids={"z-office"})] == ["z-office"]


def test_camera(lab_layout):
    camera = camera_position(lab_layout, grid_size=1.0)
    assert camera.target == (20.0, 0.0, 15.0)
    assert camera.position[1] > 0
    assert camera_position(make_layout()).position == (0.0, 50.0, 50.0)


@pytest.mark.parametrize(
    "color, opacity, expected",
    [("#22d3ee", 1.0, [34, 211, 238, 255]), ("#fff", 0.0, [255, 255, 255, 0]), ("bogus", 1.0, [200, 200, 200, 255])],
)
def test_hex_to_rgba(color, opacity, expected):
    assert hex_to_rgba(color, opacity) == expected


def test_build_dxf_layers_and_entities(lab_layout):
    lab_layout.notes.append("Eyewash station near entrance")
    doc = build_dxf(lab_layout, grid_size=1.0, draw_grid=False)
    for name in ("BORDER", "LABELS", "NOTES", zone_layer_name("compute"), zone_layer_name("meeting")):
        assert doc.layers.has_entry(name)

    msp = doc.modelspace()
    polylines = msp.query("LWPOLYLINE")
    assert len(polylines) == 4          # border + 3 zones
    texts = [t.dxf.text for t in msp.query("TEXT")]
    assert "Wet Lab" in texts
    assert "Eyewash station near entrance" in texts


def test_generate_dxf_file(tmp_path, lab_layout):
    path = generate_dxf(lab_layout, str(tmp_path / "plans" / "lab.dxf"))
    doc = ezdxf.readfile(path)
    assert len(doc.modelspace().query("LINE[layer=='GRID']")) == 39 + 29


def test_scene_has_floor_and_zone_boxes(lab_layout):
    scene = build_scene(lab_layout)
    assert len(scene.geometry) == 4


@pytest.mark.parametrize("name, suffix", [("lab.glb", ".glb"), ("lab.obj", ".obj"), ("lab", ".glb")])
def test_generate_3d_model(tmp_path, lab_layout, name, suffix):
    path = generate_3d_model(lab_layout, str(tmp_path / name))
    assert path.endswith(suffix)
    assert (tmp_path / path.split("/")[-1]).stat().st_size > 0


def test_glb_loads_back(tmp_path, lab_layout):
    path = generate_3d_model(lab_layout, str(tmp_path / "lab.glb"))
    loaded = trimesh.load(path)
    assert len(loaded.geometry) == 4
