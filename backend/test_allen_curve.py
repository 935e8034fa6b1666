import pytest

from conftest import make_layout, make_zone
from schemas import CollaborationLink
from services.spatial.allen_curve import (
    STATUS_SEVERITY, ZONE_COLLABORATION_MATRIX, assess_layout, generate_links, infer_intensity,
    link_efficiency, link_status, overall_score, safety_level,
)
from services.spatial.validation import detect_zone_overlaps


def link(a, b, intensity="high", **kwargs):
    return CollaborationLink(id=f"{a}-{b}", source_zone_id=a, target_zone_id=b,
                             intensity=intensity, **kwargs)


def test_two_close_zones_are_optimal():
    layout = make_layout(make_zone("A", 0, 0, 2, 2), make_zone("B", 3, 0, 2, 2))
    result = assess_layout(layout, [link("z-a", "z-b", "high")], grid_size=1.0)

    assessed = result.links[0]
    assert assessed.distance == 3.0
    assert assessed.status == "optimal"
    assert assessed.efficiency == 100
    assert result.overall_score == 100
    assert result.safety_level == "excellent"


def test_grid_size_scales_distance():
    layout = make_layout(make_zone("A", 0, 0, 2, 2), make_zone("B", 3, 0, 2, 2))
    result = assess_layout(layout, [link("z-a", "z-b")], grid_size=5.0)
    assert result.links[0].distance == pytest.approx(15.0)
    assert result.links[0].status == "acceptable"


@pytest.mark.parametrize("intensity", ["high", "medium", "low"])
def test_efficiency_non_increasing_with_distance(intensity):
    values = [link_efficiency(d, intensity) for d in range(0, 120, 2)]
    assert all(a >= b for a, b in zip(values, values[1:]))
    assert values[0] == 100


@pytest.mark.parametrize("d", [30, 45, 60, 90])
def test_high_intensity_at_least_as_severe_as_low(d):
    high = STATUS_SEVERITY[link_status(d, "high")]
    medium = STATUS_SEVERITY[link_status(d, "medium")]
    low = STATUS_SEVERITY[link_status(d, "low")]
    assert high >= medium >= low


@pytest.mark.parametrize(
    "d, intensity, expected",
    [
        (10, "high", "optimal"),
        (20, "high", "acceptable"),
        (30, "high", "critical"),
        (30, "medium", "warning"),
        (60, "medium", "critical"),
        (30, "low", "acceptable"),
        (60, "low", "warning"),
    ],
)
def test_status_bands(d, intensity, expected):
    assert link_status(d, intensity) == expected


def test_far_high_pair_penalised_more_than_low():
    assert link_efficiency(40, "high") < link_efficiency(40, "low")
    assert link_efficiency(20, "high") == link_efficiency(20, "low")


def test_custom_weight_scales_efficiency():
    assert link_efficiency(5, "high", custom_weight=0.5) == 50


def test_matrix_symmetric():
    for a, row in ZONE_COLLABORATION_MATRIX.items():
        for b, intensity in row.items():
            assert ZONE_COLLABORATION_MATRIX[b][a] == intensity


def test_infer_intensity_defaults_low():
    assert infer_intensity("compute", "workspace") == "high"
    assert infer_intensity("cryo", "workspace") == "low"


def test_generate_links_one_per_pair_with_overrides():
    layout = make_layout(
        make_zone("A", 0, 0, 2, 2, "compute"),
        make_zone("B", 5, 0, 2, 2, "workspace"),
        make_zone("C", 10, 0, 2, 2, "storage"),
    )
    custom = link("z-c", "z-a", "high")
    links = generate_links(layout, [custom])
    assert len(links) == 3
    by_pair = {frozenset((l.source_zone_id, l.target_zone_id)): l for l in links}
    assert by_pair[frozenset(("z-a", "z-b"))].intensity == "high"
    assert by_pair[frozenset(("z-a", "z-b"))].auto_inferred
    assert by_pair[frozenset(("z-a", "z-c"))] is custom
    assert by_pair[frozenset(("z-b", "z-c"))].intensity == "low"


def test_overall_score_weighted():
    layout = make_layout(
        make_zone("A", 0, 0, 2, 2),
        make_zone("B", 3, 0, 2, 2),
        make_zone("C", 100, 0, 2, 2),
    )
    links = [link("z-a", "z-b", "high"), link("z-a", "z-c", "low"), link("z-b", "z-c", "low")]
    result = assess_layout(layout, links, grid_size=1.0)
    effs = {a.link.id: a.efficiency for a in result.links}
    expected = round((effs["z-a-z-b"] * 3 + effs["z-a-z-c"] + effs["z-b-z-c"]) / 5)
    assert result.overall_score == expected
    assert overall_score([]) == 0


@pytest.mark.parametrize(
    "score, level",
    [(100, "excellent"), (85, "excellent"), (70, "good"), (55, "moderate"),
     (40, "needs_improvement"), (39, "critical")],
)
def test_safety_levels(score, level):
    assert safety_level(score) == level


def test_move_closer_for_far_high_pair():
    layout = make_layout(make_zone("Lab", 0, 0, 2, 2), make_zone("Office", 50, 0, 2, 2), width=60)
    result = assess_layout(layout, [link("z-lab", "z-office", "high")])
    rec = result.recommendations[0]
    assert rec.type == "move_closer"
    assert rec.priority == "high"
    assert set(rec.affected_zones) == {"z-lab", "z-office"}
    assert rec.estimated_improvement == pytest.approx(100 - result.links[0].efficiency, abs=0.1)


def test_no_move_closer_for_low_pair():
    layout = make_layout(make_zone("Lab", 0, 0, 2, 2), make_zone("Office", 50, 0, 2, 2), width=60)
    result = assess_layout(layout, [link("z-lab", "z-office", "low")])
    assert result.recommendations == []


def test_move_apart_from_overlaps():
    layout = make_layout(make_zone("A", 0, 0, 4, 4), make_zone("B", 2, 0, 4, 4))
    overlaps = detect_zone_overlaps(layout)
    result = assess_layout(layout, overlaps=overlaps)
    rec = next(r for r in result.recommendations if r.type == "move_apart")
    assert rec.estimated_improvement == 50.0


def test_cluster_for_near_high_group():
    layout = make_layout(
        make_zone("A", 0, 0, 2, 2),
        make_zone("B", 12, 0, 2, 2),
        make_zone("C", 0, 12, 2, 2),
    )
    links = [link("z-a", "z-b"), link("z-a", "z-c"), link("z-b", "z-c")]
    result = assess_layout(layout, links)
    cluster = next(r for r in result.recommendations if r.type == "cluster")
    assert cluster.affected_zones == ["z-a", "z-b", "z-c"]
    assert cluster.priority == "low"


def test_recommendations_ranked_and_capped():
    zones = [make_zone(f"Z{i}", i * 40, 0, 2, 2) for i in range(5)]
    layout = make_layout(*zones, width=200)
    links = [link(a.id, b.id) for i, a in enumerate(zones) for b in zones[i + 1:]]
    result = assess_layout(layout, links, max_recommendations=5)
    improvements = [r.estimated_improvement for r in result.recommendations]
    assert len(improvements) == 5
    assert improvements == sorted(improvements, reverse=True)


def test_to_dict_shape():
    layout = make_layout(make_zone("A", 0, 0, 2, 2), make_zone("B", 3, 0, 2, 2))
    data = assess_layout(layout).to_dict()
    assert set(data) == {"links", "overall_score", "safety_level", "recommendations", "assessed_at"}
    assert data["links"][0]["status"] == "optimal"
