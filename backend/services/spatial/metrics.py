"""Derived layout metrics stored on every Universe."""

from typing import Optional

from config import GRID_SIZE
from schemas import Layout, LayoutMetrics
from .allen_curve import assess_layout
from .budget import budget_summary
from .validation import detect_zone_overlaps

# Rough fit-out cost per square unit when no equipment is priced
ZONE_COST_RATES = {
    "compute": 5000,
    "workspace": 2000,
    "meeting": 1500,
    "storage": 1000,
    "utility": 3000,
    "entrance": 500,
}
DEFAULT_COST_RATE = 1000


def estimate_area_cost(layout: Layout) -> float:
    return sum(z.area * ZONE_COST_RATES.get(z.type, DEFAULT_COST_RATE) for z in layout.zones)


def safety_score(layout: Layout, efficiency: float, overlap_count: int) -> float:
    """
    Heuristic 0..100: an entrance and a utility zone are expected, a
    moderately filled floor is rewarded, a crowded one penalised, and each
    overlapping pair costs points.
    """
    types = {z.type for z in layout.zones}
    score = 50.0
    if "entrance" in types:
        score += 20
    if "utility" in types:
        score += 15
    if 0.4 <= efficiency <= 0.7:
        score += 15
    elif efficiency > 0.85:
        score -= 10
    score -= 10 * overlap_count
    return max(0.0, min(100.0, score))


def calculate_layout_metrics(layout: Layout, grid_size: Optional[float] = None) -> LayoutMetrics:
    grid_size = GRID_SIZE if grid_size is None else grid_size
    total_area = layout.total_area
    used_area = sum(z.area for z in layout.zones)
    efficiency = min(used_area / total_area, 1.0) if total_area > 0 else 0.0

    budget = budget_summary(layout)
    cost = budget.total_cost if budget.items else estimate_area_cost(layout)

    overlaps = detect_zone_overlaps(layout)
    allen = assess_layout(layout, overlaps=overlaps, grid_size=grid_size)

    return LayoutMetrics(
        total_area=round(total_area, 2),
        used_area=round(used_area, 2),
        efficiency=round(efficiency, 4),
        estimated_cost=round(cost, 2),
        safety_score=safety_score(layout, efficiency, len(overlaps)),
        collaboration_score=allen.overall_score,
    )
