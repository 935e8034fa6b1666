"""
Allen Curve collaboration-distance model.

Communication frequency between two groups falls off sharply with the
distance separating them (T. Allen, 1977).  Every zone pair gets a
collaboration intensity (inferred from zone types unless overridden) and
is scored on its center-to-center distance:

  * distance <= OPTIMAL_DISTANCE        -> optimal, efficiency 100
  * OPTIMAL < distance < WARNING        -> acceptable, exponential decay
  * distance >= WARNING_DISTANCE        -> severity depends on intensity;
                                            high-intensity pairs are also
                                            penalised in efficiency

Distances are physical units: grid units x ``grid_size``.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

import networkx as nx

from config import GRID_SIZE, OPTIMAL_DISTANCE, WARNING_DISTANCE
from schemas import CollaborationLink, Layout, Zone
from .errors import NotFoundError
from .validation import ZoneOverlap

logger = logging.getLogger(__name__)

DECAY_ALPHA = 0.05

# weight of each intensity in the layout-wide mean
INTENSITY_WEIGHTS = {"high": 3, "medium": 2, "low": 1}

# efficiency multiplier once a pair is at or past the warning distance
FAR_PENALTY = {"high": 0.75, "medium": 0.9, "low": 1.0}

STATUS_SEVERITY = {"optimal": 0, "acceptable": 1, "warning": 2, "critical": 3}

# Default intensity between zone types (symmetric)
ZONE_COLLABORATION_MATRIX: Dict[str, Dict[str, str]] = {
    "compute": {
        "compute": "medium", "workspace": "high", "meeting": "medium",
        "storage": "low", "utility": "medium", "break": "low", "entrance": "low",
    },
    "workspace": {
        "compute": "high", "workspace": "medium", "meeting": "high",
        "storage": "low", "utility": "low", "break": "medium", "entrance": "medium",
    },
    "meeting": {
        "compute": "medium", "workspace": "high", "meeting": "low",
        "storage": "low", "utility": "low", "break": "medium", "entrance": "medium",
    },
    "storage": {
        "compute": "low", "workspace": "low", "meeting": "low",
        "storage": "low", "utility": "medium", "break": "low", "entrance": "low",
    },
    "utility": {
        "compute": "medium", "workspace": "low", "meeting": "low",
        "storage": "medium", "utility": "low", "break": "low", "entrance": "low",
    },
    "break": {
        "compute": "low", "workspace": "medium", "meeting": "medium",
        "storage": "low", "utility": "low", "break": "low", "entrance": "medium",
    },
    "entrance": {
        "compute": "low", "workspace": "medium", "meeting": "medium",
        "storage": "low", "utility": "low", "break": "medium", "entrance": "low",
    },
}


@dataclass
class LinkAssessment:
    link: CollaborationLink
    distance: float
    efficiency: float
    status: str

    def to_dict(self) -> dict:
        return {
            "link": self.link.model_dump(),
            "distance": round(self.distance, 2),
            "efficiency": self.efficiency,
            "status": self.status,
        }


@dataclass
class Recommendation:
    priority: str           # high | medium | low
    type: str               # move_closer | move_apart | cluster
    affected_zones: List[str]
    message: str
    estimated_improvement: float

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class AllenCurveAssessment:
    links: List[LinkAssessment]
    overall_score: int
    safety_level: str
    recommendations: List[Recommendation] = field(default_factory=list)
    assessed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return {
            "links": [a.to_dict() for a in self.links],
            "overall_score": self.overall_score,
            "safety_level": self.safety_level,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "assessed_at": self.assessed_at,
        }


# ----------------------------------------------------------------------
# Pairwise scoring
# ----------------------------------------------------------------------

def zone_distance(zone_a: Zone, zone_b: Zone, grid_size: float = GRID_SIZE) -> float:
    """Center-to-center distance in physical units."""
    ca, cb = zone_a.center, zone_b.center
    return math.hypot(ca.x - cb.x, ca.y - cb.y) * grid_size


def link_efficiency(
    distance: float,
    intensity: str,
    custom_weight: Optional[float] = None,
    optimal: float = OPTIMAL_DISTANCE,
    warning: float = WARNING_DISTANCE,
) -> float:
    """
    Efficiency 0..100.  Flat at 100 up to *optimal*, then decays as
    ``exp(-alpha * (d - optimal))``; pairs at or past *warning* take the
    intensity penalty.  Non-increasing in distance for a fixed intensity.
    """
    if distance <= optimal:
        eff = 100.0
    else:
        eff = 100.0 * math.exp(-DECAY_ALPHA * (distance - optimal))
    if distance >= warning:
        eff *= FAR_PENALTY.get(intensity, 1.0)
    if custom_weight is not None:
        eff *= custom_weight
    return round(max(0.0, min(100.0, eff)), 2)


def link_status(
    distance: float,
    intensity: str,
    optimal: float = OPTIMAL_DISTANCE,
    warning: float = WARNING_DISTANCE,
) -> str:
    """
    Distance band, with severity past *warning* set by intensity:
    high -> critical; medium -> warning (critical from 2x warning);
    low -> acceptable (warning from 2x warning).
    """
    if distance <= optimal:
        return "optimal"
    if distance < warning:
        return "acceptable"
    very_far = distance >= 2 * warning
    if intensity == "high":
        return "critical"
    if intensity == "medium":
        return "critical" if very_far else "warning"
    return "warning" if very_far else "acceptable"


def infer_intensity(source_type: str, target_type: str) -> str:
    row = ZONE_COLLABORATION_MATRIX.get(source_type, {})
    if target_type in row:
        return row[target_type]
    # unknown zone types collaborate rarely
    return ZONE_COLLABORATION_MATRIX.get(target_type, {}).get(source_type, "low")


def _pair_key(a: str, b: str) -> frozenset:
    return frozenset((a, b))


def generate_links(
    layout: Layout,
    existing_links: Optional[Iterable[CollaborationLink]] = None,
) -> List[CollaborationLink]:
    """
    One link per unordered zone pair.  An explicit link for the pair (in
    either direction) overrides the matrix default.
    """
    overrides = {_pair_key(l.source_zone_id, l.target_zone_id): l for l in existing_links or []}
    links = []
    zones = layout.zones
    for i in range(len(zones)):
        for j in range(i + 1, len(zones)):
            a, b = zones[i], zones[j]
            link = overrides.get(_pair_key(a.id, b.id))
            if link is None:
                link = CollaborationLink(
                    id=f"link-{a.id}-{b.id}",
                    source_zone_id=a.id,
                    target_zone_id=b.id,
                    intensity=infer_intensity(a.type, b.type),
                    auto_inferred=True,
                )
            links.append(link)
    return links


def assess_link(
    link: CollaborationLink,
    zones_by_id: Dict[str, Zone],
    grid_size: float = GRID_SIZE,
    optimal: float = OPTIMAL_DISTANCE,
    warning: float = WARNING_DISTANCE,
) -> LinkAssessment:
    for zone_id in (link.source_zone_id, link.target_zone_id):
        if zone_id not in zones_by_id:
            raise NotFoundError("Zone", zone_id)
    d = zone_distance(zones_by_id[link.source_zone_id], zones_by_id[link.target_zone_id], grid_size)
    return LinkAssessment(
        link=link,
        distance=d,
        efficiency=link_efficiency(d, link.intensity, link.custom_weight, optimal, warning),
        status=link_status(d, link.intensity, optimal, warning),
    )


# ----------------------------------------------------------------------
# Aggregation
# ----------------------------------------------------------------------

def overall_score(assessments: Sequence[LinkAssessment]) -> int:
    """Intensity-weighted mean efficiency (high=3, medium=2, low=1)."""
    total_weight = 0
    weighted = 0.0
    for a in assessments:
        w = INTENSITY_WEIGHTS[a.link.intensity]
        weighted += a.efficiency * w
        total_weight += w
    return round(weighted / total_weight) if total_weight else 0


def safety_level(score: float) -> str:
    if score >= 85:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 55:
        return "moderate"
    if score >= 40:
        return "needs_improvement"
    return "critical"


def _achievable(link: CollaborationLink) -> float:
    # efficiency if the pair were brought within the optimal band
    return 100.0 * (link.custom_weight if link.custom_weight is not None else 1.0)


def _near_high_clusters(assessments: Sequence[LinkAssessment]) -> List[List[str]]:
    """Connected groups (>= 3 zones) joined by near, high-intensity links."""
    G = nx.Graph()
    for a in assessments:
        if a.link.intensity == "high" and a.status in ("optimal", "acceptable"):
            G.add_edge(a.link.source_zone_id, a.link.target_zone_id, distance=a.distance)
    return [sorted(c) for c in nx.connected_components(G) if len(c) >= 3]


def generate_recommendations(
    assessments: Sequence[LinkAssessment],
    zones_by_id: Dict[str, Zone],
    overlaps: Optional[Iterable[ZoneOverlap]] = None,
    max_items: int = 5,
) -> List[Recommendation]:
    """
    ``move_closer`` for high/medium links in warning or critical status,
    ``move_apart`` for overlapping pairs reported by the layout validator,
    ``cluster`` for groups of 3+ zones already near each other with high
    mutual intensity.  Ranked by estimated improvement, one per zone set.
    """
    recs: List[Recommendation] = []

    for a in assessments:
        if a.link.intensity not in ("high", "medium") or a.status not in ("warning", "critical"):
            continue
        src = zones_by_id[a.link.source_zone_id]
        dst = zones_by_id[a.link.target_zone_id]
        recs.append(Recommendation(
            priority="high" if a.status == "critical" else "medium",
            type="move_closer",
            affected_zones=[src.id, dst.id],
            message=(f"Move '{src.name}' and '{dst.name}' closer together "
                     f"(distance {a.distance:.1f}, efficiency {a.efficiency:.0f}%)"),
            estimated_improvement=round(_achievable(a.link) - a.efficiency, 1),
        ))

    for overlap in overlaps or []:
        src = zones_by_id.get(overlap.zone_a_id)
        dst = zones_by_id.get(overlap.zone_b_id)
        if src is None or dst is None:
            continue
        smaller = min(src.area, dst.area)
        recs.append(Recommendation(
            priority="high",
            type="move_apart",
            affected_zones=[src.id, dst.id],
            message=f"'{src.name}' and '{dst.name}' overlap by {overlap.area:.1f} square units",
            estimated_improvement=round(100.0 * overlap.area / smaller, 1) if smaller else 0.0,
        ))

    for cluster in _near_high_clusters(assessments):
        members = set(cluster)
        inside = [a for a in assessments
                  if a.link.source_zone_id in members and a.link.target_zone_id in members
                  and a.link.intensity == "high"]
        shortfall = sum(_achievable(a.link) - a.efficiency for a in inside) / len(inside)
        names = ", ".join(zones_by_id[z].name for z in cluster)
        recs.append(Recommendation(
            priority="low",
            type="cluster",
            affected_zones=cluster,
            message=f"Keep {names} together as a collaboration cluster",
            estimated_improvement=round(shortfall, 1),
        ))

    recs.sort(key=lambda r: r.estimated_improvement, reverse=True)

    unique = []
    seen = set()
    for rec in recs:
        key = frozenset(rec.affected_zones)
        if key in seen:
            continue
        seen.add(key)
        unique.append(rec)
    return unique[:max_items]


def assess_layout(
    layout: Layout,
    custom_links: Optional[Iterable[CollaborationLink]] = None,
    overlaps: Optional[Iterable[ZoneOverlap]] = None,
    grid_size: float = GRID_SIZE,
    optimal: float = OPTIMAL_DISTANCE,
    warning: float = WARNING_DISTANCE,
    max_recommendations: int = 5,
) -> AllenCurveAssessment:
    """Score every zone pair and roll up into a layout-wide assessment."""
    zones_by_id = {z.id: z for z in layout.zones}
    links = generate_links(layout, custom_links)
    assessments = [assess_link(link, zones_by_id, grid_size, optimal, warning) for link in links]

    score = overall_score(assessments)
    result = AllenCurveAssessment(
        links=assessments,
        overall_score=score,
        safety_level=safety_level(score),
        recommendations=generate_recommendations(assessments, zones_by_id, overlaps,
                                                 max_recommendations),
    )
    logger.debug(f"Allen Curve: {len(assessments)} links, score={score} ({result.safety_level})")
    return result
