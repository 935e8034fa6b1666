"""Pydantic schemas for layout records and API request/response validation.

Attributes are snake_case; every record also accepts the camelCase keys an
external layout generator emits (``layerId``, ``unitPrice`` ...).
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from config import MAX_COMPARISON


def generate_uuid():
    return str(uuid.uuid4())


class ZoneType(str, Enum):
    COMPUTE = "compute"
    WORKSPACE = "workspace"
    MEETING = "meeting"
    STORAGE = "storage"
    UTILITY = "utility"
    ENTRANCE = "entrance"
    BREAK = "break"


class LayerType(str, Enum):
    ZONES = "zones"
    EQUIPMENT = "equipment"
    ANNOTATIONS = "annotations"
    MEASUREMENTS = "measurements"
    GUIDES = "guides"


Intensity = Literal["high", "medium", "low"]


class LabModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Geometry ----------
class Point(LabModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Size(LabModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


# ---------- Zone ----------
class Equipment(LabModel):
    name: str
    category: str = "utilities"
    unit_price: float = Field(
        0.0, ge=0, validation_alias=AliasChoices("unit_price", "unitPrice", "price")
    )
    quantity: int = 1
    equipment_id: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value):
        return value or "utilities"

    @field_validator("unit_price", mode="before")
    @classmethod
    def _default_price(cls, value):
        return value or 0.0

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value):
        # zero / missing quantities count as a single unit
        return value or 1

    @property
    def total_price(self) -> float:
        return self.unit_price * self.quantity


class Zone(LabModel):
    id: str = Field(default_factory=generate_uuid)
    name: str
    type: str = ZoneType.WORKSPACE.value
    position: Point
    size: Size
    color: str = "#22d3ee"
    equipment: Optional[List[Union[Equipment, str]]] = None
    requirements: Optional[List[str]] = None
    layer_id: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if isinstance(value, ZoneType):
            return value.value
        return str(value).strip().lower()

    @property
    def center(self) -> Point:
        return Point(
            x=self.position.x + self.size.width / 2,
            y=self.position.y + self.size.height / 2,
        )

    @property
    def area(self) -> float:
        return self.size.width * self.size.height

    @property
    def bounds(self):
        """(minx, miny, maxx, maxy) in grid units."""
        return (
            self.position.x,
            self.position.y,
            self.position.x + self.size.width,
            self.position.y + self.size.height,
        )


# ---------- Layout ----------
class Dimensions(LabModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    unit: Literal["m", "ft"] = "m"


class Layout(LabModel):
    name: str = "Untitled Layout"
    description: str = ""
    dimensions: Dimensions
    zones: List[Zone] = []
    notes: List[str] = []

    @model_validator(mode="after")
    def _unique_zone_ids(self):
        seen = set()
        for zone in self.zones:
            if zone.id in seen:
                raise ValueError(f"Duplicate zone id: {zone.id}")
            seen.add(zone.id)
        return self

    def get_zone(self, zone_id: str) -> Optional[Zone]:
        return next((z for z in self.zones if z.id == zone_id), None)

    @property
    def total_area(self) -> float:
        return self.dimensions.width * self.dimensions.height


# ---------- Layer ----------
class Layer(LabModel):
    id: str = Field(default_factory=lambda: f"layer-{uuid.uuid4().hex[:12]}")
    name: str
    type: LayerType
    visible: bool = True
    locked: bool = False
    opacity: float = 100
    order: int = 0
    color: Optional[str] = None

    @property
    def editable(self) -> bool:
        return self.visible and not self.locked


# ---------- Collaboration ----------
class CollaborationLink(LabModel):
    id: str
    source_zone_id: str
    target_zone_id: str
    intensity: Intensity
    auto_inferred: bool = False
    custom_weight: Optional[float] = Field(None, ge=0, le=1)


# ---------- Multiverse ----------
class LayoutMetrics(LabModel):
    total_area: float = 0.0
    used_area: float = 0.0
    efficiency: float = 0.0
    estimated_cost: float = 0.0
    safety_score: float = 0.0
    collaboration_score: float = 0.0


class Universe(LabModel):
    id: str = Field(default_factory=generate_uuid)
    name: str
    description: Optional[str] = None
    layout: Layout
    created_at: str
    parent_id: Optional[str] = None
    branch_point: Optional[str] = None
    metrics: LayoutMetrics = LayoutMetrics()


class Multiverse(LabModel):
    universes: List[Universe] = []
    active_universe_id: str = ""
    comparison_ids: List[str] = Field(default_factory=list, max_length=MAX_COMPARISON)


# ---------- Editor requests ----------
class AlignmentRequest(LabModel):
    layout: Layout
    zone_id: str
    x: float
    y: float
    threshold: Optional[float] = None


class SnapRequest(LabModel):
    layout: Layout
    point: Point
    threshold: Optional[float] = None
    exclude_zone_id: Optional[str] = None


class DistributeRequest(LabModel):
    layout: Layout
    zone_ids: Optional[List[str]] = None
    axis: Literal["horizontal", "vertical"] = "horizontal"
    spacing: float = 1.0


class ArrangeRequest(LabModel):
    layout: Layout
    padding: float = 2.0


# ---------- Analysis requests ----------
class AnalysisRequest(LabModel):
    layout: Layout
    links: List[CollaborationLink] = []
    grid_size: Optional[float] = None


class BudgetRequest(LabModel):
    layout: Layout
    currency: Literal["USD", "CNY", "EUR"] = "USD"


class IntakeRequest(LabModel):
    payload: Union[Dict[str, Any], str] = Field(..., description="Generator reply text or layout JSON")


# ---------- Session tool requests ----------
class LayerCreateRequest(LabModel):
    name: str
    type: LayerType
    opacity: float = 100
    color: Optional[str] = None


class LayerUpdateRequest(LabModel):
    name: Optional[str] = None
    opacity: Optional[float] = None


class LayerReorderRequest(LabModel):
    source_index: int
    dest_index: int


class LayerMergeRequest(LabModel):
    source_id: str
    target_id: str


class MeasurementStartRequest(LabModel):
    mode: Literal["distance", "area", "angle"]


class DragRequest(LabModel):
    zone_id: str
    x: float
    y: float


# ---------- Multiverse requests ----------
class UniverseCreateRequest(LabModel):
    layout: Layout
    name: Optional[str] = None


class BranchRequest(LabModel):
    name: str
    branch_point: str = ""


class FuseRequest(LabModel):
    ids: List[str]
    name: str
    strategy: Literal["first_wins", "suffix", "by_id"] = "first_wins"


class UpdateLayoutRequest(LabModel):
    layout: Layout
