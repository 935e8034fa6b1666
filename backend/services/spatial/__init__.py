"""
Spatial layout engine for lab floor plans.

Geometry helpers, drag alignment and snapping, layers, measurements,
zone arrangement, Allen Curve collaboration scoring, budgets, layout
validation and metrics, and the multiverse versioning store.  Geometry
is in grid units; ``GRID_SIZE`` converts to physical units.
"""

from .errors import SpatialError, NotFoundError, InsufficientInputError
from .geometry import Rect, distance, snap_to_grid
from .alignment import AlignmentGuide, AlignmentSession, compute_alignment_guides, snap_to_alignment
from .layers import LayerRegistry, create_default_layers
from .measurement import Measurement, MeasurementSession
from .arrangement import auto_arrange, distribute_evenly, apply_placements
from .allen_curve import assess_layout
from .budget import budget_summary
from .validation import validate_layout
from .metrics import calculate_layout_metrics
from .multiverse import MergeStrategy, MultiverseStore
from .history import EditHistory
from .projection import layout_to_3d, camera_position

__all__ = [
    "SpatialError",
    "NotFoundError",
    "InsufficientInputError",
    "Rect",
    "distance",
    "snap_to_grid",
    "AlignmentGuide",
    "AlignmentSession",
    "compute_alignment_guides",
    "snap_to_alignment",
    "LayerRegistry",
    "create_default_layers",
    "Measurement",
    "MeasurementSession",
    "auto_arrange",
    "distribute_evenly",
    "apply_placements",
    "assess_layout",
    "budget_summary",
    "validate_layout",
    "calculate_layout_metrics",
    "MergeStrategy",
    "MultiverseStore",
    "EditHistory",
    "layout_to_3d",
    "camera_position",
]
