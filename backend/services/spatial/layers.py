"""
Layer registry: ordered visibility / lock / opacity groups.

Every drawable item may carry a ``layer_id``; items without one are
always visible and editable.  ``order`` is the paint order (low first).
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from schemas import Layer, LayerType

logger = logging.getLogger(__name__)

DEFAULT_LAYERS = [
    {"name": "Guides & Grid", "type": LayerType.GUIDES, "opacity": 30, "color": "#6b7280"},
    {"name": "Zones", "type": LayerType.ZONES, "opacity": 100, "color": "#22d3ee"},
    {"name": "Equipment", "type": LayerType.EQUIPMENT, "opacity": 100, "color": "#8b5cf6"},
    {"name": "Annotations", "type": LayerType.ANNOTATIONS, "opacity": 100, "color": "#f59e0b"},
    {"name": "Measurements", "type": LayerType.MEASUREMENTS, "opacity": 100, "color": "#10b981"},
]


def _layer_id(layer_type: LayerType) -> str:
    return f"layer-{LayerType(layer_type).value}-{uuid.uuid4().hex[:9]}"


def make_layer(name: str, layer_type: LayerType, **options) -> Layer:
    return Layer(
        id=_layer_id(layer_type),
        name=name,
        type=layer_type,
        visible=options.get("visible", True),
        locked=options.get("locked", False),
        opacity=clamp_opacity(options.get("opacity", 100)),
        order=options.get("order", 0),
        color=options.get("color"),
    )


def create_default_layers() -> List[Layer]:
    return [make_layer(spec["name"], spec["type"], opacity=spec["opacity"],
                       order=index, color=spec["color"])
            for index, spec in enumerate(DEFAULT_LAYERS)]


def clamp_opacity(opacity: float) -> float:
    clamped = max(0.0, min(100.0, float(opacity)))
    if clamped != opacity:
        logger.warning(f"Opacity {opacity} outside [0, 100], clamped to {clamped}")
    return clamped


def is_layer_editable(layer: Layer) -> bool:
    return layer.visible and not layer.locked


def _item_layer_id(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        return item.get("layer_id") or item.get("layerId")
    return getattr(item, "layer_id", None)


class LayerRegistry:
    """
    Ordered list of layers for one editing session.

    Single writer: callers serialize mutations.  Operations addressing an
    unknown layer id are ignored and return ``None``.
    """

    def __init__(self, layers: Optional[List[Layer]] = None):
        self.layers: List[Layer] = list(layers) if layers is not None else create_default_layers()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, layer_id: str) -> Optional[Layer]:
        return next((layer for layer in self.layers if layer.id == layer_id), None)

    def get_by_type(self, layer_type: LayerType) -> Optional[Layer]:
        return next((layer for layer in self.layers if layer.type == layer_type), None)

    def _index(self, layer_id: str) -> int:
        for i, layer in enumerate(self.layers):
            if layer.id == layer_id:
                return i
        return -1

    def _replace(self, layer_id: str, **changes) -> Optional[Layer]:
        i = self._index(layer_id)
        if i < 0:
            logger.debug(f"Layer {layer_id} not found, ignoring update {changes}")
            return None
        self.layers[i] = self.layers[i].model_copy(update=changes)
        return self.layers[i]

    def _renumber(self):
        self.layers = [layer.model_copy(update={"order": i}) for i, layer in enumerate(self.layers)]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def toggle_visibility(self, layer_id: str) -> Optional[Layer]:
        layer = self.get(layer_id)
        return self._replace(layer_id, visible=not layer.visible) if layer else None

    def toggle_lock(self, layer_id: str) -> Optional[Layer]:
        layer = self.get(layer_id)
        return self._replace(layer_id, locked=not layer.locked) if layer else None

    def set_opacity(self, layer_id: str, opacity: float) -> Optional[Layer]:
        return self._replace(layer_id, opacity=clamp_opacity(opacity))

    def rename(self, layer_id: str, name: str) -> Optional[Layer]:
        return self._replace(layer_id, name=name)

    def reorder(self, source_index: int, dest_index: int) -> List[Layer]:
        """
        Move one layer, then renumber ``order`` densely from 0.  Indices
        outside ``0..n-1`` (negative ones included) leave the stack as is.
        """
        count = len(self.layers)
        if not (0 <= source_index < count and 0 <= dest_index < count):
            logger.warning(f"reorder ignored, index out of range: {source_index} -> {dest_index}")
            return self.layers
        moved = self.layers.pop(source_index)
        self.layers.insert(dest_index, moved)
        self._renumber()
        return self.layers

    def create(self, name: str, layer_type: LayerType, **options) -> Layer:
        options.setdefault("order", len(self.layers))
        layer = make_layer(name, layer_type, **options)
        self.layers.append(layer)
        logger.debug(f"Created layer {layer.id} ({layer.name})")
        return layer

    def delete(self, layer_id: str) -> bool:
        before = len(self.layers)
        self.layers = [layer for layer in self.layers if layer.id != layer_id]
        return len(self.layers) < before

    def duplicate(self, layer_id: str) -> Optional[Layer]:
        """Insert a copy right after the source and renumber."""
        i = self._index(layer_id)
        if i < 0:
            return None
        source = self.layers[i]
        copy = make_layer(f"{source.name} Copy", source.type,
                          visible=source.visible, locked=source.locked,
                          opacity=source.opacity, color=source.color)
        self.layers.insert(i + 1, copy)
        self._renumber()
        return self.layers[i + 1]

    def merge(self, source_id: str, target_id: str, items: Iterable[Any]) -> List[Any]:
        """
        Move every item on *source_id* to *target_id* and delete the source.

        Returns the items with reassigned layer ids (pydantic items are copied,
        dicts are shallow-copied).
        """
        if self.get(source_id) is None or self.get(target_id) is None:
            return list(items)
        merged = []
        for item in items:
            if _item_layer_id(item) != source_id:
                merged.append(item)
            elif isinstance(item, dict):
                merged.append({**item, "layer_id": target_id})
            else:
                merged.append(item.model_copy(update={"layer_id": target_id}))
        self.delete(source_id)
        return merged

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_item_visible(self, layer_id: Optional[str]) -> bool:
        layer = self.get(layer_id) if layer_id else None
        return layer.visible if layer else True

    def is_item_editable(self, layer_id: Optional[str]) -> bool:
        layer = self.get(layer_id) if layer_id else None
        return is_layer_editable(layer) if layer else True

    def item_opacity(self, layer_id: Optional[str]) -> float:
        layer = self.get(layer_id) if layer_id else None
        return layer.opacity / 100 if layer else 1.0

    def filter_visible(self, items: Iterable[Any]) -> List[Any]:
        return [item for item in items if self.is_item_visible(_item_layer_id(item))]

    def filter_editable(self, items: Iterable[Any]) -> List[Any]:
        return [item for item in items if self.is_item_editable(_item_layer_id(item))]

    def layers_for_rendering(self) -> List[Layer]:
        """Ascending ``order``; ties keep list position."""
        return sorted(self.layers, key=lambda layer: layer.order)

    def stats(self) -> Dict[str, int]:
        return {
            "total": len(self.layers),
            "visible": sum(1 for layer in self.layers if layer.visible),
            "locked": sum(1 for layer in self.layers if layer.locked),
            "unlocked": sum(1 for layer in self.layers if not layer.locked),
        }

    def validate(self) -> Dict[str, Any]:
        errors = []
        ids = [layer.id for layer in self.layers]
        if len(ids) != len(set(ids)):
            errors.append("Duplicate layer IDs found")
        orders = [layer.order for layer in self.layers]
        if len(orders) != len(set(orders)):
            errors.append("Duplicate layer orders found")
        for layer in self.layers:
            if not 0 <= layer.opacity <= 100:
                errors.append(f'Layer "{layer.name}" has invalid opacity: {layer.opacity}')
        return {"valid": not errors, "errors": errors}
