"""
Multiverse versioning store.

A *universe* is a snapshot of a full layout plus derived metrics.  The
store keeps every universe, which one is active, and up to
``MAX_COMPARISON`` universes selected for side-by-side comparison.
Universes can be branched (copy with a parent link) and fused (merge the
zone sets of several universes into a new, unparented one).

The store is a plain object owned by the host session; one writer at a
time.  Operations that reference ids validate them before mutating, so a
failed call leaves the store untouched.
"""

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from config import MAX_COMPARISON
from schemas import Layout, LayoutMetrics, Multiverse, Universe, Zone
from .errors import InsufficientInputError, NotFoundError
from .metrics import calculate_layout_metrics

logger = logging.getLogger(__name__)


class MergeStrategy(str, Enum):
    """How fusion resolves zones that collide across universes."""
    FIRST_WINS = "first_wins"   # same name: keep the first, drop later ones
    SUFFIX = "suffix"           # same name: keep all, rename "Name (2)", ...
    BY_ID = "by_id"             # same zone id: keep the first


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def merge_zones(zone_sets: Sequence[Sequence[Zone]],
                strategy: MergeStrategy = MergeStrategy.FIRST_WINS) -> List[Zone]:
    """
    Union the zones of several layouts in input order.  Every surviving
    zone is a deep copy with a fresh id.
    """
    strategy = MergeStrategy(strategy)
    merged: List[Zone] = []
    seen_keys = set()
    name_counts: Dict[str, int] = {}

    for zones in zone_sets:
        for zone in zones:
            name = zone.name
            if strategy == MergeStrategy.BY_ID:
                if zone.id in seen_keys:
                    continue
                seen_keys.add(zone.id)
            elif strategy == MergeStrategy.FIRST_WINS:
                if zone.name in seen_keys:
                    continue
                seen_keys.add(zone.name)
            else:
                count = name_counts.get(zone.name, 0) + 1
                name_counts[zone.name] = count
                if count > 1:
                    name = f"{zone.name} ({count})"
            merged.append(zone.model_copy(deep=True, update={"id": _new_id(), "name": name}))
    return merged


class MultiverseStore:
    def __init__(self, max_comparison: int = MAX_COMPARISON,
                 metrics_fn: Callable[[Layout], LayoutMetrics] = calculate_layout_metrics):
        self.universes: List[Universe] = []
        self.active_universe_id: Optional[str] = None
        self.comparison_ids: List[str] = []
        self.max_comparison = max_comparison
        self._metrics = metrics_fn

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get_universe(self, universe_id: str) -> Optional[Universe]:
        return next((u for u in self.universes if u.id == universe_id), None)

    def require_universe(self, universe_id: str) -> Universe:
        universe = self.get_universe(universe_id)
        if universe is None:
            raise NotFoundError("Universe", universe_id)
        return universe

    def get_active_universe(self) -> Optional[Universe]:
        if self.active_universe_id is None:
            return None
        return self.get_universe(self.active_universe_id)

    def children_of(self, universe_id: str) -> List[Universe]:
        return [u for u in self.universes if u.parent_id == universe_id]

    def lineage(self, universe_id: str) -> List[Universe]:
        """Ancestors from the oldest reachable root down to *universe_id*.

        Stops at a dangling parent reference (parent deleted).
        """
        chain = [self.require_universe(universe_id)]
        visited = {universe_id}
        parent_id = chain[0].parent_id
        while parent_id and parent_id not in visited:
            parent = self.get_universe(parent_id)
            if parent is None:
                break
            chain.append(parent)
            visited.add(parent_id)
            parent_id = parent.parent_id
        chain.reverse()
        return chain

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def create_universe(self, layout: Layout, name: Optional[str] = None,
                        description: Optional[str] = None) -> str:
        """Store a deep copy of *layout*; the first universe becomes active."""
        layout = layout.model_copy(deep=True)
        universe = Universe(
            id=_new_id(),
            name=name or f"Universe {len(self.universes) + 1}",
            description=description,
            layout=layout,
            created_at=_now(),
            metrics=self._metrics(layout),
        )
        self.universes.append(universe)
        if not self.active_universe_id:
            self.active_universe_id = universe.id
        logger.info(f"Created universe '{universe.name}' ({universe.id})")
        return universe.id

    def branch_universe(self, source_id: str, name: str, branch_point: str = "") -> str:
        """Copy *source_id* into a child universe with freshly computed metrics."""
        source = self.require_universe(source_id)
        layout = source.layout.model_copy(deep=True)
        universe = Universe(
            id=_new_id(),
            name=name,
            description=f"Branched from '{source.name}'",
            layout=layout,
            created_at=_now(),
            parent_id=source_id,
            branch_point=branch_point,
            metrics=self._metrics(layout),
        )
        self.universes.append(universe)
        logger.info(f"Branched '{universe.name}' from '{source.name}' ({branch_point or 'no branch note'})")
        return universe.id

    def delete_universe(self, universe_id: str, detach_children: bool = False) -> bool:
        """
        Remove a universe.  Children keep their ``parent_id`` unless
        *detach_children* is set, in which case it is cleared.  Returns
        False for an unknown id.
        """
        if self.get_universe(universe_id) is None:
            logger.warning(f"delete ignored, universe not found: {universe_id}")
            return False

        self.universes = [u for u in self.universes if u.id != universe_id]
        if self.active_universe_id == universe_id:
            self.active_universe_id = self.universes[0].id if self.universes else None
        self.comparison_ids = [cid for cid in self.comparison_ids if cid != universe_id]

        if detach_children:
            for child in self.children_of(universe_id):
                child.parent_id = None
        logger.info(f"Deleted universe {universe_id}")
        return True

    def set_active_universe(self, universe_id: str) -> bool:
        if self.get_universe(universe_id) is None:
            logger.warning(f"set_active ignored, universe not found: {universe_id}")
            return False
        self.active_universe_id = universe_id
        return True

    def update_universe_layout(self, universe_id: str, layout: Layout) -> Universe:
        universe = self.require_universe(universe_id)
        universe.layout = layout.model_copy(deep=True)
        universe.metrics = self._metrics(universe.layout)
        return universe

    def fuse_universes(self, ids: Sequence[str], name: str,
                       strategy: MergeStrategy = MergeStrategy.FIRST_WINS) -> str:
        """
        Merge the zone sets of the universes in *ids* into a new universe.

        Unknown ids are skipped; fewer than two resolved universes raises
        ``InsufficientInputError`` before anything changes.  Dimensions,
        description and notes come from the first resolved universe.
        """
        sources = [u for u in (self.get_universe(i) for i in ids) if u is not None]
        if len(sources) < 2:
            raise InsufficientInputError(
                "Need at least 2 universes to fuse", required=2, given=len(sources)
            )

        base = sources[0].layout
        fused = Layout(
            name=name,
            description=base.description,
            dimensions=base.dimensions.model_copy(),
            zones=merge_zones([u.layout.zones for u in sources], strategy),
            notes=list(base.notes),
        )
        fused_id = self.create_universe(fused, name)
        logger.info(f"Fused {len(sources)} universes into '{name}' "
                    f"({len(fused.zones)} zones, strategy={MergeStrategy(strategy).value})")
        return fused_id

    # ------------------------------------------------------------------
    # Comparison set
    # ------------------------------------------------------------------
    def add_to_comparison(self, universe_id: str) -> bool:
        """Silently ignores unknown ids, duplicates and a full set."""
        if (len(self.comparison_ids) >= self.max_comparison
                or universe_id in self.comparison_ids
                or self.get_universe(universe_id) is None):
            return False
        self.comparison_ids.append(universe_id)
        return True

    def remove_from_comparison(self, universe_id: str) -> bool:
        if universe_id not in self.comparison_ids:
            return False
        self.comparison_ids.remove(universe_id)
        return True

    def clear_comparison(self):
        self.comparison_ids = []

    def compare(self) -> List[dict]:
        rows = []
        for cid in self.comparison_ids:
            universe = self.get_universe(cid)
            if universe is not None:
                rows.append({
                    "id": universe.id,
                    "name": universe.name,
                    "zone_count": len(universe.layout.zones),
                    "metrics": universe.metrics.model_dump(),
                })
        return rows

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------
    def snapshot(self) -> Multiverse:
        return Multiverse(
            universes=[u.model_copy(deep=True) for u in self.universes],
            active_universe_id=self.active_universe_id or "",
            comparison_ids=list(self.comparison_ids),
        )

    @classmethod
    def restore(cls, state: Multiverse, **kwargs) -> "MultiverseStore":
        """
        Rebuild a store from a snapshot.  An active id that names no
        universe falls back to the first universe; comparison ids are
        deduplicated and unknown ones dropped before the cap applies.
        """
        store = cls(**kwargs)
        store.universes = [u.model_copy(deep=True) for u in state.universes]
        known = {u.id for u in store.universes}

        active_id = state.active_universe_id or None
        if active_id is not None and active_id not in known:
            logger.warning(f"restore: active universe {active_id} not found, falling back")
            active_id = None
        if active_id is None and store.universes:
            active_id = store.universes[0].id
        store.active_universe_id = active_id

        comparison = []
        for cid in state.comparison_ids:
            if cid in known and cid not in comparison:
                comparison.append(cid)
        if len(comparison) != len(state.comparison_ids):
            logger.warning("restore: dropped unknown or duplicate comparison ids")
        store.comparison_ids = comparison[:store.max_comparison]
        return store
