import pytest

from conftest import make_layout, make_zone
from schemas import Multiverse
from services.spatial.errors import InsufficientInputError, NotFoundError
from services.spatial.history import EditHistory
from services.spatial.multiverse import MergeStrategy, MultiverseStore, merge_zones


@pytest.fixture
def store():
    return MultiverseStore()


def lab_only():
    return make_layout(make_zone("Lab", 0, 0, 4, 4, "compute"), name="A")


def lab_and_office():
    return make_layout(
        make_zone("Lab", 10, 10, 4, 4, "compute", id="lab-b"),
        make_zone("Office", 0, 0, 3, 3, "workspace"),
        name="B",
    )


def test_create_first_becomes_active(store):
    first = store.create_universe(lab_only())
    second = store.create_universe(lab_and_office(), "Second")
    assert store.active_universe_id == first
    assert store.get_universe(second).name == "Second"
    assert store.get_universe(first).name == "Universe 1"
    assert store.get_universe(first).parent_id is None


def test_create_deep_copies_layout(store):
    layout = lab_only()
    uid = store.create_universe(layout)
    layout.zones.clear()
    assert len(store.get_universe(uid).layout.zones) == 1


def test_create_computes_metrics(store):
    uid = store.create_universe(lab_only())
    metrics = store.get_universe(uid).metrics
    assert metrics.used_area == 16
    assert metrics.total_area == 1200


def test_branch(store):
    source = store.create_universe(lab_only(), "Base")
    child = store.branch_universe(source, "Wider lab", "lab width")
    universe = store.get_universe(child)
    assert universe.parent_id == source
    assert universe.branch_point == "lab width"
    assert universe.description == "Branched from 'Base'"
    assert universe.layout == store.get_universe(source).layout
    assert universe.layout is not store.get_universe(source).layout
    assert store.active_universe_id == source


def test_branch_unknown_source_leaves_store_untouched(store):
    store.create_universe(lab_only())
    with pytest.raises(NotFoundError):
        store.branch_universe("missing", "X", "")
    assert len(store.universes) == 1


def test_delete_active_picks_successor(store):
    a = store.create_universe(lab_only())
    b = store.create_universe(lab_and_office())
    store.add_to_comparison(a)
    assert store.delete_universe(a) is True
    assert store.active_universe_id == b
    assert a not in store.comparison_ids

    assert store.delete_universe(b) is True
    assert store.active_universe_id is None
    assert store.delete_universe(b) is False


def test_delete_does_not_cascade(store):
    parent = store.create_universe(lab_only())
    child = store.branch_universe(parent, "Child", "")
    store.delete_universe(parent)
    assert store.get_universe(child).parent_id == parent
    assert [u.id for u in store.lineage(child)] == [child]


def test_delete_can_detach_children(store):
    parent = store.create_universe(lab_only())
    child = store.branch_universe(parent, "Child", "")
    store.delete_universe(parent, detach_children=True)
    assert store.get_universe(child).parent_id is None


def test_set_active_unknown_is_ignored(store):
    a = store.create_universe(lab_only())
    assert store.set_active_universe("missing") is False
    assert store.active_universe_id == a


def test_comparison_capped_at_three(store):
    ids = [store.create_universe(lab_only()) for _ in range(6)]
    for uid in ids + ids:
        store.add_to_comparison(uid)
        assert len(store.comparison_ids) <= 3
    assert store.comparison_ids == ids[:3]
    assert store.add_to_comparison(ids[0]) is False

    assert store.remove_from_comparison(ids[1]) is True
    assert store.add_to_comparison(ids[4]) is True
    assert store.comparison_ids == [ids[0], ids[2], ids[4]]
    assert [row["id"] for row in store.compare()] == store.comparison_ids

    store.clear_comparison()
    assert store.comparison_ids == []


def test_fuse_dedupes_by_name_with_fresh_ids(store):
    a = store.create_universe(lab_only())
    b = store.create_universe(lab_and_office())
    input_ids = {z.id for uid in (a, b) for z in store.get_universe(uid).layout.zones}

    fused = store.get_universe(store.fuse_universes([a, b], "Fused"))
    assert sorted(z.name for z in fused.layout.zones) == ["Lab", "Office"]
    assert not input_ids & {z.id for z in fused.layout.zones}
    assert len({z.id for z in fused.layout.zones}) == 2
    assert fused.parent_id is None
    # first occurrence wins
    assert fused.layout.zones[0].position.x == 0


def test_fuse_suffix_strategy(store):
    a = store.create_universe(lab_only())
    b = store.create_universe(lab_and_office())
    fused = store.get_universe(store.fuse_universes([a, b], "Fused", MergeStrategy.SUFFIX))
    assert [z.name for z in fused.layout.zones] == ["Lab", "Lab (2)", "Office"]


def test_merge_by_id():
    zones_a = [make_zone("Lab", 0, 0, 2, 2, id="shared")]
    zones_b = [make_zone("Lab renamed", 5, 5, 2, 2, id="shared"), make_zone("Lab", 1, 1, 2, 2, id="other")]
    merged = merge_zones([zones_a, zones_b], "by_id")
    assert [z.name for z in merged] == ["Lab", "Lab"]


@pytest.mark.parametrize("known", [0, 1])
def test_fuse_needs_two_resolved(store, known):
    ids = [store.create_universe(lab_only()) for _ in range(known)]
    before = len(store.universes)
    with pytest.raises(InsufficientInputError):
        store.fuse_universes(ids + ["ghost-1", "ghost-2"], "Nope")
    assert len(store.universes) == before


def test_update_layout_recomputes_metrics(store):
    uid = store.create_universe(lab_only())
    universe = store.update_universe_layout(uid, lab_and_office())
    assert universe.metrics.used_area == 25
    with pytest.raises(NotFoundError):
        store.update_universe_layout("missing", lab_only())


def test_lineage_and_children(store):
    root = store.create_universe(lab_only(), "Root")
    mid = store.branch_universe(root, "Mid", "")
    leaf = store.branch_universe(mid, "Leaf", "")
    assert [u.name for u in store.lineage(leaf)] == ["Root", "Mid", "Leaf"]
    assert [u.id for u in store.children_of(root)] == [mid]


def test_snapshot_restore_round_trip(store):
    a = store.create_universe(lab_only())
    b = store.branch_universe(a, "B", "")
    store.add_to_comparison(b)

    restored = MultiverseStore.restore(store.snapshot())
    assert [u.id for u in restored.universes] == [a, b]
    assert restored.active_universe_id == a
    assert restored.comparison_ids == [b]


def test_restore_repairs_dangling_ids(store):
    a = store.create_universe(lab_only())
    b = store.branch_universe(a, "B", "")
    state = store.snapshot().model_copy(
        update={"active_universe_id": "ghost", "comparison_ids": [b, b, "ghost", a]}
    )

    restored = MultiverseStore.restore(state)
    assert restored.active_universe_id == a
    assert restored.get_universe(restored.active_universe_id) is not None
    assert restored.comparison_ids == [b, a]


def test_restore_empty_snapshot():
    restored = MultiverseStore.restore(Multiverse(active_universe_id="ghost"))
    assert restored.active_universe_id is None
    assert restored.comparison_ids == []


def test_edit_history_undo_redo():
    history = EditHistory(lab_only(), max_size=3)
    assert not history.can_undo

    history.push(lab_and_office())
    assert history.undo().name == "A"
    assert history.redo().name == "B"

    history.undo()
    history.push(make_layout(name="C"))
    assert not history.can_redo

    history.push(make_layout(name="D"))
    assert len(history) == 3
    assert [history.undo().name, history.undo().name] == ["C", "A"]
    assert not history.can_undo
