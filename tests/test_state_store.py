from __future__ import annotations

from pytacmon.state.store import EntityStore


def _rec(entity_id: object, lat: float = 50.0, lng: float = 30.0, **extra: object) -> dict[str, object]:
    return {"id": entity_id, "lat": lat, "lng": lng, **extra}


def test_first_snapshot_adds_in_input_order() -> None:
    store = EntityStore()

    result = store.reconcile([_rec(3), _rec(1), _rec(2)])

    assert [entity.id for entity in result.added] == ["3", "1", "2"]
    assert result.updated == []
    assert result.removed == []
    assert store.ids() == ["3", "1", "2"]


def test_reappearing_id_is_updated_never_duplicated() -> None:
    store = EntityStore()
    store.reconcile([_rec(1, 50.0, 30.0, type="drone", label="A"), _rec(2)])

    result = store.reconcile([_rec(1, 51.0, 31.0, type="missile", label="B"), _rec(2)])

    assert result.added == []
    assert [entity.id for entity in result.updated] == ["1", "2"]
    assert len(store) == 2
    entity = store.get("1")
    assert entity is not None
    assert (entity.lat, entity.lng, entity.category, entity.label) == (51.0, 31.0, "missile", "B")


def test_unchanged_entity_still_reported_as_updated() -> None:
    store = EntityStore()
    store.reconcile([_rec(1)])

    result = store.reconcile([_rec(1)])

    assert [entity.id for entity in result.updated] == ["1"]


def test_vanished_ids_are_removed_sorted() -> None:
    store = EntityStore()
    store.reconcile([_rec("b"), _rec("c"), _rec("a"), _rec("d")])

    result = store.reconcile([_rec("d")])

    assert result.removed == ["a", "b", "c"]
    assert store.ids() == ["d"]


def test_drone_then_empty_snapshot_empties_store() -> None:
    store = EntityStore()
    store.reconcile([{"id": 1, "lat": 50, "lng": 30, "category": "drone"}])

    result = store.reconcile([])

    assert result.removed == ["1"]
    assert result.added == [] and result.updated == []
    assert len(store) == 0


def test_mixed_added_updated_removed() -> None:
    store = EntityStore()
    store.reconcile([_rec(1), _rec(2)])

    result = store.reconcile([_rec(3), _rec(2)])

    assert [entity.id for entity in result.added] == ["3"]
    assert [entity.id for entity in result.updated] == ["2"]
    assert result.removed == ["1"]
    assert result.changed


def test_invalid_records_are_skipped_and_counted() -> None:
    store = EntityStore()

    result = store.reconcile([_rec(1), {"id": "", "lat": 0, "lng": 0}, _rec(2, lat=123.0), "garbage", _rec(3)])

    assert result.skipped == 3
    assert store.ids() == ["1", "3"]


def test_invalid_record_for_known_id_counts_as_removal() -> None:
    store = EntityStore()
    store.reconcile([_rec(1), _rec(2)])

    result = store.reconcile([_rec(1), _rec(2, lat=999.0)])

    assert result.removed == ["2"]
    assert result.skipped == 1


def test_duplicate_ids_in_one_snapshot_collapse_last_wins() -> None:
    store = EntityStore()

    result = store.reconcile([_rec(1, label="first"), _rec(2), _rec("1", label="second")])

    assert [entity.id for entity in result.added] == ["1", "2"]
    assert result.added[0].label == "second"
    assert len(store) == 2


def test_store_size_matches_distinct_ids_of_latest_snapshot() -> None:
    store = EntityStore()
    store.reconcile([_rec(i) for i in range(10)])

    store.reconcile([_rec(i) for i in (1, 1.0, "1", 5, 7, 7)])

    assert len(store) == 3
    assert sorted(store.ids()) == ["1", "5", "7"]


def test_returned_entities_are_copies() -> None:
    store = EntityStore()
    result = store.reconcile([_rec(1, 50.0, 30.0)])

    result.added[0].lat = 0.0
    for entity in store.entities():
        entity.lng = 0.0

    stored = store.get("1")
    assert stored is not None
    assert (stored.lat, stored.lng) == (50.0, 30.0)


def test_clear_returns_removed_ids() -> None:
    store = EntityStore()
    store.reconcile([_rec("b"), _rec("a")])

    assert store.clear() == ["a", "b"]
    assert len(store) == 0


def test_out_of_range_observed_at_does_not_abort_reconcile() -> None:
    store = EntityStore()

    result = store.reconcile([_rec(1, observedAt=1e30), _rec(2, time=10**400)])

    assert [entity.id for entity in result.added] == ["1", "2"]
    assert result.skipped == 0
    entity = store.get("1")
    assert entity is not None and entity.observed_at is None
