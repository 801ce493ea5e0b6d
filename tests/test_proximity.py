from __future__ import annotations

import math

import pytest

from pytacmon.exceptions import TacmonConfigError
from pytacmon.geo import Coordinate
from pytacmon.models.entity import TrackedEntity
from pytacmon.state.proximity import AlertState, ProximityEvaluator

OBSERVER = Coordinate(lat=50.0, lng=30.0)


def _entity(entity_id: str, lat: float, lng: float) -> TrackedEntity:
    return TrackedEntity(id=entity_id, lat=lat, lng=lng, category="drone", label=f"T-{entity_id}")


NEAR = _entity("1", 50.01, 30.01)  # ~1.3 km
FAR = _entity("1", 51.0, 30.0)  # ~111 km


def test_entry_fires_once_then_suppressed() -> None:
    evaluator = ProximityEvaluator(radius_km=10)

    first = evaluator.evaluate([NEAR], OBSERVER)
    second = evaluator.evaluate([NEAR], OBSERVER)

    assert len(first) == 1
    assert first[0].entity_id == "1"
    assert first[0].distance_km == pytest.approx(1.32, abs=0.02)
    assert first[0].radius_km == 10
    assert first[0].label == "T-1"
    assert second == []
    assert evaluator.state_of("1") is AlertState.ARMED


def test_exit_rearms_silently_and_reentry_fires_again() -> None:
    evaluator = ProximityEvaluator(radius_km=10)

    assert len(evaluator.evaluate([NEAR], OBSERVER)) == 1
    assert evaluator.evaluate([FAR], OBSERVER) == []
    assert evaluator.state_of("1") is AlertState.UNARMED
    assert len(evaluator.evaluate([NEAR], OBSERVER)) == 1


def test_distance_equal_to_radius_is_inside() -> None:
    evaluator = ProximityEvaluator(radius_km=6371.0 * math.pi / 180.0 + 1e-9)
    on_edge = _entity("e", 0.0, 1.0)

    assert len(evaluator.evaluate([on_edge], Coordinate(lat=0.0, lng=0.0))) == 1


def test_outside_entities_get_unarmed_state_lazily() -> None:
    evaluator = ProximityEvaluator(radius_km=10)

    assert evaluator.state_of("1") is None
    assert evaluator.evaluate([FAR], OBSERVER) == []
    assert evaluator.state_of("1") is AlertState.UNARMED


def test_absent_observer_leaves_state_untouched() -> None:
    evaluator = ProximityEvaluator(radius_km=10)
    evaluator.evaluate([NEAR], OBSERVER)

    assert evaluator.evaluate([FAR, _entity("2", 50.0, 30.0)], None) == []
    assert evaluator.state_of("1") is AlertState.ARMED
    assert evaluator.state_of("2") is None


def test_set_radius_rearms_everything() -> None:
    evaluator = ProximityEvaluator(radius_km=10)
    evaluator.evaluate([NEAR], OBSERVER)

    evaluator.set_radius(5)

    assert evaluator.radius_km == 5
    assert evaluator.state_of("1") is AlertState.UNARMED
    alerts = evaluator.evaluate([NEAR], OBSERVER)
    assert [alert.entity_id for alert in alerts] == ["1"]
    assert alerts[0].radius_km == 5


@pytest.mark.parametrize("bad", [0, -1, float("inf"), float("nan"), "10", None, True])
def test_invalid_radius_rejected_and_previous_kept(bad: object) -> None:
    evaluator = ProximityEvaluator(radius_km=10)
    evaluator.evaluate([NEAR], OBSERVER)

    with pytest.raises(TacmonConfigError):
        evaluator.set_radius(bad)

    assert evaluator.radius_km == 10
    assert evaluator.state_of("1") is AlertState.ARMED


def test_invalid_radius_rejected_by_constructor() -> None:
    with pytest.raises(TacmonConfigError):
        ProximityEvaluator(radius_km=-5)


def test_explicit_radius_argument_overrides_configured() -> None:
    evaluator = ProximityEvaluator(radius_km=1)

    assert evaluator.evaluate([NEAR], OBSERVER) == []
    assert len(evaluator.evaluate([NEAR], OBSERVER, radius_km=2)) == 1
    assert evaluator.radius_km == 1

    with pytest.raises(TacmonConfigError):
        evaluator.evaluate([NEAR], OBSERVER, radius_km=0)


def test_remove_id_drops_state() -> None:
    evaluator = ProximityEvaluator()
    evaluator.evaluate([NEAR, _entity("2", 50.0, 30.0)], OBSERVER)

    evaluator.remove_id("1")
    evaluator.remove_id("missing")

    assert len(evaluator) == 1
    assert evaluator.armed_ids() == ["2"]


def test_default_radius_is_fifty_km() -> None:
    evaluator = ProximityEvaluator()
    inside = _entity("in", 50.4, 30.0)  # ~44 km
    outside = _entity("out", 50.5, 30.0)  # ~56 km

    alerts = evaluator.evaluate([inside, outside], OBSERVER)

    assert evaluator.radius_km == 50
    assert [alert.entity_id for alert in alerts] == ["in"]
