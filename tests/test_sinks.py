from __future__ import annotations

from pytacmon.models.entity import TrackedEntity
from pytacmon.models.events import EntityAdded, EntityRemoved, EntityUpdated, NewAlert, SyncFailed
from pytacmon.sinks import EventLog, LogLevel, MarkerIndex


def _entity(entity_id: str, lat: float = 50.0, lng: float = 30.0, category: str = "drone") -> TrackedEntity:
    return TrackedEntity(id=entity_id, lat=lat, lng=lng, category=category, label=f"L-{entity_id}")


def test_marker_index_follows_events_only() -> None:
    markers = MarkerIndex()

    markers.apply([EntityAdded(entity=_entity("1")), EntityAdded(entity=_entity("2"))])
    markers.apply([EntityUpdated(entity=_entity("1", 51.0, 31.0, "missile")), EntityRemoved(entity_id="2")])

    assert len(markers) == 1
    assert "2" not in markers
    marker = markers.get("1")
    assert marker is not None
    assert (marker.lat, marker.lng, marker.category) == (51.0, 31.0, "missile")


def test_marker_index_ignores_alerts_and_failures() -> None:
    markers = MarkerIndex()

    markers.apply([NewAlert(entity_id="1", distance_km=1.0, radius_km=5.0), SyncFailed(reason="down")])

    assert len(markers) == 0


def test_event_log_is_newest_first_and_bounded() -> None:
    log = EventLog(capacity=3)

    log.apply(
        [
            EntityAdded(entity=_entity("1")),
            EntityUpdated(entity=_entity("1")),
            NewAlert(entity_id="1", distance_km=1.32, radius_km=10.0, category="drone", label="SHAHEED-136"),
            SyncFailed(reason="HTTP 503"),
            EntityRemoved(entity_id="1"),
        ]
    )

    entries = log.entries()
    assert len(log) == 3
    assert [entry.level for entry in entries] == [LogLevel.INFO, LogLevel.DANGER, LogLevel.DANGER]
    assert entries[0].text == "CONTACT LOST: 1"
    assert entries[1].text == "SYNC_ERROR: HTTP 503"
    assert entries[2].text == "ALERT: SHAHEED-136 (DRONE) 1.3 KM"
    assert str(entries[0]).startswith("[")
