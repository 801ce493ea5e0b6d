"""Presentation-side helpers driven purely by tracking events.

Nothing here looks at the entity store; a UI keeps its own view of the
world by feeding every cycle's events through these helpers.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pytacmon._constants import DEFAULT_LOG_CAPACITY
from pytacmon.models.events import (
    EntityAdded,
    EntityRemoved,
    EntityUpdated,
    NewAlert,
    SyncFailed,
    TrackingEvent,
)


@dataclass(slots=True)
class Marker:
    """What a map layer needs to draw one entity."""

    entity_id: str
    lat: float
    lng: float
    category: str
    label: str


class MarkerIndex:
    """Marker id -> marker, maintained from added/updated/removed events only."""

    def __init__(self) -> None:
        self._markers: dict[str, Marker] = {}

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._markers

    def get(self, entity_id: str) -> Marker | None:
        return self._markers.get(entity_id)

    def markers(self) -> list[Marker]:
        return list(self._markers.values())

    def apply(self, events: Iterable[TrackingEvent]) -> None:
        for event in events:
            if isinstance(event, (EntityAdded, EntityUpdated)):
                entity = event.entity
                marker = self._markers.get(entity.id)
                if marker is None:
                    self._markers[entity.id] = Marker(entity.id, entity.lat, entity.lng, entity.category, entity.label)
                else:
                    marker.lat = entity.lat
                    marker.lng = entity.lng
                    marker.category = entity.category
                    marker.label = entity.label
            elif isinstance(event, EntityRemoved):
                self._markers.pop(event.entity_id, None)


class LogLevel(StrEnum):
    INFO = "info"
    DANGER = "danger"


@dataclass(frozen=True, slots=True)
class LogEntry:
    at: datetime
    level: LogLevel
    text: str

    def __str__(self) -> str:
        return f"[{self.at.strftime('%H:%M:%S')}] {self.text}"


class EventLog:
    """Bounded newest-first log of human readable lines.

    Alerts and sync failures are logged as ``DANGER``; arrivals and
    departures as ``INFO``. Routine updates are not logged.
    """

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> list[LogEntry]:
        """Entries, newest first."""
        return list(self._entries)

    def apply(self, events: Iterable[TrackingEvent]) -> None:
        for event in events:
            entry = _describe(event)
            if entry is not None:
                self._entries.appendleft(entry)


def _describe(event: TrackingEvent) -> LogEntry | None:
    if isinstance(event, NewAlert):
        text = f"ALERT: {event.label or event.entity_id} ({event.category.upper()}) {event.distance_km:.1f} KM"
        return LogEntry(event.emitted_at, LogLevel.DANGER, text)
    if isinstance(event, SyncFailed):
        return LogEntry(event.emitted_at, LogLevel.DANGER, f"SYNC_ERROR: {event.reason}")
    if isinstance(event, EntityAdded):
        entity = event.entity
        return LogEntry(event.emitted_at, LogLevel.INFO, f"NEW CONTACT: {entity.label} ({entity.category.upper()})")
    if isinstance(event, EntityRemoved):
        return LogEntry(event.emitted_at, LogLevel.INFO, f"CONTACT LOST: {event.entity_id}")
    return None
