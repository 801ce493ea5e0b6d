"""Tracking events emitted once per cycle for the presentation layer.

Events are immutable and carry copies of entity data, never references into
the store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from pytacmon.models.entity import TrackedEntity


class TrackingEventKind(StrEnum):
    ENTITY_ADDED = "entity_added"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_REMOVED = "entity_removed"
    NEW_ALERT = "new_alert"
    SYNC_FAILED = "sync_failed"


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    emitted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class EntityAdded(_Event):
    kind: Literal[TrackingEventKind.ENTITY_ADDED] = TrackingEventKind.ENTITY_ADDED
    entity: TrackedEntity

    @property
    def entity_id(self) -> str:
        return self.entity.id


class EntityUpdated(_Event):
    kind: Literal[TrackingEventKind.ENTITY_UPDATED] = TrackingEventKind.ENTITY_UPDATED
    entity: TrackedEntity

    @property
    def entity_id(self) -> str:
        return self.entity.id


class EntityRemoved(_Event):
    kind: Literal[TrackingEventKind.ENTITY_REMOVED] = TrackingEventKind.ENTITY_REMOVED
    entity_id: str


class NewAlert(_Event):
    """An entity entered the danger zone around the observer."""

    kind: Literal[TrackingEventKind.NEW_ALERT] = TrackingEventKind.NEW_ALERT
    entity_id: str
    distance_km: float
    radius_km: float
    category: str = ""
    label: str = ""


class SyncFailed(_Event):
    kind: Literal[TrackingEventKind.SYNC_FAILED] = TrackingEventKind.SYNC_FAILED
    reason: str
    status_code: int | None = None


TrackingEvent = Annotated[
    EntityAdded | EntityUpdated | EntityRemoved | NewAlert | SyncFailed,
    Field(discriminator="kind"),
]
