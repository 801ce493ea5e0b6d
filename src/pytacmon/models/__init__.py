"""Data models for snapshot records and tracking events."""

from pytacmon.models._base import TacmonBaseModel
from pytacmon.models.entity import ObservedAt, RawEntity, TrackedEntity
from pytacmon.models.events import (
    EntityAdded,
    EntityRemoved,
    EntityUpdated,
    NewAlert,
    SyncFailed,
    TrackingEvent,
    TrackingEventKind,
)

__all__ = [
    "EntityAdded",
    "EntityRemoved",
    "EntityUpdated",
    "NewAlert",
    "ObservedAt",
    "RawEntity",
    "SyncFailed",
    "TacmonBaseModel",
    "TrackedEntity",
    "TrackingEvent",
    "TrackingEventKind",
]
