"""pytacmon - Async snapshot reconciliation and proximity alerting for tracked entities."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytacmon")
except PackageNotFoundError:
    __version__ = "0+local"
from pytacmon.config import TrackerConfig
from pytacmon.engine import CycleOutcome, CycleResult, TrackingEngine
from pytacmon.exceptions import (
    TacmonConfigError,
    TacmonError,
    TacmonFetchError,
    TacmonValidationError,
)
from pytacmon.geo import Coordinate, distance_km
from pytacmon.models import (
    EntityAdded,
    EntityRemoved,
    EntityUpdated,
    NewAlert,
    RawEntity,
    SyncFailed,
    TrackedEntity,
    TrackingEvent,
    TrackingEventKind,
)
from pytacmon.scheduler import PollingScheduler
from pytacmon.sinks import EventLog, MarkerIndex
from pytacmon.sources import (
    FileSnapshotSource,
    HttpSnapshotSource,
    MockSnapshotSource,
    SnapshotSource,
    build_source,
)
from pytacmon.state.proximity import AlertState, ProximityEvaluator
from pytacmon.state.store import EntityStore, ReconcileResult

__all__ = [
    "__version__",
    "AlertState",
    "Coordinate",
    "CycleOutcome",
    "CycleResult",
    "EntityAdded",
    "EntityRemoved",
    "EntityStore",
    "EntityUpdated",
    "EventLog",
    "FileSnapshotSource",
    "HttpSnapshotSource",
    "MarkerIndex",
    "MockSnapshotSource",
    "NewAlert",
    "PollingScheduler",
    "ProximityEvaluator",
    "RawEntity",
    "ReconcileResult",
    "SnapshotSource",
    "SyncFailed",
    "TacmonConfigError",
    "TacmonError",
    "TacmonFetchError",
    "TacmonValidationError",
    "TrackedEntity",
    "TrackerConfig",
    "TrackingEngine",
    "TrackingEvent",
    "TrackingEventKind",
    "build_source",
    "distance_km",
]
