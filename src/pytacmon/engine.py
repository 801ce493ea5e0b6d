"""Polling cycle orchestration.

One :class:`TrackingEngine` owns one entity store and one proximity
evaluator. A cycle fetches a snapshot, reconciles it, cascades removals
into the alert state and evaluates proximity, returning a single ordered
list of events for the presentation layer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pytacmon._constants import DEFAULT_RADIUS_KM
from pytacmon.config import TrackerConfig
from pytacmon.exceptions import TacmonFetchError
from pytacmon.geo import Coordinate
from pytacmon.models.entity import TrackedEntity
from pytacmon.models.events import (
    EntityAdded,
    EntityRemoved,
    EntityUpdated,
    SyncFailed,
    TrackingEvent,
)
from pytacmon.sources import SnapshotSource, build_source
from pytacmon.state.proximity import AlertState, ProximityEvaluator
from pytacmon.state.store import EntityStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CycleOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass(slots=True)
class CycleResult:
    """Outcome and ordered events of one polling cycle."""

    outcome: CycleOutcome
    generation: int
    started_at: datetime
    finished_at: datetime
    events: list[TrackingEvent] = field(default_factory=list)
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome is CycleOutcome.SUCCEEDED


class TrackingEngine:
    """Reconciliation and proximity alerting over a snapshot source.

    Usage::

        engine = TrackingEngine(source, radius_km=25)
        engine.set_observer(Coordinate(lat=50.45, lng=30.52))
        result = await engine.run_cycle()
        for event in result.events:
            ...

    Callers must not overlap cycles on purpose (see
    :class:`pytacmon.scheduler.PollingScheduler`); if they do, only the most
    recently started cycle is applied and older ones are discarded.
    """

    def __init__(
        self,
        source: SnapshotSource,
        *,
        radius_km: float = DEFAULT_RADIUS_KM,
        observer: Coordinate | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._store = EntityStore()
        self._evaluator = ProximityEvaluator(radius_km)
        self._observer = observer
        self._clock = clock
        self._generation = 0
        self._in_flight = 0
        self._last_sync: datetime | None = None

    @classmethod
    def from_config(cls, config: TrackerConfig, source: SnapshotSource | None = None, **kwargs: Any) -> TrackingEngine:
        """Build an engine (and, unless given, its snapshot source) from *config*."""
        return cls(
            source if source is not None else build_source(config),
            radius_km=config.radius_km,
            observer=config.observer,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def observer(self) -> Coordinate | None:
        return self._observer

    def set_observer(self, observer: Coordinate | None) -> None:
        """Update the reference position; read at the next evaluation."""
        self._observer = observer

    @property
    def radius_km(self) -> float:
        return self._evaluator.radius_km

    def set_radius(self, radius_km: Any) -> float:
        """Change the danger-zone radius; raises :class:`TacmonConfigError` if invalid."""
        return self._evaluator.set_radius(radius_km)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    @property
    def last_sync(self) -> datetime | None:
        """Time the last successful cycle finished."""
        return self._last_sync

    @property
    def entity_count(self) -> int:
        return len(self._store)

    def entities(self) -> list[TrackedEntity]:
        return self._store.entities()

    def ids(self) -> list[str]:
        return self._store.ids()

    def alert_state(self, entity_id: str) -> AlertState | None:
        return self._evaluator.state_of(entity_id)

    def armed_ids(self) -> list[str]:
        return self._evaluator.armed_ids()

    @property
    def alert_state_count(self) -> int:
        return len(self._evaluator)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def reset(self) -> list[str]:
        """Forget every entity together with its alert state; returns the dropped ids.

        Any in-flight cycle is abandoned so it cannot repopulate the store.
        """
        self.cancel_pending()
        removed = self._store.clear()
        self._evaluator.clear()
        return removed

    def cancel_pending(self) -> None:
        """Abandon any in-flight cycle; its result will be discarded."""
        if self._in_flight:
            _logger.debug("Abandoning %d in-flight cycle(s)", self._in_flight)
        self._generation += 1

    async def run_cycle(self) -> CycleResult:
        """Run one fetch/reconcile/evaluate cycle.

        Event order is ``EntityAdded*, EntityUpdated*, EntityRemoved*,
        NewAlert*``. A fetch failure yields a single :class:`SyncFailed` and
        leaves all state untouched.
        """
        self._generation += 1
        generation = self._generation
        started_at = self._clock()

        self._in_flight += 1
        failure: TacmonFetchError | None = None
        records: Any = None
        try:
            records = await self._source.fetch_snapshot()
        except TacmonFetchError as exc:
            failure = exc
        finally:
            self._in_flight -= 1

        if generation != self._generation:
            _logger.debug("Discarding result of cycle %d (superseded by %d)", generation, self._generation)
            return CycleResult(
                outcome=CycleOutcome.SUPERSEDED,
                generation=generation,
                started_at=started_at,
                finished_at=self._clock(),
            )

        if failure is not None:
            _logger.warning("Snapshot sync failed: %s", failure)
            return CycleResult(
                outcome=CycleOutcome.FAILED,
                generation=generation,
                started_at=started_at,
                finished_at=self._clock(),
                events=[SyncFailed(reason=str(failure), status_code=failure.status_code)],
            )

        return self._apply(generation, started_at, records)

    def _apply(self, generation: int, started_at: datetime, records: Any) -> CycleResult:
        reconciled = self._store.reconcile(records)
        for entity_id in reconciled.removed:
            self._evaluator.remove_id(entity_id)

        alerts = self._evaluator.evaluate(self._store.entities(), self._observer)

        events: list[TrackingEvent] = []
        events.extend(EntityAdded(entity=entity) for entity in reconciled.added)
        events.extend(EntityUpdated(entity=entity) for entity in reconciled.updated)
        events.extend(EntityRemoved(entity_id=entity_id) for entity_id in reconciled.removed)
        events.extend(alerts)

        finished_at = self._clock()
        self._last_sync = finished_at
        _logger.debug(
            "Cycle %d: %d entities, %d events, %d alerts, %d skipped",
            generation,
            len(self._store),
            len(events),
            len(alerts),
            reconciled.skipped,
        )
        return CycleResult(
            outcome=CycleOutcome.SUCCEEDED,
            generation=generation,
            started_at=started_at,
            finished_at=finished_at,
            events=events,
            skipped=reconciled.skipped,
        )
