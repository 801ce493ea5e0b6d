"""Deterministic in-memory entity store.

This is the only component allowed to mutate tracked entities.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pytacmon.ingestion.snapshot import parse_snapshot
from pytacmon.models.entity import TrackedEntity

_logger = logging.getLogger(__name__)


class ReconcileResult(BaseModel):
    """Delta between the previous and the newly applied snapshot.

    ``added``/``updated`` follow input order; ``removed`` is sorted by id.
    Entities are copies; mutating them does not affect the store.
    """

    model_config = ConfigDict(extra="forbid")

    added: list[TrackedEntity] = Field(default_factory=list)
    updated: list[TrackedEntity] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    skipped: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated or self.removed)


class EntityStore:
    """Current set of tracked entities keyed by id.

    Given the same sequence of snapshots the store always produces the same
    results. A reappearing id is reported as updated even when nothing about
    it changed.
    """

    def __init__(self) -> None:
        self._entities: dict[str, TrackedEntity] = {}

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entities))

    def ids(self) -> list[str]:
        return list(self._entities)

    def get(self, entity_id: str) -> TrackedEntity | None:
        entity = self._entities.get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    def entities(self) -> list[TrackedEntity]:
        """Copies of all tracked entities in insertion order."""
        return [entity.model_copy(deep=True) for entity in self._entities.values()]

    def clear(self) -> list[str]:
        """Drop every entity and return the removed ids (sorted)."""
        removed = sorted(self._entities)
        self._entities.clear()
        return removed

    def reconcile(self, raw: Iterable[Any]) -> ReconcileResult:
        """Apply a snapshot and report what changed.

        Invalid records are skipped and counted. The diff is computed in full
        before the map is touched, so a failure while validating leaves the
        store as it was.
        """
        parsed = parse_snapshot(raw)

        incoming_ids = set(parsed.ids)
        removed = sorted(entity_id for entity_id in self._entities if entity_id not in incoming_ids)
        new_ids = {entity.id for entity in parsed.entities if entity.id not in self._entities}

        # Commit.
        result = ReconcileResult(removed=removed, skipped=parsed.skipped)
        for entity_id in removed:
            del self._entities[entity_id]
        for raw_entity in parsed.entities:
            if raw_entity.id in new_ids:
                tracked = TrackedEntity.from_raw(raw_entity)
                self._entities[tracked.id] = tracked
                result.added.append(tracked.model_copy(deep=True))
            else:
                tracked = self._entities[raw_entity.id]
                tracked.apply(raw_entity)
                result.updated.append(tracked.model_copy(deep=True))

        _logger.debug(
            "Reconciled snapshot: %d added, %d updated, %d removed, %d skipped (tracking %d)",
            len(result.added),
            len(result.updated),
            len(result.removed),
            result.skipped,
            len(self._entities),
        )
        return result
