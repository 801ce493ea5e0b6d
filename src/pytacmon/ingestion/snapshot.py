"""Snapshot validation.

Validates every record of a polled snapshot up front so the state layer only
ever sees well-formed :class:`RawEntity` values.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pytacmon.exceptions import TacmonValidationError
from pytacmon.models.entity import RawEntity

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ParsedSnapshot:
    """Valid, de-duplicated entities of one snapshot plus the rejected count."""

    entities: list[RawEntity] = field(default_factory=list)
    skipped: int = 0

    @property
    def ids(self) -> list[str]:
        return [entity.id for entity in self.entities]


def parse_snapshot(records: Iterable[Any]) -> ParsedSnapshot:
    """Validate *records*, dropping and counting malformed ones.

    Repeated ids collapse into one entity: the last occurrence's values win
    and the entity keeps the position of its first occurrence.
    """
    by_id: dict[str, RawEntity] = {}
    skipped = 0
    for index, record in enumerate(records):
        try:
            entity = RawEntity.from_record(record)
        except TacmonValidationError as exc:
            skipped += 1
            _logger.debug("Skipping snapshot record #%d: %s", index, exc)
            continue
        if entity.id in by_id:
            _logger.debug("Duplicate id %s in snapshot; keeping the later record", entity.id)
        by_id[entity.id] = entity
    return ParsedSnapshot(entities=list(by_id.values()), skipped=skipped)
