"""Threshold-crossing proximity alerts.

An entity raises at most one alert per entry into the danger zone: the first
evaluation inside the radius arms it, and it only becomes eligible again
after an evaluation outside the radius (or a radius change).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pytacmon._constants import DEFAULT_RADIUS_KM
from pytacmon.exceptions import TacmonConfigError
from pytacmon.geo import Coordinate, distance_km
from pytacmon.models.entity import TrackedEntity
from pytacmon.models.events import NewAlert

_logger = logging.getLogger(__name__)


class AlertState(StrEnum):
    UNARMED = "unarmed"
    ARMED = "armed"


def validate_radius(value: Any) -> float:
    """Return *value* as a positive finite radius in km or raise :class:`TacmonConfigError`."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TacmonConfigError(f"radius must be a number, got {value!r}")
    radius = float(value)
    if not math.isfinite(radius) or radius <= 0:
        raise TacmonConfigError(f"radius must be a positive finite number of km, got {value!r}")
    return radius


class ProximityEvaluator:
    """Per-entity alert state against a circular zone around one observer."""

    def __init__(self, radius_km: float = DEFAULT_RADIUS_KM) -> None:
        self._radius_km = validate_radius(radius_km)
        self._states: dict[str, AlertState] = {}

    def __len__(self) -> int:
        return len(self._states)

    @property
    def radius_km(self) -> float:
        return self._radius_km

    def set_radius(self, radius_km: Any) -> float:
        """Replace the radius and reset every known id to ``UNARMED``.

        Raises :class:`TacmonConfigError` and keeps the previous radius when
        *radius_km* is not a positive finite number.
        """
        radius = validate_radius(radius_km)
        previous = self._radius_km
        self._radius_km = radius
        for entity_id in self._states:
            self._states[entity_id] = AlertState.UNARMED
        _logger.info("Alert radius changed from %.3f km to %.3f km; all alerts re-armed", previous, radius)
        return radius

    def state_of(self, entity_id: str) -> AlertState | None:
        return self._states.get(entity_id)

    def armed_ids(self) -> list[str]:
        return sorted(entity_id for entity_id, state in self._states.items() if state is AlertState.ARMED)

    def remove_id(self, entity_id: str) -> None:
        """Forget the alert state of an entity that is no longer tracked."""
        self._states.pop(entity_id, None)

    def clear(self) -> None:
        self._states.clear()

    def evaluate(
        self,
        entities: Iterable[TrackedEntity],
        observer: Coordinate | None,
        radius_km: float | None = None,
    ) -> list[NewAlert]:
        """Update alert state for *entities* and return newly fired alerts.

        Nothing is evaluated (and no state changes) while *observer* is
        unknown. *radius_km* defaults to the configured radius.
        """
        if observer is None:
            return []
        radius = self._radius_km if radius_km is None else validate_radius(radius_km)

        pending: dict[str, AlertState] = {}
        alerts: list[NewAlert] = []
        for entity in entities:
            distance = distance_km(observer, entity)
            previous = pending.get(entity.id, self._states.get(entity.id))
            if distance <= radius:
                if previous is not AlertState.ARMED:
                    alerts.append(
                        NewAlert(
                            entity_id=entity.id,
                            distance_km=distance,
                            radius_km=radius,
                            category=entity.category,
                            label=entity.label,
                        )
                    )
                pending[entity.id] = AlertState.ARMED
            else:
                pending[entity.id] = AlertState.UNARMED

        self._states.update(pending)
        for alert in alerts:
            _logger.info(
                "Proximity alert: %s (%s) at %.2f km (radius %.2f km)",
                alert.entity_id,
                alert.category,
                alert.distance_km,
                radius,
            )
        return alerts
