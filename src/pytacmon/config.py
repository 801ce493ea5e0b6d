"""Tracker configuration for pytacmon."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydantic import ValidationError

from pytacmon._constants import (
    DEFAULT_LOG_CAPACITY,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_RADIUS_KM,
    DEFAULT_REQUEST_TIMEOUT_S,
)
from pytacmon.exceptions import TacmonConfigError
from pytacmon.geo import Coordinate


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise TacmonConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    radius_km : float
        Danger-zone radius around the observer in kilometres.
    poll_interval : float
        Seconds between scheduled polling cycles.
    snapshot_url : str or None
        HTTP(S) URL returning a JSON array of entity records.
    snapshot_path : str or None
        Local JSON file used instead of a URL.
    request_timeout : float
        Total HTTP timeout per snapshot fetch, in seconds.
    cache_bust : bool
        Append a ``t=<epoch ms>`` query parameter to every snapshot request.
    observer_lat : float or None
        Initial observer latitude.
    observer_lng : float or None
        Initial observer longitude.
    log_capacity : int
        Number of entries kept by :class:`pytacmon.sinks.EventLog`.
    """

    radius_km: float = DEFAULT_RADIUS_KM
    poll_interval: float = DEFAULT_POLL_INTERVAL_S
    snapshot_url: str | None = None
    snapshot_path: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_S
    cache_bust: bool = True
    observer_lat: float | None = None
    observer_lng: float | None = None
    log_capacity: int = DEFAULT_LOG_CAPACITY

    @property
    def observer(self) -> Coordinate | None:
        """Initial observer position, when both coordinates are configured."""
        if self.observer_lat is None or self.observer_lng is None:
            return None
        try:
            return Coordinate(lat=self.observer_lat, lng=self.observer_lng)
        except ValidationError as exc:
            raise TacmonConfigError(
                f"invalid observer position ({self.observer_lat}, {self.observer_lng})"
            ) from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from ``TACMON_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        TacmonConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "TACMON_SNAPSHOT_URL": "snapshot_url",
            "TACMON_SNAPSHOT_PATH": "snapshot_path",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "TACMON_RADIUS_KM": ("radius_km", float),
            "TACMON_POLL_INTERVAL": ("poll_interval", float),
            "TACMON_REQUEST_TIMEOUT": ("request_timeout", float),
            "TACMON_OBSERVER_LAT": ("observer_lat", float),
            "TACMON_OBSERVER_LNG": ("observer_lng", float),
            "TACMON_LOG_CAPACITY": ("log_capacity", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "cache_bust" not in overrides:
            config_kwargs["cache_bust"] = _env_bool(env.get("TACMON_CACHE_BUST"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
