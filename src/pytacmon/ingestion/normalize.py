"""Normalization helpers.

Centralizes defensive parsing of untrusted snapshot fields.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

# Sentinel strings feeds use for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip() in _SENTINELS:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def normalize_entity_id(value: Any) -> str | None:
    """Coerce a raw id (string or number) into a stable string key.

    Integral floats collapse to their integer form so ``1``, ``1.0`` and
    ``"1"`` all address the same entity. Booleans are never valid ids.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return safe_str(value)
    return None


def normalize_timestamp_seconds(value: Any) -> float | None:
    """Normalize epoch timestamps to seconds.

    - Empty/missing -> None
    - <= 0 -> None
    - Milliseconds (> 1e11) -> seconds
    """

    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        ts = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(ts) or ts <= 0:
        return None
    if ts > 1e11:
        ts /= 1000.0
    return ts


def _from_epoch_seconds(seconds: float | None) -> datetime | None:
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        # Beyond the platform time_t range.
        return None


def parse_observed_at(value: Any) -> datetime | None:
    """Parse an observation time given as a datetime, ISO-8601 string or epoch number.

    Naive values are assumed to be UTC. Unparseable input yields ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if safe_float(text) is not None:
            return _from_epoch_seconds(normalize_timestamp_seconds(text))
        try:
            # fromisoformat() on 3.11+ understands the trailing "Z" emitted by JS toISOString().
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return _from_epoch_seconds(normalize_timestamp_seconds(value))
