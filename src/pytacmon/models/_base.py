"""Base model for untrusted snapshot records.

:class:`TacmonBaseModel` provides:

* ``alias_generator=to_camel`` so camelCase feed keys (``observedAt``)
  map automatically to snake_case fields.
* A ``model_validator(mode="before")`` that applies per-model key aliases
  and strips feed sentinel values (``""``, ``"--"``, NaN) so the field
  default is used.
* A ``raw`` dict that captures the original record.
"""

from __future__ import annotations

import math
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings feeds use for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan"})

# Validation context flag set when parsing an untrusted feed record.
RECORD_CONTEXT_KEY = "feed_record"


class TacmonBaseModel(BaseModel):
    """Base for models parsed from snapshot records."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    """Alternate feed keys mapped onto canonical camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original record."""

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        """Apply key aliases on *values* and drop sentinel values."""
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)

        cleaned: dict[str, Any] = {}
        for key, value in working.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_record(cls, values: Any, info: ValidationInfo) -> Any:
        """Strip sentinel values, apply key aliases, and stash the raw record."""
        if not isinstance(values, dict):
            return values
        original = dict(values)

        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        cleaned = TacmonBaseModel._clean_dict(original, aliases)

        # Keep an explicitly supplied raw= (keyword construction) untouched. Feed
        # records always get the full original, even if they carry a "raw" key.
        from_feed = bool(info.context and info.context.get(RECORD_CONTEXT_KEY))
        if from_feed or "raw" not in values:
            cleaned["raw"] = original
        return cleaned
