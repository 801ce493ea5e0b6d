"""Entity models: untrusted raw records and the canonical tracked form."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator, model_validator

from pytacmon._constants import DEFAULT_CATEGORY
from pytacmon.exceptions import TacmonValidationError
from pytacmon.geo import Coordinate
from pytacmon.ingestion.normalize import normalize_entity_id, parse_observed_at, safe_float, safe_str
from pytacmon.models._base import RECORD_CONTEXT_KEY, TacmonBaseModel

ObservedAt = Annotated[datetime | None, BeforeValidator(parse_observed_at)]
"""Annotated type that coerces ISO strings and epoch seconds/ms to UTC datetimes."""


class RawEntity(TacmonBaseModel):
    """One validated record from a snapshot.

    Parameters
    ----------
    id : str
        Stable string key. Numeric ids are coerced (``1`` -> ``"1"``).
    lat : float
        Latitude in degrees, within ``[-90, 90]``.
    lng : float
        Longitude in degrees, within ``[-180, 180]``.
    category : str
        Entity category (``"drone"``, ``"missile"``, ...).
    label : str
        Human readable label. Defaults to the id.
    observed_at : datetime or None
        Observation time reported by the feed, if any.
    raw : dict
        Original record.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {
        "type": "category",
        "time": "observedAt",
        "observed_at": "observedAt",
        "timestamp": "observedAt",
        "latitude": "lat",
        "longitude": "lng",
        "lon": "lng",
        "name": "label",
    }

    id: str
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    category: str = DEFAULT_CATEGORY
    label: str = ""
    observed_at: ObservedAt = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        entity_id = normalize_entity_id(value)
        if entity_id is None:
            raise ValueError("id must be a non-empty string or number")
        return entity_id

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"coordinate must be a finite number, got {value!r}")
        return parsed

    @field_validator("category", "label", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value) or ""

    @model_validator(mode="after")
    def _fill_defaults(self) -> RawEntity:
        if not self.category:
            object.__setattr__(self, "category", DEFAULT_CATEGORY)
        if not self.label:
            object.__setattr__(self, "label", self.id)
        return self

    @classmethod
    def from_record(cls, record: Any) -> RawEntity:
        """Validate one snapshot record.

        Raises :class:`TacmonValidationError` for anything that is not a
        mapping with a usable id and in-range coordinates.
        """
        if isinstance(record, RawEntity):
            return record
        if not isinstance(record, Mapping):
            raise TacmonValidationError(f"record must be a mapping, got {type(record).__name__}", record=record)
        try:
            return cls.model_validate(dict(record), context={RECORD_CONTEXT_KEY: True})
        except ValidationError as exc:
            reasons = "; ".join(f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in exc.errors())
            raise TacmonValidationError(f"invalid record: {reasons}", record=record) from exc


class TrackedEntity(BaseModel):
    """Canonical entity owned by :class:`pytacmon.state.store.EntityStore`.

    Mutated in place when the same id reappears. Everything handed out of the
    store is a copy.
    """

    model_config = ConfigDict(extra="forbid")

    id: str
    lat: float
    lng: float
    category: str
    label: str
    observed_at: datetime | None = None

    @classmethod
    def from_raw(cls, raw: RawEntity) -> TrackedEntity:
        return cls(
            id=raw.id,
            lat=raw.lat,
            lng=raw.lng,
            category=raw.category,
            label=raw.label,
            observed_at=raw.observed_at,
        )

    def apply(self, raw: RawEntity) -> None:
        """Replace position, label, category and observation time from *raw*."""
        self.lat = raw.lat
        self.lng = raw.lng
        self.category = raw.category
        self.label = raw.label
        self.observed_at = raw.observed_at

    @property
    def position(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)
