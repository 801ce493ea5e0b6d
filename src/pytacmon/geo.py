"""Great-circle distance on a spherical Earth."""

from __future__ import annotations

import math
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from pytacmon._constants import EARTH_RADIUS_KM


class HasPosition(Protocol):
    @property
    def lat(self) -> float: ...

    @property
    def lng(self) -> float: ...


class Coordinate(BaseModel):
    """A WGS84 latitude/longitude pair in degrees."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


def distance_km(a: HasPosition, b: HasPosition) -> float:
    """Return the haversine distance between *a* and *b* in kilometres.

    Symmetric in its arguments and ``0.0`` for identical points.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # Rounding can push h marginally outside [0, 1] for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))
