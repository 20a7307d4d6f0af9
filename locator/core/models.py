"""Core data models shared by the directory search pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote

UNBOUNDED = math.inf


class SortMode(str, Enum):
    DISTANCE = "distance"
    NAME = "name"
    NONE = "none"


class LocationIntent(str, Enum):
    USE_DEVICE_LOCATION = "device"
    USE_TYPED_TEXT = "typed"


class LocationSource(str, Enum):
    DEVICE = "device"
    GEOCODED = "geocoded"
    ZIP_CENTROID = "zip_centroid"


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class Entity:
    """Normalized directory record as loaded from the data source."""

    name: str
    address: str = ""
    city: str = ""
    zip: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    website: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        """Return the entity position, or None when it cannot be placed on a map."""
        if not _in_range(self.latitude, 90.0) or not _in_range(self.longitude, 180.0):
            return None
        return Coordinate(lat=float(self.latitude), lon=float(self.longitude))

    @property
    def maps_url(self) -> str:
        query = quote(f"{self.name} {self.address} {self.city}", safe="")
        return f"https://www.google.com/maps/search/?api=1&query={query}"


@dataclass(frozen=True, slots=True)
class SearchQuery:
    raw_text: str = ""
    radius_miles: float = UNBOUNDED
    sort_mode: SortMode = SortMode.DISTANCE
    location_intent: LocationIntent = LocationIntent.USE_TYPED_TEXT


@dataclass(frozen=True, slots=True)
class ResolvedLocation:
    point: Coordinate
    source: LocationSource
    cached_query_text: Optional[str] = None
    label: Optional[str] = None

    @property
    def is_device(self) -> bool:
        return self.source is LocationSource.DEVICE


@dataclass(frozen=True, slots=True)
class PositionOptions:
    high_accuracy: bool = True
    timeout_ms: int = 10000
    max_age_ms: int = 0


@dataclass(frozen=True, slots=True)
class ScoredEntity:
    entity: Entity
    distance_miles: float

    def to_dict(self) -> dict:
        return {
            "name": self.entity.name,
            "address": self.entity.address,
            "city": self.entity.city,
            "zip": self.entity.zip,
            "latitude": self.entity.latitude,
            "longitude": self.entity.longitude,
            "website": self.entity.website,
            "maps_url": self.entity.maps_url,
            "distance_miles": round(self.distance_miles, 2),
        }


def _in_range(value, limit: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and abs(value) <= limit
