"""Error taxonomy for location resolution, catalog loading and device lookups."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NO_LOCATION_PROVIDED = "no_location_provided"
    ZIP_NOT_FOUND = "zip_not_found"
    GEOCODE_NOT_FOUND = "geocode_not_found"
    DATA_SOURCE_UNAVAILABLE = "data_source_unavailable"


class DeviceErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


class LocatorError(RuntimeError):
    """Base class for failures the core reports to callers."""


class LocationResolutionError(LocatorError):
    kind: ErrorKind

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind.value)


class ZipNotFoundError(LocationResolutionError):
    kind = ErrorKind.ZIP_NOT_FOUND


class GeocodeNotFoundError(LocationResolutionError):
    kind = ErrorKind.GEOCODE_NOT_FOUND


class DeviceLocationError(LocatorError):
    """Raised when the device position cannot be obtained."""

    def __init__(self, kind: DeviceErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


class DataSourceError(RuntimeError):
    """Raised when the catalog payload cannot be fetched or decoded."""


class GeocodingError(RuntimeError):
    """Raised when the geocoding service returns a non-successful response."""
