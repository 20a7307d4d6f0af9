"""Device location providers.

A locator answers ``get_current_position(options)`` with a Coordinate or raises
DeviceLocationError. The IP locator is the closest thing a process has to a
browser's geolocation prompt; the static locator serves a configured or
client-supplied fix.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Tuple

import requests

from locator.core.config import Settings
from locator.core.errors import DeviceErrorKind, DeviceLocationError
from locator.core.models import Coordinate, PositionOptions

logger = logging.getLogger(__name__)
_SESSION = requests.Session()


class StaticDeviceLocator:
    def __init__(self, point: Optional[Coordinate]) -> None:
        self.point = point

    def get_current_position(self, options: PositionOptions) -> Coordinate:
        if self.point is None:
            raise DeviceLocationError(DeviceErrorKind.UNAVAILABLE, "no device position configured")
        return self.point


class IpDeviceLocator:
    """Approximates the device position from its public IP address."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._last_fix: Optional[Tuple[Coordinate, float]] = None

    def get_current_position(self, options: PositionOptions) -> Coordinate:
        if self._last_fix is not None and options.max_age_ms > 0:
            point, fixed_at = self._last_fix
            if (time.monotonic() - fixed_at) * 1000 <= options.max_age_ms:
                logger.debug("Reusing cached IP fix within max_age_ms=%d", options.max_age_ms)
                return point

        try:
            response = _SESSION.get(self.url, timeout=options.timeout_ms / 1000)
        except requests.Timeout as exc:
            raise DeviceLocationError(DeviceErrorKind.TIMEOUT, str(exc)) from exc
        except requests.RequestException as exc:
            logger.warning("IP geolocation request failed: %s", exc)
            raise DeviceLocationError(DeviceErrorKind.UNAVAILABLE, str(exc)) from exc

        if response.status_code in (401, 403):
            raise DeviceLocationError(DeviceErrorKind.PERMISSION_DENIED, f"status {response.status_code}")
        if response.status_code >= 400:
            raise DeviceLocationError(DeviceErrorKind.UNAVAILABLE, f"status {response.status_code}")

        try:
            point = parse_ip_payload(response.json())
        except ValueError as exc:
            raise DeviceLocationError(DeviceErrorKind.UNAVAILABLE, str(exc)) from exc
        self._last_fix = (point, time.monotonic())
        return point


def parse_ip_payload(payload: Dict[str, Any]) -> Coordinate:
    """Accept ipinfo's ``loc: "lat,lon"`` as well as separate latitude/longitude keys."""
    if not isinstance(payload, dict):
        raise ValueError("IP geolocation payload is not an object")
    loc = payload.get("loc")
    if isinstance(loc, str) and "," in loc:
        lat_raw, lon_raw = loc.split(",", 1)
    else:
        lat_raw = payload.get("latitude", payload.get("lat"))
        lon_raw = payload.get("longitude", payload.get("lon"))
    try:
        lat, lon = float(lat_raw), float(lon_raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"IP geolocation payload has no position: {str(payload)[:200]}") from exc
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValueError(f"IP geolocation position out of range: {lat}, {lon}")
    return Coordinate(lat=lat, lon=lon)


def build_device_locator(settings: Settings):
    if settings.device_locator == "ip":
        return IpDeviceLocator(settings.device_locator_url)
    if settings.device_locator == "static" and settings.device_latitude is not None and settings.device_longitude is not None:
        return StaticDeviceLocator(Coordinate(lat=settings.device_latitude, lon=settings.device_longitude))
    return StaticDeviceLocator(None)
