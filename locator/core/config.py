"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes"}
_DEVICE_LOCATORS = {"ip", "static", "none"}


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    data_source: str
    data_prevalidated: bool = False
    geocoder_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "directory-locator/0.1"
    request_timeout: float = 10.0
    device_locator: str = "ip"
    device_locator_url: str = "https://ipinfo.io/json"
    device_latitude: Optional[float] = None
    device_longitude: Optional[float] = None
    device_high_accuracy: bool = True
    device_timeout_ms: int = 10000
    device_max_age_ms: int = 0
    default_radius_miles: Optional[float] = None
    port: int = 8080


def _get_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


def _get_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    data_source = os.getenv("DIRECTORY_DATA_SOURCE", "databases/churchesList.json")
    geocoder_url = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org").rstrip("/")
    geocoder_user_agent = os.getenv("GEOCODER_USER_AGENT", "")
    device_locator = os.getenv("DEVICE_LOCATOR", "ip").strip().lower()
    if device_locator not in _DEVICE_LOCATORS:
        raise ConfigError(f"DEVICE_LOCATOR must be one of {sorted(_DEVICE_LOCATORS)}, got {device_locator!r}")

    device_latitude = _get_number("DEVICE_LATITUDE", None, float)
    device_longitude = _get_number("DEVICE_LONGITUDE", None, float)
    port = _get_number("PORT", 8080, int)

    if not geocoder_user_agent:
        logger.warning("GEOCODER_USER_AGENT is not set; using the generic directory-locator agent.")
        geocoder_user_agent = "directory-locator/0.1"
    if device_locator == "static" and (device_latitude is None or device_longitude is None):
        logger.warning("DEVICE_LATITUDE/DEVICE_LONGITUDE are not set; device location will be unavailable.")

    return Settings(
        data_source=data_source,
        data_prevalidated=_get_flag("DIRECTORY_DATA_PREVALIDATED", "false"),
        geocoder_url=geocoder_url,
        geocoder_user_agent=geocoder_user_agent,
        request_timeout=_get_number("REQUEST_TIMEOUT_SECONDS", 10.0, float),
        device_locator=device_locator,
        device_locator_url=os.getenv("DEVICE_LOCATOR_URL", "https://ipinfo.io/json"),
        device_latitude=device_latitude,
        device_longitude=device_longitude,
        device_high_accuracy=_get_flag("DEVICE_HIGH_ACCURACY", "true"),
        device_timeout_ms=_get_number("DEVICE_TIMEOUT_MS", 10000, int),
        device_max_age_ms=_get_number("DEVICE_MAX_AGE_MS", 0, int),
        default_radius_miles=_get_number("DEFAULT_RADIUS_MILES", None, float),
        port=port,
    )
