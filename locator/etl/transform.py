"""Utilities for turning raw directory records into Entity objects."""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from locator.core.models import Entity

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "name": ("name", "title", "church", "church_name"),
    "address": ("address", "street", "street_address", "address1"),
    "city": ("city", "town", "locality"),
    "zip": ("zip", "zipcode", "zip_code", "postcode", "postal_code"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon", "lng", "long"),
    "website": ("website", "url", "site", "web"),
}


def _normalize_keys(record: Dict[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in record.items():
        if not isinstance(key, str):
            continue
        compact = key.strip().lower().replace("-", "_").replace(" ", "_")
        # first spelling wins when a record carries the same field twice
        normalized.setdefault(compact, value)
    return normalized


def _pick(record: Dict[str, Any], field: str) -> Any:
    for alias in _FIELD_ALIASES[field]:
        value = record.get(alias)
        if value is not None and value != "":
            return value
    return None


def _strip_or_empty(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _strip_or_none(value: Any) -> Optional[str]:
    value_str = _strip_or_empty(value)
    return value_str or None


def _safe_coordinate(value: Any, limit: float) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def _zip_text(value: Any) -> str:
    # numeric payloads lose leading zeros, e.g. 2134 for "02134"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 100000:
        return f"{value:05d}"
    return _strip_or_empty(value)


def to_entity(record: Dict[str, Any]) -> Entity:
    fields = _normalize_keys(record)
    return Entity(
        name=_strip_or_empty(_pick(fields, "name")),
        address=_strip_or_empty(_pick(fields, "address")),
        city=_strip_or_empty(_pick(fields, "city")),
        zip=_zip_text(_pick(fields, "zip")),
        latitude=_safe_coordinate(_pick(fields, "latitude"), 90.0),
        longitude=_safe_coordinate(_pick(fields, "longitude"), 180.0),
        website=_strip_or_none(_pick(fields, "website")),
    )


def to_entities(records: Iterable[Any]) -> List[Entity]:
    """Convert raw records, skipping anything that is not a mapping."""
    entities: List[Entity] = []
    for raw in records or []:
        if not isinstance(raw, dict):
            logger.debug("Skipping non-object record: %r", raw)
            continue
        entities.append(to_entity(raw))
    return entities
