"""HTTP entrypoint exposing directory search to a web front end."""

from __future__ import annotations

import asyncio
import logging
import os
from functools import lru_cache
from typing import Any, Dict

from flask import Flask, jsonify, request

from locator.core.config import get_settings
from locator.core.errors import DeviceLocationError
from locator.core.models import Coordinate, LocationIntent, SearchQuery, SortMode
from locator.core.search import parse_radius
from locator.core.session import DirectorySession, build_session
from locator.vendors.device_location import StaticDeviceLocator

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

_DEVICE_ERROR_STATUS = {
    "permission_denied": 403,
    "timeout": 504,
    "unavailable": 503,
}


@lru_cache(maxsize=1)
def get_session() -> DirectorySession:
    return build_session(get_settings())


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "catalog_loaded": get_session().catalog.is_loaded,
                "device_locator": settings.device_locator,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/search")
def search_directory() -> Any:
    """
    Run a directory search.
    Optional JSON fields: query (str), radius (number), sort (distance|name|none),
    use_device_location (bool)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    text = str(payload.get("query") or "").strip()

    radius_raw = payload.get("radius", get_settings().default_radius_miles)
    try:
        radius = parse_radius(radius_raw)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        sort_mode = SortMode(str(payload.get("sort") or SortMode.DISTANCE.value))
    except ValueError:
        return jsonify({"error": "sort must be one of distance, name, none"}), 400

    intent = LocationIntent.USE_TYPED_TEXT
    if payload.get("use_device_location"):
        intent = LocationIntent.USE_DEVICE_LOCATION

    session = get_session()
    query = SearchQuery(raw_text=text, radius_miles=radius, sort_mode=sort_mode, location_intent=intent)
    results = asyncio.run(session.on_search_requested(query))

    return (
        jsonify(
            {
                "data": {
                    "status": session.last_status.value,
                    "count": len(results),
                    "results": [item.to_dict() for item in results],
                }
            }
        ),
        200,
    )


@app.post("/locate")
def locate_device() -> Any:
    """
    Acquire a device fix. A browser may send its own latitude/longitude;
    otherwise the configured device locator is asked.
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    locator = None
    if "latitude" in payload or "longitude" in payload:
        try:
            lat = float(payload.get("latitude"))
            lon = float(payload.get("longitude"))
        except (TypeError, ValueError):
            return jsonify({"error": "latitude and longitude must be numeric"}), 400
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            return jsonify({"error": "latitude/longitude out of range"}), 400
        locator = StaticDeviceLocator(Coordinate(lat=lat, lon=lon))

    try:
        fix = asyncio.run(get_session().on_device_location_requested(locator=locator))
    except DeviceLocationError as exc:
        logger.warning("Device location request failed: %s", exc.kind.value)
        return jsonify({"error": exc.kind.value}), _DEVICE_ERROR_STATUS[exc.kind.value]

    return (
        jsonify({"data": {"latitude": fix.point.lat, "longitude": fix.point.lon, "label": fix.label}}),
        200,
    )


@app.post("/location/typed")
def typed_text_edited() -> Any:
    """Record a text edit; this discards any held device fix."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    session = get_session()
    session.on_text_edited(str(payload.get("query") or ""))
    location = session.context.location
    return jsonify({"data": {"source": location.source.value if location else None}}), 200


def main() -> None:
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    # one request at a time: the session's asyncio state is not shared across threads
    app.run(host="0.0.0.0", port=port, threaded=False)


if __name__ == "__main__":
    main()
