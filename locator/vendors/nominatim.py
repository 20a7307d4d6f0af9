"""Client utilities for the Nominatim geocoding API."""

import logging
from typing import Any, Dict, List, Optional

import requests

from locator.core.errors import GeocodingError
from locator.core.models import Coordinate

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_TOWN_KEYS = ("city", "town", "village", "hamlet", "suburb")


class NominatimGeocoder:
    def __init__(self, base_url: str, user_agent: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            response = _SESSION.get(
                f"{self.base_url}/{path}",
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("%s request failed: %s", path, exc)
            raise GeocodingError(str(exc)) from exc

    def geocode(self, text: str) -> Optional[Coordinate]:
        """Return the single best match for free-form text, or None when nothing matches."""
        payload = self._get("search", {"q": text, "format": "json", "limit": 1})
        if not isinstance(payload, list):
            raise GeocodingError(f"unexpected search payload: {str(payload)[:200]}")
        if not payload:
            logger.info("No geocoding match for query=%s", text)
            return None
        return _to_coordinate(payload)

    def reverse_geocode(self, point: Coordinate) -> Optional[str]:
        """Describe a point as a postcode, falling back to "town, state"."""
        payload = self._get(
            "reverse",
            {"lat": point.lat, "lon": point.lon, "format": "json", "addressdetails": 1},
        )
        if not isinstance(payload, dict):
            raise GeocodingError(f"unexpected reverse payload: {str(payload)[:200]}")
        address = payload.get("address") or {}
        postcode = address.get("postcode")
        if postcode:
            return postcode
        town = next((address[key] for key in _TOWN_KEYS if address.get(key)), None)
        state = address.get("state")
        if town and state:
            return f"{town}, {state}"
        return None


def _to_coordinate(results: List[Dict[str, Any]]) -> Coordinate:
    best = results[0]
    try:
        return Coordinate(lat=float(best["lat"]), lon=float(best["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise GeocodingError(f"malformed search result: {best!r}") from exc
