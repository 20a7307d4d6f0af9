"""Catalog data source backed by a JSON document over HTTP or on disk."""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

import requests

from locator.core.errors import DataSourceError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

_ENVELOPE_KEYS = ("churches", "items", "results", "records", "data")


class JsonDataSource:
    """Fetches raw directory records from a URL or a local file path."""

    def __init__(self, location: str, timeout: float = 10.0, prevalidated: bool = False) -> None:
        if not location:
            raise ValueError("A data source location is required")
        self.location = location
        self.timeout = timeout
        self.prevalidated = prevalidated

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    def fetch(self) -> List[Any]:
        payload = self._fetch_remote() if self.is_remote else self._read_local()
        return list(_extract_records(payload))

    def _fetch_remote(self) -> Any:
        try:
            response = _SESSION.get(self.location, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Failed to fetch catalog from %s: %s", self.location, exc)
            raise DataSourceError(str(exc)) from exc

    def _read_local(self) -> Any:
        path = Path(self.location)
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read catalog file %s: %s", path, exc)
            raise DataSourceError(str(exc)) from exc


def _extract_records(payload: Any) -> Iterable[Any]:
    """Catalog documents are either a bare list or a list wrapped in an object."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _ENVELOPE_KEYS:
            maybe = payload.get(key)
            if isinstance(maybe, list):
                return maybe
        logger.warning("Catalog payload has no record list. keys=%s", list(payload.keys())[:10])
        raise DataSourceError("catalog payload does not contain a record list")
    raise DataSourceError(f"unexpected catalog payload type: {type(payload).__name__}")
