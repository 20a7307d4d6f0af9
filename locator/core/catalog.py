"""Lazily-fetched, process-lifetime cache of directory entities."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from locator.core.errors import ErrorKind
from locator.core.models import Entity
from locator.etl.transform import to_entities

logger = logging.getLogger(__name__)


class Catalog:
    """Loads entities from a data source once and serves them from memory.

    An empty or failed fetch is not cached, so the next ``load()`` retries.
    Concurrent callers share a single in-flight fetch.
    """

    def __init__(self, source) -> None:
        self._source = source
        self._entities: Optional[Tuple[Entity, ...]] = None
        self._pending: Optional[asyncio.Task] = None
        self.last_error: Optional[ErrorKind] = None

    @property
    def is_loaded(self) -> bool:
        return self._entities is not None

    async def load(self) -> Sequence[Entity]:
        if self._entities is not None:
            return self._entities
        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._fetch())
        pending = self._pending
        try:
            return await asyncio.shield(pending)
        finally:
            if self._pending is pending and pending.done():
                self._pending = None

    async def _fetch(self) -> Tuple[Entity, ...]:
        try:
            records = await asyncio.to_thread(self._source.fetch)
            entities = to_entities(records)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Catalog fetch failed: %s", exc)
            self.last_error = ErrorKind.DATA_SOURCE_UNAVAILABLE
            return ()

        if getattr(self._source, "prevalidated", False):
            entities = _drop_unlocatable(entities)

        if not entities:
            logger.warning("Catalog fetch returned no entities; will retry on next load.")
            self.last_error = ErrorKind.DATA_SOURCE_UNAVAILABLE
            return ()

        self._entities = tuple(entities)
        self.last_error = None
        logger.info("Catalog loaded with %d entities", len(self._entities))
        return self._entities


def _drop_unlocatable(entities: List[Entity]) -> List[Entity]:
    kept = [entity for entity in entities if entity.coordinate is not None]
    if len(kept) != len(entities):
        logger.debug("Dropped %d entities without coordinates", len(entities) - len(kept))
    return kept
