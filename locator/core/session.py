"""Presentation-facing entry points that tie the catalog, resolver and search together."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from locator.core.catalog import Catalog
from locator.core.config import Settings
from locator.core.context import LocationContext, LocationEvent
from locator.core.display_gate import DisplayGate
from locator.core.errors import ErrorKind, LocationResolutionError
from locator.core.models import PositionOptions, ResolvedLocation, ScoredEntity, SearchQuery
from locator.core.resolver import LocationResolver
from locator.core.search import search
from locator.vendors.data_source import JsonDataSource
from locator.vendors.device_location import build_device_locator
from locator.vendors.nominatim import NominatimGeocoder

logger = logging.getLogger(__name__)

Renderer = Callable[[Sequence[ScoredEntity], "SearchStatus"], None]


class SearchStatus(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    OK = "ok"
    NO_LOCATION_PROVIDED = ErrorKind.NO_LOCATION_PROVIDED.value
    ZIP_NOT_FOUND = ErrorKind.ZIP_NOT_FOUND.value
    GEOCODE_NOT_FOUND = ErrorKind.GEOCODE_NOT_FOUND.value
    DATA_SOURCE_UNAVAILABLE = ErrorKind.DATA_SOURCE_UNAVAILABLE.value


class DirectorySession:
    """One user's view of the directory.

    Overlapping searches are allowed; only the most recently started search
    that completes is published to the renderer.
    """

    def __init__(
        self,
        catalog: Catalog,
        resolver: LocationResolver,
        renderer: Optional[Renderer] = None,
        gate: Optional[DisplayGate] = None,
    ) -> None:
        self.catalog = catalog
        self.resolver = resolver
        self.context = LocationContext()
        self.renderer = renderer
        self.gate = gate
        self.last_status = SearchStatus.NOT_ATTEMPTED
        self._search_seq = 0

    async def on_search_requested(self, query: SearchQuery) -> List[ScoredEntity]:
        self._search_seq += 1
        seq = self._search_seq
        logger.info(
            "Search #%d text=%r radius=%s sort=%s intent=%s",
            seq,
            query.raw_text,
            query.radius_miles,
            query.sort_mode.value,
            query.location_intent.value,
        )

        held_before = self.context.location
        entities, outcome = await asyncio.gather(self.catalog.load(), self._resolve(query))
        resolved, status = outcome
        if not entities and self.catalog.last_error is not None:
            status = SearchStatus.DATA_SOURCE_UNAVAILABLE
        results = search(query, entities, resolved) if status is SearchStatus.OK else []

        if seq != self._search_seq:
            logger.info("Search #%d superseded by #%d; not publishing", seq, self._search_seq)
            return results
        if status is SearchStatus.OK and not resolved.is_device:
            self._keep_typed_resolution(resolved, held_before)
        self.last_status = status
        logger.info("Search #%d finished status=%s results=%d", seq, status.value, len(results))
        self._publish(results, status)
        return results

    def _keep_typed_resolution(self, resolved: ResolvedLocation, held_before: Optional[ResolvedLocation]) -> None:
        # a device fix acquired while this search was in flight takes precedence
        if self.context.location is not held_before:
            logger.info("Location changed during search; not keeping resolution for %r", resolved.cached_query_text)
            return
        self.context.apply(LocationEvent.TEXT_RESOLVED, resolved=resolved)

    async def _resolve(self, query: SearchQuery):
        try:
            resolved = await self.resolver.resolve(query.location_intent, query.raw_text, self.context)
        except LocationResolutionError as exc:
            return None, SearchStatus(exc.kind.value)
        if resolved is None:
            return None, SearchStatus.NO_LOCATION_PROVIDED
        return resolved, SearchStatus.OK

    async def on_device_location_requested(self, locator=None) -> ResolvedLocation:
        """Acquire a device fix; DeviceLocationError propagates to the caller."""
        return await self.resolver.acquire_device_location(self.context, locator=locator)

    def on_text_edited(self, text: str) -> None:
        self.context.apply(LocationEvent.TEXT_EDITED, text=text)

    def _publish(self, results: Sequence[ScoredEntity], status: SearchStatus) -> None:
        if self.renderer is None:
            return
        render = self.renderer
        if self.gate is None:
            render(results, status)
        else:
            self.gate.submit(lambda: render(results, status))


def build_session(settings: Settings, renderer: Optional[Renderer] = None, gate: Optional[DisplayGate] = None) -> DirectorySession:
    source = JsonDataSource(
        settings.data_source,
        timeout=settings.request_timeout,
        prevalidated=settings.data_prevalidated,
    )
    geocoder = NominatimGeocoder(
        settings.geocoder_url,
        user_agent=settings.geocoder_user_agent,
        timeout=settings.request_timeout,
    )
    catalog = Catalog(source)
    resolver = LocationResolver(
        catalog,
        geocoder,
        build_device_locator(settings),
        PositionOptions(
            high_accuracy=settings.device_high_accuracy,
            timeout_ms=settings.device_timeout_ms,
            max_age_ms=settings.device_max_age_ms,
        ),
    )
    return DirectorySession(catalog, resolver, renderer=renderer, gate=gate)
