"""Turns typed text, ZIP codes or a device fix into a single reference point."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional, Sequence

from locator.core.catalog import Catalog
from locator.core.context import LocationContext, LocationEvent
from locator.core.errors import (
    DeviceErrorKind,
    DeviceLocationError,
    GeocodeNotFoundError,
    ZipNotFoundError,
)
from locator.core.models import (
    Coordinate,
    Entity,
    LocationIntent,
    LocationSource,
    PositionOptions,
    ResolvedLocation,
)

logger = logging.getLogger(__name__)

ZIP_PATTERN = re.compile(r"^[0-9]{5}(?:-[0-9]{4})?$")


def is_zip_code(text: str) -> bool:
    return bool(ZIP_PATTERN.match(text))


def zip_centroid(entities: Sequence[Entity], zip_code: str) -> Optional[Coordinate]:
    """Mean latitude and longitude of the locatable entities filed under ``zip_code``."""
    points = [
        entity.coordinate
        for entity in entities
        if entity.zip == zip_code and entity.coordinate is not None
    ]
    if not points:
        return None
    return Coordinate(
        lat=sum(point.lat for point in points) / len(points),
        lon=sum(point.lon for point in points) / len(points),
    )


def describe_point(point: Coordinate) -> str:
    return f"{point.lat:.5f}, {point.lon:.5f}"


class LocationResolver:
    def __init__(
        self,
        catalog: Catalog,
        geocoder,
        device_locator,
        position_options: Optional[PositionOptions] = None,
    ) -> None:
        self.catalog = catalog
        self.geocoder = geocoder
        self.device_locator = device_locator
        self.position_options = position_options or PositionOptions()

    async def resolve(
        self,
        intent: LocationIntent,
        raw_text: str,
        context: LocationContext,
    ) -> Optional[ResolvedLocation]:
        """Resolve the reference point for a search.

        Returns None when there is nothing to search around. Raises
        ZipNotFoundError or GeocodeNotFoundError when typed text cannot be placed.
        The context is only read; the caller decides whether to keep the result.
        """
        device_fix = context.device_fix
        if intent is LocationIntent.USE_DEVICE_LOCATION and device_fix is not None:
            return device_fix

        text = (raw_text or "").strip()
        if not text:
            return None

        held = context.location
        if held is not None and not held.is_device and held.cached_query_text == text:
            logger.debug("Reusing cached resolution for %s", text)
            return held

        if is_zip_code(text):
            return await self._resolve_zip(text)
        return await self._resolve_free_text(text)

    async def _resolve_zip(self, zip_code: str) -> ResolvedLocation:
        entities = await self.catalog.load()
        centroid = zip_centroid(entities, zip_code)
        if centroid is None:
            logger.info("ZIP %s not present in catalog", zip_code)
            raise ZipNotFoundError(f"no catalog entries for ZIP {zip_code}")
        return ResolvedLocation(point=centroid, source=LocationSource.ZIP_CENTROID, cached_query_text=zip_code)

    async def _resolve_free_text(self, text: str) -> ResolvedLocation:
        try:
            point = await asyncio.to_thread(self.geocoder.geocode, text)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Geocoding failed for %s: %s", text, exc)
            point = None
        if point is None:
            raise GeocodeNotFoundError(f"no geocoding match for {text!r}")
        return ResolvedLocation(point=point, source=LocationSource.GEOCODED, cached_query_text=text)

    async def acquire_device_location(self, context: LocationContext, locator=None) -> ResolvedLocation:
        """Ask the device collaborator for a fix and make it the held location.

        Raises DeviceLocationError; the held location is left untouched on failure.
        """
        locator = locator or self.device_locator
        options = self.position_options
        try:
            point = await asyncio.wait_for(
                asyncio.to_thread(locator.get_current_position, options),
                timeout=options.timeout_ms / 1000,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Device location timed out after %d ms", options.timeout_ms)
            raise DeviceLocationError(DeviceErrorKind.TIMEOUT) from exc
        except DeviceLocationError as exc:
            logger.warning("Device location failed: %s", exc.kind.value)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("Device location failed: %s", exc)
            raise DeviceLocationError(DeviceErrorKind.UNAVAILABLE, str(exc)) from exc

        label = await self._describe(point)
        resolved = ResolvedLocation(point=point, source=LocationSource.DEVICE, label=label)
        return context.apply(LocationEvent.DEVICE_ACQUIRED, resolved=resolved)

    async def _describe(self, point: Coordinate) -> str:
        reverse = getattr(self.geocoder, "reverse_geocode", None)
        label = None
        if reverse is not None:
            try:
                label = await asyncio.to_thread(reverse, point)
            except Exception as exc:  # noqa: BLE001
                logger.debug("Reverse geocoding failed: %s", exc)
        return label or describe_point(point)
