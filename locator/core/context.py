"""Caller-owned location state.

``location`` is the single source of truth for the current reference point. Its
``source`` tag tells a device fix apart from a typed resolution (geocoded or ZIP
centroid); ``None`` means no usable point is held.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from locator.core.models import ResolvedLocation


class LocationEvent(str, Enum):
    DEVICE_ACQUIRED = "device_acquired"
    TEXT_RESOLVED = "text_resolved"
    TEXT_EDITED = "text_edited"
    CLEARED = "cleared"


def transition(
    current: Optional[ResolvedLocation],
    event: LocationEvent,
    resolved: Optional[ResolvedLocation] = None,
    text: Optional[str] = None,
) -> Optional[ResolvedLocation]:
    """Return the location held after ``event``.

    Acquiring or resolving replaces whatever was held before. A text edit drops a
    device fix, and drops a typed resolution unless the text is unchanged.
    """
    if event in (LocationEvent.DEVICE_ACQUIRED, LocationEvent.TEXT_RESOLVED):
        if resolved is None:
            raise ValueError(f"{event.value} requires a resolved location")
        return resolved
    if event is LocationEvent.TEXT_EDITED:
        if current is None or current.is_device:
            return None
        if text is not None and text.strip() == current.cached_query_text:
            return current
        return None
    return None


@dataclass
class LocationContext:
    location: Optional[ResolvedLocation] = None

    def apply(
        self,
        event: LocationEvent,
        resolved: Optional[ResolvedLocation] = None,
        text: Optional[str] = None,
    ) -> Optional[ResolvedLocation]:
        self.location = transition(self.location, event, resolved=resolved, text=text)
        return self.location

    @property
    def device_fix(self) -> Optional[ResolvedLocation]:
        if self.location is not None and self.location.is_device:
            return self.location
        return None
