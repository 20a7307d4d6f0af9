"""Radius filtering and ordering of catalog entities around a reference point."""

from __future__ import annotations

import logging
import math
import unicodedata
from typing import List, Optional, Sequence, Tuple

from locator.core.distance import distance
from locator.core.models import Entity, ResolvedLocation, ScoredEntity, SearchQuery, SortMode

logger = logging.getLogger(__name__)


def collation_key(name: str) -> Tuple[str, str, str]:
    """Sort key approximating a locale collation.

    Compares base letters first (accents and case ignored), then accents, then
    case with lowercase ahead of uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name.casefold(), name.swapcase()


def parse_radius(raw) -> float:
    """Interpret a user-entered radius; blank or non-numeric means unbounded."""
    if raw is None or isinstance(raw, bool):
        return math.inf
    try:
        radius = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return math.inf
    if math.isnan(radius):
        return math.inf
    if radius < 0:
        raise ValueError("radius must not be negative")
    return radius


def search(
    query: SearchQuery,
    catalog: Sequence[Entity],
    resolved: Optional[ResolvedLocation],
) -> List[ScoredEntity]:
    """Score, filter and order ``catalog`` around ``resolved.point``.

    Always returns a new list; catalog entities are wrapped, never modified.
    """
    if resolved is None:
        return []

    scored: List[ScoredEntity] = []
    for entity in catalog:
        point = entity.coordinate
        if point is None:
            continue
        miles = distance(resolved.point, point)
        if miles <= query.radius_miles:
            scored.append(ScoredEntity(entity=entity, distance_miles=miles))

    # sorted() is stable, so ties keep catalog order
    if query.sort_mode is SortMode.DISTANCE:
        scored = sorted(scored, key=lambda item: item.distance_miles)
    elif query.sort_mode is SortMode.NAME:
        scored = sorted(scored, key=lambda item: collation_key(item.entity.name))

    logger.debug(
        "Search around %s (%s) kept %d of %d entities",
        resolved.point,
        resolved.source.value,
        len(scored),
        len(catalog),
    )
    return scored
