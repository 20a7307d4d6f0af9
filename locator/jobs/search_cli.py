"""CLI job to search the directory around a typed location or the device position."""

import argparse
import asyncio
import logging
from typing import List, Optional, Sequence

from locator.core.config import get_settings
from locator.core.errors import DeviceLocationError
from locator.core.models import LocationIntent, ScoredEntity, SearchQuery, SortMode
from locator.core.search import parse_radius
from locator.core.session import SearchStatus, build_session

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    SearchStatus.NO_LOCATION_PROVIDED: "Enter a location or use --use-device-location.",
    SearchStatus.ZIP_NOT_FOUND: "That ZIP code is not in the directory.",
    SearchStatus.GEOCODE_NOT_FOUND: "Could not find that location.",
    SearchStatus.DATA_SOURCE_UNAVAILABLE: "The directory is unavailable right now.",
}


def format_results(results: Sequence[ScoredEntity], status: SearchStatus) -> List[str]:
    if status in _STATUS_MESSAGES:
        return [_STATUS_MESSAGES[status]]
    if not results:
        return ["No results found."]
    lines = [f"{len(results)} results found."]
    for item in results:
        entity = item.entity
        place = ", ".join(part for part in (entity.address, entity.city, entity.zip) if part)
        lines.append(f"{item.distance_miles:6.1f} mi  {entity.name}  {place}")
    return lines


async def run_search(
    *,
    text: str,
    radius: float,
    sort_mode: SortMode,
    use_device_location: bool,
) -> List[str]:
    session = build_session(get_settings())
    intent = LocationIntent.USE_TYPED_TEXT
    if use_device_location:
        fix = await session.on_device_location_requested()
        logger.info("Using device location near %s", fix.label)
        intent = LocationIntent.USE_DEVICE_LOCATION

    query = SearchQuery(raw_text=text, radius_miles=radius, sort_mode=sort_mode, location_intent=intent)
    results = await session.on_search_requested(query)
    return format_results(results, session.last_status)


def build_parser() -> argparse.ArgumentParser:
    default_radius = get_settings().default_radius_miles
    parser = argparse.ArgumentParser(description="Search the directory by location")
    parser.add_argument("text", nargs="?", default="", help="Address, city or ZIP code")
    parser.add_argument(
        "--radius",
        dest="radius",
        default=default_radius,
        help="Search radius in miles; omit for no limit",
    )
    parser.add_argument(
        "--sort",
        dest="sort_mode",
        choices=[mode.value for mode in SortMode],
        default=SortMode.DISTANCE.value,
        help="Result ordering",
    )
    parser.add_argument(
        "--use-device-location",
        dest="use_device_location",
        action="store_true",
        help="Search around the device position instead of the typed text",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        radius = parse_radius(args.radius)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        lines = asyncio.run(
            run_search(
                text=args.text,
                radius=radius,
                sort_mode=SortMode(args.sort_mode),
                use_device_location=args.use_device_location,
            )
        )
    except DeviceLocationError as exc:
        logger.error("Unable to retrieve location: %s", exc.kind.value)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
