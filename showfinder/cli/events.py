#!/usr/bin/env python3
"""
CLI for querying a running Showfinder API.

Usage:
    # Search near a place (geocoded with GOOGLE_GEOCODING_API_KEY)
    python -m showfinder.cli.events search "taylor swift" --location "Los Angeles, CA"

    # Search near coordinates, or near your IP's location
    python -m showfinder.cli.events search jazz --lat 34.05 --lng -118.24 --distance 25
    python -m showfinder.cli.events search jazz --auto-detect

    # Suggestions, event details and artist lookup
    python -m showfinder.cli.events suggest tay
    python -m showfinder.cli.events event G5vYZ9aTvn1yA
    python -m showfinder.cli.events artist "Taylor Swift"

    # Favorites
    python -m showfinder.cli.events favorites list
    python -m showfinder.cli.events favorites add G5vYZ9aTvn1yA
    python -m showfinder.cli.events favorites remove G5vYZ9aTvn1yA

Set API_BASE_URL (or --api) to point at the server.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import BaseModel

from showfinder.client.api import ShowfinderClient
from showfinder.client.favorites import favorite_payload_from_detail
from showfinder.client.location import get_geocoding_client, get_ipinfo_client
from showfinder.client.search import SearchController, sort_results
from showfinder.config import configure_logging
from showfinder.errors import ShowfinderError
from showfinder.models import SearchParams

logger = logging.getLogger(__name__)


def to_json(data: Any) -> str:
    """Serialize models (or lists of them) with their wire field names."""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(by_alias=True) if isinstance(item, BaseModel) else item
            for item in data
        ]
    return json.dumps(data, indent=2)


async def search_events(client: ShowfinderClient, args: argparse.Namespace) -> Any:
    """Search directly by coordinates, or through the form controller by place."""
    if args.lat is not None and args.lng is not None:
        events = await client.search_events(
            SearchParams(
                keyword=args.keyword,
                category=args.category,
                lat=args.lat,
                lng=args.lng,
                distance=args.distance,
            )
        )
        return sort_results(events)

    geocoder = get_geocoding_client()
    detector = get_ipinfo_client()
    controller = SearchController(client, geocoder=geocoder, location_detector=detector)
    try:
        controller.form.keyword = args.keyword
        controller.set_category(args.category)
        controller.set_location(args.location or "")
        controller.set_distance(str(args.distance))
        controller.form.auto_detect = args.auto_detect

        results = await controller.search()
    finally:
        await geocoder.close()
        await detector.close()

    if controller.errors:
        raise ShowfinderError("; ".join(controller.errors.values()))
    if controller.error_message:
        raise ShowfinderError(controller.error_message)
    return results


async def run(args: argparse.Namespace) -> Any:
    """Execute one command and return its JSON-serializable result."""
    async with ShowfinderClient(base_url=args.api) as client:
        if args.command == "search":
            return await search_events(client, args)
        if args.command == "suggest":
            return {"suggestions": await client.get_suggestions(args.keyword)}
        if args.command == "event":
            return await client.get_event_details(args.event_id)
        if args.command == "artist":
            artist = await client.get_artist(args.name)
            if artist is None:
                raise ShowfinderError(f"No Spotify artist found for {args.name}")
            return artist

        # favorites
        if args.action == "list":
            return await client.list_favorites()
        if args.action == "add":
            detail = await client.get_event_details(args.event_id)
            result = await client.add_favorite(favorite_payload_from_detail(detail))
            logger.info(
                "%s favorite %s", "Created" if result.created else "Updated", args.event_id
            )
            return result.favorite
        removed = await client.remove_favorite(args.event_id)
        return {"removed": removed.model_dump(by_alias=True) if removed else None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Event discovery CLI for Showfinder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--api",
        default=None,
        help="Showfinder API base URL (default: API_BASE_URL or http://localhost:3000/api)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # search command
    search = subparsers.add_parser("search", help="Search events")
    search.add_argument("keyword", help="Search keyword")
    search.add_argument("--category", default="All", help="Classification (default: All)")
    search.add_argument("--location", help="Place to search around")
    search.add_argument("--lat", type=float, help="Latitude (with --lng, skips geocoding)")
    search.add_argument("--lng", type=float, help="Longitude")
    search.add_argument(
        "--distance",
        type=int,
        default=10,
        help="Radius in miles (default: 10)",
    )
    search.add_argument(
        "--auto-detect",
        action="store_true",
        help="Use the location of this machine's IP address",
    )

    # suggest command
    suggest = subparsers.add_parser("suggest", help="Keyword suggestions")
    suggest.add_argument("keyword", help="Partial keyword")

    # event command
    event = subparsers.add_parser("event", help="Event details")
    event.add_argument("event_id", help="Ticketmaster event id")

    # artist command
    artist = subparsers.add_parser("artist", help="Spotify artist lookup")
    artist.add_argument("name", help="Artist name")

    # favorites command
    favorites = subparsers.add_parser("favorites", help="Manage favorites")
    actions = favorites.add_subparsers(dest="action", help="Favorites action")
    actions.add_parser("list", help="List favorites")
    add = actions.add_parser("add", help="Add an event to favorites")
    add.add_argument("event_id", help="Ticketmaster event id")
    remove = actions.add_parser("remove", help="Remove an event from favorites")
    remove.add_argument("event_id", help="Ticketmaster event id")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command or (args.command == "favorites" and not args.action):
        parser.print_help()
        sys.exit(1)

    configure_logging()
    try:
        result = asyncio.run(run(args))
    except ShowfinderError as e:
        logger.error("%s", e)
        sys.exit(1)

    print(to_json(result))


if __name__ == "__main__":
    main()
