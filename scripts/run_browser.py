from __future__ import annotations

import argparse
import asyncio
import logging
from functools import partial
from pathlib import Path

import pandas as pd
import requests

from poi_browser.config import (
    DEFAULT_CENTER,
    DEFAULT_USER_AGENT,
    DEFAULT_ZOOM,
    DEMO_CITIES,
    DEMO_RESTAURANTS,
    SEARCH_DEBOUNCE_S,
    SELECTION_GRACE_S,
    SETTLE_DEBOUNCE_S,
)
from poi_browser.dataset import SeedResolution, places_from_outcomes
from poi_browser.geocode import fetch_coordinates, search_addresses
from poi_browser.map import StaticMap
from poi_browser.models import Coordinate
from poi_browser.session import BrowserSession


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Geocode restaurants and browse them on a map.")
    parser.add_argument("--city", default=None, help="Jump to a city before browsing, e.g. Marseille")
    parser.add_argument("--select", default=None, help="Name of a restaurant to select")
    parser.add_argument("--search", default=None, help="Address to search for and recenter on")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    parser.add_argument("--output-dir", default="outputs")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


async def browse(places, args: argparse.Namespace, widget: StaticMap, lookup=None):
    if args.select and args.select not in {place.name for place in places}:
        raise ValueError(f"Unknown or unresolved place: {args.select}")

    session = BrowserSession(places, lookup=lookup)
    session.attach(widget)
    for place in places:
        session.mount_marker(place.name, widget.add_marker(place))

    if args.city:
        session.jump_to_city(args.city)

    chosen = None
    if args.search and session.search is not None:
        session.search.input(args.search)
        await asyncio.sleep(SEARCH_DEBOUNCE_S + 0.05)
        if session.search.pending is not None:
            await session.search.pending
            await asyncio.sleep(0)
        if session.search.suggestions:
            chosen = session.search.choose(0)

    if args.select:
        widget.markers[args.select].click()

    # Let the settle debounce and the selection grace window run out.
    await asyncio.sleep(max(SETTLE_DEBOUNCE_S, SELECTION_GRACE_S) + 0.1)
    session.close()
    return session, chosen


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.city and args.city not in dict(DEMO_CITIES):
        raise ValueError(f"Unknown city {args.city!r}; choose from {sorted(dict(DEMO_CITIES))}")

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    http = requests.Session()
    resolution = SeedResolution(
        DEMO_RESTAURANTS,
        http,
        resolver=lambda address, s: fetch_coordinates(address, s, user_agent=args.user_agent),
    )
    outcomes = list(resolution)
    places = places_from_outcomes(outcomes)

    resolutions_df = pd.DataFrame(
        [
            {
                "name": outcome.name,
                "address": outcome.address,
                "lat": outcome.place.position.lat if outcome.place else None,
                "lon": outcome.place.position.lon if outcome.place else None,
                "resolved": outcome.place is not None,
                "reason": outcome.reason,
            }
            for outcome in outcomes
        ],
        columns=["name", "address", "lat", "lon", "resolved", "reason"],
    )
    resolutions_csv = output_dir / "resolutions.csv"
    resolutions_df.to_csv(resolutions_csv, index=False)

    widget = StaticMap(center=Coordinate.from_pair(DEFAULT_CENTER), zoom=DEFAULT_ZOOM)
    lookup = partial(search_addresses, session=http, user_agent=args.user_agent)
    session, chosen = asyncio.run(browse(places, args, widget, lookup=lookup))

    visible_df = pd.DataFrame(
        [
            {
                "name": place.name,
                "address": place.address,
                "lat": place.position.lat,
                "lon": place.position.lon,
                "selected": place.name == session.selected,
            }
            for place in session.visible
        ],
        columns=["name", "address", "lat", "lon", "selected"],
    )
    visible_csv = output_dir / "visible_places.csv"
    visible_df.to_csv(visible_csv, index=False)

    map_path = output_dir / "map.html"
    highlighted = [item.name for item in session.list_items() if item.highlighted]
    widget.save(str(map_path), highlighted=highlighted)

    print(f"Resolutions: {resolutions_csv}")
    print(f"Visible:     {visible_csv}")
    print(f"Map:         {map_path}")
    print(f"Resolved:    {len(places)} of {len(outcomes)}")
    print(f"Visible:     {len(session.visible)}")
    print(f"Selected:    {session.selected or '-'}")
    if chosen is not None:
        print(f"Search:      {chosen.label}")
    if session.last_view is not None:
        center = session.last_view.center
        print(f"View:        {center.lat:.5f}, {center.lon:.5f} z={session.last_view.zoom}")


if __name__ == "__main__":
    main()
