from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import requests

from poi_browser.geocode import GeocodingError, fetch_coordinates
from poi_browser.models import Coordinate, Place


logger = logging.getLogger(__name__)

Resolver = Callable[[str, requests.Session], Optional[Coordinate]]


@dataclass(frozen=True)
class ResolutionOutcome:
    name: str
    address: str
    place: Place | None
    reason: str | None


class SeedResolution:
    """Lazy, restartable pass over seed entries.

    Every iteration starts a fresh sequential geocoding pass in seed order,
    one lookup per entry. Setting ``abort`` stops the pass before the next
    lookup is sent.
    """

    def __init__(
        self,
        seed: Sequence[Tuple[str, str]],
        session: requests.Session,
        abort: threading.Event | None = None,
        resolver: Resolver = fetch_coordinates,
    ) -> None:
        self.seed = list(seed)
        self.session = session
        self.abort = abort
        self.resolver = resolver

    def __len__(self) -> int:
        return len(self.seed)

    def __iter__(self) -> Iterator[ResolutionOutcome]:
        for name, address in self.seed:
            if self.abort is not None and self.abort.is_set():
                logger.info("Geocoding aborted before %r", name)
                return
            yield self._resolve_one(name, address)

    def _resolve_one(self, name: str, address: str) -> ResolutionOutcome:
        try:
            position = self.resolver(address, self.session)
        except GeocodingError as exc:
            # A single failed lookup must not abort the whole dataset.
            logger.warning("Dropping %r: %s", name, exc)
            return ResolutionOutcome(name, address, None, "geocode_error")

        if position is None:
            logger.warning("Dropping %r: address not found (%s)", name, address)
            return ResolutionOutcome(name, address, None, "geocode_not_found")

        return ResolutionOutcome(
            name, address, Place(name=name, address=address, position=position), None
        )


def places_from_outcomes(outcomes: Sequence[ResolutionOutcome]) -> List[Place]:
    return [outcome.place for outcome in outcomes if outcome.place is not None]


def build_dataset(
    seed: Sequence[Tuple[str, str]],
    session: requests.Session,
    abort: threading.Event | None = None,
    resolver: Resolver = fetch_coordinates,
) -> List[Place]:
    resolution = SeedResolution(seed, session, abort=abort, resolver=resolver)
    places = places_from_outcomes(list(resolution))
    logger.info("Resolved %d of %d places", len(places), len(resolution))
    return places
