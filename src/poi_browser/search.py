from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from poi_browser.config import SEARCH_DEBOUNCE_S, SEARCH_MIN_CHARS
from poi_browser.geocode import GeocodingError
from poi_browser.models import AddressSuggestion
from poi_browser.scheduling import Debouncer, Scheduler
from poi_browser.state import FocusRequest


logger = logging.getLogger(__name__)

Lookup = Callable[[str], List[AddressSuggestion]]


class AddressSearch:
    """Search box with debounced suggestion lookups.

    Lookups are blocking HTTP calls, so they run in the scheduler's default
    executor. Results are applied back on the loop only while they still
    answer the latest input.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        lookup: Lookup,
        on_choose: Callable[[FocusRequest], None],
        delay_s: float = SEARCH_DEBOUNCE_S,
    ) -> None:
        self.query = ""
        self.suggestions: List[AddressSuggestion] = []
        self.pending: Optional[Any] = None
        self._scheduler = scheduler
        self._lookup = lookup
        self._on_choose = on_choose
        self._generation = 0
        self._closed = False
        self._debouncer = Debouncer(scheduler, delay_s, self._refresh)

    def input(self, text: str) -> None:
        self.query = text
        self._generation += 1
        self._debouncer.trigger(text, self._generation)

    def _refresh(self, text: str, generation: int) -> None:
        if generation != self._generation or self._closed:
            return
        if len(text.strip()) < SEARCH_MIN_CHARS:
            self.suggestions = []
            return

        future = self._scheduler.run_in_executor(None, self._lookup, text)
        self.pending = future
        future.add_done_callback(lambda done: self._apply(text, generation, done))

    def _apply(self, text: str, generation: int, future: Any) -> None:
        if self.pending is future:
            self.pending = None
        if future.cancelled() or self._closed:
            return
        if generation != self._generation:
            logger.debug("Discarding stale suggestions for %r", text)
            return
        try:
            self.suggestions = future.result()
        except GeocodingError as exc:
            logger.warning("Address search failed for %r: %s", text, exc)
            self.suggestions = []

    def choose(self, index: int) -> AddressSuggestion:
        suggestion = self.suggestions[index]
        self.query = suggestion.label
        self.suggestions = []
        self._generation += 1
        self._debouncer.cancel()
        self._on_choose(FocusRequest(suggestion.position))
        return suggestion

    def close(self) -> None:
        self._closed = True
        self._debouncer.cancel()
        if self.pending is not None:
            self.pending.cancel()
            self.pending = None
