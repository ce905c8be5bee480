from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from poi_browser.config import DEMO_CITIES, SELECTION_GRACE_S, SETTLE_DEBOUNCE_S
from poi_browser.models import Bounds, Coordinate, Place
from poi_browser.scheduling import Debouncer, Scheduler, TimerSlot
from poi_browser.search import AddressSearch, Lookup
from poi_browser.state import (
    ArmGrace,
    ClearFocus,
    CloseAllPopups,
    ClosePopup,
    Command,
    Event,
    Focus,
    FocusRequest,
    GraceExpired,
    MapClick,
    MarkerClick,
    MarkerHoverEnter,
    MarkerHoverExit,
    MarkerPopupClose,
    OpenPopup,
    PanSettle,
    PanStart,
    RefreshVisible,
    SelectionState,
    transition,
)
from poi_browser.view import SetView, ViewSynchronizer
from poi_browser.viewport import filter_visible


logger = logging.getLogger(__name__)


class MapWidget(Protocol):
    def get_bounds(self) -> Bounds: ...

    def set_view(self, center: Coordinate, zoom: int) -> None: ...

    def on(self, event: str, callback: Callable[..., Any]) -> None: ...


class MarkerHandle(Protocol):
    def open_popup(self) -> None: ...

    def close_popup(self) -> None: ...

    def on(self, event: str, callback: Callable[..., Any]) -> None: ...


@dataclass(frozen=True)
class ListItem:
    name: str
    selected: bool
    hovered: bool

    @property
    def highlighted(self) -> bool:
        return self.selected or self.hovered


class BrowserSession:
    """One map view: selection state, markers, visible set and their timers.

    Everything runs on a single event loop. Events raised while another event
    is being handled are queued and handled afterwards, in order.
    """

    def __init__(
        self,
        places: Sequence[Place],
        scheduler: Optional[Scheduler] = None,
        settle_delay_s: float = SETTLE_DEBOUNCE_S,
        grace_s: float = SELECTION_GRACE_S,
        cities: Iterable[Tuple[str, Tuple[float, float]]] = DEMO_CITIES,
        lookup: Optional[Lookup] = None,
    ) -> None:
        if scheduler is None:
            scheduler = asyncio.get_running_loop()

        self.places: Tuple[Place, ...] = tuple(places)
        self._by_name: Dict[str, Place] = {place.name: place for place in self.places}
        self.cities: Dict[str, Coordinate] = {
            name: Coordinate.from_pair(pos) for name, pos in cities
        }
        self.state = SelectionState()
        self.visible: Tuple[Place, ...] = self.places
        self.bounds: Bounds | None = None
        self.markers: Dict[str, MarkerHandle] = {}
        self.view = ViewSynchronizer()
        self.widget: MapWidget | None = None
        self.last_view: SetView | None = None
        self.closed = False

        self._grace_s = grace_s
        self._grace = TimerSlot(scheduler)
        self._settle = Debouncer(scheduler, settle_delay_s, self._apply_bounds)
        self._visible_listeners: List[Callable[[Tuple[Place, ...]], None]] = []
        self._queue: Deque[Event] = deque()
        self._dispatching = False

        self.search: AddressSearch | None = None
        if lookup is not None:
            self.search = AddressSearch(scheduler, lookup, self.dispatch)

    @property
    def selected(self) -> str | None:
        return self.state.selected

    @property
    def hovered(self) -> str | None:
        return self.state.hovered

    def attach(self, widget: MapWidget) -> None:
        self.widget = widget
        widget.on("movestart", lambda *_: self.dispatch(PanStart()))
        widget.on("moveend", lambda *_: self.dispatch(PanSettle(widget.get_bounds())))
        widget.on("click", lambda *_: self.dispatch(MapClick()))

    def mount_marker(self, name: str, marker: MarkerHandle) -> None:
        self.markers[name] = marker
        marker.on("click", lambda *_: self.dispatch(MarkerClick(name)))
        marker.on("popupclose", lambda *_: self.dispatch(MarkerPopupClose(name)))
        marker.on("mouseover", lambda *_: self.dispatch(MarkerHoverEnter(name)))
        marker.on("mouseout", lambda *_: self.dispatch(MarkerHoverExit(name)))

    def unmount_marker(self, name: str) -> None:
        self.markers.pop(name, None)

    def subscribe_visible(self, callback: Callable[[Tuple[Place, ...]], None]) -> None:
        self._visible_listeners.append(callback)

    def list_items(self) -> List[ListItem]:
        return [
            ListItem(
                name=place.name,
                selected=place.name == self.state.selected,
                hovered=place.name == self.state.hovered,
            )
            for place in self.visible
        ]

    def jump_to_city(self, name: str) -> None:
        try:
            point = self.cities[name]
        except KeyError:
            raise ValueError(f"Unknown city: {name}") from None
        self.dispatch(FocusRequest(point))

    def dispatch(self, event: Event) -> None:
        if self.closed:
            logger.debug("Ignoring %r after session close", event)
            return

        self._queue.append(event)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue and not self.closed:
                current = self._queue.popleft()
                self.state, commands = transition(
                    self.state, current, self._by_name, grace_s=self._grace_s
                )
                logger.debug("%r -> %r %r", current, self.state, commands)
                for command in commands:
                    self._execute(command)
        finally:
            self._queue.clear()
            self._dispatching = False

    def _execute(self, command: Command) -> None:
        if isinstance(command, OpenPopup):
            marker = self.markers.get(command.name)
            if marker is not None:
                marker.open_popup()
        elif isinstance(command, ClosePopup):
            marker = self.markers.get(command.name)
            if marker is not None:
                marker.close_popup()
        elif isinstance(command, CloseAllPopups):
            for marker in list(self.markers.values()):
                marker.close_popup()
        elif isinstance(command, ArmGrace):
            self._grace.start(command.delay_s, self.dispatch, GraceExpired())
        elif isinstance(command, Focus):
            set_view = self.view.focus(command.point)
            if set_view is not None:
                self.last_view = set_view
                if self.widget is not None:
                    self.widget.set_view(set_view.center, set_view.zoom)
        elif isinstance(command, ClearFocus):
            self.view.clear()
        elif isinstance(command, RefreshVisible):
            self._settle.trigger(command.bounds)
        else:
            raise TypeError(f"Unsupported command: {command!r}")

    def _apply_bounds(self, bounds: Bounds) -> None:
        self.bounds = bounds
        self.visible = filter_visible(self.places, bounds)
        logger.debug("Visible places: %d of %d", len(self.visible), len(self.places))
        for callback in list(self._visible_listeners):
            callback(self.visible)

    def close(self) -> None:
        self.closed = True
        self._grace.cancel()
        self._settle.cancel()
        if self.search is not None:
            self.search.close()
        self.markers.clear()
