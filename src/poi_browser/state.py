from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Mapping, Tuple, Union

from poi_browser.config import SELECTION_GRACE_S
from poi_browser.models import Bounds, Coordinate, Place


@dataclass(frozen=True)
class SelectionState:
    selected: str | None = None
    hovered: str | None = None
    deselect_suppressed: bool = False

    def is_highlighted(self, name: str) -> bool:
        return name == self.selected or name == self.hovered


# Events


@dataclass(frozen=True)
class PanStart:
    pass


@dataclass(frozen=True)
class PanSettle:
    bounds: Bounds


@dataclass(frozen=True)
class MapClick:
    pass


@dataclass(frozen=True)
class MarkerClick:
    name: str


@dataclass(frozen=True)
class MarkerPopupClose:
    name: str


@dataclass(frozen=True)
class MarkerHoverEnter:
    name: str


@dataclass(frozen=True)
class MarkerHoverExit:
    name: str


@dataclass(frozen=True)
class ListItemClick:
    name: str


@dataclass(frozen=True)
class ListItemHoverEnter:
    name: str


@dataclass(frozen=True)
class ListItemHoverExit:
    name: str


@dataclass(frozen=True)
class GraceExpired:
    pass


@dataclass(frozen=True)
class FocusRequest:
    point: Coordinate


Event = Union[
    PanStart,
    PanSettle,
    MapClick,
    MarkerClick,
    MarkerPopupClose,
    MarkerHoverEnter,
    MarkerHoverExit,
    ListItemClick,
    ListItemHoverEnter,
    ListItemHoverExit,
    GraceExpired,
    FocusRequest,
]


# Commands


@dataclass(frozen=True)
class OpenPopup:
    name: str


@dataclass(frozen=True)
class ClosePopup:
    name: str


@dataclass(frozen=True)
class CloseAllPopups:
    pass


@dataclass(frozen=True)
class ArmGrace:
    delay_s: float


@dataclass(frozen=True)
class Focus:
    point: Coordinate


@dataclass(frozen=True)
class ClearFocus:
    pass


@dataclass(frozen=True)
class RefreshVisible:
    bounds: Bounds


Command = Union[
    OpenPopup, ClosePopup, CloseAllPopups, ArmGrace, Focus, ClearFocus, RefreshVisible
]

_SELECT_EVENTS = (MarkerClick, ListItemClick)
_HOVER_ENTER_EVENTS = (MarkerHoverEnter, ListItemHoverEnter)
_HOVER_EXIT_EVENTS = (MarkerHoverExit, ListItemHoverExit)
_NAMED_EVENTS = _SELECT_EVENTS + _HOVER_ENTER_EVENTS + _HOVER_EXIT_EVENTS + (
    MarkerPopupClose,
)


def transition(
    state: SelectionState,
    event: Event,
    places: Mapping[str, Place],
    grace_s: float = SELECTION_GRACE_S,
) -> Tuple[SelectionState, List[Command]]:
    if isinstance(event, _NAMED_EVENTS) and event.name not in places:
        return state, []

    if isinstance(event, _HOVER_ENTER_EVENTS):
        return replace(state, hovered=event.name), [OpenPopup(event.name)]

    if isinstance(event, _HOVER_EXIT_EVENTS):
        commands: List[Command] = []
        if state.hovered == event.name:
            state = replace(state, hovered=None)
        if state.selected != event.name:
            commands.append(ClosePopup(event.name))
        return state, commands

    if isinstance(event, _SELECT_EVENTS):
        place = places[event.name]
        new_state = replace(state, selected=place.name, deselect_suppressed=True)
        return new_state, [
            ArmGrace(grace_s),
            OpenPopup(place.name),
            Focus(place.position),
        ]

    if isinstance(event, MarkerPopupClose):
        if state.selected == event.name:
            state = replace(state, selected=None)
        return state, [ClearFocus()]

    if isinstance(event, MapClick):
        return replace(state, selected=None), [CloseAllPopups(), ClearFocus()]

    if isinstance(event, PanStart):
        # A recenter issued by our own selection also starts a pan.
        if state.deselect_suppressed:
            return state, []
        return replace(state, selected=None), [CloseAllPopups()]

    if isinstance(event, PanSettle):
        return state, [RefreshVisible(event.bounds)]

    if isinstance(event, GraceExpired):
        return replace(state, deselect_suppressed=False), []

    if isinstance(event, FocusRequest):
        return state, [Focus(event.point)]

    raise TypeError(f"Unsupported event: {event!r}")
