from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List

import folium

from poi_browser.config import DEFAULT_CENTER, DEFAULT_VIEWPORT_PX, DEFAULT_ZOOM
from poi_browser.models import Bounds, Coordinate, Place
from poi_browser.viewport import bounds_around


class _Emitter:
    def __init__(self) -> None:
        self._callbacks: DefaultDict[str, List[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._callbacks[event].append(callback)

    def fire(self, event: str, *args: Any) -> None:
        for callback in list(self._callbacks[event]):
            callback(*args)


class StaticMarker(_Emitter):
    def __init__(self, place: Place) -> None:
        super().__init__()
        self.place = place
        self.popup_open = False

    def open_popup(self) -> None:
        if self.popup_open:
            return
        self.popup_open = True
        self.fire("popupopen", self)

    def close_popup(self) -> None:
        if not self.popup_open:
            return
        self.popup_open = False
        self.fire("popupclose", self)

    def click(self) -> None:
        self.fire("click", self)

    def hover(self) -> None:
        self.fire("mouseover", self)

    def unhover(self) -> None:
        self.fire("mouseout", self)


class StaticMap(_Emitter):
    """In-process map widget with a fixed pixel size.

    Moves are instantaneous: ``set_view`` fires ``movestart`` and then
    ``moveend``. Several popups may be open at once.
    """

    def __init__(
        self,
        center: Coordinate = Coordinate.from_pair(DEFAULT_CENTER),
        zoom: int = DEFAULT_ZOOM,
        width_px: int = DEFAULT_VIEWPORT_PX[0],
        height_px: int = DEFAULT_VIEWPORT_PX[1],
    ) -> None:
        super().__init__()
        self.center = center
        self.zoom = zoom
        self.width_px = width_px
        self.height_px = height_px
        self.markers: Dict[str, StaticMarker] = {}

    def get_bounds(self) -> Bounds:
        return bounds_around(self.center, self.zoom, self.width_px, self.height_px)

    def set_view(self, center: Coordinate, zoom: int) -> None:
        self.fire("movestart", self)
        self.center = center
        self.zoom = zoom
        self.fire("moveend", self)

    def click(self) -> None:
        self.fire("click", self)

    def add_marker(self, place: Place) -> StaticMarker:
        marker = StaticMarker(place)
        self.markers[place.name] = marker
        return marker

    def remove_marker(self, name: str) -> None:
        marker = self.markers.pop(name, None)
        if marker is not None:
            marker.close_popup()

    def open_popups(self) -> List[str]:
        return [name for name, marker in self.markers.items() if marker.popup_open]

    def to_folium(self, highlighted: Iterable[str] = ()) -> folium.Map:
        highlighted = set(highlighted)
        m = folium.Map(location=list(self.center.as_pair()), zoom_start=self.zoom)

        for name, marker in self.markers.items():
            position = marker.place.position
            if not position.is_finite():
                continue
            popup = folium.Popup(name, show=marker.popup_open)
            color = "darkblue" if name in highlighted else "blue"
            folium.Marker(
                location=list(position.as_pair()),
                popup=popup,
                tooltip=marker.place.address,
                icon=folium.Icon(color=color),
            ).add_to(m)

        return m

    def save(self, output_path: str, highlighted: Iterable[str] = ()) -> None:
        self.to_folium(highlighted).save(output_path)
