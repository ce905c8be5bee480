from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from poi_browser.config import FOCUS_ZOOM
from poi_browser.models import Coordinate


@dataclass(frozen=True)
class SetView:
    center: Coordinate
    zoom: int


class ViewSynchronizer:
    def __init__(self, zoom: int = FOCUS_ZOOM) -> None:
        self.zoom = zoom
        self.pending: Optional[Coordinate] = None

    def focus(self, point: Coordinate | None) -> Optional[SetView]:
        self.pending = point
        if point is None:
            return None
        # Always issue the move; the widget ignores redundant ones.
        command = SetView(center=point, zoom=self.zoom)
        self.pending = None
        return command

    def clear(self) -> None:
        self.pending = None
