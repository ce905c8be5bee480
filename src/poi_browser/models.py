from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    @classmethod
    def from_pair(cls, pair: Tuple[float, float]) -> "Coordinate":
        lat, lon = pair
        return cls(float(lat), float(lon))

    def as_pair(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lon)


@dataclass(frozen=True)
class Place:
    name: str
    address: str
    position: Coordinate


@dataclass(frozen=True)
class Bounds:
    south_west: Coordinate
    north_east: Coordinate

    def contains(self, point: Coordinate) -> bool:
        # Edges count as inside.
        return (
            self.south_west.lat <= point.lat <= self.north_east.lat
            and self.south_west.lon <= point.lon <= self.north_east.lon
        )


@dataclass(frozen=True)
class AddressSuggestion:
    label: str
    position: Coordinate
