from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """A WGS-84 coordinate with altitude in meters above the reference sphere."""

    latitude: float
    longitude: float
    altitude: float = 0.0

    def __post_init__(self) -> None:
        for name in ("latitude", "longitude", "altitude"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"Non-finite {name}: {getattr(self, name)}")
        if not (-90.0 <= self.latitude <= 90.0):
            raise ValueError(f"Invalid latitude: {self.latitude}")
        if not (-180.0 <= self.longitude <= 180.0):
            raise ValueError(f"Invalid longitude: {self.longitude}")
