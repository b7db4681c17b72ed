from .fix import (
    HistorySample,
    LocationFix,
    MotionState,
    OccupancyStatus,
    RawObservation,
)
from .geo import Position
from .vehicle import Vehicle

__all__ = [
    "HistorySample",
    "LocationFix",
    "MotionState",
    "OccupancyStatus",
    "Position",
    "RawObservation",
    "Vehicle",
]
