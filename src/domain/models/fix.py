from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geo import Position


class MotionState(str, Enum):
    MOVING = "moving"
    STOPPED = "stopped"


class OccupancyStatus(str, Enum):
    """Crowding level, mirroring GTFS-Realtime OccupancyStatus."""

    EMPTY = "empty"
    MANY_SEATS_AVAILABLE = "many_seats_available"
    FEW_SEATS_AVAILABLE = "few_seats_available"
    STANDING_ROOM_ONLY = "standing_room_only"
    CRUSHED_STANDING_ROOM_ONLY = "crushed_standing_room_only"
    FULL = "full"
    NOT_ACCEPTING_PASSENGERS = "not_accepting_passengers"


@dataclass(frozen=True, slots=True)
class HistorySample:
    position: Position
    observed_at: str


@dataclass(frozen=True, slots=True)
class RawObservation:
    """One GPS sample as reported by a device, before any derivation.

    `speed`, `heading` and `motion_state` are whatever the device claims; they
    are only used when derivation is skipped for an out-of-order sample.
    """

    vehicle_id: str
    latitude: float
    longitude: float
    observed_at: str
    altitude: float = 0.0
    accuracy: float = 5.0
    device_handle: int | None = None
    speed: float | None = None
    heading: float | None = None
    motion_state: MotionState | None = None
    trip_id: str = ""
    route_id: str = ""
    direction_id: str = ""
    occupancy_status: OccupancyStatus | None = None
    occupancy_percentage: int | None = None


@dataclass(frozen=True, slots=True)
class LocationFix:
    """Current, derived location of a vehicle.

    `heading` is None while no direction of travel could be derived; 0.0 means
    due north. `smoothed` is False until speed and heading hold a derived
    estimate, so the first derived values pass through the filter unchanged.
    """

    vehicle_id: str
    position: Position
    observed_at: str
    device_handle: int | None = None
    accuracy: float = 5.0
    speed: float = 0.0
    heading: float | None = None
    motion_state: MotionState = MotionState.STOPPED
    smoothed: bool = False
    trip_id: str = ""
    route_id: str = ""
    direction_id: str = ""
    occupancy_status: OccupancyStatus | None = None
    occupancy_percentage: int | None = None
    history: tuple[HistorySample, ...] = ()
