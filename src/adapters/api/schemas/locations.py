from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

MotionStateLiteral = Literal["moving", "stopped"]
OccupancyLiteral = Literal[
    "empty",
    "many_seats_available",
    "few_seats_available",
    "standing_room_only",
    "crushed_standing_room_only",
    "full",
    "not_accepting_passengers",
]


class PositionSchema(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    altitude: float = 0.0


class HistorySampleSchema(BaseModel):
    position: PositionSchema
    observed_at: str


class LocationSubmitSchema(BaseModel):
    """Incoming fix. Legacy device field names (busNumber, deviceId, status,
    timestamp) are accepted alongside the canonical ones."""

    vehicle_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("vehicle_id", "busNumber")
    )
    device_handle: int | None = Field(
        default=None, ge=1, validation_alias=AliasChoices("device_handle", "deviceId")
    )
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    altitude: float | None = None
    accuracy: float | None = Field(default=None, ge=0.0)
    speed: float | None = Field(default=None, ge=0.0)
    heading: float | None = Field(default=None, ge=0.0, le=360.0)
    motion_state: MotionStateLiteral | None = Field(
        default=None, validation_alias=AliasChoices("motion_state", "status")
    )
    observed_at: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("observed_at", "timestamp")
    )
    trip_id: str | None = None
    route_id: str | None = None
    direction_id: str | None = None
    occupancy_status: OccupancyLiteral | None = None
    occupancy_percentage: int | None = Field(default=None, ge=0, le=100)


class LocationFixSchema(BaseModel):
    vehicle_id: str
    device_handle: int | None = None
    position: PositionSchema
    accuracy: float
    speed: float
    heading: float | None = None
    motion_state: MotionStateLiteral
    observed_at: str
    trip_id: str = ""
    route_id: str = ""
    direction_id: str = ""
    occupancy_status: OccupancyLiteral | None = None
    occupancy_percentage: int | None = None
    history: list[HistorySampleSchema] = []


class LocationUpdatedSchema(BaseModel):
    message: str
    location: LocationFixSchema


class LocationsResponseSchema(BaseModel):
    locations: list[LocationFixSchema]
