from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from src.domain.algorithms.geo_utils import (
    distance_3d_m,
    haversine_distance_m,
    initial_bearing_deg,
    low_pass,
    low_pass_bearing,
    normalize_bearing_deg,
)
from src.domain.exceptions import InvalidInput, StaleObservation
from src.domain.models import (
    HistorySample,
    LocationFix,
    MotionState,
    OccupancyStatus,
    Position,
    RawObservation,
)


class SpeedPolicy(str, Enum):
    """How speed is estimated from successive fixes. One policy per deployment."""

    LOW_PASS = "low_pass"
    WINDOWED = "windowed"


class OutOfOrderPolicy(str, Enum):
    STORE = "store"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class MotionParameters:
    alpha: float = 0.3
    speed_threshold_mps: float = 1.0
    history_size: int = 3
    speed_policy: SpeedPolicy = SpeedPolicy.LOW_PASS
    out_of_order: OutOfOrderPolicy = OutOfOrderPolicy.STORE

    def __post_init__(self) -> None:
        if not (0.0 < self.alpha <= 1.0):
            raise ValueError(f"Smoothing alpha must be in (0, 1]: {self.alpha}")
        if self.speed_threshold_mps < 0.0:
            raise ValueError(
                f"Speed threshold must be non-negative: {self.speed_threshold_mps}"
            )
        if self.history_size < 1:
            raise ValueError(f"History size must be at least 1: {self.history_size}")


def parse_observed_at(value: str) -> datetime:
    """Parse a caller-supplied ISO-8601 timestamp into an aware datetime.

    Naive timestamps are read as UTC.
    """

    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("observed_at must be a non-empty timestamp string")

    text = value.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInput(f"Unparseable observed_at: {value!r}") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def classify_motion(speed_mps: float, threshold_mps: float) -> MotionState:
    return MotionState.MOVING if speed_mps > threshold_mps else MotionState.STOPPED


def append_history(
    history: tuple[HistorySample, ...], sample: HistorySample, size: int
) -> tuple[HistorySample, ...]:
    return (*history, sample)[-size:]


def _finite(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{name} must be a number")
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite")
    return float(value)


def validate_observation(raw: RawObservation) -> RawObservation:
    """Check every field of a raw fix and return a normalized copy.

    Runs before any storage access so that a malformed fix never causes a
    partial write.
    """

    if not isinstance(raw.vehicle_id, str) or not raw.vehicle_id.strip():
        raise InvalidInput("vehicle_id is required")

    latitude = _finite("latitude", raw.latitude)
    longitude = _finite("longitude", raw.longitude)
    altitude = _finite("altitude", raw.altitude)
    accuracy = _finite("accuracy", raw.accuracy)
    if accuracy < 0.0:
        raise InvalidInput(f"accuracy must be non-negative: {accuracy}")

    try:
        Position(latitude=latitude, longitude=longitude, altitude=altitude)
    except ValueError as exc:
        raise InvalidInput(str(exc)) from exc

    parse_observed_at(raw.observed_at)

    device_handle = raw.device_handle
    if device_handle is not None:
        if isinstance(device_handle, bool) or not isinstance(device_handle, int):
            raise InvalidInput("device_handle must be an integer")
        if device_handle < 1:
            raise InvalidInput(f"Invalid device handle: {device_handle}")

    speed = raw.speed
    if speed is not None:
        speed = _finite("speed", speed)
        if speed < 0.0:
            raise InvalidInput(f"speed must be non-negative: {speed}")

    heading = raw.heading
    if heading is not None:
        heading = _finite("heading", heading)
        if not (0.0 <= heading <= 360.0):
            raise InvalidInput(f"heading must be within [0, 360]: {heading}")
        heading = normalize_bearing_deg(heading)

    percentage = raw.occupancy_percentage
    if percentage is not None:
        if isinstance(percentage, bool) or not isinstance(percentage, int):
            raise InvalidInput("occupancy_percentage must be an integer")
        if not (0 <= percentage <= 100):
            raise InvalidInput(f"occupancy_percentage out of range: {percentage}")

    try:
        motion_state = (
            MotionState(raw.motion_state) if raw.motion_state is not None else None
        )
        occupancy_status = (
            OccupancyStatus(raw.occupancy_status)
            if raw.occupancy_status is not None
            else None
        )
    except ValueError as exc:
        raise InvalidInput(str(exc)) from exc

    return replace(
        raw,
        vehicle_id=raw.vehicle_id.strip(),
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
        accuracy=accuracy,
        speed=speed,
        heading=heading,
        motion_state=motion_state,
        occupancy_status=occupancy_status,
    )


def derive_fix(
    previous: LocationFix | None,
    raw: RawObservation,
    parameters: MotionParameters,
) -> LocationFix:
    """Turn a validated raw fix into the vehicle's next current fix."""

    position = Position(
        latitude=raw.latitude, longitude=raw.longitude, altitude=raw.altitude
    )
    observed = parse_observed_at(raw.observed_at)
    history = append_history(
        previous.history if previous is not None else (),
        HistorySample(position=position, observed_at=raw.observed_at),
        parameters.history_size,
    )

    fix = LocationFix(
        vehicle_id=raw.vehicle_id,
        position=position,
        observed_at=raw.observed_at,
        device_handle=(
            raw.device_handle
            if raw.device_handle is not None or previous is None
            else previous.device_handle
        ),
        accuracy=raw.accuracy,
        trip_id=raw.trip_id,
        route_id=raw.route_id,
        direction_id=raw.direction_id,
        occupancy_status=raw.occupancy_status,
        occupancy_percentage=raw.occupancy_percentage,
        history=history,
    )

    if previous is None:
        return fix

    dt = (observed - parse_observed_at(previous.observed_at)).total_seconds()

    if dt <= 0.0:
        if parameters.out_of_order is OutOfOrderPolicy.REJECT:
            raise StaleObservation(
                raw.vehicle_id, raw.observed_at, previous.observed_at
            )
        return replace(
            fix,
            speed=raw.speed if raw.speed is not None else previous.speed,
            heading=raw.heading if raw.heading is not None else previous.heading,
            motion_state=raw.motion_state or previous.motion_state,
            smoothed=previous.smoothed,
        )

    if parameters.speed_policy is SpeedPolicy.WINDOWED:
        speed, heading = _windowed_estimate(previous, history)
    else:
        speed, heading = _low_pass_estimate(
            previous, position, dt, parameters.alpha
        )

    return replace(
        fix,
        speed=speed,
        heading=heading,
        motion_state=classify_motion(speed, parameters.speed_threshold_mps),
        smoothed=True,
    )


def _low_pass_estimate(
    previous: LocationFix, position: Position, dt: float, alpha: float
) -> tuple[float, float | None]:
    surface_m = haversine_distance_m(previous.position, position)
    raw_speed = distance_3d_m(previous.position, position) / dt

    prev_speed = previous.speed if previous.smoothed else None
    prev_heading = previous.heading if previous.smoothed else None

    speed = low_pass(raw_speed, prev_speed, alpha)
    if surface_m > 0.0:
        heading = low_pass_bearing(
            initial_bearing_deg(previous.position, position), prev_heading, alpha
        )
    else:
        # No horizontal displacement, no direction of travel.
        heading = previous.heading
    return speed, heading


def _windowed_estimate(
    previous: LocationFix, history: tuple[HistorySample, ...]
) -> tuple[float, float | None]:
    if len(history) < 2:
        return 0.0, previous.heading

    oldest = history[0]
    newest = history[-1]
    elapsed = (
        parse_observed_at(newest.observed_at) - parse_observed_at(oldest.observed_at)
    ).total_seconds()
    surface_m = haversine_distance_m(oldest.position, newest.position)

    speed = surface_m / elapsed if elapsed > 0.0 else 0.0
    if surface_m > 0.0:
        heading = initial_bearing_deg(oldest.position, newest.position)
    else:
        heading = previous.heading
    return speed, heading
