from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.domain.algorithms.motion import (
    MotionParameters,
    OutOfOrderPolicy,
    SpeedPolicy,
    append_history,
    classify_motion,
    derive_fix,
    parse_observed_at,
    validate_observation,
)
from src.domain.exceptions import InvalidInput, StaleObservation
from src.domain.models import (
    HistorySample,
    MotionState,
    OccupancyStatus,
    Position,
    RawObservation,
)

BUS = "MH08AA1234"


def _raw(lat: float, observed_at: str, **kwargs) -> RawObservation:
    return RawObservation(
        vehicle_id=BUS,
        latitude=lat,
        longitude=72.8,
        observed_at=observed_at,
        **kwargs,
    )


def test_parse_observed_at_accepts_zulu_and_naive_as_utc() -> None:
    zulu = parse_observed_at("2024-05-01T10:00:00Z")
    naive = parse_observed_at("2024-05-01T10:00:00")
    offset = parse_observed_at("2024-05-01T15:30:00+05:30")

    expected = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert zulu == expected
    assert naive == expected
    assert offset == expected


@pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-45T00:00:00"])
def test_parse_observed_at_rejects_garbage(value: str) -> None:
    with pytest.raises(InvalidInput):
        parse_observed_at(value)


def test_classify_motion_is_strict_at_threshold() -> None:
    assert classify_motion(1.0, 1.0) is MotionState.STOPPED
    assert classify_motion(1.0000001, 1.0) is MotionState.MOVING
    assert classify_motion(0.0, 1.0) is MotionState.STOPPED


def test_append_history_keeps_most_recent_samples_oldest_first() -> None:
    samples = [
        HistorySample(
            position=Position(latitude=float(i), longitude=0.0),
            observed_at=f"2024-05-01T10:00:0{i}Z",
        )
        for i in range(5)
    ]
    history: tuple[HistorySample, ...] = ()
    for s in samples:
        history = append_history(history, s, 3)

    assert history == tuple(samples[2:])


@pytest.mark.parametrize(
    "overrides",
    [
        {"vehicle_id": "  "},
        {"latitude": 91.0},
        {"longitude": float("nan")},
        {"accuracy": -1.0},
        {"observed_at": "not-a-time"},
        {"device_handle": 0},
        {"speed": -3.0},
        {"heading": 400.0},
        {"occupancy_percentage": 101},
        {"motion_state": "flying"},
    ],
)
def test_validate_observation_rejects_bad_fields(overrides: dict) -> None:
    fields = {
        "vehicle_id": BUS,
        "latitude": 19.0,
        "longitude": 72.8,
        "observed_at": "2024-05-01T10:00:00Z",
    }
    fields.update(overrides)
    with pytest.raises(InvalidInput):
        validate_observation(RawObservation(**fields))


def test_validate_observation_normalizes_values() -> None:
    raw = RawObservation(
        vehicle_id=f" {BUS} ",
        latitude=19,
        longitude=72,
        observed_at="2024-05-01T10:00:00Z",
        heading=360.0,
        motion_state="moving",  # type: ignore[arg-type]
        occupancy_status="full",  # type: ignore[arg-type]
    )
    out = validate_observation(raw)

    assert out.vehicle_id == BUS
    assert isinstance(out.latitude, float)
    assert out.heading == 0.0
    assert out.motion_state is MotionState.MOVING
    assert out.occupancy_status is OccupancyStatus.FULL


def test_first_fix_has_no_motion() -> None:
    fix = derive_fix(None, _raw(19.0, "2024-05-01T10:00:00Z"), MotionParameters())

    assert fix.speed == 0.0
    assert fix.heading is None
    assert fix.motion_state is MotionState.STOPPED
    assert fix.smoothed is False
    assert len(fix.history) == 1
    assert fix.accuracy == 5.0
    assert fix.position.altitude == 0.0


def test_low_pass_scenario_north_bound_bus() -> None:
    params = MotionParameters()
    first = derive_fix(None, _raw(19.0000, "2024-05-01T10:00:00Z"), params)
    second = derive_fix(first, _raw(19.0009, "2024-05-01T10:01:40Z"), params)

    # 0.0009 degrees on the 6378137 m sphere is ~100.19 m, in 100 s.
    assert second.speed == pytest.approx(1.0, abs=0.01)
    # ~1.0019 m/s is strictly above the 1 m/s threshold.
    assert second.motion_state is MotionState.MOVING
    assert second.heading == pytest.approx(0.0, abs=1e-9)
    assert second.heading is not None
    assert second.smoothed is True

    third = derive_fix(second, _raw(19.0027, "2024-05-01T10:03:20Z"), params)

    # raw ~2.0 m/s blended with ~1.0: 0.3 * 2.0 + 0.7 * 1.0
    assert third.speed == pytest.approx(1.3, abs=0.01)
    assert third.speed == pytest.approx(0.3 * 2.00375 + 0.7 * 1.001875, rel=1e-4)
    assert third.motion_state is MotionState.MOVING
    assert [s.observed_at for s in third.history] == [
        "2024-05-01T10:00:00Z",
        "2024-05-01T10:01:40Z",
        "2024-05-01T10:03:20Z",
    ]


def test_exact_threshold_speed_stays_stopped() -> None:
    params = MotionParameters()
    first = derive_fix(None, _raw(19.0, "2024-05-01T10:00:00Z"), params)
    # Pure climb of 100 m in 100 s: exactly 1.0 m/s, no horizontal movement.
    second = derive_fix(
        first, _raw(19.0, "2024-05-01T10:01:40Z", altitude=100.0), params
    )

    assert second.speed == 1.0
    assert second.motion_state is MotionState.STOPPED
    assert second.heading is None


def test_out_of_order_fix_skips_derivation() -> None:
    params = MotionParameters()
    first = derive_fix(None, _raw(19.0, "2024-05-01T10:00:00Z"), params)
    second = derive_fix(first, _raw(19.0027, "2024-05-01T10:01:40Z"), params)

    late = derive_fix(second, _raw(18.99, "2024-05-01T10:00:30Z"), params)

    assert late.speed == second.speed
    assert late.heading == second.heading
    assert late.motion_state is second.motion_state
    assert late.position.latitude == 18.99
    assert late.observed_at == "2024-05-01T10:00:30Z"


def test_out_of_order_fix_passes_device_values_through() -> None:
    params = MotionParameters()
    first = derive_fix(None, _raw(19.0, "2024-05-01T10:00:00Z"), params)

    dup = derive_fix(
        first,
        _raw(
            19.001,
            "2024-05-01T10:00:00Z",
            speed=7.5,
            heading=45.0,
            motion_state=MotionState.MOVING,
        ),
        params,
    )

    assert dup.speed == 7.5
    assert dup.heading == 45.0
    assert dup.motion_state is MotionState.MOVING


def test_out_of_order_fix_rejected_by_policy() -> None:
    params = MotionParameters(out_of_order=OutOfOrderPolicy.REJECT)
    first = derive_fix(None, _raw(19.0, "2024-05-01T10:00:00Z"), params)

    with pytest.raises(StaleObservation):
        derive_fix(first, _raw(19.1, "2024-05-01T09:59:59Z"), params)


def test_windowed_policy_uses_oldest_and_newest_sample() -> None:
    params = MotionParameters(speed_policy=SpeedPolicy.WINDOWED)
    fix = derive_fix(None, _raw(19.0000, "2024-05-01T10:00:00Z"), params)
    fix = derive_fix(fix, _raw(19.0009, "2024-05-01T10:01:40Z"), params)
    fix = derive_fix(fix, _raw(19.0027, "2024-05-01T10:03:20Z"), params)

    # 300.56 m over 200 s, no smoothing applied.
    assert fix.speed == pytest.approx(1.5028, abs=1e-3)
    assert fix.motion_state is MotionState.MOVING

    fix = derive_fix(fix, _raw(19.0027, "2024-05-01T10:05:00Z"), params)
    # Window is now 19.0009 @ 10:01:40 .. 19.0027 @ 10:05:00
    assert fix.speed == pytest.approx(200.375 / 200.0, abs=1e-3)
    assert fix.history[0].position.latitude == 19.0009


def test_metadata_passes_through_and_device_handle_is_kept() -> None:
    params = MotionParameters()
    first = derive_fix(
        None,
        _raw(
            19.0,
            "2024-05-01T10:00:00Z",
            device_handle=42,
            trip_id="T1",
            route_id="R9",
            direction_id="0",
            occupancy_status=OccupancyStatus.FEW_SEATS_AVAILABLE,
            occupancy_percentage=60,
        ),
        params,
    )
    second = derive_fix(first, _raw(19.0009, "2024-05-01T10:01:40Z"), params)

    assert first.trip_id == "T1"
    assert first.route_id == "R9"
    assert first.occupancy_status is OccupancyStatus.FEW_SEATS_AVAILABLE
    assert first.occupancy_percentage == 60
    assert second.device_handle == 42
    assert second.trip_id == ""


def test_motion_parameters_reject_bad_values() -> None:
    with pytest.raises(ValueError):
        MotionParameters(alpha=0.0)
    with pytest.raises(ValueError):
        MotionParameters(history_size=0)
    with pytest.raises(ValueError):
        MotionParameters(speed_threshold_mps=-1.0)
