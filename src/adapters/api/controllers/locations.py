from __future__ import annotations

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_motion_estimator
from src.adapters.api.schemas.locations import (
    HistorySampleSchema,
    LocationFixSchema,
    LocationsResponseSchema,
    LocationSubmitSchema,
    LocationUpdatedSchema,
    PositionSchema,
)
from src.app.services.motion_estimator import MotionEstimator
from src.domain.models import (
    LocationFix,
    MotionState,
    OccupancyStatus,
    Position,
    RawObservation,
)

router = APIRouter(tags=["locations"])


def _position_to_schema(p: Position) -> PositionSchema:
    return PositionSchema(latitude=p.latitude, longitude=p.longitude, altitude=p.altitude)


def _fix_to_schema(fix: LocationFix) -> LocationFixSchema:
    return LocationFixSchema(
        vehicle_id=fix.vehicle_id,
        device_handle=fix.device_handle,
        position=_position_to_schema(fix.position),
        accuracy=fix.accuracy,
        speed=fix.speed,
        heading=fix.heading,
        motion_state=fix.motion_state.value,
        observed_at=fix.observed_at,
        trip_id=fix.trip_id,
        route_id=fix.route_id,
        direction_id=fix.direction_id,
        occupancy_status=(
            fix.occupancy_status.value if fix.occupancy_status is not None else None
        ),
        occupancy_percentage=fix.occupancy_percentage,
        history=[
            HistorySampleSchema(
                position=_position_to_schema(s.position), observed_at=s.observed_at
            )
            for s in fix.history
        ],
    )


def _to_observation(req: LocationSubmitSchema) -> RawObservation:
    return RawObservation(
        vehicle_id=req.vehicle_id,
        device_handle=req.device_handle,
        latitude=req.latitude,
        longitude=req.longitude,
        altitude=req.altitude if req.altitude is not None else 0.0,
        accuracy=req.accuracy if req.accuracy is not None else 5.0,
        speed=req.speed,
        heading=req.heading,
        motion_state=MotionState(req.motion_state) if req.motion_state else None,
        observed_at=req.observed_at,
        trip_id=req.trip_id or "",
        route_id=req.route_id or "",
        direction_id=req.direction_id or "",
        occupancy_status=(
            OccupancyStatus(req.occupancy_status) if req.occupancy_status else None
        ),
        occupancy_percentage=req.occupancy_percentage,
    )


@router.post("/locations", response_model=LocationUpdatedSchema)
def submit_location(
    req: LocationSubmitSchema,
    service: MotionEstimator = Depends(get_motion_estimator),
) -> LocationUpdatedSchema:
    fix = service.submit_fix(_to_observation(req))
    return LocationUpdatedSchema(message="Location updated", location=_fix_to_schema(fix))


@router.get("/locations", response_model=LocationsResponseSchema)
def list_locations(
    service: MotionEstimator = Depends(get_motion_estimator),
) -> LocationsResponseSchema:
    return LocationsResponseSchema(
        locations=[_fix_to_schema(f) for f in service.list_current_fixes()]
    )


@router.get("/locations/{vehicle_id}", response_model=LocationFixSchema)
def get_location(
    vehicle_id: str,
    service: MotionEstimator = Depends(get_motion_estimator),
) -> LocationFixSchema:
    return _fix_to_schema(service.get_current_fix(vehicle_id))
