from __future__ import annotations

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_assignment_service
from src.adapters.api.schemas.buses import (
    AssignmentSchema,
    AssignRequestSchema,
    UnassignedVehiclesSchema,
)
from src.app.services.assignment_service import AssignmentService

router = APIRouter(tags=["buses"])


@router.get("/buses/unassigned", response_model=UnassignedVehiclesSchema)
def list_unassigned(
    service: AssignmentService = Depends(get_assignment_service),
) -> UnassignedVehiclesSchema:
    return UnassignedVehiclesSchema(vehicle_ids=sorted(service.list_unassigned()))


@router.post("/buses/{vehicle_id}/assign", response_model=AssignmentSchema)
def assign_vehicle(
    vehicle_id: str,
    req: AssignRequestSchema,
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentSchema:
    handle = service.assign(vehicle_id=vehicle_id, owner_name=req.owner_name)
    return AssignmentSchema(vehicle_id=vehicle_id, device_handle=handle)


@router.get("/assignments/{owner_name}", response_model=AssignmentSchema)
def lookup_assignment(
    owner_name: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentSchema:
    vehicle = service.lookup(owner_name=owner_name)
    return AssignmentSchema(
        vehicle_id=vehicle.vehicle_id, device_handle=vehicle.device_handle
    )
