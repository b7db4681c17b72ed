from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class UnassignedVehiclesSchema(BaseModel):
    vehicle_ids: list[str]


class AssignRequestSchema(BaseModel):
    owner_name: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("owner_name", "username")
    )


class AssignmentSchema(BaseModel):
    vehicle_id: str
    device_handle: int
