from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.persistence import (
    DynamoDbFixRepository,
    DynamoDbVehicleRepository,
    InMemoryFixRepository,
    InMemoryVehicleRepository,
)
from src.app.config import TrackingConfig
from src.app.ports.output import IFixRepository, IVehicleRepository
from src.app.services.assignment_service import AssignmentService
from src.app.services.motion_estimator import MotionEstimator


@lru_cache(maxsize=1)
def get_config() -> TrackingConfig:
    return TrackingConfig.from_env()


# Repositories are process-wide so the in-memory backend keeps its state
# between requests. Set DDB_VEHICLES_TABLE to store everything in DynamoDB.
@lru_cache(maxsize=1)
def get_vehicle_repository() -> IVehicleRepository:
    if os.getenv("DDB_VEHICLES_TABLE"):
        return DynamoDbVehicleRepository()
    return InMemoryVehicleRepository()


@lru_cache(maxsize=1)
def get_fix_repository() -> IFixRepository:
    if os.getenv("DDB_VEHICLES_TABLE"):
        return DynamoDbFixRepository()
    return InMemoryFixRepository()


def get_assignment_service() -> AssignmentService:
    return AssignmentService(
        vehicle_repository=get_vehicle_repository(),
        pool_size=get_config().pool_size,
    )


def get_motion_estimator() -> MotionEstimator:
    return MotionEstimator(
        vehicle_repository=get_vehicle_repository(),
        fix_repository=get_fix_repository(),
        parameters=get_config().motion_parameters(),
    )
