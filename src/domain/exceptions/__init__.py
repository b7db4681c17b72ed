from .tracking import (
    AlreadyAssigned,
    AssignmentNotFound,
    Conflict,
    FixNotFound,
    InvalidInput,
    NotFound,
    OwnerAlreadyAssigned,
    PoolExhausted,
    StaleObservation,
    StorageFailure,
    TrackingError,
    VehicleNotFound,
)

__all__ = [
    "TrackingError",
    "InvalidInput",
    "StaleObservation",
    "NotFound",
    "VehicleNotFound",
    "AssignmentNotFound",
    "FixNotFound",
    "AlreadyAssigned",
    "OwnerAlreadyAssigned",
    "PoolExhausted",
    "Conflict",
    "StorageFailure",
]
