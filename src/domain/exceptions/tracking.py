from __future__ import annotations


class TrackingError(Exception):
    """Base exception for tracking failures."""

    code = "tracking_error"


class InvalidInput(TrackingError, ValueError):
    """Raised when a request is missing or carries malformed required fields."""

    code = "invalid_input"


class StaleObservation(InvalidInput):
    """Raised when an out-of-order fix is rejected."""

    code = "stale_observation"

    def __init__(self, vehicle_id: str, observed_at: str, previous_observed_at: str) -> None:
        self.vehicle_id = vehicle_id
        self.observed_at = observed_at
        self.previous_observed_at = previous_observed_at
        super().__init__(
            f"Fix for {vehicle_id} at {observed_at} is not newer than {previous_observed_at}"
        )


class NotFound(TrackingError):
    code = "not_found"


class VehicleNotFound(NotFound):
    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"Unknown vehicle: {vehicle_id}")


class AssignmentNotFound(NotFound):
    def __init__(self, owner_name: str) -> None:
        self.owner_name = owner_name
        super().__init__(f"No vehicle assigned to {owner_name}")


class FixNotFound(NotFound):
    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"No location recorded for {vehicle_id}")


class AlreadyAssigned(TrackingError):
    code = "already_assigned"

    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"Vehicle already assigned: {vehicle_id}")


class OwnerAlreadyAssigned(AlreadyAssigned):
    """Raised when the owner already holds another vehicle."""

    def __init__(self, owner_name: str, vehicle_id: str | None = None) -> None:
        self.owner_name = owner_name
        self.vehicle_id = vehicle_id
        held = f": {vehicle_id}" if vehicle_id else ""
        TrackingError.__init__(self, f"{owner_name} already holds a vehicle{held}")


class PoolExhausted(TrackingError):
    code = "pool_exhausted"

    def __init__(self, pool_size: int) -> None:
        self.pool_size = pool_size
        super().__init__(f"All {pool_size} device handles are in use")


class Conflict(TrackingError):
    """Raised when a concurrent writer claimed the same device handle first."""

    code = "conflict"


class StorageFailure(TrackingError):
    """Raised when the persistence layer is unreachable or rejects a write."""

    code = "storage_failure"
