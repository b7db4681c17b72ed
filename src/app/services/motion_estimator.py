from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from src.app.ports.output import IFixRepository, IVehicleRepository
from src.domain.algorithms.motion import (
    MotionParameters,
    derive_fix,
    validate_observation,
)
from src.domain.exceptions import FixNotFound, InvalidInput
from src.domain.models import LocationFix, RawObservation, Vehicle

logger = logging.getLogger(__name__)


def bind_device(vehicle: Vehicle, raw: RawObservation) -> RawObservation:
    """Attach the vehicle's assigned device handle to a raw fix.

    A handle in the payload must match the assignment; a bus without an
    assigned device cannot report one.
    """

    if raw.device_handle is None:
        return replace(raw, device_handle=vehicle.device_handle)
    if raw.device_handle != vehicle.device_handle:
        if vehicle.device_handle is None:
            raise InvalidInput(
                f"{vehicle.vehicle_id} has no device assigned, got handle {raw.device_handle}"
            )
        raise InvalidInput(
            f"Device handle {raw.device_handle} is not assigned to {vehicle.vehicle_id}"
        )
    return raw


@dataclass(slots=True)
class MotionEstimator:
    """Application service for the location-update pipeline.

    Resolve the bus, load previous fix, derive speed/heading/motion state,
    upsert, return. Concurrent fixes for the same vehicle resolve as last
    write wins.
    """

    vehicle_repository: IVehicleRepository
    fix_repository: IFixRepository
    parameters: MotionParameters = field(default_factory=MotionParameters)

    def submit_fix(self, raw: RawObservation) -> LocationFix:
        raw = validate_observation(raw)
        raw = bind_device(self.vehicle_repository.load_vehicle(raw.vehicle_id), raw)

        previous = self.fix_repository.load_current_fix(raw.vehicle_id)
        fix = derive_fix(previous, raw, self.parameters)
        self.fix_repository.upsert_fix(fix)

        logger.debug(
            "Fix for %s at %s: speed=%.3f heading=%s state=%s",
            fix.vehicle_id,
            fix.observed_at,
            fix.speed,
            fix.heading,
            fix.motion_state.value,
        )
        return fix

    def get_current_fix(self, vehicle_id: str) -> LocationFix:
        fix = self.fix_repository.load_current_fix(vehicle_id)
        if fix is None:
            raise FixNotFound(vehicle_id)
        return fix

    def list_current_fixes(self) -> tuple[LocationFix, ...]:
        fixes = list(self.fix_repository.list_current_fixes())
        fixes.sort(key=lambda f: f.vehicle_id)
        return tuple(fixes)
