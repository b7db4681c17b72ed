from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from src.app.ports.output import IVehicleRepository
from src.domain.exceptions import (
    AlreadyAssigned,
    AssignmentNotFound,
    Conflict,
    InvalidInput,
    OwnerAlreadyAssigned,
    PoolExhausted,
)
from src.domain.models import Vehicle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssignmentService:
    """Binds tracking devices to buses.

    Device handles come from the bounded pool [1, pool_size]. Uniqueness is
    enforced by the repository's conditional write; this service only picks
    a free handle at random and re-samples when a concurrent writer wins.
    Each owner holds at most one bus. Handles are never released.
    """

    vehicle_repository: IVehicleRepository
    pool_size: int = 100
    rng: random.Random = field(default_factory=random.SystemRandom)

    def list_unassigned(self) -> frozenset[str]:
        return frozenset(
            v.vehicle_id for v in self.vehicle_repository.list_vehicles(assigned=False)
        )

    def free_handles(self) -> list[int]:
        used = {
            v.device_handle
            for v in self.vehicle_repository.list_vehicles(assigned=True)
        }
        return [h for h in range(1, self.pool_size + 1) if h not in used]

    def assign(self, *, vehicle_id: str, owner_name: str) -> int:
        owner = (owner_name or "").strip()
        if not owner:
            raise InvalidInput("owner_name is required")

        vehicle = self.vehicle_repository.load_vehicle(vehicle_id)
        if vehicle.assigned:
            raise AlreadyAssigned(vehicle_id)
        held = self.vehicle_repository.find_by_owner(owner)
        if held is not None:
            raise OwnerAlreadyAssigned(owner, held.vehicle_id)

        # Every lost race means another vehicle took a handle, so the pool
        # shrinks by one each time; pool_size + 1 attempts always suffice.
        for attempt in range(1, self.pool_size + 2):
            free = self.free_handles()
            if not free:
                raise PoolExhausted(self.pool_size)

            handle = self.rng.choice(free)
            try:
                self.vehicle_repository.save_vehicle(
                    vehicle.assign_to(device_handle=handle, owner_name=owner)
                )
            except Conflict:
                logger.info(
                    "Device handle %s taken concurrently, resampling (attempt %s)",
                    handle,
                    attempt,
                )
                continue

            logger.info("Assigned device handle %s to %s (%s)", handle, vehicle_id, owner)
            return handle

        raise Conflict(f"Could not claim a device handle for {vehicle_id}")

    def lookup(self, *, owner_name: str) -> Vehicle:
        vehicle = self.vehicle_repository.find_by_owner(owner_name)
        if vehicle is None:
            raise AssignmentNotFound(owner_name)
        return vehicle
