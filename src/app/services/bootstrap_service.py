from __future__ import annotations

import logging
from typing import Iterable

from src.app.ports.output import IVehicleRepository
from src.domain.models import Vehicle

logger = logging.getLogger(__name__)


def seed_vehicles(repository: IVehicleRepository, vehicle_ids: Iterable[str]) -> int:
    """Insert the reference buses that are not stored yet.

    Safe to run from several processes at once: each insert is guarded by the
    repository's unique key, so a bus is never duplicated or reset.
    """

    inserted = 0
    for vehicle_id in vehicle_ids:
        if repository.insert_if_absent(Vehicle(vehicle_id=vehicle_id)):
            inserted += 1

    if inserted:
        logger.info("Seeded %s bus numbers", inserted)
    return inserted
