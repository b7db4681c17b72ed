from __future__ import annotations

import logging

import pytest

from src.adapters.persistence.memory_repositories import InMemoryVehicleRepository
from src.app.config import DEFAULT_SEED_VEHICLES
from src.app.services.bootstrap_service import seed_vehicles
from src.domain.exceptions import StorageFailure
from src.domain.models import Vehicle


def test_seed_inserts_reference_buses_once() -> None:
    repo = InMemoryVehicleRepository()

    assert seed_vehicles(repo, DEFAULT_SEED_VEHICLES) == 10
    assert seed_vehicles(repo, DEFAULT_SEED_VEHICLES) == 0

    ids = {v.vehicle_id for v in repo.list_vehicles()}
    assert ids == set(DEFAULT_SEED_VEHICLES)
    assert all(not v.assigned for v in repo.list_vehicles())


def test_seed_does_not_reset_assigned_bus() -> None:
    repo = InMemoryVehicleRepository()
    repo.insert_if_absent(
        Vehicle(
            vehicle_id="MH08AA1234", assigned=True, device_handle=7, owner_name="alice"
        )
    )

    assert seed_vehicles(repo, ["MH08AA1234", "MH08BB5678"]) == 1
    assert repo.load_vehicle("MH08AA1234").device_handle == 7


class _UnreachableRepository(InMemoryVehicleRepository):
    def insert_if_absent(self, vehicle: Vehicle) -> bool:
        raise StorageFailure("connection refused")


@pytest.mark.anyio
async def test_startup_survives_seeding_failure(monkeypatch, caplog) -> None:
    from src import main

    monkeypatch.setattr(main, "get_vehicle_repository", lambda: _UnreachableRepository())

    with caplog.at_level(logging.ERROR, logger="uvicorn.error"):
        async with main.lifespan(main.app):
            pass

    assert "Seeding bus numbers failed" in caplog.text
