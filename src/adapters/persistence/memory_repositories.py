from __future__ import annotations

import threading
from dataclasses import dataclass, field

from src.app.ports.output import IFixRepository, IVehicleRepository
from src.domain.exceptions import (
    AlreadyAssigned,
    Conflict,
    OwnerAlreadyAssigned,
    VehicleNotFound,
)
from src.domain.models import LocationFix, Vehicle


@dataclass(slots=True)
class InMemoryVehicleRepository(IVehicleRepository):
    """Process-local vehicle store for development and tests.

    A single lock makes the conditional assignment write atomic, which only
    holds within one process.
    """

    _vehicles: dict[str, Vehicle] = field(default_factory=dict, init=False, repr=False)
    _handles: dict[int, str] = field(default_factory=dict, init=False, repr=False)
    _owners: dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def load_vehicle(self, vehicle_id: str) -> Vehicle:
        with self._lock:
            vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(vehicle_id)
        return vehicle

    def save_vehicle(self, vehicle: Vehicle) -> None:
        with self._lock:
            stored = self._vehicles.get(vehicle.vehicle_id)
            if stored is None:
                raise VehicleNotFound(vehicle.vehicle_id)
            if stored.assigned:
                raise AlreadyAssigned(vehicle.vehicle_id)
            self._claim(vehicle)
            self._vehicles[vehicle.vehicle_id] = vehicle

    def _claim(self, vehicle: Vehicle) -> None:
        # Caller holds the lock. Both checks run before either claim is taken.
        if vehicle.owner_name is not None:
            owned = self._owners.get(vehicle.owner_name)
            if owned is not None:
                raise OwnerAlreadyAssigned(vehicle.owner_name, owned)
        if vehicle.device_handle is not None:
            holder = self._handles.get(vehicle.device_handle)
            if holder is not None:
                raise Conflict(
                    f"Device handle {vehicle.device_handle} already held by {holder}"
                )
            self._handles[vehicle.device_handle] = vehicle.vehicle_id
        if vehicle.owner_name is not None:
            self._owners[vehicle.owner_name] = vehicle.vehicle_id

    def list_vehicles(self, *, assigned: bool | None = None) -> tuple[Vehicle, ...]:
        with self._lock:
            vehicles = tuple(self._vehicles.values())
        if assigned is None:
            return vehicles
        return tuple(v for v in vehicles if v.assigned is assigned)

    def find_by_owner(self, owner_name: str) -> Vehicle | None:
        with self._lock:
            vehicle_id = self._owners.get(owner_name)
            return self._vehicles.get(vehicle_id) if vehicle_id is not None else None

    def insert_if_absent(self, vehicle: Vehicle) -> bool:
        with self._lock:
            if vehicle.vehicle_id in self._vehicles:
                return False
            self._claim(vehicle)
            self._vehicles[vehicle.vehicle_id] = vehicle
            return True


@dataclass(slots=True)
class InMemoryFixRepository(IFixRepository):
    _fixes: dict[str, LocationFix] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def load_current_fix(self, vehicle_id: str) -> LocationFix | None:
        with self._lock:
            return self._fixes.get(vehicle_id)

    def upsert_fix(self, fix: LocationFix) -> None:
        with self._lock:
            self._fixes[fix.vehicle_id] = fix

    def list_current_fixes(self) -> tuple[LocationFix, ...]:
        with self._lock:
            return tuple(self._fixes.values())
