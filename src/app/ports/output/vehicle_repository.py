from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Vehicle


class IVehicleRepository(ABC):
    """Persistence port for vehicle identities and their device assignments."""

    @abstractmethod
    def load_vehicle(self, vehicle_id: str) -> Vehicle:
        """Return the vehicle or raise VehicleNotFound."""

    @abstractmethod
    def save_vehicle(self, vehicle: Vehicle) -> None:
        """Conditionally persist a vehicle.

        The write succeeds only while the stored vehicle is still unassigned.
        Raises AlreadyAssigned when it is not, OwnerAlreadyAssigned when the
        owner already holds another vehicle, Conflict when another assigned
        vehicle already holds the same device handle, and VehicleNotFound for
        an unknown vehicle.
        """

    @abstractmethod
    def list_vehicles(self, *, assigned: bool | None = None) -> tuple[Vehicle, ...]:
        raise NotImplementedError

    @abstractmethod
    def find_by_owner(self, owner_name: str) -> Vehicle | None:
        """Return the single vehicle held by owner_name, if any."""

    @abstractmethod
    def insert_if_absent(self, vehicle: Vehicle) -> bool:
        """Insert a vehicle unless its id exists; return whether it was inserted."""
