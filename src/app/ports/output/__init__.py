from .fix_repository import IFixRepository
from .vehicle_repository import IVehicleRepository

__all__ = [
    "IFixRepository",
    "IVehicleRepository",
]
