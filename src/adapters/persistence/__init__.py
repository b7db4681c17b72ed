from .dynamodb_fix_repository import DynamoDbFixRepository
from .dynamodb_vehicle_repository import DynamoDbVehicleRepository
from .memory_repositories import InMemoryFixRepository, InMemoryVehicleRepository

__all__ = [
    "DynamoDbFixRepository",
    "DynamoDbVehicleRepository",
    "InMemoryFixRepository",
    "InMemoryVehicleRepository",
]
