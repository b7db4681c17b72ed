from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import LocationFix


class IFixRepository(ABC):
    """Persistence port for the current location fix of each vehicle."""

    @abstractmethod
    def load_current_fix(self, vehicle_id: str) -> LocationFix | None:
        raise NotImplementedError

    @abstractmethod
    def upsert_fix(self, fix: LocationFix) -> None:
        """Replace the vehicle's current fix (latest write wins)."""

    @abstractmethod
    def list_current_fixes(self) -> tuple[LocationFix, ...]:
        raise NotImplementedError
