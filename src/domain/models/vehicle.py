from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Vehicle:
    """Logical bus identity, independent of the tracker bolted into it.

    A vehicle is either fully assigned (flag, handle and owner all set) or
    fully unassigned.
    """

    vehicle_id: str
    assigned: bool = False
    device_handle: int | None = None
    owner_name: str | None = None

    def __post_init__(self) -> None:
        if not self.vehicle_id or not self.vehicle_id.strip():
            raise ValueError("vehicle_id must be a non-empty string")
        if self.assigned:
            if self.device_handle is None or not self.owner_name:
                raise ValueError(
                    f"Assigned vehicle {self.vehicle_id} needs a device handle and owner"
                )
            if self.device_handle < 1:
                raise ValueError(f"Invalid device handle: {self.device_handle}")
        elif self.device_handle is not None or self.owner_name is not None:
            raise ValueError(
                f"Unassigned vehicle {self.vehicle_id} cannot carry a handle or owner"
            )

    def assign_to(self, *, device_handle: int, owner_name: str) -> Vehicle:
        return replace(
            self, assigned=True, device_handle=device_handle, owner_name=owner_name
        )
