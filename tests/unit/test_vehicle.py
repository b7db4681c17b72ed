import pytest
from src.domain.models import Vehicle


def test_unassigned_vehicle_defaults() -> None:
    v = Vehicle(vehicle_id="MH08AA1234")
    assert v.assigned is False
    assert v.device_handle is None
    assert v.owner_name is None


def test_assign_to_sets_every_field() -> None:
    v = Vehicle(vehicle_id="MH08AA1234").assign_to(device_handle=3, owner_name="alice")
    assert (v.assigned, v.device_handle, v.owner_name) == (True, 3, "alice")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"vehicle_id": ""},
        {"vehicle_id": "X", "assigned": True},
        {"vehicle_id": "X", "assigned": True, "device_handle": 1},
        {"vehicle_id": "X", "assigned": True, "device_handle": 0, "owner_name": "a"},
        {"vehicle_id": "X", "device_handle": 1},
        {"vehicle_id": "X", "owner_name": "a"},
    ],
)
def test_partially_assigned_vehicle_is_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        Vehicle(**kwargs)
