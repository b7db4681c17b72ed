import math

import pytest
from src.domain.models.geo import Position


def test_position_accepts_valid_coordinates() -> None:
    p = Position(latitude=19.0760, longitude=72.8777)
    assert p.latitude == 19.0760
    assert p.longitude == 72.8777
    assert p.altitude == 0.0


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (-90.0001, 0.0),
        (90.0001, 0.0),
        (0.0, -180.0001),
        (0.0, 180.0001),
        (math.nan, 0.0),
        (0.0, math.inf),
    ],
)
def test_position_rejects_out_of_range_coordinates(lat: float, lon: float) -> None:
    with pytest.raises(ValueError):
        Position(latitude=lat, longitude=lon)


def test_position_rejects_non_finite_altitude() -> None:
    with pytest.raises(ValueError):
        Position(latitude=0.0, longitude=0.0, altitude=math.nan)
