from __future__ import annotations

import math

from src.domain.models import Position

# WGS-84 equatorial radius, used for every distance in the service.
EARTH_RADIUS_M = 6378137.0


def haversine_distance_m(a: Position, b: Position) -> float:
    """Great-circle surface distance in meters (altitude ignored)."""

    lat1 = math.radians(a.latitude)
    lon1 = math.radians(a.longitude)
    lat2 = math.radians(b.latitude)
    lon2 = math.radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * math.atan2(math.sqrt(s), math.sqrt(1.0 - s))


def distance_3d_m(a: Position, b: Position) -> float:
    surface = haversine_distance_m(a, b)
    return math.hypot(surface, b.altitude - a.altitude)


def initial_bearing_deg(a: Position, b: Position) -> float:
    """Forward azimuth from `a` to `b` in degrees, 0 = north, in [0, 360)."""

    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlon = math.radians(b.longitude - a.longitude)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        dlon
    )
    return normalize_bearing_deg(math.degrees(math.atan2(y, x)))


def normalize_bearing_deg(value: float) -> float:
    out = value % 360.0
    # -1e-17 % 360.0 rounds to 360.0
    return 0.0 if out >= 360.0 else out


def low_pass(raw: float, previous: float | None, alpha: float) -> float:
    """Exponential smoothing; the first value passes through unchanged."""

    if previous is None:
        return raw
    # alpha * raw + (1 - alpha) * previous, exact when raw == previous
    return previous + alpha * (raw - previous)


def low_pass_bearing(raw: float, previous: float | None, alpha: float) -> float:
    """Exponential smoothing of a compass bearing along the shortest arc.

    Deliberately not the plain linear blend alpha * raw + (1 - alpha) * previous:
    that blend sends 350 and 10 towards 180. Here the difference is wrapped
    into [-180, 180) first, so the two forms agree whenever the arc between
    the bearings does not cross north.
    """

    if previous is None:
        return normalize_bearing_deg(raw)
    delta = (raw - previous + 180.0) % 360.0 - 180.0
    return normalize_bearing_deg(previous + alpha * delta)
