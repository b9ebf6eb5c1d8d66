"""Great-circle distance between two coordinates."""

import math

from services.errors import InvalidCoordinates

EARTH_RADIUS_KM = 6371.0


def validate_point(point, label: str = "point") -> tuple[float, float]:
    """Return (lat, lng) or raise InvalidCoordinates. Missing values are never zeroed."""
    if point is None:
        raise InvalidCoordinates(f"{label} coordinates are missing")

    lat = getattr(point, "lat", None)
    lng = getattr(point, "lng", None)
    if lat is None or lng is None:
        raise InvalidCoordinates(f"{label} coordinates are missing")

    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        raise InvalidCoordinates(f"{label} coordinates are not numeric: {lat!r}, {lng!r}")

    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCoordinates(f"{label} coordinates are not finite")
    if not -90 <= lat <= 90:
        raise InvalidCoordinates(f"{label} latitude {lat} is outside [-90, 90]")
    if not -180 <= lng <= 180:
        raise InvalidCoordinates(f"{label} longitude {lng} is outside [-180, 180]")
    return lat, lng


def distance_km(a, b) -> float:
    """
    Straight-line distance in km using the Haversine formula.

    Unlike a routing estimate this applies no road factor: the same value is
    used for eligibility and for the distance fare.
    """
    lat1, lng1 = validate_point(a, "pickup")
    lat2, lng2 = validate_point(b, "dropoff")

    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c
