"""
Quote fingerprint — a short digest of everything that moves the price.

Checkout recomputes it from the current order state and refuses to charge if
it differs from the one stamped on the quote. Fields that don't affect the
price (contact names, notes) are absent. Addresses enter only through the
place type they resolve to, since that can carry a location surcharge.
"""

from __future__ import annotations
import hashlib
import hmac
import json
from enum import Enum
from typing import Iterable

from services.domain import (
    Insurance, LocationType, OrderType, PackageSpec, Priority, RouteContext, VehicleType,
)
from services.errors import StaleQuote
from services.geo import validate_point
from services.packaging import dimensions_cm

FINGERPRINT_LENGTH = 16
COORD_DIGITS = 6


def _enum(value):
    return value.value if isinstance(value, Enum) else value


def _coord(point, label: str) -> list[float]:
    lat, lng = validate_point(point, label)
    return [round(lat, COORD_DIGITS), round(lng, COORD_DIGITS)]


def fingerprint_payload(
    package: PackageSpec,
    route: RouteContext,
    insurance: Insurance,
    priority: Priority | None = None,
    order_type: OrderType | None = None,
    requested: Iterable[VehicleType] | None = None,
    location_types: tuple[LocationType, LocationType] | None = None,
) -> dict:
    """Canonical, price-relevant view of a quote request."""
    cm = dimensions_cm(package.dimensions)
    insured = bool(insurance.is_insured)
    return {
        "pickup": _coord(route.pickup.point, "pickup"),
        "dropoff": _coord(route.dropoff.point, "dropoff"),
        "package": {
            "weight_kg": round(package.weight_kg, 3),
            "category": _enum(package.category),
            "dimensions_cm": [round(v, 2) for v in cm] if cm else None,
            "fragile": package.is_fragile,
            "special_handling": package.requires_special_handling,
            "temperature_controlled": package.temperature_controlled,
            "declared_value": round(package.declared_value_ngn, 2),
        },
        "insurance": {
            "insured": insured,
            # An uninsured declared value doesn't change the price
            "declared_value": round(insurance.declared_value or 0.0, 2) if insured else None,
        },
        "priority": _enum(priority),
        "order_type": _enum(order_type),
        "requested": sorted(_enum(v) for v in requested) if requested else None,
        "location_types": [_enum(t) for t in location_types] if location_types else None,
    }


def fingerprint(
    package: PackageSpec,
    route: RouteContext,
    insurance: Insurance,
    priority: Priority | None = None,
    order_type: OrderType | None = None,
    requested: Iterable[VehicleType] | None = None,
    location_types: tuple[LocationType, LocationType] | None = None,
) -> str:
    payload = fingerprint_payload(
        package, route, insurance, priority, order_type, requested, location_types,
    )
    s = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(s.encode()).hexdigest()[:FINGERPRINT_LENGTH]


def verify_fingerprint(expected: str, actual: str) -> None:
    """Raise StaleQuote unless both fingerprints match."""
    if not expected or not hmac.compare_digest(str(expected), str(actual)):
        raise StaleQuote(
            "Order details changed since the quote was issued; request a new quote",
            expected=expected,
            actual=actual,
        )
