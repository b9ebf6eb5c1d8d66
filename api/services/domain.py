"""
Domain types for the quoting engine.

Everything here is built fresh for one quote request and thrown away after the
response is sent. Dataclasses are frozen so a finished Quote cannot drift
between the moment it is shown and the moment checkout consumes it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import cached_property

from services.geo import distance_km as _distance_km


# ── Enums ──────────────────────────────────────────────────

class Category(str, Enum):
    DOCUMENT = "document"
    PARCEL = "parcel"
    FOOD = "food"
    CLOTHING = "clothing"
    FURNITURE = "furniture"
    ELECTRONICS = "electronics"
    JEWELRY = "jewelry"
    GIFTS = "gifts"
    BOOKS = "books"
    FRAGILE = "fragile"
    MEDICINE = "medicine"
    OTHERS = "others"

    @classmethod
    def parse(cls, value) -> "Category":
        """Unknown or missing categories are treated as a plain parcel."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.PARCEL


class LocationType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    OFFICE = "office"
    MALL = "mall"
    HOSPITAL = "hospital"
    SCHOOL = "school"
    OTHER = "other"


class VehicleType(str, Enum):
    BICYCLE = "bicycle"
    MOTORCYCLE = "motorcycle"
    TRICYCLE = "tricycle"
    CAR = "car"
    VAN = "van"
    TRUCK = "truck"


class Priority(str, Enum):
    NORMAL = "normal"
    URGENT = "urgent"
    INSTANT = "instant"


class OrderType(str, Enum):
    INSTANT = "instant"
    SCHEDULED = "scheduled"
    RECURRING = "recurring"


class DimensionUnit(str, Enum):
    CM = "cm"
    INCH = "inch"


# ── Package ────────────────────────────────────────────────

@dataclass(frozen=True)
class Dimensions:
    length: float
    width: float
    height: float
    unit: DimensionUnit = DimensionUnit.CM


@dataclass(frozen=True)
class PackageSpec:
    weight_kg: float
    category: Category = Category.PARCEL
    dimensions: Dimensions | None = None
    is_fragile: bool = False
    requires_special_handling: bool = False
    temperature_controlled: bool = False
    declared_value_ngn: float = 0.0


# ── Route ──────────────────────────────────────────────────

@dataclass(frozen=True)
class GeoPoint:
    lat: float | None
    lng: float | None


@dataclass(frozen=True)
class Endpoint:
    point: GeoPoint | None
    address: str = ""
    location_type: LocationType | None = None  # None → inferred from address


@dataclass(frozen=True)
class RouteContext:
    pickup: Endpoint
    dropoff: Endpoint

    @cached_property
    def distance_km(self) -> float:
        """Great-circle distance, computed once so matching and pricing agree."""
        return _distance_km(
            self.pickup.point if self.pickup else None,
            self.dropoff.point if self.dropoff else None,
        )


# ── Order ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Insurance:
    is_insured: bool = False
    declared_value: float = 0.0


@dataclass(frozen=True)
class Discount:
    amount: float = 0.0
    code: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class OrderContext:
    package: PackageSpec
    route: RouteContext
    priority: Priority = Priority.NORMAL
    insurance: Insurance = field(default_factory=Insurance)
    requested_vehicle_types: tuple[VehicleType, ...] | None = None
    order_type: OrderType = OrderType.INSTANT
    discount: Discount | None = None


# ── Results ────────────────────────────────────────────────

@dataclass(frozen=True)
class VehicleOption:
    type: VehicleType
    eligible: bool
    reasons_rejected: tuple[str, ...] = ()
    rank: int | None = None           # 1-based among eligible options
    eta_minutes: int | None = None
    estimated_total: float | None = None  # this vehicle alone, same order


@dataclass(frozen=True)
class Surcharge:
    label: str
    amount: float


@dataclass(frozen=True)
class PriceBreakdown:
    base_fare: float
    distance_fare: float
    weight_fare: float
    priority_fare: float
    surcharges: tuple[Surcharge, ...]
    insurance_fee: float
    vat: float
    discount: float
    total_amount: float
    currency: str

    @property
    def subtotal(self) -> float:
        return (
            self.base_fare
            + self.distance_fare
            + self.weight_fare
            + self.priority_fare
            + sum(s.amount for s in self.surcharges)
        )

    def component_sum(self) -> float:
        """Unrounded total; total_amount is this value floored at 0 and rounded."""
        return self.subtotal + self.insurance_fee + self.vat - self.discount


@dataclass(frozen=True)
class Quote:
    breakdown: PriceBreakdown
    selected_vehicle: VehicleType
    eligible_vehicles: tuple[VehicleOption, ...]
    fingerprint: str
    computed_at: datetime
    distance_km: float
    pickup_location_type: LocationType
    dropoff_location_type: LocationType
    discount_code: str | None = None
    discount_reason: str | None = None
