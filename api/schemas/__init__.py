"""Pydantic schemas for API request/response models."""

from __future__ import annotations
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from services.domain import (
    DimensionUnit, LocationType, OrderType, Priority, VehicleType,
)


class CamelModel(BaseModel):
    """Accepts and emits camelCase, still accepts snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Quote Request ──────────────────────────────────────────

class GeoPointIn(CamelModel):
    # Optional so a missing coordinate reaches the engine as InvalidCoordinates
    lat: float | None = None
    lng: float | None = None


class EndpointIn(CamelModel):
    point: GeoPointIn | None = None
    address: str = ""
    location_type: LocationType | None = None
    contact_name: str | None = None
    contact_phone: str | None = None


class RouteIn(CamelModel):
    pickup: EndpointIn
    dropoff: EndpointIn


class DimensionsIn(CamelModel):
    length: float
    width: float
    height: float
    unit: DimensionUnit = DimensionUnit.CM


class PackageIn(CamelModel):
    weight_kg: float | None = None
    weight_unit: Literal["kg", "g"] = "kg"
    dimensions: DimensionsIn | None = None
    category: str | None = None
    is_fragile: bool = False
    requires_special_handling: bool = False
    temperature_controlled: bool = False
    declared_value_ngn: float = Field(0.0, alias="declaredValueNGN")
    description: str | None = None


class InsuranceIn(CamelModel):
    is_insured: bool = False
    declared_value: float = 0.0


class DiscountIn(CamelModel):
    amount: float = 0.0
    code: str | None = None
    reason: str | None = None


class QuoteRequest(CamelModel):
    package: PackageIn
    route: RouteIn
    priority: Priority = Priority.NORMAL
    insurance: InsuranceIn = Field(default_factory=InsuranceIn)
    requested_vehicle_types: list[VehicleType] | None = None
    order_type: OrderType = OrderType.INSTANT
    discount: DiscountIn | None = None


class QuoteVerifyRequest(CamelModel):
    fingerprint: str
    order: QuoteRequest


# ── Quote Response ─────────────────────────────────────────

class VehicleOptionOut(CamelModel):
    type: VehicleType
    eligible: bool
    reasons_rejected: list[str] = []
    rank: int | None = None
    eta_minutes: int | None = None
    estimated_total: float | None = None


class DisplayBreakdown(CamelModel):
    delivery_service: int
    insurance: int
    vat: int
    discount: int
    total: int
    currency: str
    formatted: dict[str, str]


class SurchargeOut(CamelModel):
    label: str
    amount: float


class DiscountOut(CamelModel):
    amount: float
    code: str | None = None
    reason: str | None = None


class BackendBreakdown(CamelModel):
    base_fare: float
    distance_fare: float
    weight_fare: float
    priority_fare: float
    surcharges: list[SurchargeOut]
    insurance_fee: float
    vat: float
    discount: DiscountOut
    total_amount: float
    currency: str


class QuoteResponse(CamelModel):
    fingerprint: str
    selected_vehicle: VehicleType
    eligible_vehicles: list[VehicleOptionOut]
    distance_km: float
    pickup_location_type: LocationType
    dropoff_location_type: LocationType
    display: DisplayBreakdown
    backend: BackendBreakdown
    computed_at: datetime


class QuoteVerifyResponse(CamelModel):
    valid: bool
    fingerprint: str


# ── Catalog ────────────────────────────────────────────────

class VehicleProfileOut(CamelModel):
    type: VehicleType
    label: str
    max_weight_kg: float
    max_volume_l: float
    max_distance_km: float
    fragile_ok: bool | Literal["limited"]
    food_ok: bool
    special_handling_ok: bool
    speed_tier: int
    cost_tier: int
    stability: int

    model_config = ConfigDict(from_attributes=True)


class CategoryHintOut(CamelModel):
    prefer: list[VehicleType]
    avoid: list[VehicleType]


class CatalogResponse(CamelModel):
    version: str
    vehicles: list[VehicleProfileOut]
    category_hints: dict[str, CategoryHintOut]
