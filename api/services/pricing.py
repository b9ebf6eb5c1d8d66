"""
Fare Calculator — multiplicative fare model for delivery quotes.

    subtotal = (base_fare + distance_km × rate_per_km)
               × vehicle_multiplier
               × package_multiplier      (product of independent factors)
               × location_multiplier     (none configured by default)
               × urgency_multiplier      (max of order-type and priority factors)
    insurance = declared_value × insurance_rate        (insured orders only)
    vat       = (subtotal + insurance) × vat_rate
    total     = subtotal + insurance + vat − discount  (floored at 0, rounded once)

Every rate and multiplier lives in a FareTable so rates can change through
configuration without touching this code. Factors are always multiplied,
never added, so two surcharges can't drift apart from their proportions.

For the audit breakdown each factor's increment is attributed in order:
base and distance fares carry the vehicle multiplier, the heavy-package
increment is the weight fare, the urgency increment is the priority fare,
and every other factor becomes a labelled surcharge. The parts always add
back up to the subtotal.
"""

from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass, field, fields
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from services.domain import (
    Insurance, LocationType, OrderType, PackageSpec, PriceBreakdown, Priority,
    Surcharge, VehicleType,
)
from services.errors import InvalidDiscount, InvalidInsuranceValue
from services.packaging import dimensions_cm

logger = logging.getLogger(__name__)


# ── Constants ──────────────────────────────────────────────

BASE_FARE = 500.0          # ₦500 flat per order
RATE_PER_KM = 50.0         # ₦50 per km
VAT_RATE = 0.075           # 7.5% Nigerian VAT
INSURANCE_RATE = 0.02      # 2% of declared value
MIN_INSURED_VALUE = 1000.0  # ₦1,000 minimum declared value when insured

VEHICLE_MULTIPLIER = {
    "bicycle": 0.8,
    "motorcycle": 1.0,
    "tricycle": 1.2,
    "car": 1.4,
    "van": 1.7,
    "truck": 2.0,
}

ORDER_TYPE_MULTIPLIER = {
    "instant": 1.2,        # Dispatched right away
    "scheduled": 1.0,
    "recurring": 1.0,
}

PRIORITY_MULTIPLIER = {
    "normal": 1.0,
    "urgent": 1.0,
    "instant": 1.0,
}


def _key(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _frozen(mapping: Mapping) -> Mapping[str, float]:
    return MappingProxyType({_key(k): float(v) for k, v in mapping.items()})


# ── Fare table ─────────────────────────────────────────────

@dataclass(frozen=True)
class FareTable:
    base_fare: float = BASE_FARE
    rate_per_km: float = RATE_PER_KM
    vehicle_multipliers: Mapping[str, float] = field(
        default_factory=lambda: VEHICLE_MULTIPLIER
    )

    heavy_weight_kg: float = 20.0
    heavy_multiplier: float = 1.3
    oversize_cm: float = 100.0
    oversize_multiplier: float = 1.2
    fragile_multiplier: float = 1.15
    special_handling_multiplier: float = 1.25
    temperature_controlled_multiplier: float = 1.4
    high_value_threshold: float = 100_000.0
    high_value_multiplier: float = 1.1

    order_type_multipliers: Mapping[str, float] = field(
        default_factory=lambda: ORDER_TYPE_MULTIPLIER
    )
    priority_multipliers: Mapping[str, float] = field(
        default_factory=lambda: PRIORITY_MULTIPLIER
    )
    location_multipliers: Mapping[str, float] = field(default_factory=dict)

    insurance_rate: float = INSURANCE_RATE
    min_insured_value: float = MIN_INSURED_VALUE
    vat_rate: float = VAT_RATE
    currency: str = "NGN"
    rounding_digits: int = 0   # whole naira

    def __post_init__(self):
        for name in (
            "vehicle_multipliers", "order_type_multipliers",
            "priority_multipliers", "location_multipliers",
        ):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    def vehicle_multiplier(self, vehicle: VehicleType) -> float:
        return self.vehicle_multipliers.get(_key(vehicle), 1.0)

    def urgency_multiplier(self, order_type: OrderType, priority: Priority) -> float:
        return max(
            self.order_type_multipliers.get(_key(order_type), 1.0),
            self.priority_multipliers.get(_key(priority), 1.0),
        )


DEFAULT_FARES = FareTable()


def load_fare_table(settings) -> FareTable:
    """
    Build a FareTable from settings.

    A JSON rules file (PRICING_RULES_PATH) may override any FareTable field;
    individual environment settings are applied on top of it.
    """
    overrides: dict = {}

    if settings.PRICING_RULES_PATH:
        path = Path(settings.PRICING_RULES_PATH)
        overrides.update(json.loads(path.read_text(encoding="utf-8")))
        logger.info("Loaded pricing rules from %s", path)

    env_map = {
        "base_fare": settings.BASE_FARE,
        "rate_per_km": settings.RATE_PER_KM,
        "vat_rate": settings.VAT_RATE,
        "insurance_rate": settings.INSURANCE_RATE,
        "min_insured_value": settings.MIN_INSURED_VALUE,
    }
    overrides.update({k: v for k, v in env_map.items() if v is not None})
    if settings.CURRENCY:
        overrides.setdefault("currency", settings.CURRENCY)

    known = {f.name for f in fields(FareTable)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown pricing rule(s): {', '.join(sorted(unknown))}")

    return FareTable(**overrides)


# ── Core Functions ─────────────────────────────────────────

def package_factors(package: PackageSpec, fares: FareTable) -> list[tuple[str, str, float]]:
    """(key, label, multiplier) for each package factor that applies, in fixed order."""
    factors = []
    if package.weight_kg > fares.heavy_weight_kg:
        factors.append(("heavy", f"Heavy package (over {fares.heavy_weight_kg:g}kg)",
                        fares.heavy_multiplier))

    cm = dimensions_cm(package.dimensions)
    if cm is not None and max(cm[0], cm[1]) > fares.oversize_cm:
        factors.append(("oversize", f"Oversize (over {fares.oversize_cm:g}cm)",
                        fares.oversize_multiplier))
    if package.is_fragile:
        factors.append(("fragile", "Fragile handling", fares.fragile_multiplier))
    if package.requires_special_handling:
        factors.append(("special_handling", "Special handling",
                        fares.special_handling_multiplier))
    if package.temperature_controlled:
        factors.append(("temperature_controlled", "Temperature control",
                        fares.temperature_controlled_multiplier))
    if package.declared_value_ngn > fares.high_value_threshold:
        factors.append(("high_value", "High-value item", fares.high_value_multiplier))
    return factors


def package_multiplier(package: PackageSpec, fares: FareTable = DEFAULT_FARES) -> float:
    return math.prod(mult for _, _, mult in package_factors(package, fares))


def insurance_fee(insurance: Insurance, fares: FareTable = DEFAULT_FARES) -> float:
    """2% of declared value for insured orders; insured values below the minimum are refused."""
    if not insurance.is_insured:
        return 0.0
    declared = insurance.declared_value
    if declared is None or not math.isfinite(declared) or declared < fares.min_insured_value:
        raise InvalidInsuranceValue(
            f"Declared value {declared!r} is below the minimum insured value "
            f"of {fares.min_insured_value:,.0f} {fares.currency}"
        )
    return declared * fares.insurance_rate


def round_money(amount: float, digits: int = 0) -> float:
    """Round half-up to the currency unit; used once, on the final total."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(amount)).quantize(quantum, rounding=ROUND_HALF_UP))


def price(
    package: PackageSpec,
    distance_km: float,
    selected_vehicle: VehicleType,
    priority: Priority = Priority.NORMAL,
    insurance: Insurance | None = None,
    order_type: OrderType = OrderType.INSTANT,
    candidates: Iterable[VehicleType] | None = None,
    discount: float = 0.0,
    location_types: Iterable[LocationType] = (),
    fares: FareTable | None = None,
) -> PriceBreakdown:
    """
    Calculate the full price breakdown for one order.

    Args:
        package: Normalized package description
        distance_km: Route distance, already computed once for the order
        selected_vehicle: Vehicle the quote is for
        priority: normal, urgent or instant
        insurance: Insurance selection (uninsured when omitted)
        order_type: instant, scheduled or recurring
        candidates: Other vehicle types still in play; the highest multiplier wins
        discount: Amount taken off the total, passed through from promotions
        location_types: Endpoint types, for configured location surcharges
        fares: Rate table (module defaults when omitted)

    Returns:
        PriceBreakdown whose components add up to the unrounded total
    """
    fares = fares or DEFAULT_FARES
    insurance = insurance or Insurance()
    if discount is None:
        discount = 0.0
    if not math.isfinite(discount) or discount < 0:
        raise InvalidDiscount(f"Discount {discount!r} cannot be negative")

    in_play = {VehicleType(selected_vehicle)}
    if candidates:
        in_play.update(VehicleType(v) for v in candidates)
    vehicle_mult = max(fares.vehicle_multiplier(v) for v in in_play)

    # Base cost
    base_fare = fares.base_fare * vehicle_mult
    distance_fare = distance_km * fares.rate_per_km * vehicle_mult
    running = base_fare + distance_fare

    # Package factors
    weight_fare = 0.0
    surcharges: list[Surcharge] = []
    for key, label, mult in package_factors(package, fares):
        amount = running * (mult - 1)
        running *= mult
        if key == "heavy":
            weight_fare += amount
        else:
            surcharges.append(Surcharge(label=label, amount=amount))

    # Location surcharges, once per distinct place type
    seen: set[str] = set()
    for loc in location_types:
        loc_key = _key(loc)
        mult = fares.location_multipliers.get(loc_key)
        if mult is None or loc_key in seen:
            continue
        seen.add(loc_key)
        amount = running * (mult - 1)
        running *= mult
        surcharges.append(Surcharge(label=f"Location: {loc_key}", amount=amount))

    # Urgency
    urgency_mult = fares.urgency_multiplier(order_type, priority)
    priority_fare = running * (urgency_mult - 1)
    subtotal = running * urgency_mult

    ins_fee = insurance_fee(insurance, fares)
    vat = (subtotal + ins_fee) * fares.vat_rate

    # Total
    total = subtotal + ins_fee + vat - discount
    total = max(total, 0.0)  # Floor

    return PriceBreakdown(
        base_fare=base_fare,
        distance_fare=distance_fare,
        weight_fare=weight_fare,
        priority_fare=priority_fare,
        surcharges=tuple(surcharges),
        insurance_fee=ins_fee,
        vat=vat,
        discount=discount,
        total_amount=round_money(total, fares.rounding_digits),
        currency=fares.currency,
    )
