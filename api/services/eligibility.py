"""
Eligibility Matcher — which vehicle classes can carry a package, best first.

Hard constraints (any failure makes the vehicle ineligible, every failing
constraint is reported):
  1. weight   ≤ max_weight_kg
  2. volume   ≤ max_volume_l
  3. distance ≤ max_distance_km
  4. fragile packages need fragile_ok True or "limited"
  5. food needs food_ok
  6. special handling needs special_handling_ok

Ranking of eligible vehicles, ascending on:
  1. "limited" fragile handling after full support, for fragile packages
  2. category hint: preferred (in hint order), neutral, avoided (in hint order)
  3. cost_tier
  4. catalog order
"""

from __future__ import annotations
from typing import Iterable

from services.domain import Category, OrderType, PackageSpec, VehicleOption, VehicleType
from services.errors import NoEligibleVehicle
from services.packaging import volume_liters
from services.vehicles import VehicleCatalog, VehicleProfile, estimate_eta_minutes, get_catalog

PREFERRED, NEUTRAL, AVOIDED = 0, 1, 2


def rejection_reasons(
    profile: VehicleProfile,
    package: PackageSpec,
    volume_l: float,
    distance_km: float,
) -> list[str]:
    """Every hard constraint the vehicle fails, as user-facing messages."""
    reasons = []
    if package.weight_kg > profile.max_weight_kg:
        reasons.append(
            f"Weight {package.weight_kg:g}kg exceeds maximum {profile.max_weight_kg:g}kg"
        )
    if volume_l > profile.max_volume_l:
        reasons.append(
            f"Volume {volume_l:.1f}L exceeds maximum {profile.max_volume_l:g}L"
        )
    if distance_km > profile.max_distance_km:
        reasons.append(
            f"Distance {distance_km:.1f}km exceeds maximum {profile.max_distance_km:g}km"
        )
    if package.is_fragile and profile.fragile_ok is False:
        reasons.append("Cannot carry fragile items")
    if package.category == Category.FOOD and not profile.food_ok:
        reasons.append("Not approved for food deliveries")
    if package.requires_special_handling and not profile.special_handling_ok:
        reasons.append("Cannot provide special handling")
    return reasons


def _rank_key(profile: VehicleProfile, package: PackageSpec, catalog: VehicleCatalog):
    hint = catalog.hint_for(package.category)
    if profile.type in hint.prefer:
        bucket, hint_pos = PREFERRED, hint.prefer.index(profile.type)
    elif profile.type in hint.avoid:
        bucket, hint_pos = AVOIDED, hint.avoid.index(profile.type)
    else:
        bucket, hint_pos = NEUTRAL, 0

    limited = package.is_fragile and profile.fragile_ok == "limited"
    return (limited, bucket, hint_pos, profile.cost_tier, catalog.order_of(profile.type))


def match(
    package: PackageSpec,
    distance_km: float,
    requested: Iterable[VehicleType] | None = None,
    catalog: VehicleCatalog | None = None,
    order_type: OrderType | None = None,
) -> list[VehicleOption]:
    """
    Evaluate every catalog vehicle against the package and route.

    Returns eligible options first, ranked (rank 1 is the recommendation),
    followed by the ineligible ones with their reasons. Raises
    NoEligibleVehicle when nothing qualifies, or when `requested` is given
    and none of the requested vehicles qualify. ETAs follow `order_type`.
    """
    catalog = catalog or get_catalog()
    volume_l = volume_liters(package.dimensions)
    wanted = {VehicleType(v) for v in requested} if requested else None

    eligible: list[VehicleProfile] = []
    rejected: list[VehicleOption] = []
    for profile in catalog.profiles.values():
        reasons = rejection_reasons(profile, package, volume_l, distance_km)
        if wanted is not None and profile.type not in wanted and not reasons:
            reasons = ["Not among the requested vehicle types"]
        if reasons:
            rejected.append(VehicleOption(
                type=profile.type, eligible=False, reasons_rejected=tuple(reasons),
            ))
        else:
            eligible.append(profile)

    if not eligible:
        if wanted is not None:
            message = (
                "None of the requested vehicle types can carry this package: "
                + ", ".join(sorted(v.value for v in wanted))
            )
        else:
            message = "No vehicle class can carry this package over this distance"
        raise NoEligibleVehicle(message, rejected)

    eligible.sort(key=lambda p: _rank_key(p, package, catalog))
    ranked = [
        VehicleOption(
            type=profile.type,
            eligible=True,
            rank=position,
            eta_minutes=estimate_eta_minutes(profile, distance_km, order_type),
        )
        for position, profile in enumerate(eligible, start=1)
    ]
    return ranked + rejected
