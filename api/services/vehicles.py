"""
Vehicle Catalog — static capability profiles for each vehicle class.

The catalog is read-only and shared by every request. To change it at runtime
build a new VehicleCatalog and hand it to install_catalog(); the module-level
reference is swapped in one assignment, so readers see either the old rule set
or the new one, never a mix.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Mapping

from services.domain import Category, OrderType, VehicleType

logger = logging.getLogger(__name__)

HANDLING_BUFFER_MIN = 10  # pickup + hand-over time added to every ETA


@dataclass(frozen=True)
class VehicleProfile:
    type: VehicleType
    label: str
    max_weight_kg: float
    max_volume_l: float
    max_distance_km: float
    fragile_ok: bool | Literal["limited"]
    food_ok: bool
    special_handling_ok: bool
    speed_tier: int      # 1 (slow) … 3 (fast)
    cost_tier: int       # 1 (cheapest) … 6
    stability: int       # 1 … 6
    speed_kmh: float
    scheduled_eta: tuple[int, int]             # (min, max) door-to-door minutes
    instant_eta: tuple[int, int] | None = None  # None: instant orders use scheduled_eta


@dataclass(frozen=True)
class CategoryHint:
    prefer: tuple[VehicleType, ...] = ()
    avoid: tuple[VehicleType, ...] = ()


@dataclass(frozen=True)
class VehicleCatalog:
    profiles: Mapping[VehicleType, VehicleProfile]
    hints: Mapping[Category, CategoryHint] = field(default_factory=dict)
    version: str = "default"

    def __post_init__(self):
        # Freeze the mappings so entries cannot be edited in place
        object.__setattr__(self, "profiles", MappingProxyType(dict(self.profiles)))
        object.__setattr__(self, "hints", MappingProxyType(dict(self.hints)))

    def profile(self, vehicle_type: VehicleType) -> VehicleProfile:
        return self.profiles[VehicleType(vehicle_type)]

    def hint_for(self, category: Category) -> CategoryHint:
        return self.hints.get(category, CategoryHint())

    def order_of(self, vehicle_type: VehicleType) -> int:
        return list(self.profiles).index(vehicle_type)


# ── Default profiles ───────────────────────────────────────

VEHICLE_PROFILES = {
    VehicleType.BICYCLE: VehicleProfile(
        type=VehicleType.BICYCLE, label="Bicycle",
        max_weight_kg=15, max_volume_l=60, max_distance_km=10,
        fragile_ok=False, food_ok=True, special_handling_ok=False,
        speed_tier=1, cost_tier=1, stability=1,
        speed_kmh=15, instant_eta=(15, 45), scheduled_eta=(30, 60),
    ),
    VehicleType.MOTORCYCLE: VehicleProfile(
        type=VehicleType.MOTORCYCLE, label="Motorcycle",
        max_weight_kg=50, max_volume_l=240, max_distance_km=150,
        fragile_ok="limited", food_ok=True, special_handling_ok=True,
        speed_tier=3, cost_tier=2, stability=2,
        speed_kmh=35, instant_eta=(10, 30), scheduled_eta=(15, 45),
    ),
    VehicleType.TRICYCLE: VehicleProfile(
        type=VehicleType.TRICYCLE, label="Tricycle",
        max_weight_kg=100, max_volume_l=768, max_distance_km=60,
        fragile_ok=True, food_ok=True, special_handling_ok=True,
        speed_tier=2, cost_tier=3, stability=4,
        speed_kmh=25, instant_eta=(15, 40), scheduled_eta=(20, 60),
    ),
    VehicleType.CAR: VehicleProfile(
        type=VehicleType.CAR, label="Car",
        max_weight_kg=200, max_volume_l=1500, max_distance_km=300,
        fragile_ok=True, food_ok=True, special_handling_ok=True,
        speed_tier=3, cost_tier=4, stability=5,
        speed_kmh=40, instant_eta=(20, 50), scheduled_eta=(30, 90),
    ),
    VehicleType.VAN: VehicleProfile(
        type=VehicleType.VAN, label="Van",
        max_weight_kg=500, max_volume_l=4500, max_distance_km=500,
        fragile_ok=True, food_ok=True, special_handling_ok=True,
        speed_tier=2, cost_tier=5, stability=5,
        speed_kmh=35, scheduled_eta=(45, 120),
    ),
    VehicleType.TRUCK: VehicleProfile(
        type=VehicleType.TRUCK, label="Truck",
        max_weight_kg=2000, max_volume_l=12000, max_distance_km=1000,
        fragile_ok=True, food_ok=False, special_handling_ok=True,
        speed_tier=1, cost_tier=6, stability=6,
        speed_kmh=30, scheduled_eta=(60, 180),
    ),
}

V = VehicleType
CATEGORY_HINTS = {
    Category.DOCUMENT: CategoryHint(prefer=(V.MOTORCYCLE, V.BICYCLE), avoid=(V.VAN, V.TRUCK)),
    Category.PARCEL: CategoryHint(prefer=(V.MOTORCYCLE,)),
    Category.FOOD: CategoryHint(prefer=(V.MOTORCYCLE, V.BICYCLE), avoid=(V.VAN,)),
    Category.CLOTHING: CategoryHint(prefer=(V.MOTORCYCLE,), avoid=(V.TRUCK,)),
    Category.FURNITURE: CategoryHint(prefer=(V.VAN, V.TRUCK), avoid=(V.BICYCLE, V.MOTORCYCLE)),
    Category.ELECTRONICS: CategoryHint(prefer=(V.CAR,), avoid=(V.BICYCLE,)),
    Category.JEWELRY: CategoryHint(prefer=(V.CAR,), avoid=(V.BICYCLE, V.TRICYCLE)),
    Category.GIFTS: CategoryHint(prefer=(V.MOTORCYCLE, V.CAR)),
    Category.BOOKS: CategoryHint(prefer=(V.MOTORCYCLE,)),
    Category.FRAGILE: CategoryHint(prefer=(V.CAR, V.VAN), avoid=(V.BICYCLE, V.MOTORCYCLE)),
    Category.MEDICINE: CategoryHint(prefer=(V.MOTORCYCLE, V.CAR), avoid=(V.TRUCK,)),
    Category.OTHERS: CategoryHint(),
}
del V

DEFAULT_CATALOG = VehicleCatalog(profiles=VEHICLE_PROFILES, hints=CATEGORY_HINTS)

_catalog: VehicleCatalog = DEFAULT_CATALOG


def get_catalog() -> VehicleCatalog:
    return _catalog


def install_catalog(catalog: VehicleCatalog) -> VehicleCatalog:
    """Swap in a new catalog and return the one it replaced."""
    global _catalog
    if not isinstance(catalog, VehicleCatalog):
        raise TypeError(f"Expected VehicleCatalog, got {type(catalog).__name__}")
    previous, _catalog = _catalog, catalog
    logger.info("Vehicle catalog swapped: %s -> %s", previous.version, catalog.version)
    return previous


def eta_window(profile: VehicleProfile, order_type: OrderType | None = None) -> tuple[int, int]:
    """(min, max) minutes for the order type; instant is the default order type."""
    if OrderType(order_type or OrderType.INSTANT) == OrderType.INSTANT and profile.instant_eta:
        return profile.instant_eta
    return profile.scheduled_eta


def estimate_eta_minutes(
    profile: VehicleProfile,
    distance_km: float,
    order_type: OrderType | None = None,
) -> int:
    """Door-to-door minutes at the vehicle's average speed, clamped to its window."""
    low, high = eta_window(profile, order_type)
    travel = distance_km / profile.speed_kmh * 60
    return max(low, min(high, math.ceil(travel + HANDLING_BUFFER_MIN)))
