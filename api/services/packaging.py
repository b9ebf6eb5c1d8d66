"""Package normalization and volume."""

import math

from services.domain import Category, DimensionUnit, Dimensions, PackageSpec
from services.errors import InvalidPackageSpec

INCH_TO_CM = 2.54
DEFAULT_WEIGHT_KG = 1.0


def _to_cm(value: float, unit: DimensionUnit) -> float:
    return value * INCH_TO_CM if unit == DimensionUnit.INCH else value


def dimensions_cm(dimensions: Dimensions | None) -> tuple[float, float, float] | None:
    """(length, width, height) in centimetres, or None when not supplied."""
    if dimensions is None:
        return None
    unit = DimensionUnit(dimensions.unit)
    return (
        _to_cm(dimensions.length, unit),
        _to_cm(dimensions.width, unit),
        _to_cm(dimensions.height, unit),
    )


def volume_liters(dimensions: Dimensions | None) -> float:
    """Package volume in litres. 0 when dimensions are absent."""
    cm = dimensions_cm(dimensions)
    if cm is None:
        return 0.0
    length, width, height = cm
    return length * width * height / 1000.0


def normalize_package(
    weight: float | None,
    category=None,
    dimensions: Dimensions | None = None,
    weight_unit: str = "kg",
    is_fragile: bool = False,
    requires_special_handling: bool = False,
    temperature_controlled: bool = False,
    declared_value_ngn: float | None = 0.0,
) -> PackageSpec:
    """
    Build a PackageSpec from loosely-typed request fields.

    Grams are converted to kg. Missing or non-positive weights fall back to
    1 kg and unknown categories to parcel; anything still unusable after that
    raises InvalidPackageSpec.
    """
    weight_kg = weight if weight is not None else 0.0
    if weight_unit == "g":
        weight_kg = weight_kg / 1000.0
    if not weight_kg or weight_kg <= 0:
        weight_kg = DEFAULT_WEIGHT_KG
    if not math.isfinite(weight_kg) or weight_kg <= 0:
        raise InvalidPackageSpec(f"Package weight {weight!r} is not a usable value")

    declared = declared_value_ngn or 0.0
    if not math.isfinite(declared) or declared < 0:
        raise InvalidPackageSpec(f"Declared value {declared_value_ngn!r} cannot be negative")

    if dimensions is not None:
        sides = (dimensions.length, dimensions.width, dimensions.height)
        if any(not math.isfinite(s) or s < 0 for s in sides):
            raise InvalidPackageSpec(f"Package dimensions {sides} must be non-negative")

    return PackageSpec(
        weight_kg=weight_kg,
        category=Category.parse(category),
        dimensions=dimensions,
        is_fragile=bool(is_fragile),
        requires_special_handling=bool(requires_special_handling),
        temperature_controlled=bool(temperature_controlled),
        declared_value_ngn=float(declared),
    )


def validate_package(package: PackageSpec) -> PackageSpec:
    """Re-run normalization on an already-built PackageSpec."""
    return normalize_package(
        package.weight_kg,
        package.category,
        package.dimensions,
        is_fragile=package.is_fragile,
        requires_special_handling=package.requires_special_handling,
        temperature_controlled=package.temperature_controlled,
        declared_value_ngn=package.declared_value_ngn,
    )
