"""Tests for package normalization, volume and location classification."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "api"))

import pytest

from services.domain import Category, Dimensions, DimensionUnit, Endpoint, LocationType
from services.errors import InvalidPackageSpec
from services.location import classify, resolve_location_type
from services.packaging import normalize_package, volume_liters


def test_volume_absent_dimensions():
    assert volume_liters(None) == 0


def test_volume_cm():
    assert volume_liters(Dimensions(10, 10, 10)) == pytest.approx(1.0)


def test_volume_inches_converted():
    assert volume_liters(Dimensions(10, 10, 10, DimensionUnit.INCH)) == pytest.approx(16.387064)


@pytest.mark.parametrize("weight", [None, 0, -3])
def test_missing_weight_defaults_to_one_kg(weight):
    assert normalize_package(weight).weight_kg == 1.0


def test_grams_converted():
    assert normalize_package(500, weight_unit="g").weight_kg == pytest.approx(0.5)


def test_unknown_category_is_parcel():
    assert normalize_package(2, "spaceship").category == Category.PARCEL
    assert normalize_package(2, None).category == Category.PARCEL
    assert normalize_package(2, "Food").category == Category.FOOD


def test_negative_declared_value_rejected():
    with pytest.raises(InvalidPackageSpec):
        normalize_package(2, declared_value_ngn=-1)


def test_non_finite_weight_rejected():
    with pytest.raises(InvalidPackageSpec):
        normalize_package(float("nan"))
    with pytest.raises(InvalidPackageSpec):
        normalize_package(float("inf"))


def test_negative_dimensions_rejected():
    with pytest.raises(InvalidPackageSpec):
        normalize_package(2, dimensions=Dimensions(10, -5, 10))


@pytest.mark.parametrize("address, expected", [
    ("Lagos University Teaching Hospital, Idi-Araba", LocationType.HOSPITAL),
    ("St. Nicholas Medical Centre", LocationType.HOSPITAL),
    ("Ikeja City Mall, Alausa", LocationType.MALL),
    ("Adeniran Ogunsanya Shopping Complex", LocationType.MALL),
    ("Corporate HQ, 5 Marina", LocationType.OFFICE),
    ("Central Business District, Abuja", LocationType.OFFICE),
    ("Federal Government College, Ijanikin", LocationType.SCHOOL),
    ("12 Allen Avenue, Ikeja", LocationType.RESIDENTIAL),
    ("Mallam Aminu Street", LocationType.RESIDENTIAL),
    ("", LocationType.RESIDENTIAL),
])
def test_classify(address, expected):
    assert classify(address) == expected


def test_explicit_location_type_wins():
    endpoint = Endpoint(point=None, address="Ikeja City Mall", location_type=LocationType.OFFICE)
    assert resolve_location_type(endpoint) == LocationType.OFFICE
    assert resolve_location_type(Endpoint(point=None, address="Ikeja City Mall")) == LocationType.MALL
