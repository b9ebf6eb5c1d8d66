"""
End-to-end quote flow (unit-level, no server required).

Builds full quotes through the orchestrator: distance, classification,
eligibility, fares and fingerprint together.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "api"))

import dataclasses
from datetime import datetime, timezone

import pytest

from services.domain import (
    Category, Discount, Endpoint, GeoPoint, Insurance, LocationType, OrderContext,
    OrderType, PackageSpec, RouteContext, VehicleType,
)
from services.errors import (
    InvalidCoordinates, InvalidInsuranceValue, InvalidPackageSpec, NoEligibleVehicle, StaleQuote,
)
from services.pricing import FareTable
from services.quotes import backend_breakdown, build_quote, display_breakdown, verify_quote

# ~10 km due north
PICKUP = GeoPoint(lat=6.5, lng=3.35)
DROPOFF = GeoPoint(lat=6.589932, lng=3.35)
FIXED_NOW = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)


def _ctx(
    package=None,
    dropoff=DROPOFF,
    dropoff_address="14 Awolowo Road",
    order_type=OrderType.SCHEDULED,
    **kwargs,
) -> OrderContext:
    return OrderContext(
        package=package or PackageSpec(weight_kg=1.0, category=Category.DOCUMENT),
        route=RouteContext(
            pickup=Endpoint(PICKUP, "12 Allen Avenue"),
            dropoff=Endpoint(dropoff, dropoff_address),
        ),
        order_type=order_type,
        **kwargs,
    )


def _build(ctx):
    return build_quote(ctx, clock=lambda: FIXED_NOW)


def test_document_quote():
    quote = _build(_ctx())
    assert quote.distance_km == pytest.approx(10.0, abs=0.01)
    assert quote.selected_vehicle == VehicleType.MOTORCYCLE
    assert quote.breakdown.base_fare == 500
    assert quote.breakdown.subtotal == pytest.approx(1000, abs=0.5)
    assert quote.breakdown.total_amount == 1075
    assert quote.computed_at == FIXED_NOW


def test_instant_quote():
    quote = _build(_ctx(order_type=OrderType.INSTANT))
    assert quote.breakdown.subtotal == pytest.approx(1200, abs=0.5)
    assert quote.breakdown.total_amount == 1290


def test_insured_quote():
    quote = _build(_ctx(insurance=Insurance(is_insured=True, declared_value=10_000)))
    assert quote.breakdown.insurance_fee == pytest.approx(200)
    assert quote.breakdown.total_amount == 1290


def test_deterministic():
    ctx = _ctx(insurance=Insurance(is_insured=True, declared_value=75_000))
    first, second = build_quote(ctx), build_quote(ctx)
    assert first.breakdown == second.breakdown
    assert first.fingerprint == second.fingerprint


def test_total_never_decreases_with_distance():
    totals = [
        _build(_ctx(dropoff=GeoPoint(lat=6.5 + step * 0.05, lng=3.35))).breakdown.total_amount
        for step in range(1, 8)
    ]
    assert totals == sorted(totals)


def test_quote_is_immutable():
    quote = _build(_ctx())
    with pytest.raises(dataclasses.FrozenInstanceError):
        quote.fingerprint = "tampered"


def test_location_types_tagged():
    quote = _build(_ctx(dropoff_address="Reddington Hospital, Victoria Island"))
    assert quote.pickup_location_type == LocationType.RESIDENTIAL
    assert quote.dropoff_location_type == LocationType.HOSPITAL


def test_requested_vehicles_priced_conservatively():
    quote = _build(_ctx(requested_vehicle_types=(VehicleType.CAR, VehicleType.VAN)))
    assert quote.selected_vehicle == VehicleType.CAR
    assert quote.breakdown.base_fare == pytest.approx(500 * 1.7)


def test_missing_coordinates_abort():
    with pytest.raises(InvalidCoordinates):
        _build(_ctx(dropoff=GeoPoint(lat=None, lng=3.35)))


def test_no_vehicle_aborts():
    with pytest.raises(NoEligibleVehicle):
        _build(_ctx(package=PackageSpec(weight_kg=3000, category=Category.FURNITURE)))


def test_invalid_insurance_aborts():
    with pytest.raises(InvalidInsuranceValue):
        _build(_ctx(insurance=Insurance(is_insured=True, declared_value=500)))


def test_display_breakdown():
    view = display_breakdown(_build(_ctx()))
    assert view["delivery_service"] == 1000
    assert view["insurance"] == 0
    assert view["vat"] == 75
    assert view["total"] == 1075
    assert view["formatted"]["total"] == "₦1,075"


def test_backend_breakdown_carries_discount():
    quote = _build(_ctx(discount=Discount(amount=75, code="WELCOME75", reason="First order")))
    backend = backend_breakdown(quote)
    assert backend["discount"] == {"amount": 75, "code": "WELCOME75", "reason": "First order"}
    assert backend["total_amount"] == 1000
    assert backend["currency"] == "NGN"


def test_verify_quote_at_checkout():
    ctx = _ctx(insurance=Insurance(is_insured=True, declared_value=10_000))
    quote = _build(ctx)
    assert verify_quote(quote.fingerprint, ctx) == quote.fingerprint

    # Same order with a different contact address still verifies
    relabelled = dataclasses.replace(
        ctx, route=RouteContext(
            pickup=Endpoint(PICKUP, "12 Allen Avenue, gate 2"),
            dropoff=ctx.route.dropoff,
        ),
    )
    verify_quote(quote.fingerprint, relabelled)

    changed = dataclasses.replace(ctx, insurance=Insurance(is_insured=True, declared_value=90_000))
    with pytest.raises(StaleQuote):
        verify_quote(quote.fingerprint, changed)


def test_negative_declared_value_rejected_without_http_layer():
    pkg = PackageSpec(weight_kg=-5, declared_value_ngn=-100)
    with pytest.raises(InvalidPackageSpec):
        _build(_ctx(package=pkg))


def test_non_positive_weight_defaults_to_one_kg():
    defaulted = _build(_ctx(package=PackageSpec(weight_kg=0, category=Category.DOCUMENT)))
    explicit = _build(_ctx())
    assert defaulted.breakdown == explicit.breakdown
    assert defaulted.fingerprint == explicit.fingerprint


def test_unusable_weight_rejected():
    with pytest.raises(InvalidPackageSpec):
        _build(_ctx(package=PackageSpec(weight_kg=float("nan"))))


def test_location_surcharge_input_changes_fingerprint():
    fares = FareTable(location_multipliers={"hospital": 1.5})
    home = _ctx()
    hospital = _ctx(dropoff_address="Reddington Hospital")

    home_quote = build_quote(home, fares=fares, clock=lambda: FIXED_NOW)
    hospital_quote = build_quote(hospital, fares=fares, clock=lambda: FIXED_NOW)
    assert hospital_quote.breakdown.total_amount > home_quote.breakdown.total_amount
    assert hospital_quote.fingerprint != home_quote.fingerprint

    with pytest.raises(StaleQuote):
        verify_quote(home_quote.fingerprint, hospital)


def test_explicit_location_type_is_fingerprinted():
    tagged = dataclasses.replace(
        _ctx(), route=RouteContext(
            pickup=Endpoint(PICKUP, "12 Allen Avenue"),
            dropoff=Endpoint(DROPOFF, "14 Awolowo Road", LocationType.HOSPITAL),
        ),
    )
    assert _build(tagged).fingerprint != _build(_ctx()).fingerprint


def test_eligible_options_carry_estimated_total():
    quote = _build(_ctx())
    by_type = {opt.type: opt for opt in quote.eligible_vehicles}

    assert by_type[VehicleType.MOTORCYCLE].estimated_total == quote.breakdown.total_amount
    assert by_type[VehicleType.CAR].estimated_total == 1505
    for opt in quote.eligible_vehicles:
        if opt.eligible:
            assert opt.estimated_total > 0
        else:
            assert opt.estimated_total is None


def test_estimated_total_prices_each_vehicle_alone():
    quote = _build(_ctx(requested_vehicle_types=(VehicleType.CAR, VehicleType.VAN)))
    car = next(opt for opt in quote.eligible_vehicles if opt.type == VehicleType.CAR)
    # The quote itself is priced at the van rate; the option shows the car rate
    assert car.estimated_total < quote.breakdown.total_amount
