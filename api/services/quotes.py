"""
Quote Builder — turns one OrderContext into one immutable Quote.

Steps:
  1. Normalize the package, then distance (once, cached on the route)
  2. Classify pickup / drop-off place types
  3. Rank eligible vehicles; rank 1 is the selected vehicle
  4. Price the selected vehicle, and each eligible one for comparison
  5. Fingerprint the price-relevant inputs

A failure in any step raises that step's error. There is no fallback price.
"""

from __future__ import annotations
import dataclasses
import logging
from datetime import datetime, timezone
from typing import Callable

from services.domain import LocationType, OrderContext, Quote
from services.eligibility import match
from services.errors import QuoteError
from services.fingerprint import fingerprint, verify_fingerprint
from services.location import resolve_location_type
from services.packaging import validate_package
from services.pricing import FareTable, price, round_money
from services.vehicles import VehicleCatalog, get_catalog

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {"NGN": "₦"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _location_types(ctx: OrderContext) -> tuple[LocationType, LocationType]:
    return resolve_location_type(ctx.route.pickup), resolve_location_type(ctx.route.dropoff)


def order_fingerprint(ctx: OrderContext) -> str:
    return fingerprint(
        validate_package(ctx.package),
        ctx.route,
        ctx.insurance,
        priority=ctx.priority,
        order_type=ctx.order_type,
        requested=ctx.requested_vehicle_types,
        location_types=_location_types(ctx),
    )


def build_quote(
    ctx: OrderContext,
    catalog: VehicleCatalog | None = None,
    fares: FareTable | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> Quote:
    """Run the full quoting pipeline for an order."""
    # Pin the catalog for the whole request, even if it is swapped meanwhile
    catalog = catalog or get_catalog()

    try:
        package = validate_package(ctx.package)
        distance_km = ctx.route.distance_km
        pickup_type, dropoff_type = _location_types(ctx)

        options = match(
            package, distance_km, ctx.requested_vehicle_types, catalog, ctx.order_type,
        )
        eligible = [opt for opt in options if opt.eligible]
        selected = eligible[0].type

        # Several requested vehicles still in play: price conservatively
        candidates = (
            [opt.type for opt in eligible]
            if ctx.requested_vehicle_types and len(eligible) > 1
            else None
        )
        pricing = dict(
            priority=ctx.priority,
            insurance=ctx.insurance,
            order_type=ctx.order_type,
            discount=ctx.discount.amount if ctx.discount else 0.0,
            location_types=(pickup_type, dropoff_type),
            fares=fares,
        )
        breakdown = price(package, distance_km, selected, candidates=candidates, **pricing)
        options = [
            dataclasses.replace(
                opt,
                estimated_total=price(package, distance_km, opt.type, **pricing).total_amount,
            )
            if opt.eligible else opt
            for opt in options
        ]
        stamp = order_fingerprint(ctx)
    except QuoteError as e:
        logger.warning("Quote rejected: %s (%s)", e.code, e.message)
        raise

    quote = Quote(
        breakdown=breakdown,
        selected_vehicle=selected,
        eligible_vehicles=tuple(options),
        fingerprint=stamp,
        computed_at=clock(),
        distance_km=distance_km,
        pickup_location_type=pickup_type,
        dropoff_location_type=dropoff_type,
        discount_code=ctx.discount.code if ctx.discount else None,
        discount_reason=ctx.discount.reason if ctx.discount else None,
    )
    logger.info(
        "Quote %s: %s, %.2f km, total %s %s",
        quote.fingerprint, selected.value, distance_km,
        breakdown.total_amount, breakdown.currency,
    )
    return quote


def verify_quote(expected_fingerprint: str, ctx: OrderContext) -> str:
    """
    Checkout-time check that the priced inputs are unchanged.

    Returns the current fingerprint, or raises StaleQuote.
    """
    current = order_fingerprint(ctx)
    try:
        verify_fingerprint(expected_fingerprint, current)
    except QuoteError:
        logger.warning("Stale quote: expected %s, got %s", expected_fingerprint, current)
        raise
    return current


# ── Views ──────────────────────────────────────────────────

def format_currency(amount: float, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    text = f"{amount:,.0f}"
    return f"{symbol}{text}" if symbol else f"{text} {currency}"


def display_breakdown(quote: Quote) -> dict:
    """Simplified, rounded view for the checkout screen."""
    b = quote.breakdown
    view = {
        "delivery_service": int(round_money(b.subtotal)),
        "insurance": int(round_money(b.insurance_fee)),
        "vat": int(round_money(b.vat)),
        "discount": int(round_money(b.discount)),
        "total": int(round_money(b.total_amount)),
        "currency": b.currency,
    }
    view["formatted"] = {
        key: format_currency(view[key], b.currency)
        for key in ("delivery_service", "insurance", "vat", "discount", "total")
    }
    return view


def backend_breakdown(quote: Quote) -> dict:
    """Itemized view stored with the order for audit and settlement."""
    b = quote.breakdown
    return {
        "base_fare": b.base_fare,
        "distance_fare": b.distance_fare,
        "weight_fare": b.weight_fare,
        "priority_fare": b.priority_fare,
        "surcharges": [{"label": s.label, "amount": s.amount} for s in b.surcharges],
        "insurance_fee": b.insurance_fee,
        "vat": b.vat,
        "discount": {
            "amount": b.discount,
            "code": quote.discount_code,
            "reason": quote.discount_reason,
        },
        "total_amount": b.total_amount,
        "currency": b.currency,
    }
