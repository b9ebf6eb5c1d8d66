"""Delivery quote API endpoints."""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from config import get_settings
from schemas import (
    CatalogResponse, CategoryHintOut, QuoteRequest, QuoteResponse,
    QuoteVerifyRequest, QuoteVerifyResponse, VehicleProfileOut,
)
from services.domain import (
    Dimensions, Discount, Endpoint, GeoPoint, Insurance, OrderContext, RouteContext,
)
from services.errors import NoEligibleVehicle, QuoteError, StaleQuote
from services.packaging import normalize_package
from services.pricing import FareTable, load_fare_table
from services.quotes import backend_breakdown, build_quote, display_breakdown, verify_quote
from services.vehicles import get_catalog

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_fare_table() -> FareTable:
    return load_fare_table(get_settings())


def _http_error(e: QuoteError) -> HTTPException:
    """Map an engine error to an HTTP error with a structured detail."""
    status = 409 if isinstance(e, StaleQuote) else 422
    return HTTPException(status_code=status, detail=e.to_dict())


def _endpoint(data) -> Endpoint:
    point = GeoPoint(lat=data.point.lat, lng=data.point.lng) if data.point else None
    return Endpoint(point=point, address=data.address, location_type=data.location_type)


def _to_context(data: QuoteRequest) -> OrderContext:
    """Translate the request body into the engine's OrderContext."""
    pkg = data.package
    dims = None
    if pkg.dimensions:
        dims = Dimensions(
            length=pkg.dimensions.length,
            width=pkg.dimensions.width,
            height=pkg.dimensions.height,
            unit=pkg.dimensions.unit,
        )
    package = normalize_package(
        weight=pkg.weight_kg,
        category=pkg.category,
        dimensions=dims,
        weight_unit=pkg.weight_unit,
        is_fragile=pkg.is_fragile,
        requires_special_handling=pkg.requires_special_handling,
        temperature_controlled=pkg.temperature_controlled,
        declared_value_ngn=pkg.declared_value_ngn,
    )
    discount = None
    if data.discount:
        discount = Discount(
            amount=data.discount.amount,
            code=data.discount.code,
            reason=data.discount.reason,
        )
    return OrderContext(
        package=package,
        route=RouteContext(
            pickup=_endpoint(data.route.pickup),
            dropoff=_endpoint(data.route.dropoff),
        ),
        priority=data.priority,
        insurance=Insurance(
            is_insured=data.insurance.is_insured,
            declared_value=data.insurance.declared_value,
        ),
        requested_vehicle_types=(
            tuple(data.requested_vehicle_types) if data.requested_vehicle_types else None
        ),
        order_type=data.order_type,
        discount=discount,
    )


@router.post("", response_model=QuoteResponse)
def create_quote(data: QuoteRequest, fares: FareTable = Depends(get_fare_table)):
    """Price an order and recommend a vehicle, without creating the order."""
    try:
        ctx = _to_context(data)
        quote = build_quote(ctx, fares=fares)
    except NoEligibleVehicle as e:
        logger.info("No eligible vehicle: %s", e.message)
        raise _http_error(e)
    except QuoteError as e:
        raise _http_error(e)

    return QuoteResponse(
        fingerprint=quote.fingerprint,
        selected_vehicle=quote.selected_vehicle,
        eligible_vehicles=[
            {
                "type": opt.type,
                "eligible": opt.eligible,
                "reasons_rejected": list(opt.reasons_rejected),
                "rank": opt.rank,
                "eta_minutes": opt.eta_minutes,
                "estimated_total": opt.estimated_total,
            }
            for opt in quote.eligible_vehicles
        ],
        distance_km=round(quote.distance_km, 2),
        pickup_location_type=quote.pickup_location_type,
        dropoff_location_type=quote.dropoff_location_type,
        display=display_breakdown(quote),
        backend=backend_breakdown(quote),
        computed_at=quote.computed_at,
    )


@router.post("/verify", response_model=QuoteVerifyResponse)
def verify(data: QuoteVerifyRequest):
    """Checkout guard: confirm the priced inputs still match the quote."""
    try:
        current = verify_quote(data.fingerprint, _to_context(data.order))
    except QuoteError as e:
        raise _http_error(e)
    return QuoteVerifyResponse(valid=True, fingerprint=current)


@router.get("/vehicles", response_model=CatalogResponse)
def list_vehicles():
    """Vehicle profiles and category hints currently in force."""
    catalog = get_catalog()
    return CatalogResponse(
        version=catalog.version,
        vehicles=[VehicleProfileOut.model_validate(p) for p in catalog.profiles.values()],
        category_hints={
            category.value: CategoryHintOut(prefer=list(hint.prefer), avoid=list(hint.avoid))
            for category, hint in catalog.hints.items()
        },
    )
