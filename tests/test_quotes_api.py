"""Tests for the quote HTTP endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "api"))

import copy

from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

ORDER = {
    "package": {"weightKg": 1, "category": "document"},
    "route": {
        "pickup": {
            "point": {"lat": 6.5, "lng": 3.35},
            "address": "12 Allen Avenue, Ikeja",
            "contactName": "Ada Obi",
        },
        "dropoff": {
            "point": {"lat": 6.589932, "lng": 3.35},
            "address": "Ikeja City Mall",
        },
    },
    "orderType": "scheduled",
}


def _order(**changes) -> dict:
    order = copy.deepcopy(ORDER)
    order.update(changes)
    return order


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_create_quote():
    resp = client.post("/api/quotes", json=ORDER)
    assert resp.status_code == 200
    body = resp.json()

    assert body["selectedVehicle"] == "motorcycle"
    assert body["dropoffLocationType"] == "mall"
    assert len(body["fingerprint"]) == 16
    assert body["display"]["total"] == 1075
    assert body["display"]["vat"] == 75
    assert body["display"]["formatted"]["total"] == "₦1,075"
    assert body["backend"]["baseFare"] == 500
    assert body["backend"]["totalAmount"] == 1075
    assert body["backend"]["discount"]["amount"] == 0
    assert body["eligibleVehicles"][0]["rank"] == 1


def test_quote_path_has_no_trailing_slash_redirect():
    resp = client.post("/api/quotes", json=ORDER, follow_redirects=False)
    assert resp.status_code == 200


def test_options_carry_estimated_totals():
    options = client.post("/api/quotes", json=ORDER).json()["eligibleVehicles"]
    by_type = {opt["type"]: opt for opt in options}
    assert by_type["motorcycle"]["estimatedTotal"] == 1075
    assert by_type["car"]["estimatedTotal"] == 1505
    assert by_type["truck"]["estimatedTotal"] > by_type["car"]["estimatedTotal"]


def test_instant_and_insured_quotes():
    instant = client.post("/api/quotes", json=_order(orderType="instant"))
    assert instant.json()["display"]["total"] == 1290

    insured = client.post(
        "/api/quotes",
        json=_order(insurance={"isInsured": True, "declaredValue": 10000}),
    )
    assert insured.json()["display"]["insurance"] == 200
    assert insured.json()["display"]["total"] == 1290


def test_contact_name_does_not_change_fingerprint():
    other = copy.deepcopy(ORDER)
    other["route"]["pickup"]["contactName"] = "Chinedu Eze"
    a = client.post("/api/quotes", json=ORDER).json()["fingerprint"]
    b = client.post("/api/quotes", json=other).json()["fingerprint"]
    assert a == b


def test_missing_coordinates():
    order = copy.deepcopy(ORDER)
    del order["route"]["dropoff"]["point"]
    resp = client.post("/api/quotes", json=order)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "InvalidCoordinates"


def test_no_eligible_vehicle():
    resp = client.post(
        "/api/quotes",
        json=_order(package={"weightKg": 3000, "category": "furniture"}),
    )
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["code"] == "NoEligibleVehicle"
    assert "truck" in detail["rejected"]


def test_insured_below_minimum():
    resp = client.post(
        "/api/quotes",
        json=_order(insurance={"isInsured": True, "declaredValue": 500}),
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "InvalidInsuranceValue"


def test_verify_quote():
    fingerprint = client.post("/api/quotes", json=ORDER).json()["fingerprint"]

    ok = client.post("/api/quotes/verify", json={"fingerprint": fingerprint, "order": ORDER})
    assert ok.status_code == 200
    assert ok.json() == {"valid": True, "fingerprint": fingerprint}

    changed = _order(package={"weightKg": 4, "category": "document"})
    stale = client.post("/api/quotes/verify", json={"fingerprint": fingerprint, "order": changed})
    assert stale.status_code == 409
    assert stale.json()["detail"]["code"] == "StaleQuote"


def test_list_vehicles():
    resp = client.get("/api/quotes/vehicles")
    assert resp.status_code == 200
    body = resp.json()
    types = [v["type"] for v in body["vehicles"]]
    assert types == ["bicycle", "motorcycle", "tricycle", "car", "van", "truck"]
    motorcycle = body["vehicles"][1]
    assert motorcycle["fragileOk"] == "limited"
    assert body["categoryHints"]["food"]["prefer"] == ["motorcycle", "bicycle"]
