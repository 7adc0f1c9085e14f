"""Integration tests for offer endpoints against an in-memory catalog."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from offer_runtime.adapters.catalog.in_memory_offer_catalog import InMemoryOfferCatalog
from offer_runtime.adapters.ledger.noop_redemption_ledger import NoopRedemptionLedger
from offer_runtime.app.api.routers.offers import get_offers_service
from offer_runtime.app.main import app
from offer_runtime.application.offer_service import OffersService
from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.domain.offers.models import AmountOff, Offer, OfferScope, PercentOff, Product

PRODUCTS = [
    Product(product_id="p1", category="Dairy", collection="Breakfast"),
    Product(product_id="p2", category="Bakery"),
]

OFFERS = [
    Offer(
        offer_id="pct",
        name="10% off dairy",
        reward=PercentOff(percent_off=10),
        scope=OfferScope.new(categories=["Dairy"]),
        priority=2,
        is_stackable=True,
    ),
    Offer(
        offer_id="amt",
        name="5 off breakfast",
        reward=AmountOff(amount_off=5),
        scope=OfferScope.new(collections=["Breakfast"]),
        priority=1,
        is_stackable=True,
        ends_at=datetime(2099, 1, 1, tzinfo=timezone.utc),
    ),
    Offer(
        offer_id="old",
        name="Expired bakery deal",
        reward=PercentOff(percent_off=50),
        scope=OfferScope.new(categories=["Bakery"]),
        ends_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
    ),
]


@pytest.fixture
def client():
    """Create a test client backed by an in-memory catalog."""
    service = OffersService(
        InMemoryOfferCatalog(offers=OFFERS, products=PRODUCTS),
        NoopRedemptionLedger(),
        OfferEngineConfig(),
    )
    app.dependency_overrides[get_offers_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_calculate_cart(client):
    response = client.post(
        "/v1/offers/calculate",
        json={"cartItems": [{"productId": "p1", "quantity": 4, "unitPrice": 25.0}]},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["originalAmount"] == 100.0
    assert body["totalDiscount"] == 15.0
    assert body["finalAmount"] == 85.0
    assert [o["offerId"] for o in body["applicableOffers"]] == ["pct", "amt"]
    assert body["freeItems"] == []


def test_calculate_cart_as_of_excludes_expired_offer(client):
    response = client.post(
        "/v1/offers/calculate",
        json={
            "cartItems": [{"productId": "p2", "quantity": 1, "unitPrice": 10.0}],
            "asOf": "2024-06-01T00:00:00Z",
        },
    )

    assert response.status_code == 200
    assert response.json()["excludedOffers"] == {"old": ["OFFER_EXPIRED"]}
    assert response.json()["finalAmount"] == 10.0


def test_calculate_cart_unknown_product_returns_422(client):
    response = client.post(
        "/v1/offers/calculate",
        json={"cartItems": [{"productId": "nope", "quantity": 1, "unitPrice": 1.0}]},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["issues"] == ["cartItems[0]: unknown productId nope"]


def test_calculate_cart_empty_cart_returns_422(client):
    response = client.post("/v1/offers/calculate", json={"cartItems": []})

    assert response.status_code == 422


def test_calculate_cart_negative_price_returns_422(client):
    response = client.post(
        "/v1/offers/calculate",
        json={"cartItems": [{"productId": "p1", "quantity": 1, "unitPrice": -1.0}]},
    )

    assert response.status_code == 422


def test_calculate_cart_oversized_price_returns_422(client):
    response = client.post(
        "/v1/offers/calculate",
        json={"cartItems": [{"productId": "p1", "quantity": 1, "unitPrice": 1e27}]},
    )

    assert response.status_code == 422


def test_calculate_cart_catalog_failure_returns_503():
    catalog = Mock()
    catalog.get_products.side_effect = RuntimeError("warehouse down")
    service = OffersService(catalog, NoopRedemptionLedger(), OfferEngineConfig())
    app.dependency_overrides[get_offers_service] = lambda: service
    try:
        response = TestClient(app).post(
            "/v1/offers/calculate",
            json={"cartItems": [{"productId": "p1", "quantity": 1, "unitPrice": 1.0}]},
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503


def test_applicable_offers_for_product(client):
    response = client.get("/v1/offers/applicable", params={"productId": "p1"})

    assert response.status_code == 200
    assert [o["id"] for o in response.json()] == ["pct", "amt"]


def test_applicable_offers_without_params(client):
    response = client.get("/v1/offers/applicable")

    assert response.status_code == 200
    assert response.json() == []


def test_list_offers_with_pagination(client):
    response = client.get("/v1/offers", params={"page": 1, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert [o["id"] for o in body["data"]] == ["pct", "amt"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


def test_list_offers_filter_by_type(client):
    response = client.get("/v1/offers", params={"type": "AMOUNT_OFF"})

    assert [o["id"] for o in response.json()["data"]] == ["amt"]


def test_list_offers_rejects_limit_above_100(client):
    response = client.get("/v1/offers", params={"limit": 101})

    assert response.status_code == 422


def test_get_offer(client):
    response = client.get("/v1/offers/amt")

    assert response.status_code == 200
    body = response.json()
    assert body["amountOff"] == 5.0
    assert body["isStackable"] is True
    assert body["scopes"]["collections"] == ["Breakfast"]


def test_get_offer_not_found(client):
    response = client.get("/v1/offers/missing")

    assert response.status_code == 404


def test_offers_service_dependency_closes_service(monkeypatch):
    service = Mock(spec=OffersService)
    monkeypatch.setattr("offer_runtime.app.api.routers.offers.create_offers_service", lambda: service)

    dependency = get_offers_service()
    assert next(dependency) is service
    dependency.close()

    service.close.assert_called_once()
