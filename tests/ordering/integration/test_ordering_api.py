"""Integration tests for the Ordering API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import install_exception_handlers
from ordering.api.routes import admin_router, cart_router, order_router, pricing_router


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (pricing_router, cart_router, order_router, admin_router):
        app.include_router(router)
    install_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def guld(make_group):
    return make_group(name="Guld", percentage=10.0)


@pytest.fixture()
def customer(make_customer, guld):
    return make_customer(group=guld)


@pytest.fixture()
def tomater(make_product):
    return make_product(sku="TOM-001", name="Tomater", base_price=100.0, unit="kg")


def _headers(customer):
    return {"X-Customer-Id": str(customer.id)}


def _place_order(client, customer, product, quantity=3):
    client.post("/cart/items", json={"product_id": str(product.id), "quantity": quantity}, headers=_headers(customer))
    response = client.post("/orders", json={"city": "Aarhus C", "postal_code": "8000"}, headers=_headers(customer))
    assert response.status_code == 201
    return response.json()


class TestPricingAPI:
    def test_customer_price(self, client, customer, tomater):
        response = client.get(f"/pricing/{tomater.id}", headers=_headers(customer))

        assert response.status_code == 200
        assert response.json() == {
            "price": 90.0,
            "original_price": 100.0,
            "discount_type": "rabatGruppe",
            "discount_label": "Guld rabat",
            "discount_percentage": 10,
            "show_strikethrough": True,
        }

    def test_anonymous_price(self, client, tomater):
        response = client.get(f"/pricing/{tomater.id}")

        assert response.json()["price"] == 100.0
        assert response.json()["discount_type"] == "none"

    def test_unknown_product_is_404(self, client):
        assert client.get("/pricing/does-not-exist").status_code == 404


class TestCartAPI:
    def test_add_and_view(self, client, customer, tomater):
        response = client.post(
            "/cart/items", json={"product_id": str(tomater.id), "quantity": 3}, headers=_headers(customer)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_items"] == 3
        assert body["total_price"] == 270.0
        assert body["items"][0]["item_savings"] == 30.0

        assert client.get("/cart", headers=_headers(customer)).json()["total_price"] == 270.0

    def test_missing_customer_is_401(self, client, tomater):
        response = client.post("/cart/items", json={"product_id": str(tomater.id), "quantity": 1})

        assert response.status_code == 401

    def test_invalid_quantity_is_400(self, client, customer, tomater):
        response = client.post(
            "/cart/items", json={"product_id": str(tomater.id), "quantity": 0}, headers=_headers(customer)
        )

        assert response.status_code == 400

    def test_update_remove_and_clear(self, client, customer, tomater):
        client.post("/cart/items", json={"product_id": str(tomater.id), "quantity": 3}, headers=_headers(customer))

        updated = client.put(f"/cart/items/{tomater.id}", json={"quantity": 1}, headers=_headers(customer))
        removed = client.delete(f"/cart/items/{tomater.id}", headers=_headers(customer))
        removed_again = client.delete(f"/cart/items/{tomater.id}", headers=_headers(customer))
        cleared = client.delete("/cart", headers=_headers(customer))

        assert updated.json()["total_items"] == 1
        assert removed.json()["items"] == []
        assert removed_again.status_code == 200
        assert cleared.json()["total_items"] == 0


class TestOrderAPI:
    def test_place_order(self, client, customer, tomater):
        order = _place_order(client, customer, tomater)

        assert order["status"] == "order_placed"
        assert order["allowed_transitions"] == ["order_confirmed", "rejected"]
        assert order["totals"]["total_amount"] == 270.0
        assert order["items"][0]["pricing"]["discount_type"] == "rabatGruppe"
        assert order["delivery"]["city"] == "Aarhus C"
        assert order["customer"]["discount_group_name"] == "Guld"
        assert client.get("/cart", headers=_headers(customer)).json()["items"] == []

    def test_place_order_with_delivery_date(self, client, customer, tomater):
        client.post("/cart/items", json={"product_id": str(tomater.id), "quantity": 1}, headers=_headers(customer))

        response = client.post(
            "/orders",
            json={"city": "Aarhus C", "postal_code": "8000", "expected_delivery": "2026-03-04"},
            headers=_headers(customer),
        )

        assert response.status_code == 201
        assert response.json()["delivery"]["expected_delivery"] == "2026-03-04"

    def test_get_and_list_orders(self, client, customer, tomater):
        order = _place_order(client, customer, tomater)

        fetched = client.get(f"/orders/{order['order_id']}")
        listed = client.get("/orders", headers=_headers(customer))

        assert fetched.json()["order_number"] == order["order_number"]
        assert [o["order_id"] for o in listed.json()] == [order["order_id"]]

    def test_transition(self, client, customer, tomater):
        order = _place_order(client, customer, tomater)

        response = client.put(f"/orders/{order['order_id']}/status", json={"status": "order_confirmed"})

        assert response.status_code == 200
        assert response.json()["status"] == "order_confirmed"
        assert len(response.json()["status_history"]) == 2

    def test_invalid_transition_is_400(self, client, customer, tomater):
        order = _place_order(client, customer, tomater)

        response = client.put(f"/orders/{order['order_id']}/status", json={"status": "invoiced"})

        assert response.status_code == 400

    def test_empty_cart_is_400(self, client, customer):
        response = client.post("/orders", json={}, headers=_headers(customer))

        assert response.status_code == 400


class TestAdminAPI:
    def test_bulk_upsert_reports_per_entry(self, client, tomater, guld):
        response = client.post(
            "/admin/offer-group-prices/bulk-upsert",
            json={
                "prices": [
                    {"product_id": str(tomater.id), "offer_group_id": str(guld.id), "price": 80},
                    {"product_id": "no-such-product", "offer_group_id": str(guld.id), "price": 10},
                ]
            },
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["ok"] for r in results] == [True, False]

        baseline = client.get("/admin/offer-group-prices").json()["prices"]
        assert baseline == {str(tomater.id): {str(guld.id): 80.0}}

    def test_bulk_upsert_changes_customer_price(self, client, customer, tomater, guld):
        client.post(
            "/admin/offer-group-prices/bulk-upsert",
            json={"prices": [{"product_id": str(tomater.id), "offer_group_id": str(guld.id), "price": "80"}]},
        )

        price = client.get(f"/pricing/{tomater.id}", headers=_headers(customer)).json()
        assert price["price"] == 80.0
        assert price["discount_percentage"] == 20
