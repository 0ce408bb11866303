"""Integration tests for the storefront API via TestClient."""

import json

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from storefront.api import (
    admin_router,
    auth_router,
    catalog_router,
    checkout_router,
    install_shell_sessions,
    orders_router,
    register_error_handlers,
)
from storefront.domain import storefront


@pytest.fixture()
def app():
    app = FastAPI()
    for router in (auth_router, catalog_router, checkout_router, orders_router, admin_router):
        app.include_router(router)
    register_error_handlers(app)
    install_shell_sessions(app, secret_key="test-session-secret")

    @app.middleware("http")
    async def domain_context(request: Request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    yield app
    app.state.shells.close_all()


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def other_client(app):
    """A second browser against the same server."""
    return TestClient(app)


def _login(client, email="jane@example.com", password="s3cret-pass"):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


def _product_body(**overrides):
    body = {
        "name": "Trail Shoes",
        "description": "Grippy outsole",
        "price": 89.99,
        "stock_quantity": 10,
        "category": "Footwear",
        "image_url": "https://cdn.example.com/shoes.jpg",
    }
    body.update(overrides)
    return body


class TestAuthAPI:
    def test_session_when_signed_out(self, client):
        response = client.get("/auth/session")
        assert response.status_code == 200
        assert response.json() == {"user": None, "home_route": "/login"}

    def test_login(self, client, customer):
        assert _login(client) == {"path": "/dashboard", "delay_seconds": 0.0, "message": None}
        session = client.get("/auth/session").json()
        assert session["user"]["email"] == "jane@example.com"
        assert session["home_route"] == "/dashboard"

    def test_bad_login_is_502_with_service_message(self, client, customer):
        response = client.post("/auth/login", json={"email": "jane@example.com", "password": "wrong-pass"})
        assert response.status_code == 502
        assert response.json() == {"error": "Invalid login credentials"}

    def test_signup(self, client, backend):
        response = client.post(
            "/auth/signup",
            json={"email": "new@example.com", "password": "s3cret-pass", "full_name": "New Shopper"},
        )
        assert response.status_code == 201
        assert response.json() == {"path": "/dashboard", "delay_seconds": 2.0, "message": "Account created! Redirecting..."}
        assert backend.rows("users")[0]["email"] == "new@example.com"

    def test_logout(self, client, customer):
        _login(client)
        response = client.post("/auth/logout")
        assert response.json()["path"] == "/login"
        assert client.get("/auth/profile").status_code == 401

    def test_profile(self, client, customer):
        _login(client)
        response = client.get("/auth/profile")
        assert response.status_code == 200
        assert response.json()["role_label"] == "Customer"


class TestCatalogAPI:
    def test_requires_sign_in(self, client):
        assert client.get("/catalog").status_code == 401

    def test_browse_and_filter(self, client, customer, make_product):
        make_product(name="Trail Shoes", category="Footwear")
        make_product(name="Rain Jacket", category="Outerwear")
        make_product(name="Tent", category="Camping", stock_quantity=0)
        _login(client)

        body = client.get("/catalog").json()
        assert {p["name"] for p in body["products"]} == {"Trail Shoes", "Rain Jacket"}
        assert body["categories"] == ["Footwear", "Outerwear"]

        filtered = client.get("/catalog", params={"search": "rain"}).json()
        assert [p["name"] for p in filtered["products"]] == ["Rain Jacket"]

    def test_add_to_cart(self, client, customer, make_product):
        product = make_product(price=10.0)
        _login(client)

        client.post("/catalog/cart", json={"product_id": product["id"]})
        body = client.post("/catalog/cart", json={"product_id": product["id"]}).json()

        assert body["item_count"] == 2
        assert body["total"] == "20.00"
        assert client.get("/catalog/cart").json()["lines"][0]["quantity"] == 2

    def test_unknown_product_is_400(self, client, customer):
        _login(client)
        response = client.post("/catalog/cart", json={"product_id": "missing"})
        assert response.status_code == 400

    def test_stored_row_with_unusable_price_does_not_break_browsing(self, client, customer, make_product):
        make_product(name="Trail Shoes")
        make_product(name="Broken", price=float("inf"))
        _login(client)

        response = client.get("/catalog")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["products"]] == ["Trail Shoes"]


class TestCheckoutAPI:
    def test_full_checkout(self, client, backend, customer, make_product):
        product = make_product(price=10.0)
        _login(client)
        client.post("/catalog/cart", json={"product_id": product["id"]})

        opened = client.post("/checkout").json()
        assert opened["state"] == "unsubmitted"
        assert opened["redirect"] is None

        submitted = client.post("/checkout/submit").json()
        assert submitted["state"] == "submitted"
        assert submitted["success"] == "Order placed successfully!"
        assert submitted["redirect"] == {"path": "/orders", "delay_seconds": 2.0, "message": None}
        assert len(backend.rows("orders")) == 1

    def test_duplicate_submit_is_400(self, client, backend, customer, make_product):
        product = make_product()
        _login(client)
        client.post("/catalog/cart", json={"product_id": product["id"]})
        client.post("/checkout")
        client.post("/checkout/submit")

        assert client.post("/checkout/submit").status_code == 400
        assert len(backend.rows("orders")) == 1

    def test_checkout_with_empty_cart_redirects(self, client, customer):
        _login(client)
        body = client.post("/checkout").json()
        assert body["redirect"]["path"] == "/dashboard"

    def test_submit_without_checkout_is_400(self, client, customer):
        _login(client)
        assert client.post("/checkout/submit").status_code == 400

    def test_backend_failure_is_502(self, client, backend, customer, make_product):
        product = make_product()
        _login(client)
        client.post("/catalog/cart", json={"product_id": product["id"]})
        client.post("/checkout")
        backend.fail_on("insert", "order_items", message="Service unavailable")

        response = client.post("/checkout/submit")

        assert response.status_code == 502
        assert response.json() == {"error": "Service unavailable"}
        assert client.get("/checkout").json()["state"] == "unsubmitted"


class TestOrdersAPI:
    def test_history_with_items(self, client, customer, make_product):
        product = make_product(price=10.0)
        _login(client)
        client.post("/catalog/cart", json={"product_id": product["id"]})
        client.post("/checkout")
        client.post("/checkout/submit")

        [order] = client.get("/orders").json()
        assert order["status"] == "completed"
        assert order["total_amount"] == "10.00"
        assert order["items"][0]["price_at_purchase"] == "10.00"


class TestAdminAPI:
    def test_customer_forbidden(self, client, customer):
        _login(client)
        response = client.get("/admin/products")
        assert response.status_code == 403

    def test_crud(self, client, backend, admin):
        _login(client, email="admin@example.com")

        created = client.post("/admin/products", json=_product_body())
        assert created.status_code == 201
        product_id = created.json()["product_id"]

        updated = client.put(f"/admin/products/{product_id}", json=_product_body(stock_quantity=0))
        assert updated.status_code == 200
        [listed] = client.get("/admin/products").json()
        assert listed["stock_quantity"] == 0

        assert client.delete(f"/admin/products/{product_id}").json() == {"status": "ok"}
        assert backend.rows("products") == []

    def test_update_missing_is_404(self, client, admin):
        _login(client, email="admin@example.com")
        response = client.put("/admin/products/missing", json=_product_body())
        assert response.status_code == 404

    def test_negative_price_is_422(self, client, admin):
        _login(client, email="admin@example.com")
        response = client.post("/admin/products", json=_product_body(price=-1))
        assert response.status_code == 422

    @pytest.mark.parametrize("price", ["1e999", "NaN", "1e30"])
    def test_unusable_price_is_422(self, client, backend, admin, price):
        _login(client, email="admin@example.com")
        body = json.dumps(_product_body(price=0)).replace('"price": 0', f'"price": {price}')

        response = client.post("/admin/products", content=body, headers={"Content-Type": "application/json"})

        assert response.status_code == 422
        assert backend.rows("products") == []


class TestSeparateBrowsers:
    def test_sign_in_stays_with_its_browser(self, client, other_client, admin):
        _login(client, email="admin@example.com")

        assert other_client.get("/auth/session").json()["user"] is None
        assert other_client.get("/admin/products").status_code == 401
        assert client.get("/admin/products").status_code == 200

    def test_each_browser_has_its_own_cart(self, client, other_client, customer, make_user, make_product):
        make_user(email="sam@example.com", full_name="Sam Shopper")
        product = make_product(price=10.0)
        _login(client)
        _login(other_client, email="sam@example.com")

        client.post("/catalog/cart", json={"product_id": product["id"]})

        assert client.get("/catalog/cart").json()["item_count"] == 1
        assert other_client.get("/catalog/cart").json()["item_count"] == 0
        assert other_client.get("/auth/profile").json()["email"] == "sam@example.com"

    def test_sign_out_in_one_browser_leaves_the_other_signed_in(self, client, other_client, customer, make_user):
        make_user(email="sam@example.com", full_name="Sam Shopper")
        _login(client)
        _login(other_client, email="sam@example.com")

        client.post("/auth/logout")

        assert client.get("/auth/session").json()["user"] is None
        assert other_client.get("/auth/session").json()["user"]["email"] == "sam@example.com"

    def test_one_shell_per_browser(self, app, client, other_client):
        client.get("/auth/session")
        client.get("/auth/session")
        other_client.get("/auth/session")
        assert len(app.state.shells) == 2
