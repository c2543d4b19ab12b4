"""
HTTP surface: status codes and body shapes.

Uses httpx.AsyncClient with ASGITransport against the FastAPI app.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from kungfu import Error

from storefront.checkout import CheckoutService, TransactionFailure
from storefront.orders import OrderHistory
from storefront.wire import REPLAY_HEADER, create_app


@pytest_asyncio.fixture
async def client(service, history):
    app = create_app(checkout=service, history=history)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


USER = {"X-User-Id": "1"}


class TestCheckoutEndpoint:
    @pytest.mark.asyncio
    async def test_created(self, client, seeded):
        resp = await client.post("/checkout", headers=USER, json={
            "items": [{"productId": 1, "quantity": 2}, {"productId": 2, "quantity": 1}],
        })

        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "paid"
        assert data["total_cents"] == 2250
        assert "createdAt" in data
        assert data["items"][0] == {
            "productId": 1,
            "quantity": 2,
            "unit_price_cents": 1000,
            "subtotal_cents": 2000,
        }
        assert REPLAY_HEADER not in resp.headers
        assert await seeded.stock_of(1) == 3

    @pytest.mark.asyncio
    async def test_missing_user_is_unauthorized(self, client):
        resp = await client.post("/checkout", json={"items": [{"productId": 1, "quantity": 1}]})
        assert resp.status_code == 401
        assert "error" in resp.json()

    @pytest.mark.asyncio
    async def test_non_ascii_digit_user_is_unauthorized(self, client):
        # b"\xb2" decodes to "²", which isdigit() accepts and int() rejects
        resp = await client.post(
            "/checkout",
            headers={"X-User-Id": b"\xb2"},
            json={"items": [{"productId": 1, "quantity": 1}]},
        )
        assert resp.status_code == 401
        assert "error" in resp.json()

    @pytest.mark.asyncio
    async def test_client_supplied_price_is_ignored(self, client):
        resp = await client.post("/checkout", headers=USER, json={
            "items": [{"productId": 1, "quantity": 1, "unitPrice": 1, "unit_price_cents": 1}],
        })
        assert resp.status_code == 201
        data = resp.json()
        assert data["items"][0]["unit_price_cents"] == 1000
        assert data["total_cents"] == 1000

    @pytest.mark.asyncio
    async def test_empty_cart_is_bad_request(self, client):
        resp = await client.post("/checkout", headers=USER, json={"items": []})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Cart is empty"

    @pytest.mark.asyncio
    async def test_zero_quantity_is_bad_request(self, client):
        resp = await client.post("/checkout", headers=USER, json={
            "items": [{"productId": 1, "quantity": 0}],
        })
        assert resp.status_code == 400
        assert resp.json()["details"] == ["items[0].quantity: must be an integer >= 1"]

    @pytest.mark.asyncio
    async def test_malformed_body_is_bad_request(self, client):
        resp = await client.post("/checkout", headers=USER, json={
            "items": [{"productId": "abc", "quantity": 1}],
        })
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Invalid request body"
        assert body["details"]

    @pytest.mark.asyncio
    async def test_conflict_lists_unavailable_products(self, client, seeded):
        resp = await client.post("/checkout", headers=USER, json={
            "items": [{"productId": 3, "quantity": 5}, {"productId": 1, "quantity": 1}],
        })
        assert resp.status_code == 409
        assert resp.json()["unavailableProducts"] == [3]
        assert await seeded.stock_of(1) == 5

    @pytest.mark.asyncio
    async def test_idempotent_replay_sets_header(self, client, seeded):
        headers = {**USER, "Idempotency-Key": "abc-123"}
        body = {"items": [{"productId": 2, "quantity": 4}]}

        first = await client.post("/checkout", headers=headers, json=body)
        second = await client.post("/checkout", headers=headers, json=body)

        assert first.status_code == second.status_code == 201
        assert second.json()["id"] == first.json()["id"]
        assert second.headers[REPLAY_HEADER] == "true"
        assert await seeded.stock_of(2) == 6


class _FailingService(CheckoutService):
    async def checkout(self, user_id, raw_items, *, idempotency_key=None):
        return Error(TransactionFailure("Checkout transaction failed: boom"))


@pytest.mark.asyncio
async def test_transaction_failure_is_internal_error(seeded):
    service = _FailingService(catalog=seeded.catalog, runner=seeded.runner, orders=seeded.orders)
    app = create_app(checkout=service, history=OrderHistory(seeded.orders))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.post("/checkout", headers=USER, json={
            "items": [{"productId": 1, "quantity": 1}],
        })

    assert resp.status_code == 500
    assert set(resp.json()) == {"error"}
    assert "boom" not in resp.json()["error"]


class TestOrdersEndpoint:
    @pytest.mark.asyncio
    async def test_lists_callers_orders(self, client):
        await client.post("/checkout", headers=USER, json={"items": [{"productId": 1, "quantity": 1}]})
        await client.post("/checkout", headers={"X-User-Id": "2"}, json={
            "items": [{"productId": 2, "quantity": 1}],
        })

        resp = await client.get("/orders", headers=USER)

        assert resp.status_code == 200
        orders = resp.json()
        assert len(orders) == 1
        assert orders[0]["items"][0]["productId"] == 1

    @pytest.mark.asyncio
    async def test_requires_user(self, client):
        resp = await client.get("/orders")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_non_ascii_digit_user_is_unauthorized(self, client):
        resp = await client.get("/orders", headers={"X-User-Id": b"\xb2"})
        assert resp.status_code == 401


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
