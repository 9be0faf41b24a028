from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from fleet_booking.api.dependencies import get_create_booking_use_case
from fleet_booking.main import app
from tests.factories import REFEREE_ID, VEHICLE_ID

URL = "/api/v1/bookings"


def _base_payload(**overrides):
    payload = {
        "vehicle_id": VEHICLE_ID,
        "booking_type": "DAY",
        "start_date": "2030-01-12T09:00:00Z",
        "end_date": "2030-01-13T21:00:00Z",
        "pickup_address": "12 Admiralty Way, Lekki",
        "pickup_time": "09:00",
        "guest_email": "guest@example.com",
        "guest_name": "Guest Person",
        "guest_phone": "+2348000000099",
    }
    payload.update(overrides)
    return payload


def _customer_payload(**overrides):
    payload = _base_payload(**overrides)
    for key in ("guest_email", "guest_name", "guest_phone"):
        payload.pop(key)
    return payload


@pytest_asyncio.fixture
async def client(use_case):
    app.dependency_overrides[get_create_booking_use_case] = lambda: use_case
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def test_create_guest_booking(client, store):
    payload = _base_payload(
        include_security_detail=True,
        requires_full_tank=True,
        client_total_amount="140825.00",
    )

    response = await client.post(URL, json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["booking_reference"].startswith("BK-")
    assert body["checkout_url"].endswith(body["booking_id"])
    assert Decimal(str(body["total_amount"])) == Decimal("140825")
    assert body["booking_id"] in store.bookings


async def test_customer_id_header_books_for_customer(client, store):
    response = await client.post(URL, json=_customer_payload(), headers={"X-Customer-Id": REFEREE_ID})

    assert response.status_code == 201
    booking = store.bookings[response.json()["booking_id"]]
    assert booking.customer_id == REFEREE_ID
    assert booking.guest_email is None


async def test_both_identities_are_rejected(client):
    response = await client.post(URL, json=_base_payload(), headers={"X-Customer-Id": REFEREE_ID})

    assert response.status_code == 400
    assert response.json()["retryable"] is True


async def test_price_mismatch_error_body(client, store):
    response = await client.post(URL, json=_base_payload(client_total_amount="1.00"))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "PRICE_MISMATCH"
    assert body["retryable"] is True
    assert body["retry_hint"]
    assert store.bookings == {}


async def test_missing_guest_fields_list_each_field(client):
    payload = _base_payload()
    payload.pop("guest_phone")

    response = await client.post(URL, json=payload)

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["guest_phone"]


async def test_unknown_vehicle_is_404(client):
    response = await client.post(URL, json=_base_payload(vehicle_id="nope"))

    assert response.status_code == 404
    assert response.json()["retryable"] is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"guest_email": "not-an-email"},
        {"booking_type": "WEEKLY"},
        {"pickup_time": "nine"},
        {"unexpected": "field"},
        {"client_total_amount": "-5"},
    ],
)
async def test_malformed_body_is_422(client, overrides):
    response = await client.post(URL, json=_base_payload(**overrides))
    assert response.status_code == 422


async def test_payment_failure_returns_committed_booking(client, store, payment_gateway):
    payment_gateway.fail = True

    response = await client.post(URL, json=_base_payload())

    assert response.status_code == 502
    body = response.json()
    assert body["code"] == "PAYMENT_AUTHORIZATION_FAILED"
    assert body["retryable"] is True
    assert store.bookings[body["booking_id"]].payment_status == "FAILED"
    assert body["booking_reference"].startswith("BK-")


async def test_unexpected_error_is_hidden_behind_error_id(client):
    class ExplodingUseCase:
        async def execute(self, request, customer_id=None):
            raise RuntimeError("database password is hunter2")

    app.dependency_overrides[get_create_booking_use_case] = lambda: ExplodingUseCase()

    response = await client.post(URL, json=_base_payload())

    assert response.status_code == 500
    body = response.json()
    assert "error_id" in body
    assert "hunter2" not in response.text


async def test_unsaved_payment_intent_returns_booking(client, use_case, store, monkeypatch):
    monkeypatch.setattr(
        use_case._booking_repo,
        "set_payment_intent",
        AsyncMock(side_effect=RuntimeError("connection lost")),
    )

    response = await client.post(URL, json=_base_payload())

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "PAYMENT_INTENT_NOT_RECORDED"
    assert body["retryable"] is True
    assert store.bookings[body["booking_id"]].payment_status == "UNPAID"
    assert body["booking_reference"].startswith("BK-")
    assert "connection lost" not in response.text
