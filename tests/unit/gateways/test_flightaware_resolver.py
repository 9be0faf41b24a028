import json
from datetime import date, datetime, timezone

import httpx
import pytest

from fleet_booking.domain.errors import (
    FlightAlreadyLandedError,
    FlightLookupError,
    FlightNotFoundError,
    ValidationFailure,
)
from fleet_booking.infrastructure.gateways.flightaware_resolver import FlightAwareResolver

BASE_URL = "https://aeroapi.test/aeroapi"


def flight_payload(**overrides):
    flight = {
        "fa_flight_id": "BAW75-1893456000-schedule-0001",
        "ident": "BAW75",
        "scheduled_on": "2030-01-12T14:17:00Z",
        "estimated_on": None,
        "actual_on": None,
        "origin": {"code": "EGLL", "code_iata": "LHR", "name": "London Heathrow"},
        "destination": {"code": "DNMM", "code_iata": "LOS", "name": "Murtala Muhammed Intl", "city": "Lagos"},
    }
    flight.update(overrides)
    return flight


def make_resolver(handler) -> FlightAwareResolver:
    return FlightAwareResolver(
        base_url=BASE_URL,
        api_key="test-key",
        business_timezone="Africa/Lagos",
        transport=httpx.MockTransport(handler),
    )


class TestResolve:
    async def test_matches_flight_arriving_on_pickup_date(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["api_key"] = request.headers.get("x-apikey")
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"flights": [flight_payload()]})

        flight = await make_resolver(handler).resolve("ba75", date(2030, 1, 12), "Eko Hotel")

        assert seen["path"] == "/aeroapi/flights/BA75"
        assert seen["api_key"] == "test-key"
        assert set(seen["params"]) == {"start", "end"}
        assert flight.flight_id == "BAW75-1893456000-schedule-0001"
        assert flight.flight_number == "BA75"
        assert flight.arrival_time == datetime(2030, 1, 12, 14, 17, tzinfo=timezone.utc)
        assert flight.origin_iata == "LHR"
        assert flight.destination_iata == "LOS"
        assert flight.destination_city == "Lagos"
        assert flight.drive_time_minutes is None

    async def test_prefers_estimated_over_scheduled_arrival(self):
        payload = flight_payload(estimated_on="2030-01-12T15:02:00Z")

        def handler(request):
            return httpx.Response(200, json={"flights": [payload]})

        flight = await make_resolver(handler).resolve("BA75", date(2030, 1, 12), None)
        assert flight.arrival_time == datetime(2030, 1, 12, 15, 2, tzinfo=timezone.utc)

    async def test_date_is_compared_in_business_timezone(self):
        # 23:30 UTC ya es el 13 en Lagos
        payload = flight_payload(scheduled_on="2030-01-12T23:30:00Z")

        def handler(request):
            return httpx.Response(200, json={"flights": [payload]})

        resolver = make_resolver(handler)
        with pytest.raises(FlightNotFoundError):
            await resolver.resolve("BA75", date(2030, 1, 12), None)
        flight = await resolver.resolve("BA75", date(2030, 1, 13), None)
        assert flight.arrival_time.hour == 23

    async def test_past_arrival_means_landed(self):
        payload = flight_payload(scheduled_on="2020-01-12T09:00:00Z", actual_on="2020-01-12T09:20:00Z")

        def handler(request):
            return httpx.Response(200, json={"flights": [payload]})

        with pytest.raises(FlightAlreadyLandedError):
            await make_resolver(handler).resolve("BA75", date(2020, 1, 12), None)

    async def test_not_found_status(self):
        with pytest.raises(FlightNotFoundError):
            await make_resolver(lambda request: httpx.Response(404)).resolve("BA75", date(2030, 1, 12), None)

    async def test_empty_flight_list(self):
        with pytest.raises(FlightNotFoundError):
            await make_resolver(lambda request: httpx.Response(200, json={"flights": []})).resolve(
                "BA75", date(2030, 1, 12), None
            )

    @pytest.mark.parametrize("status_code", [401, 429, 500])
    async def test_provider_errors(self, status_code):
        with pytest.raises(FlightLookupError):
            await make_resolver(lambda request: httpx.Response(status_code)).resolve(
                "BA75", date(2030, 1, 12), None
            )

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FlightLookupError):
            await make_resolver(handler).resolve("BA75", date(2030, 1, 12), None)

    async def test_malformed_flight_number(self):
        with pytest.raises(ValidationFailure):
            await make_resolver(lambda request: httpx.Response(200)).resolve("B!", date(2030, 1, 12), None)


class TestFlightAlert:
    async def test_posts_alert_and_returns_id(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"alert_id": 4242})

        alert_id = await make_resolver(handler).request_flight_alert(
            flight_id="fa-1",
            flight_number="ba75",
            arrival_time=datetime(2030, 1, 12, 14, 17, tzinfo=timezone.utc),
            destination_iata="LOS",
        )

        assert alert_id == "4242"
        assert seen["method"] == "POST"
        assert seen["path"] == "/aeroapi/alerts"
        assert seen["body"]["ident"] == "BA75"
        assert seen["body"]["date_start"] == "2030-01-12"
        assert seen["body"]["destination"] == "LOS"
        assert seen["body"]["enabled"] is True

    async def test_alert_failure_raises_lookup_error(self):
        with pytest.raises(FlightLookupError):
            await make_resolver(lambda request: httpx.Response(503)).request_flight_alert(
                "fa-1", "BA75", datetime(2030, 1, 12, 14, tzinfo=timezone.utc), None
            )
