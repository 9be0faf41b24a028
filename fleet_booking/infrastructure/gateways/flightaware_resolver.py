import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from fleet_booking.application.interfaces.flight_resolver import FlightResolver
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.domain.errors import (
    FieldError,
    FlightAlreadyLandedError,
    FlightLookupError,
    FlightNotFoundError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

_FLIGHT_NUMBER = re.compile(r"^[A-Z0-9]{2,3}\d{1,5}$")
_ALERT_EVENTS = ["arrival", "cancelled", "departure", "diverted"]


class FlightAwareResolver(FlightResolver):
    """
    Flight lookups against the FlightAware AeroAPI live flights endpoint.

    A flight matches when its arrival falls on the pickup date in the
    business timezone. If the only flight on that date already arrived the
    lookup fails with FlightAlreadyLandedError. Drive time is not estimated
    here; leg generation falls back to its default.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        business_timezone: str = "UTC",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"x-apikey": api_key or ""}
        self._tz = ZoneInfo(business_timezone)
        self._timeout = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def resolve(
        self,
        flight_number: str,
        pickup_date: date,
        drop_off_address: str | None,
    ) -> FlightContext:
        ident = flight_number.strip().upper()
        if not _FLIGHT_NUMBER.match(ident):
            raise ValidationFailure(
                [FieldError("flight_number", f"Invalid flight number format: {flight_number}")]
            )

        day_start = datetime.combine(pickup_date, time(0, 0), tzinfo=timezone.utc)
        params = {
            "start": (day_start - timedelta(hours=12)).isoformat(),
            "end": (day_start + timedelta(hours=36)).isoformat(),
        }

        try:
            async with self._client() as client:
                response = await client.get(f"/flights/{ident}", params=params)
        except httpx.HTTPError as exc:
            logger.error(
                "Flight lookup request failed",
                exc_info=exc,
                extra={"flight_number": ident},
            )
            raise FlightLookupError(ident) from exc

        if response.status_code == 404:
            raise FlightNotFoundError(ident, pickup_date.isoformat())
        if response.status_code >= 400:
            logger.warning(
                "Flight lookup returned an error status",
                extra={"flight_number": ident, "status_code": response.status_code},
            )
            raise FlightLookupError(ident, f"Flight provider error: {response.status_code}")

        flights = response.json().get("flights") or []
        return self._select_flight(ident, pickup_date, flights)

    def _select_flight(
        self,
        ident: str,
        pickup_date: date,
        flights: list[dict[str, Any]],
    ) -> FlightContext:
        now = datetime.now(timezone.utc)
        landed = False
        for flight in flights:
            arrival_raw = flight.get("actual_on") or flight.get("estimated_on") or flight.get("scheduled_on")
            if not arrival_raw:
                continue
            arrival = _parse_timestamp(arrival_raw)
            if arrival.astimezone(self._tz).date() != pickup_date:
                continue
            if arrival < now:
                landed = True
                continue
            return _to_context(ident, arrival, flight)

        if landed:
            raise FlightAlreadyLandedError(ident)
        raise FlightNotFoundError(ident, pickup_date.isoformat())

    async def request_flight_alert(
        self,
        flight_id: str,
        flight_number: str,
        arrival_time: datetime,
        destination_iata: str | None,
    ) -> str:
        date_str = arrival_time.astimezone(timezone.utc).date().isoformat()
        body: dict[str, Any] = {
            "ident": flight_number.upper(),
            "date_start": date_str,
            "date_end": date_str,
            "enabled": True,
            "events": _ALERT_EVENTS,
        }
        if destination_iata:
            body["destination"] = destination_iata

        try:
            async with self._client() as client:
                response = await client.post("/alerts", json=body)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FlightLookupError(flight_number, "Flight alert creation failed") from exc

        alert_id = str(response.json().get("alert_id"))
        logger.info(
            "Flight alert registered",
            extra={"flight_id": flight_id, "alert_id": alert_id},
        )
        return alert_id


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_context(ident: str, arrival: datetime, flight: dict[str, Any]) -> FlightContext:
    origin = flight.get("origin") or {}
    destination = flight.get("destination") or {}
    return FlightContext(
        flight_id=flight.get("fa_flight_id") or f"{ident}-{arrival.date().isoformat()}",
        flight_number=ident,
        arrival_time=arrival,
        origin_code=origin.get("code"),
        origin_iata=origin.get("code_iata"),
        origin_name=origin.get("name"),
        destination_code=destination.get("code"),
        destination_iata=destination.get("code_iata"),
        destination_name=destination.get("name"),
        destination_city=destination.get("city"),
    )
