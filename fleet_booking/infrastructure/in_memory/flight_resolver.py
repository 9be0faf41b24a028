from datetime import date, datetime

from fleet_booking.application.interfaces.flight_resolver import FlightResolver
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.domain.errors import (
    FlightAlreadyLandedError,
    FlightLookupError,
    FlightNotFoundError,
)


class FakeFlightResolver(FlightResolver):
    """Resolver de vuelos con datos precargados, para desarrollo y tests."""

    def __init__(self) -> None:
        self._flights: dict[str, FlightContext] = {}
        self._landed: set[str] = set()
        self.fail_lookups = False
        self.fail_alerts = False
        self.alerts: list[str] = []

    def add_flight(self, flight: FlightContext, landed: bool = False) -> None:
        key = flight.flight_number.upper()
        self._flights[key] = flight
        if landed:
            self._landed.add(key)

    async def resolve(
        self,
        flight_number: str,
        pickup_date: date,
        drop_off_address: str | None,
    ) -> FlightContext:
        key = flight_number.upper()
        if self.fail_lookups:
            raise FlightLookupError(flight_number)
        flight = self._flights.get(key)
        if flight is None:
            raise FlightNotFoundError(flight_number, pickup_date.isoformat())
        if key in self._landed:
            raise FlightAlreadyLandedError(flight_number)
        return flight

    async def request_flight_alert(
        self,
        flight_id: str,
        flight_number: str,
        arrival_time: datetime,
        destination_iata: str | None,
    ) -> str:
        if self.fail_alerts:
            raise FlightLookupError(flight_number, "Alert provider unavailable")
        self.alerts.append(flight_id)
        return f"alert-{flight_id}"
