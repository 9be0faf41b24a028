from datetime import date, datetime

from fleet_booking.domain.entities.flight import FlightContext


class FlightResolver:
    async def resolve(
        self,
        flight_number: str,
        pickup_date: date,
        drop_off_address: str | None,
    ) -> FlightContext:
        """
        Raises:
            FlightNotFoundError: el vuelo no existe para esa fecha.
            FlightAlreadyLandedError: el vuelo ya aterrizó.
            FlightLookupError: el proveedor externo falló.
        """
        raise NotImplementedError

    async def request_flight_alert(
        self,
        flight_id: str,
        flight_number: str,
        arrival_time: datetime,
        destination_iata: str | None,
    ) -> str:
        raise NotImplementedError
