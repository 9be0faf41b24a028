from fleet_booking.domain.entities.flight import FlightContext


class FlightRepo:
    async def upsert(self, flight: FlightContext) -> str:
        """Crea el registro del vuelo si no existe y retorna su id."""
        raise NotImplementedError
