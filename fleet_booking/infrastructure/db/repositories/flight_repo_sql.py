from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.application.interfaces.flight_repo import FlightRepo
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.infrastructure.db.engine import to_db_datetime
from fleet_booking.infrastructure.db.tables import flights

FLIGHT_STATUS_SCHEDULED = "SCHEDULED"
UNKNOWN_ORIGIN_CODE = "UNKNOWN"
DEFAULT_DESTINATION_CODE = "DNMM"


class FlightRepoSQL(FlightRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, flight: FlightContext) -> str:
        stmt = select(flights.c.id).where(flights.c.id == flight.flight_id).limit(1)
        result = await self._session.execute(stmt)
        if result.scalar() is not None:
            return flight.flight_id

        arrival = to_db_datetime(flight.arrival_time)
        await self._session.execute(
            insert(flights).values(
                id=flight.flight_id,
                flight_number=flight.flight_number.upper(),
                flight_date=arrival,
                origin_code=flight.origin_code or UNKNOWN_ORIGIN_CODE,
                origin_code_iata=flight.origin_iata,
                origin_name=flight.origin_name,
                destination_code=flight.destination_code or DEFAULT_DESTINATION_CODE,
                destination_code_iata=flight.destination_iata,
                destination_name=flight.destination_name,
                destination_city=flight.destination_city,
                scheduled_arrival=arrival,
                status=FLIGHT_STATUS_SCHEDULED,
            )
        )
        return flight.flight_id
