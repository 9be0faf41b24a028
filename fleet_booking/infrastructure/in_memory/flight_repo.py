from fleet_booking.application.interfaces.flight_repo import FlightRepo
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.infrastructure.in_memory.store import InMemoryStore


class InMemoryFlightRepo(FlightRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def upsert(self, flight: FlightContext) -> str:
        if flight.flight_id not in self._store.flights:
            self._store.flights[flight.flight_id] = flight
            self._store.record_undo(lambda: self._store.flights.pop(flight.flight_id, None))
        return flight.flight_id
