"""Implementación in-memory del repositorio de reservas."""

from typing import Sequence

from fleet_booking.application.interfaces.booking_repo import BookingRepo
from fleet_booking.domain.constants import (
    BOOKING_STATUS_ACTIVE,
    BOOKING_STATUS_CONFIRMED,
    PAYMENT_STATUS_PAID,
)
from fleet_booking.domain.entities.booking import Booking
from fleet_booking.domain.value_objects.time_window import TimeWindow, as_utc
from fleet_booking.infrastructure.in_memory.store import InMemoryStore

_BLOCKING_STATUSES = (BOOKING_STATUS_CONFIRMED, BOOKING_STATUS_ACTIVE)


class InMemoryBookingRepo(BookingRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, booking_id: str) -> Booking | None:
        return self._store.bookings.get(booking_id)

    async def find_overlapping(
        self,
        vehicle_id: str,
        window: TimeWindow,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        return [
            b
            for b in self._store.bookings.values()
            if b.vehicle_id == vehicle_id
            and b.id != exclude_booking_id
            and b.payment_status == PAYMENT_STATUS_PAID
            and b.status in _BLOCKING_STATUSES
            and window.overlaps_with(TimeWindow(start=as_utc(b.start_date), end=as_utc(b.end_date)))
        ]

    async def create(self, booking: Booking) -> None:
        if booking.id in self._store.bookings:
            raise ValueError(f"Booking {booking.id} already exists")
        for leg in booking.legs:
            leg.booking_id = booking.id
        self._store.bookings[booking.id] = booking
        self._store.record_undo(lambda: self._store.bookings.pop(booking.id, None))

    async def set_payment_intent(self, booking_id: str, payment_intent: str) -> None:
        booking = self._store.bookings[booking_id]
        previous = booking.payment_intent
        booking.payment_intent = payment_intent
        self._store.record_undo(lambda: setattr(booking, "payment_intent", previous))

    async def update_payment_status(self, booking_id: str, payment_status: str) -> None:
        booking = self._store.bookings[booking_id]
        previous = booking.payment_status
        booking.payment_status = payment_status
        self._store.record_undo(lambda: setattr(booking, "payment_status", previous))
