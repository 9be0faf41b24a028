from typing import Sequence

from fleet_booking.domain.entities.booking import Booking
from fleet_booking.domain.value_objects.time_window import TimeWindow


class BookingRepo:
    async def get_by_id(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    async def find_overlapping(
        self,
        vehicle_id: str,
        window: TimeWindow,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        """
        Reservas confirmadas/activas y pagadas del vehículo cuya ventana se
        superpone estrictamente con `window`.
        """
        raise NotImplementedError

    async def create(self, booking: Booking) -> None:
        """Persiste la reserva junto con sus tramos."""
        raise NotImplementedError

    async def set_payment_intent(self, booking_id: str, payment_intent: str) -> None:
        raise NotImplementedError

    async def update_payment_status(self, booking_id: str, payment_status: str) -> None:
        raise NotImplementedError
