from typing import Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.application.interfaces.booking_repo import BookingRepo
from fleet_booking.domain.constants import (
    BOOKING_STATUS_ACTIVE,
    BOOKING_STATUS_CONFIRMED,
    PAYMENT_STATUS_PAID,
)
from fleet_booking.domain.entities.booking import Booking, BookingLegRecord, BookingType
from fleet_booking.domain.value_objects.time_window import TimeWindow
from fleet_booking.infrastructure.db.engine import from_db_datetime, to_db_datetime
from fleet_booking.infrastructure.db.tables import booking_legs, bookings

_DATETIME_FIELDS = ("start_date", "end_date")
_LEG_DATETIME_FIELDS = ("leg_date", "leg_start_time", "leg_end_time")


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, booking_id: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        legs_stmt = (
            select(booking_legs)
            .where(booking_legs.c.booking_id == booking_id)
            .order_by(booking_legs.c.leg_start_time)
        )
        legs_result = await self._session.execute(legs_stmt)
        booking = _to_booking(row)
        booking.legs = [_to_leg(leg_row) for leg_row in legs_result.mappings().all()]
        return booking

    async def find_overlapping(
        self,
        vehicle_id: str,
        window: TimeWindow,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        stmt = select(bookings).where(
            bookings.c.vehicle_id == vehicle_id,
            bookings.c.payment_status == PAYMENT_STATUS_PAID,
            bookings.c.status.in_([BOOKING_STATUS_CONFIRMED, BOOKING_STATUS_ACTIVE]),
            bookings.c.start_date < to_db_datetime(window.end),
            bookings.c.end_date > to_db_datetime(window.start),
        )
        if exclude_booking_id:
            stmt = stmt.where(bookings.c.id != exclude_booking_id)
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def create(self, booking: Booking) -> None:
        values = {column.name: getattr(booking, column.name) for column in bookings.columns}
        values["booking_type"] = booking.booking_type.value
        for name in _DATETIME_FIELDS:
            values[name] = to_db_datetime(values[name])
        await self._session.execute(insert(bookings).values(values))

        if booking.legs:
            leg_values = []
            for leg in booking.legs:
                leg.booking_id = booking.id
                row = {
                    column.name: getattr(leg, column.name)
                    for column in booking_legs.columns
                    if column.name != "id"
                }
                for name in _LEG_DATETIME_FIELDS:
                    row[name] = to_db_datetime(row[name])
                leg_values.append(row)
            await self._session.execute(insert(booking_legs), leg_values)

    async def set_payment_intent(self, booking_id: str, payment_intent: str) -> None:
        stmt = (
            update(bookings)
            .where(bookings.c.id == booking_id)
            .values(payment_intent=payment_intent)
        )
        await self._session.execute(stmt)

    async def update_payment_status(self, booking_id: str, payment_status: str) -> None:
        stmt = (
            update(bookings)
            .where(bookings.c.id == booking_id)
            .values(payment_status=payment_status)
        )
        await self._session.execute(stmt)


def _to_booking(row) -> Booking:
    values = {column.name: row[column.name] for column in bookings.columns}
    values["booking_type"] = BookingType(values["booking_type"])
    for name in _DATETIME_FIELDS:
        values[name] = from_db_datetime(values[name])
    return Booking(**values)


def _to_leg(row) -> BookingLegRecord:
    values = {column.name: row[column.name] for column in booking_legs.columns}
    for name in _LEG_DATETIME_FIELDS:
        values[name] = from_db_datetime(values[name])
    return BookingLegRecord(**values)
