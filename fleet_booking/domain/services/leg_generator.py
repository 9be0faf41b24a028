"""
Generación de tramos (legs) facturables por tipo de reserva.

- DAY: un tramo de 12 horas por día calendario, desde la hora de recogida.
- NIGHT: tramos fijos 23:00 -> 05:00, uno por noche.
- FULL_DAY: tramos de 24 horas encadenados desde la hora de recogida.
- AIRPORT_PICKUP: un único tramo a partir de la llegada del vuelo.

Todos los cálculos se hacen en UTC; un datetime sin zona se interpreta como UTC.
"""

import re
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal

from fleet_booking.domain.constants import (
    AIRPORT_PICKUP_BUFFER_MINUTES,
    AIRPORT_PICKUP_DEFAULT_DRIVE_MINUTES,
    AIRPORT_PICKUP_DRIVE_TIME_MULTIPLIER,
    DAY_BOOKING_DURATION_HOURS,
    FULL_DAY_DURATION_HOURS,
    NIGHT_END_HOUR,
    NIGHT_START_HOUR,
)
from fleet_booking.domain.entities.booking import BookingType
from fleet_booking.domain.value_objects.leg import Leg
from fleet_booking.domain.value_objects.time_window import as_utc

_TIME_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(AM|PM)$", re.IGNORECASE)
_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})$")

_ONE_DAY = timedelta(hours=24)


def generate_legs(
    booking_type: BookingType,
    start_date: datetime,
    end_date: datetime,
    pickup_time: str | None = None,
    flight_arrival_time: datetime | None = None,
    drive_time_minutes: int | Decimal | None = None,
) -> list[Leg]:
    """
    Genera los tramos de una reserva en orden cronológico y sin solapes.

    Raises:
        ValueError: si falta o es inválida la hora de recogida en DAY / FULL_DAY.
    """
    start = as_utc(start_date)
    end = as_utc(end_date)

    if booking_type == BookingType.DAY:
        return _day_legs(start, end, _require_pickup_time(pickup_time, booking_type))
    if booking_type == BookingType.NIGHT:
        return _night_legs(start, end)
    if booking_type == BookingType.FULL_DAY:
        return _full_day_legs(start, end, _require_pickup_time(pickup_time, booking_type))
    if booking_type == BookingType.AIRPORT_PICKUP:
        arrival = as_utc(flight_arrival_time) if flight_arrival_time else None
        return _airport_pickup_legs(start, arrival, drive_time_minutes)
    raise ValueError(f"Unknown booking type: {booking_type}")


def parse_pickup_time(pickup_time: str) -> time:
    """
    Convierte "9 AM", "9:30 pm" o "14:30" en un `time`.

    El formato llega validado desde la capa de entrada; cualquier otro valor
    es un error del llamador.
    """
    value = pickup_time.strip()

    match = _TIME_24H.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise ValueError(f"Invalid pickup time: {pickup_time!r}")
        return time(hours, minutes)

    match = _TIME_12H.match(value)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2)) if match.group(2) else 0
        if not 1 <= hours <= 12 or minutes > 59:
            raise ValueError(f"Invalid pickup time: {pickup_time!r}")
        is_pm = match.group(3).upper() == "PM"
        if is_pm and hours != 12:
            hours += 12
        elif not is_pm and hours == 12:
            hours = 0
        return time(hours, minutes)

    raise ValueError(f"Invalid pickup time: {pickup_time!r}")


def effective_end_date(end_date: datetime, start_date: datetime) -> datetime:
    """
    Si `end_date` cae exactamente en medianoche UTC, le resta una unidad de
    tiempo para no contar un día extra; nunca devuelve algo anterior a
    `start_date`.
    """
    if end_date.time() == time(0, 0):
        adjusted = end_date - timedelta(microseconds=1)
        if adjusted < start_date:
            return start_date
        return adjusted
    return end_date


def _day_legs(start: datetime, end: datetime, pickup: time) -> list[Leg]:
    effective_end = effective_end_date(end, start)
    legs = []
    day = start.date()
    while day <= effective_end.date():
        leg_start = datetime.combine(day, pickup, tzinfo=timezone.utc)
        legs.append(
            Leg(
                leg_date=datetime.combine(day, time(0, 0), tzinfo=timezone.utc),
                leg_start_time=leg_start,
                leg_end_time=leg_start + timedelta(hours=DAY_BOOKING_DURATION_HOURS),
            )
        )
        day += timedelta(days=1)
    return legs


def _night_legs(start: datetime, end: datetime) -> list[Leg]:
    effective_end = effective_end_date(end, start)
    nights = max(1, _ceil_days(effective_end - start))

    legs = []
    for i in range(nights):
        night_date = start + timedelta(days=i)
        leg_start = night_date.replace(hour=NIGHT_START_HOUR, minute=0, second=0, microsecond=0)
        leg_end = (night_date + timedelta(days=1)).replace(
            hour=NIGHT_END_HOUR, minute=0, second=0, microsecond=0
        )
        legs.append(
            Leg(
                leg_date=night_date.replace(hour=0, minute=0, second=0, microsecond=0),
                leg_start_time=leg_start,
                leg_end_time=leg_end,
            )
        )
    return legs


def _full_day_legs(start: datetime, end: datetime, pickup: time) -> list[Leg]:
    effective_end = effective_end_date(end, start)
    base_start = datetime.combine(start.date(), pickup, tzinfo=timezone.utc)
    count = max(1, _ceil_days(effective_end - base_start))

    legs = []
    for i in range(count):
        leg_start = base_start + timedelta(hours=i * FULL_DAY_DURATION_HOURS)
        legs.append(
            Leg(
                leg_date=leg_start,
                leg_start_time=leg_start,
                leg_end_time=leg_start + timedelta(hours=FULL_DAY_DURATION_HOURS),
            )
        )
    return legs


def _airport_pickup_legs(
    start: datetime,
    flight_arrival_time: datetime | None,
    drive_time_minutes: int | Decimal | None,
) -> list[Leg]:
    base_time = flight_arrival_time or start
    leg_start = base_time + timedelta(minutes=AIRPORT_PICKUP_BUFFER_MINUTES)

    drive_minutes = Decimal(str(drive_time_minutes)) if drive_time_minutes else Decimal("0")
    if drive_minutes <= 0:
        drive_minutes = Decimal(AIRPORT_PICKUP_DEFAULT_DRIVE_MINUTES)
    buffered_us = drive_minutes * AIRPORT_PICKUP_DRIVE_TIME_MULTIPLIER * 60 * 1_000_000

    return [
        Leg(
            leg_date=start,
            leg_start_time=leg_start,
            leg_end_time=leg_start + timedelta(microseconds=int(buffered_us)),
        )
    ]


def _ceil_days(span: timedelta) -> int:
    return -(-span // _ONE_DAY)


def _require_pickup_time(pickup_time: str | None, booking_type: BookingType) -> time:
    if not pickup_time:
        raise ValueError(f"pickup_time is required for {booking_type.value} bookings")
    return parse_pickup_time(pickup_time)
