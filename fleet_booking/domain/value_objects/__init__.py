"""Value Objects del dominio de reservas."""

from fleet_booking.domain.value_objects.booking_reference import BookingReference
from fleet_booking.domain.value_objects.identity import (
    AuthenticatedCustomer,
    BookingIdentity,
    GuestContact,
)
from fleet_booking.domain.value_objects.leg import Leg
from fleet_booking.domain.value_objects.platform_rates import PlatformRates
from fleet_booking.domain.value_objects.time_window import TimeWindow

__all__ = [
    "AuthenticatedCustomer",
    "BookingIdentity",
    "BookingReference",
    "GuestContact",
    "Leg",
    "PlatformRates",
    "TimeWindow",
]
