"""Reglas de validación previas a la transacción de alta de reservas."""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from fleet_booking.application.interfaces.booking_repo import BookingRepo
from fleet_booking.application.interfaces.clock import Clock
from fleet_booking.application.interfaces.customer_repo import CustomerRepo
from fleet_booking.application.interfaces.vehicle_repo import VehicleRepo
from fleet_booking.domain.constants import (
    AIRPORT_PICKUP_MIN_ADVANCE_MINUTES,
    BOOKING_BUFFER_HOURS,
    PRICE_TOLERANCE,
    SAME_DAY_BOOKING_CUTOFF_HOUR,
)
from fleet_booking.domain.entities.booking import BookingType
from fleet_booking.domain.entities.vehicle import (
    Vehicle,
    VehicleApprovalStatus,
    VehicleStatus,
)
from fleet_booking.domain.errors import (
    FieldError,
    PriceMismatchError,
    ValidationFailure,
    VehicleNotAvailableError,
    VehicleNotFoundError,
)
from fleet_booking.domain.value_objects.identity import (
    AuthenticatedCustomer,
    BookingIdentity,
    GuestContact,
)
from fleet_booking.domain.value_objects.time_window import TimeWindow, as_utc

_STATUS_MESSAGES = {
    VehicleStatus.BOOKED: "This vehicle is currently booked",
    VehicleStatus.HOLD: "This vehicle is temporarily unavailable",
    VehicleStatus.IN_SERVICE: "This vehicle is currently under maintenance",
}


def resolve_identity(
    customer_id: str | None,
    guest_email: str | None,
    guest_name: str | None,
    guest_phone: str | None,
) -> BookingIdentity:
    """
    Decide which identity variant the request carries.

    Exactly one of an authenticated customer id or a complete guest contact
    must be present.
    """
    guest_fields = {
        "guest_email": guest_email,
        "guest_name": guest_name,
        "guest_phone": guest_phone,
    }
    has_guest_data = any(guest_fields.values())

    if customer_id:
        if has_guest_data:
            raise ValidationFailure(
                [FieldError("guest_email", "Guest details must not be sent by a logged-in customer")]
            )
        return AuthenticatedCustomer(customer_id=customer_id)

    missing = [name for name, value in guest_fields.items() if not value]
    if missing:
        raise ValidationFailure(
            [FieldError(name, "This field is required for guest bookings") for name in missing]
        )
    return GuestContact(email=guest_email, name=guest_name, phone=guest_phone)


class BookingValidator:
    def __init__(
        self,
        vehicle_repo: VehicleRepo,
        booking_repo: BookingRepo,
        customer_repo: CustomerRepo,
        clock: Clock,
        business_timezone: str = "UTC",
    ) -> None:
        self._vehicle_repo = vehicle_repo
        self._booking_repo = booking_repo
        self._customer_repo = customer_repo
        self._clock = clock
        self._tz = ZoneInfo(business_timezone)
        self._logger = logging.getLogger(__name__)

    def validate_dates(
        self,
        booking_type: BookingType,
        start_date: datetime,
        end_date: datetime,
    ) -> None:
        errors: list[FieldError] = []
        now = as_utc(self._clock.now())
        start = as_utc(start_date)
        end = as_utc(end_date)

        if end <= start:
            errors.append(FieldError("end_date", "End date must be after start date"))

        if booking_type == BookingType.AIRPORT_PICKUP:
            earliest = now + timedelta(minutes=AIRPORT_PICKUP_MIN_ADVANCE_MINUTES)
            if start < earliest:
                errors.append(
                    FieldError(
                        "start_date",
                        "Airport pickup bookings require at least 1 hour advance notice",
                    )
                )
        else:
            if start < now:
                errors.append(FieldError("start_date", "Booking start time cannot be in the past"))

            if booking_type == BookingType.DAY:
                local_now = now.astimezone(self._tz)
                local_start = start.astimezone(self._tz)
                is_same_day = local_start.date() == local_now.date()
                if is_same_day and local_now.hour >= SAME_DAY_BOOKING_CUTOFF_HOUR:
                    errors.append(
                        FieldError(
                            "start_date",
                            "Same-day DAY bookings cannot be made at or after "
                            f"{SAME_DAY_BOOKING_CUTOFF_HOUR}:00",
                        )
                    )

        if errors:
            raise ValidationFailure(errors)

    async def check_vehicle_availability(
        self,
        vehicle_id: str,
        start_date: datetime,
        end_date: datetime,
        exclude_booking_id: str | None = None,
    ) -> Vehicle:
        vehicle = await self._vehicle_repo.get_by_id(vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundError(vehicle_id)

        if vehicle.approval_status != VehicleApprovalStatus.APPROVED:
            self._logger.info(
                "Attempt to book unapproved vehicle",
                extra={"vehicle_id": vehicle_id, "approval_status": vehicle.approval_status.value},
            )
            raise VehicleNotAvailableError(vehicle_id, "This vehicle is not available for booking")

        if vehicle.status != VehicleStatus.AVAILABLE:
            self._logger.info(
                "Attempt to book unavailable vehicle",
                extra={"vehicle_id": vehicle_id, "status": vehicle.status.value},
            )
            raise VehicleNotAvailableError(
                vehicle_id,
                _STATUS_MESSAGES.get(vehicle.status, "This vehicle is not available for booking"),
            )

        window = TimeWindow(start=as_utc(start_date), end=as_utc(end_date))
        conflicts = await self._booking_repo.find_overlapping(
            vehicle_id,
            window.buffered(BOOKING_BUFFER_HOURS),
            exclude_booking_id=exclude_booking_id,
        )
        if conflicts:
            self._logger.info(
                "Vehicle availability conflict found",
                extra={
                    "vehicle_id": vehicle_id,
                    "requested_window": str(window),
                    "conflicting_references": [b.booking_reference for b in conflicts],
                },
            )
            raise VehicleNotAvailableError(
                vehicle_id,
                "Vehicle is not available for the selected dates. "
                "Please choose different dates or another vehicle.",
            )
        return vehicle

    async def validate_guest_email(self, identity: BookingIdentity) -> None:
        if not isinstance(identity, GuestContact):
            return
        existing = await self._customer_repo.get_by_email(identity.email)
        if existing is not None:
            self._logger.info("Guest email already registered", extra={"customer_id": existing.id})
            raise ValidationFailure(
                [
                    FieldError(
                        "guest_email",
                        "This email is already registered. Please log in to make a booking.",
                    )
                ]
            )

    def validate_price_match(self, client_total: Decimal | None, server_total: Decimal) -> None:
        """A missing client total skips the check."""
        if client_total is None:
            return
        difference = abs(client_total - server_total)
        if difference > PRICE_TOLERANCE:
            self._logger.warning(
                "Price mismatch detected",
                extra={
                    "client_total": str(client_total),
                    "server_total": str(server_total),
                    "difference": str(difference),
                },
            )
            raise PriceMismatchError(str(client_total), str(server_total))
