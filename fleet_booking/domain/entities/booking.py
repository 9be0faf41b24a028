"""Entidad Booking - la reserva persistida y sus tramos."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from fleet_booking.domain.constants import (
    BOOKING_STATUS_PENDING,
    PAYMENT_STATUS_UNPAID,
    REFERRAL_STATUS_NONE,
)


class BookingType(str, Enum):
    """Tipos de reserva soportados."""

    DAY = "DAY"
    NIGHT = "NIGHT"
    FULL_DAY = "FULL_DAY"
    AIRPORT_PICKUP = "AIRPORT_PICKUP"


@dataclass
class BookingLegRecord:
    """Tramo persistido con su reparto financiero."""

    leg_date: datetime
    leg_start_time: datetime
    leg_end_time: datetime
    total_daily_price: Decimal
    items_net_value_for_leg: Decimal
    platform_commission_rate_on_leg: Decimal
    platform_commission_amount_on_leg: Decimal
    fleet_owner_earning_for_leg: Decimal
    id: int | None = None
    booking_id: str | None = None


@dataclass
class Booking:
    """
    Agregado de reserva.

    Se crea en estado PENDING / UNPAID dentro de la transacción de alta.
    La confirmación del pago ocurre fuera de este flujo; si la autorización
    falla tras el commit, el estado de pago pasa a FAILED.
    """

    # Identificadores
    id: str
    booking_reference: str
    vehicle_id: str
    booking_type: BookingType

    # Ventana
    start_date: datetime
    end_date: datetime
    pickup_location: str
    return_location: str

    # Identidad (exactamente una)
    customer_id: str | None = None
    guest_email: str | None = None
    guest_name: str | None = None
    guest_phone: str | None = None

    # Estados
    status: str = BOOKING_STATUS_PENDING
    payment_status: str = PAYMENT_STATUS_UNPAID
    payment_intent: str | None = None

    # Vuelo
    flight_number: str | None = None
    flight_id: str | None = None
    special_requests: str | None = None

    # Financieros
    total_amount: Decimal = Decimal("0")
    net_total: Decimal = Decimal("0")
    security_detail_cost: Decimal | None = None
    fuel_upgrade_cost: Decimal | None = None
    platform_fee_base: Decimal = Decimal("0")
    platform_customer_service_fee_rate_percent: Decimal = Decimal("0")
    platform_customer_service_fee_amount: Decimal = Decimal("0")
    subtotal_before_discounts: Decimal = Decimal("0")
    subtotal_before_vat: Decimal = Decimal("0")
    vat_rate_percent: Decimal = Decimal("0")
    vat_amount: Decimal = Decimal("0")
    platform_fleet_owner_commission_rate_percent: Decimal = Decimal("0")
    platform_fleet_owner_commission_amount: Decimal = Decimal("0")
    fleet_owner_payout_amount_net: Decimal = Decimal("0")

    # Referidos y créditos
    referral_referrer_customer_id: str | None = None
    referral_discount_amount: Decimal = Decimal("0")
    referral_status: str = REFERRAL_STATUS_NONE
    referral_credits_used: Decimal = Decimal("0")
    referral_credits_reserved: Decimal = Decimal("0")

    legs: list[BookingLegRecord] = field(default_factory=list)

    @property
    def is_guest(self) -> bool:
        return self.customer_id is None
