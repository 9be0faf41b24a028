"""Entidades del dominio de reservas."""

from fleet_booking.domain.entities.booking import Booking, BookingLegRecord, BookingType
from fleet_booking.domain.entities.customer import Customer, CustomerReferralState
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.domain.entities.referral import ReferralProgramConfig, ReferralReward
from fleet_booking.domain.entities.vehicle import (
    Vehicle,
    VehicleApprovalStatus,
    VehiclePricing,
    VehicleStatus,
)

__all__ = [
    # Booking
    "Booking",
    "BookingLegRecord",
    "BookingType",
    # Customer
    "Customer",
    "CustomerReferralState",
    # Flight
    "FlightContext",
    # Referral
    "ReferralProgramConfig",
    "ReferralReward",
    # Vehicle
    "Vehicle",
    "VehicleApprovalStatus",
    "VehiclePricing",
    "VehicleStatus",
]
