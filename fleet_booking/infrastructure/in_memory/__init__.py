"""Implementaciones in-memory para desarrollo y testing."""

from fleet_booking.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from fleet_booking.infrastructure.in_memory.customer_repo import InMemoryCustomerRepo
from fleet_booking.infrastructure.in_memory.flight_repo import InMemoryFlightRepo
from fleet_booking.infrastructure.in_memory.flight_resolver import FakeFlightResolver
from fleet_booking.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from fleet_booking.infrastructure.in_memory.rate_provider import InMemoryRateProvider
from fleet_booking.infrastructure.in_memory.referral_repo import InMemoryReferralRepo
from fleet_booking.infrastructure.in_memory.store import InMemoryStore
from fleet_booking.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager
from fleet_booking.infrastructure.in_memory.vehicle_repo import InMemoryVehicleRepo

__all__ = [
    # Store
    "InMemoryStore",
    # Repositories
    "InMemoryBookingRepo",
    "InMemoryCustomerRepo",
    "InMemoryFlightRepo",
    "InMemoryReferralRepo",
    "InMemoryVehicleRepo",
    "InMemoryRateProvider",
    # Gateways
    "FakeFlightResolver",
    "StubPaymentGateway",
    # Infrastructure
    "InMemoryTransactionManager",
]
