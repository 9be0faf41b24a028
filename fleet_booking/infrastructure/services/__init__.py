"""Servicios de infraestructura."""

from fleet_booking.infrastructure.services.clock_impl import ClockImpl
from fleet_booking.infrastructure.services.id_generator_impl import IdGeneratorImpl

__all__ = [
    "ClockImpl",
    "IdGeneratorImpl",
]
