"""DTOs de la capa de aplicación."""

from fleet_booking.application.dtos.booking_dto import (
    CreateBookingRequestDTO,
    CreateBookingResultDTO,
)

__all__ = ["CreateBookingRequestDTO", "CreateBookingResultDTO"]
