"""DTOs para creación de reservas."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fleet_booking.domain.entities.booking import BookingType


@dataclass(frozen=True)
class CreateBookingRequestDTO:
    """DTO con la solicitud de reserva ya validada en forma."""

    # Vehículo y ventana
    vehicle_id: str
    booking_type: BookingType
    start_date: datetime
    end_date: datetime
    pickup_address: str
    drop_off_address: str | None = None
    pickup_time: str | None = None

    # Aeropuerto
    flight_number: str | None = None

    # Adicionales
    include_security_detail: bool = False
    requires_full_tank: bool = False
    use_credits: Decimal | None = None
    special_requests: str | None = None

    # Total cotizado por el cliente
    client_total_amount: Decimal | None = None

    # Invitado
    guest_email: str | None = None
    guest_name: str | None = None
    guest_phone: str | None = None

    @property
    def return_location(self) -> str:
        """Si no se indica destino, se devuelve en el punto de recogida."""
        return self.drop_off_address or self.pickup_address


@dataclass(frozen=True)
class CreateBookingResultDTO:
    """DTO con el resultado de una reserva creada."""

    booking_id: str
    booking_reference: str
    checkout_url: str
    total_amount: Decimal
