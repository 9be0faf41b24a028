"""Implementación real del generador de identificadores."""

import uuid

from fleet_booking.application.interfaces.id_generator import IdGenerator
from fleet_booking.domain.value_objects.booking_reference import BookingReference


class IdGeneratorImpl(IdGenerator):
    """
    Genera identificadores únicos criptográficamente seguros.
    """

    def generate_booking_id(self) -> str:
        """Genera un UUID v4 aleatorio."""
        return str(uuid.uuid4())

    def generate_booking_reference(self) -> str:
        """
        Genera un código de reserva.

        Formato: BK- seguido de 8 caracteres alfanuméricos en mayúsculas.
        Ejemplo: BK-A1B2C3D4
        """
        return str(BookingReference.generate())
