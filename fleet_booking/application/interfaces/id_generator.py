"""Interface IdGenerator - Puerto para generación de identificadores."""

from abc import ABC, abstractmethod


class IdGenerator(ABC):
    @abstractmethod
    def generate_booking_id(self) -> str:
        """Identificador interno de la reserva (también llave de idempotencia del pago)."""
        raise NotImplementedError

    @abstractmethod
    def generate_booking_reference(self) -> str:
        """Código legible para el cliente."""
        raise NotImplementedError
