"""Value Object BookingReference - código legible de la reserva."""

import secrets
import string
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingReference:
    """
    Código de reserva mostrado al cliente.

    Formato: prefijo BK- seguido de 8 caracteres alfanuméricos (ej: BK-A1B2C3D4).
    """

    value: str

    PREFIX = "BK-"
    CODE_LENGTH = 8
    ALLOWED_CHARS = string.ascii_uppercase + string.digits

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("booking_reference no puede estar vacío")

        if len(self.value) > 32:
            raise ValueError(f"booking_reference excede 32 caracteres: {len(self.value)}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> "BookingReference":
        """Genera un nuevo código aleatorio."""
        code = "".join(secrets.choice(cls.ALLOWED_CHARS) for _ in range(cls.CODE_LENGTH))
        return cls(value=f"{cls.PREFIX}{code}")
