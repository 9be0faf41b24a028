"""Value Object Leg - un tramo facturable de una reserva."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Leg:
    """
    Tramo contiguo y facturable dentro de una reserva.

    Se genera antes de la transacción, se usa para el cálculo financiero y
    se persiste sin cambios.

    Attributes:
        leg_date: Fecha calendario de referencia del tramo.
        leg_start_time: Instante de inicio.
        leg_end_time: Instante de fin (siempre posterior al inicio).
    """

    leg_date: datetime
    leg_start_time: datetime
    leg_end_time: datetime

    def __post_init__(self) -> None:
        if self.leg_end_time <= self.leg_start_time:
            raise ValueError(
                f"leg_end_time debe ser posterior a leg_start_time: "
                f"{self.leg_start_time} >= {self.leg_end_time}"
            )
