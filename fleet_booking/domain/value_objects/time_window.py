"""Value Object TimeWindow - ventana de tiempo solicitada para una reserva."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def as_utc(value: datetime) -> datetime:
    """Instante aware en UTC; los valores naive se interpretan como UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeWindow:
    """
    Value Object inmutable que representa una ventana [start, end).

    Attributes:
        start: Instante de inicio.
        end: Instante de fin.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"start debe ser anterior a end: {self.start} > {self.end}"
            )

    @property
    def duration(self) -> timedelta:
        """Retorna la duración de la ventana."""
        return self.end - self.start

    def buffered(self, hours: int) -> "TimeWindow":
        """Extiende la ventana `hours` horas hacia cada lado."""
        pad = timedelta(hours=hours)
        return TimeWindow(start=self.start - pad, end=self.end + pad)

    def overlaps_with(self, other: "TimeWindow") -> bool:
        """
        Comparación estricta: dos ventanas que solo se tocan en un extremo
        no se superponen.
        """
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
