"""Contexto de vuelo para recogidas en aeropuerto."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FlightContext:
    """Datos resueltos del vuelo y del trayecto al destino."""

    flight_id: str
    flight_number: str
    arrival_time: datetime
    origin_code: str | None = None
    origin_iata: str | None = None
    origin_name: str | None = None
    destination_code: str | None = None
    destination_iata: str | None = None
    destination_name: str | None = None
    destination_city: str | None = None
    drive_time_minutes: int | None = None
