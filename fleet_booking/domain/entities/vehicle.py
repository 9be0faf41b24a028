"""Entidad Vehicle y su snapshot de precios."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class VehicleStatus(str, Enum):
    """Estado operativo del vehículo."""

    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    HOLD = "HOLD"
    IN_SERVICE = "IN_SERVICE"


class VehicleApprovalStatus(str, Enum):
    """Estado de aprobación del vehículo en la plataforma."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class VehiclePricing:
    """
    Snapshot de tarifas por tramo del vehículo.

    Se lee una sola vez por intento de reserva.
    """

    day_rate: Decimal
    night_rate: Decimal
    full_day_rate: Decimal
    airport_pickup_rate: Decimal
    fuel_upgrade_rate: Decimal | None = None
    pricing_includes_fuel: bool = False


@dataclass
class Vehicle:
    """Vehículo de la flota."""

    id: str
    status: VehicleStatus = VehicleStatus.AVAILABLE
    approval_status: VehicleApprovalStatus = VehicleApprovalStatus.APPROVED
    pricing: VehiclePricing | None = None

    @property
    def is_bookable(self) -> bool:
        return (
            self.approval_status == VehicleApprovalStatus.APPROVED
            and self.status == VehicleStatus.AVAILABLE
        )
