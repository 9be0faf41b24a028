"""Entidades del programa de referidos."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fleet_booking.domain.constants import (
    REFERRAL_RELEASE_COMPLETED,
    REFERRAL_REWARD_STATUS_PENDING,
)


@dataclass(frozen=True)
class ReferralProgramConfig:
    """Configuración vigente del programa, ya normalizada."""

    enabled: bool = True
    discount_amount: Decimal = Decimal("0")
    reward_amount: Decimal = Decimal("0")
    release_condition: str = REFERRAL_RELEASE_COMPLETED


@dataclass
class ReferralReward:
    """Recompensa pendiente para quien refirió, ligada a una reserva."""

    referrer_id: str
    referee_id: str
    booking_id: str
    amount: Decimal
    release_condition: str = REFERRAL_RELEASE_COMPLETED
    status: str = REFERRAL_REWARD_STATUS_PENDING
    id: int | None = None
    created_at: datetime | None = None
