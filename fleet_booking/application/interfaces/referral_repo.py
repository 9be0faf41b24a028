from decimal import Decimal
from typing import Any, Iterable

from fleet_booking.domain.entities.referral import ReferralReward


class ReferralRepo:
    async def get_config_values(self, keys: Iterable[str]) -> dict[str, Any]:
        """Valores crudos (JSON) de la configuración del programa."""
        raise NotImplementedError

    async def create_reward(self, reward: ReferralReward) -> ReferralReward:
        raise NotImplementedError

    async def increment_pending_rewards(self, referrer_id: str, amount: Decimal) -> None:
        raise NotImplementedError
