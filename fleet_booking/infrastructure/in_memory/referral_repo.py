from decimal import Decimal
from typing import Any, Iterable

from fleet_booking.application.interfaces.referral_repo import ReferralRepo
from fleet_booking.domain.entities.referral import ReferralReward
from fleet_booking.infrastructure.in_memory.store import InMemoryStore


class InMemoryReferralRepo(ReferralRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_config_values(self, keys: Iterable[str]) -> dict[str, Any]:
        return {k: self._store.referral_config[k] for k in keys if k in self._store.referral_config}

    async def create_reward(self, reward: ReferralReward) -> ReferralReward:
        reward.id = len(self._store.referral_rewards) + 1
        self._store.referral_rewards.append(reward)
        self._store.record_undo(lambda: self._store.referral_rewards.remove(reward))
        return reward

    async def increment_pending_rewards(self, referrer_id: str, amount: Decimal) -> None:
        totals = self._store.referral_pending_totals
        had_entry = referrer_id in totals
        previous = totals.get(referrer_id, Decimal("0"))
        totals[referrer_id] = previous + amount

        def undo() -> None:
            if had_entry:
                totals[referrer_id] = previous
            else:
                totals.pop(referrer_id, None)

        self._store.record_undo(undo)
