from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.application.interfaces.referral_repo import ReferralRepo
from fleet_booking.domain.entities.referral import ReferralReward
from fleet_booking.infrastructure.db.engine import to_db_datetime
from fleet_booking.infrastructure.db.tables import (
    referral_program_config,
    referral_rewards,
    referral_stats,
)


class ReferralRepoSQL(ReferralRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_config_values(self, keys: Iterable[str]) -> dict[str, Any]:
        stmt = select(referral_program_config).where(
            referral_program_config.c.key.in_(list(keys))
        )
        result = await self._session.execute(stmt)
        return {row["key"]: row["value"] for row in result.mappings().all()}

    async def create_reward(self, reward: ReferralReward) -> ReferralReward:
        reward.created_at = reward.created_at or datetime.now(timezone.utc)
        stmt = insert(referral_rewards).values(
            referrer_id=reward.referrer_id,
            referee_id=reward.referee_id,
            booking_id=reward.booking_id,
            amount=reward.amount,
            status=reward.status,
            release_condition=reward.release_condition,
            created_at=to_db_datetime(reward.created_at),
        )
        result = await self._session.execute(stmt)
        reward.id = result.inserted_primary_key[0] if result.inserted_primary_key else None
        return reward

    async def increment_pending_rewards(self, referrer_id: str, amount: Decimal) -> None:
        stmt = (
            update(referral_stats)
            .where(referral_stats.c.customer_id == referrer_id)
            .values(total_rewards_pending=referral_stats.c.total_rewards_pending + amount)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            await self._session.execute(
                insert(referral_stats).values(
                    customer_id=referrer_id,
                    total_referrals=0,
                    total_rewards_granted=Decimal("0"),
                    total_rewards_pending=amount,
                )
            )
