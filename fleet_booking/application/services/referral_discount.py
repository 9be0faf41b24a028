"""
Referral discount claim.

The preliminary check runs outside any lock and only decides which price to
quote. The verified claim runs inside the commit transaction: it locks the
customer row, re-reads eligibility and marks the discount used before any
other write of that transaction.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from fleet_booking.application.interfaces.customer_repo import CustomerRepo
from fleet_booking.application.interfaces.referral_repo import ReferralRepo
from fleet_booking.domain.constants import (
    REFERRAL_DISCOUNT_AMOUNT_KEY,
    REFERRAL_ENABLED_KEY,
    REFERRAL_RELEASE_COMPLETED,
    REFERRAL_RELEASE_CONDITION_KEY,
    REFERRAL_RELEASE_PAID,
    REFERRAL_REWARD_AMOUNT_KEY,
)
from fleet_booking.domain.entities.referral import ReferralProgramConfig, ReferralReward
from fleet_booking.domain.errors import CustomerNotFoundError, DiscountRaceLost

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

_CONFIG_KEYS = (
    REFERRAL_ENABLED_KEY,
    REFERRAL_DISCOUNT_AMOUNT_KEY,
    REFERRAL_REWARD_AMOUNT_KEY,
    REFERRAL_RELEASE_CONDITION_KEY,
)


class ReferralClaimState(str, Enum):
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    PRELIMINARILY_ELIGIBLE = "PRELIMINARILY_ELIGIBLE"
    CLAIMED = "CLAIMED"
    LOST_RACE = "LOST_RACE"


@dataclass(frozen=True)
class ReferralClaim:
    state: ReferralClaimState
    customer_id: str | None = None
    referrer_id: str | None = None
    discount_amount: Decimal = ZERO
    config: ReferralProgramConfig = field(default_factory=ReferralProgramConfig)

    @property
    def is_discount_applied(self) -> bool:
        return self.state in (
            ReferralClaimState.PRELIMINARILY_ELIGIBLE,
            ReferralClaimState.CLAIMED,
        )


NOT_ELIGIBLE = ReferralClaim(state=ReferralClaimState.NOT_ELIGIBLE)


def parse_program_config(raw: dict[str, Any]) -> ReferralProgramConfig:
    """Normalize raw configuration values (JSON scalars) into a config object."""
    enabled_value = raw.get(REFERRAL_ENABLED_KEY)
    if enabled_value is None:
        enabled = True
    elif isinstance(enabled_value, str):
        enabled = enabled_value.strip().lower() == "true"
    else:
        enabled = enabled_value is True

    release_value = raw.get(REFERRAL_RELEASE_CONDITION_KEY)
    release_condition = (
        REFERRAL_RELEASE_PAID if release_value == REFERRAL_RELEASE_PAID else REFERRAL_RELEASE_COMPLETED
    )

    return ReferralProgramConfig(
        enabled=enabled,
        discount_amount=_parse_amount(REFERRAL_DISCOUNT_AMOUNT_KEY, raw.get(REFERRAL_DISCOUNT_AMOUNT_KEY)),
        reward_amount=_parse_amount(REFERRAL_REWARD_AMOUNT_KEY, raw.get(REFERRAL_REWARD_AMOUNT_KEY)),
        release_condition=release_condition,
    )


def _parse_amount(key: str, value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, bool):
        logger.warning("Invalid referral amount, using 0", extra={"key": key, "value": value})
        return ZERO
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        logger.warning("Invalid referral amount, using 0", extra={"key": key, "value": value})
        return ZERO
    if not amount.is_finite():
        logger.warning("Invalid referral amount, using 0", extra={"key": key, "value": value})
        return ZERO
    return amount


class ReferralDiscountClaimer:
    def __init__(self, customer_repo: CustomerRepo, referral_repo: ReferralRepo) -> None:
        self._customer_repo = customer_repo
        self._referral_repo = referral_repo

    async def get_program_config(self) -> ReferralProgramConfig:
        raw = await self._referral_repo.get_config_values(_CONFIG_KEYS)
        return parse_program_config(raw)

    async def check_preliminary(self, customer_id: str | None) -> ReferralClaim:
        """Advisory eligibility; never authorizes a discount on its own."""
        if not customer_id:
            return NOT_ELIGIBLE

        state = await self._customer_repo.get_referral_state(customer_id)
        if state is None or not state.can_use_discount:
            return NOT_ELIGIBLE

        config = await self.get_program_config()
        if not config.enabled or config.discount_amount <= 0:
            logger.info(
                "Referral discount not offered",
                extra={"customer_id": customer_id, "enabled": config.enabled},
            )
            return NOT_ELIGIBLE

        return ReferralClaim(
            state=ReferralClaimState.PRELIMINARILY_ELIGIBLE,
            customer_id=customer_id,
            referrer_id=state.referred_by_customer_id,
            discount_amount=config.discount_amount,
            config=config,
        )

    async def claim(self, preliminary: ReferralClaim) -> ReferralClaim:
        """
        Verified claim. Must run inside the commit transaction.

        Raises:
            DiscountRaceLost: eligibility no longer holds under the row lock.
            CustomerNotFoundError: the customer row disappeared.
        """
        if preliminary.state != ReferralClaimState.PRELIMINARILY_ELIGIBLE:
            return preliminary

        customer_id = preliminary.customer_id
        state = await self._customer_repo.lock_referral_state(customer_id)
        if state is None:
            raise CustomerNotFoundError(customer_id)

        if not state.can_use_discount or state.referred_by_customer_id != preliminary.referrer_id:
            logger.warning(
                "Referral discount lost to a concurrent booking",
                extra={
                    "customer_id": customer_id,
                    "state": ReferralClaimState.LOST_RACE.value,
                },
            )
            raise DiscountRaceLost(customer_id)

        await self._customer_repo.mark_referral_discount_used(customer_id)
        logger.info("Referral discount claimed", extra={"customer_id": customer_id})
        return ReferralClaim(
            state=ReferralClaimState.CLAIMED,
            customer_id=customer_id,
            referrer_id=state.referred_by_customer_id,
            discount_amount=preliminary.discount_amount,
            config=preliminary.config,
        )

    async def record_reward(self, claim: ReferralClaim, booking_id: str) -> ReferralReward | None:
        """Create the referrer's pending reward for a claimed discount."""
        if claim.state != ReferralClaimState.CLAIMED:
            return None
        amount = claim.config.reward_amount
        if amount <= 0:
            return None

        reward = await self._referral_repo.create_reward(
            ReferralReward(
                referrer_id=claim.referrer_id,
                referee_id=claim.customer_id,
                booking_id=booking_id,
                amount=amount,
                release_condition=claim.config.release_condition,
            )
        )
        await self._referral_repo.increment_pending_rewards(claim.referrer_id, amount)
        logger.info(
            "Referral reward created",
            extra={"booking_id": booking_id, "referrer_id": claim.referrer_id},
        )
        return reward
