import asyncio
from datetime import datetime
from decimal import Decimal

from sqlalchemy import insert

from fleet_booking.api.deps import get_engine
from fleet_booking.domain.constants import (
    REFERRAL_DISCOUNT_AMOUNT_KEY,
    REFERRAL_ENABLED_KEY,
    REFERRAL_RELEASE_CONDITION_KEY,
    REFERRAL_REWARD_AMOUNT_KEY,
)
from fleet_booking.infrastructure.db.repositories.rate_provider_sql import (
    ADDON_TYPE_SECURITY_DETAIL,
    FEE_TYPE_FLEET_OWNER_COMMISSION,
    FEE_TYPE_PLATFORM_SERVICE,
)
from fleet_booking.infrastructure.db.tables import (
    addon_rates,
    metadata,
    platform_fee_rates,
    referral_program_config,
    tax_rates,
    vehicles,
)

SINCE = datetime(2024, 1, 1)


async def seed():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("Created all tables.")

        await conn.execute(
            insert(vehicles).values(
                id="veh-demo-001",
                status="AVAILABLE",
                approval_status="APPROVED",
                day_rate=Decimal("50000"),
                night_rate=Decimal("40000"),
                full_day_rate=Decimal("80000"),
                airport_pickup_rate=Decimal("25000"),
                fuel_upgrade_rate=Decimal("10000"),
                pricing_includes_fuel=False,
            )
        )
        await conn.execute(
            insert(platform_fee_rates),
            [
                {"fee_type": FEE_TYPE_PLATFORM_SERVICE, "rate_percent": Decimal("10"), "effective_since": SINCE},
                {"fee_type": FEE_TYPE_FLEET_OWNER_COMMISSION, "rate_percent": Decimal("5"), "effective_since": SINCE},
            ],
        )
        await conn.execute(insert(tax_rates).values(rate_percent=Decimal("7.5"), effective_since=SINCE))
        await conn.execute(
            insert(addon_rates).values(
                addon_type=ADDON_TYPE_SECURITY_DETAIL,
                rate_amount=Decimal("5000"),
                effective_since=SINCE,
            )
        )
        await conn.execute(
            insert(referral_program_config),
            [
                {"key": REFERRAL_ENABLED_KEY, "value": True},
                {"key": REFERRAL_DISCOUNT_AMOUNT_KEY, "value": "20000"},
                {"key": REFERRAL_REWARD_AMOUNT_KEY, "value": "5000"},
                {"key": REFERRAL_RELEASE_CONDITION_KEY, "value": "COMPLETED"},
            ],
        )

        print("Seeded demo vehicle, rates and referral config.")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed())
