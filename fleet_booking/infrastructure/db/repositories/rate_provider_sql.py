import asyncio
import logging
import time
from datetime import datetime, timezone

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleet_booking.application.interfaces.rate_provider import RateProvider
from fleet_booking.domain.errors import RatesUnavailableError
from fleet_booking.domain.value_objects.platform_rates import PlatformRates
from fleet_booking.infrastructure.db.engine import to_db_datetime
from fleet_booking.infrastructure.db.tables import addon_rates, platform_fee_rates, tax_rates

logger = logging.getLogger(__name__)

FEE_TYPE_PLATFORM_SERVICE = "PLATFORM_SERVICE_FEE"
FEE_TYPE_FLEET_OWNER_COMMISSION = "FLEET_OWNER_COMMISSION"
ADDON_TYPE_SECURITY_DETAIL = "SECURITY_DETAIL"


def _active_at(table, moment: datetime):
    return (
        table.c.effective_since <= moment,
        or_(table.c.effective_until.is_(None), table.c.effective_until > moment),
    )


class CachedRateProviderSQL(RateProvider):
    """
    Rate provider backed by the rate tables.

    Uses its own session so it can run concurrently with lookups on the
    request session. The resolved snapshot is cached for `ttl_seconds`.
    """

    def __init__(self, session_maker: async_sessionmaker, ttl_seconds: float = 300.0) -> None:
        self._session_maker = session_maker
        self._ttl_seconds = ttl_seconds
        self._cached: PlatformRates | None = None
        self._cached_at = 0.0
        self._lock = asyncio.Lock()

    def clear_cache(self) -> None:
        self._cached = None
        self._cached_at = 0.0

    async def get_current_rates(self) -> PlatformRates:
        async with self._lock:
            if self._cached is not None and time.monotonic() - self._cached_at < self._ttl_seconds:
                logger.debug("Returning cached rates")
                return self._cached

            async with self._session_maker() as session:
                rates = await self._load(session)

            self._cached = rates
            self._cached_at = time.monotonic()
            logger.debug(
                "Rates fetched and cached",
                extra={
                    "platform_fee": str(rates.customer_service_fee_rate_percent),
                    "fleet_owner_commission": str(rates.fleet_owner_commission_rate_percent),
                    "vat": str(rates.vat_rate_percent),
                    "security_detail": str(rates.security_detail_rate),
                },
            )
            return rates

    async def _load(self, session: AsyncSession) -> PlatformRates:
        now = to_db_datetime(datetime.now(timezone.utc))

        fee_rows = (
            await session.execute(
                select(platform_fee_rates)
                .where(
                    platform_fee_rates.c.fee_type.in_(
                        [FEE_TYPE_PLATFORM_SERVICE, FEE_TYPE_FLEET_OWNER_COMMISSION]
                    ),
                    *_active_at(platform_fee_rates, now),
                )
                .order_by(platform_fee_rates.c.effective_since.desc())
            )
        ).mappings().all()
        vat_row = (
            await session.execute(
                select(tax_rates)
                .where(*_active_at(tax_rates, now))
                .order_by(tax_rates.c.effective_since.desc())
                .limit(1)
            )
        ).mappings().first()
        security_row = (
            await session.execute(
                select(addon_rates)
                .where(
                    addon_rates.c.addon_type == ADDON_TYPE_SECURITY_DETAIL,
                    *_active_at(addon_rates, now),
                )
                .order_by(addon_rates.c.effective_since.desc())
                .limit(1)
            )
        ).mappings().first()

        # Filas ordenadas por vigencia descendente: la primera de cada tipo gana
        service_fee = next((r for r in fee_rows if r["fee_type"] == FEE_TYPE_PLATFORM_SERVICE), None)
        commission = next(
            (r for r in fee_rows if r["fee_type"] == FEE_TYPE_FLEET_OWNER_COMMISSION), None
        )

        if service_fee is None:
            raise RatesUnavailableError("platform service fee")
        if commission is None:
            raise RatesUnavailableError("fleet owner commission")
        if vat_row is None:
            raise RatesUnavailableError("VAT")
        if security_row is None:
            raise RatesUnavailableError("security detail")

        return PlatformRates(
            customer_service_fee_rate_percent=service_fee["rate_percent"],
            fleet_owner_commission_rate_percent=commission["rate_percent"],
            vat_rate_percent=vat_row["rate_percent"],
            security_detail_rate=security_row["rate_amount"],
        )
