from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.api.deps import get_sessionmaker
from fleet_booking.application.services.booking_validation import BookingValidator
from fleet_booking.application.services.referral_discount import ReferralDiscountClaimer
from fleet_booking.application.use_cases.create_booking import CreateBookingUseCase
from fleet_booking.config import Settings, get_settings
from fleet_booking.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from fleet_booking.infrastructure.db.repositories.customer_repo_sql import CustomerRepoSQL
from fleet_booking.infrastructure.db.repositories.flight_repo_sql import FlightRepoSQL
from fleet_booking.infrastructure.db.repositories.rate_provider_sql import CachedRateProviderSQL
from fleet_booking.infrastructure.db.repositories.referral_repo_sql import ReferralRepoSQL
from fleet_booking.infrastructure.db.repositories.vehicle_repo_sql import VehicleRepoSQL
from fleet_booking.infrastructure.db.retry import retry_on_deadlock
from fleet_booking.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from fleet_booking.infrastructure.gateways.flightaware_resolver import FlightAwareResolver
from fleet_booking.infrastructure.gateways.stripe_payment_gateway import StripePaymentGateway
from fleet_booking.infrastructure.in_memory import (
    FakeFlightResolver,
    InMemoryBookingRepo,
    InMemoryCustomerRepo,
    InMemoryFlightRepo,
    InMemoryRateProvider,
    InMemoryReferralRepo,
    InMemoryStore,
    InMemoryTransactionManager,
    InMemoryVehicleRepo,
    StubPaymentGateway,
)
from fleet_booking.infrastructure.services import ClockImpl, IdGeneratorImpl


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with get_sessionmaker()() as session:
        yield session


@lru_cache(maxsize=1)
def _in_memory_bundle():
    store = InMemoryStore()
    return {
        "store": store,
        "vehicle_repo": InMemoryVehicleRepo(store),
        "booking_repo": InMemoryBookingRepo(store),
        "customer_repo": InMemoryCustomerRepo(store),
        "referral_repo": InMemoryReferralRepo(store),
        "flight_repo": InMemoryFlightRepo(store),
        "rate_provider": InMemoryRateProvider(store),
        "flight_resolver": FakeFlightResolver(),
        "payment_gateway": StubPaymentGateway(),
        "tx_manager": InMemoryTransactionManager(store),
    }


@lru_cache(maxsize=1)
def _sql_singletons():
    # El caché de tarifas y el breaker de pagos viven entre requests
    settings = get_settings()
    if settings.flight_api_key:
        flight_resolver = FlightAwareResolver(
            base_url=settings.flight_api_base_url,
            api_key=settings.flight_api_key,
            business_timezone=settings.business_timezone,
            timeout_seconds=settings.flight_api_timeout_seconds,
        )
    else:
        flight_resolver = FakeFlightResolver()
    return {
        "rate_provider": CachedRateProviderSQL(
            get_sessionmaker(), ttl_seconds=settings.rates_cache_ttl_seconds
        ),
        "payment_gateway": StripePaymentGateway(
            api_key=settings.stripe_api_key,
            currency=settings.payment_currency,
            success_url=settings.payment_success_url,
            cancel_url=settings.payment_cancel_url,
            timeout_seconds=settings.payment_timeout_seconds,
        ),
        "flight_resolver": flight_resolver,
    }


def _build_use_case(settings: Settings, components: dict, commit_runner=None) -> CreateBookingUseCase:
    validator = BookingValidator(
        vehicle_repo=components["vehicle_repo"],
        booking_repo=components["booking_repo"],
        customer_repo=components["customer_repo"],
        clock=ClockImpl(),
        business_timezone=settings.business_timezone,
    )
    claimer = ReferralDiscountClaimer(
        customer_repo=components["customer_repo"],
        referral_repo=components["referral_repo"],
    )
    return CreateBookingUseCase(
        validator=validator,
        referral_claimer=claimer,
        vehicle_repo=components["vehicle_repo"],
        booking_repo=components["booking_repo"],
        customer_repo=components["customer_repo"],
        flight_repo=components["flight_repo"],
        rate_provider=components["rate_provider"],
        flight_resolver=components["flight_resolver"],
        payment_gateway=components["payment_gateway"],
        transaction_manager=components["tx_manager"],
        id_generator=IdGeneratorImpl(),
        commit_runner=commit_runner,
    )


def get_create_booking_use_case(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> CreateBookingUseCase:
    if settings.use_in_memory:
        return _build_use_case(settings, _in_memory_bundle())

    if not session:
        raise RuntimeError("DB session not available")

    components = {
        **_sql_singletons(),
        "vehicle_repo": VehicleRepoSQL(session),
        "booking_repo": BookingRepoSQL(session),
        "customer_repo": CustomerRepoSQL(session),
        "referral_repo": ReferralRepoSQL(session),
        "flight_repo": FlightRepoSQL(session),
        "tx_manager": SQLAlchemyTransactionManager(session),
    }
    return _build_use_case(settings, components, commit_runner=retry_on_deadlock)
