"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Store in-memory con vehículo, tarifas y clientes de prueba
- Reloj fijo y caso de uso de alta de reservas cableado en memoria
- Motor SQLite in-memory (aiosqlite) para los tests de integración
"""

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fleet_booking.application.interfaces.clock import FakeClock
from fleet_booking.application.services.booking_validation import BookingValidator
from fleet_booking.application.services.referral_discount import ReferralDiscountClaimer
from fleet_booking.application.use_cases.create_booking import CreateBookingUseCase
from fleet_booking.domain.constants import (
    REFERRAL_DISCOUNT_AMOUNT_KEY,
    REFERRAL_ENABLED_KEY,
    REFERRAL_RELEASE_CONDITION_KEY,
    REFERRAL_REWARD_AMOUNT_KEY,
)
from fleet_booking.domain.entities.customer import Customer
from fleet_booking.domain.entities.vehicle import Vehicle
from fleet_booking.infrastructure.circuit_breaker import payment_breaker
from fleet_booking.infrastructure.db.tables import metadata
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
from fleet_booking.infrastructure.services import IdGeneratorImpl
from tests.factories import (
    BUSINESS_TIMEZONE,
    DEFAULT_PRICING,
    DEFAULT_RATES,
    NOW,
    REFEREE_ID,
    REFERRER_ID,
    VEHICLE_ID,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# FIXTURES IN-MEMORY
# ============================================================================

@pytest.fixture(autouse=True)
def reset_payment_breaker():
    """El breaker de pagos es global al proceso; cada test arranca cerrado."""
    payment_breaker.close()
    yield
    payment_breaker.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    InMemoryVehicleRepo(store).add(Vehicle(id=VEHICLE_ID, pricing=DEFAULT_PRICING))
    InMemoryRateProvider(store).set_rates(DEFAULT_RATES)
    store.referral_config.update(
        {
            REFERRAL_ENABLED_KEY: True,
            REFERRAL_DISCOUNT_AMOUNT_KEY: "20000",
            REFERRAL_REWARD_AMOUNT_KEY: 5000,
            REFERRAL_RELEASE_CONDITION_KEY: "PAID",
        }
    )
    customers = InMemoryCustomerRepo(store)
    customers.add(Customer(id=REFERRER_ID, email="referrer@example.com", name="Ada Referrer"))
    customers.add(
        Customer(
            id=REFEREE_ID,
            email="referee@example.com",
            name="Tunde Referee",
            phone="+2348000000001",
            referred_by_customer_id=REFERRER_ID,
            credits_balance=Decimal("50000"),
        )
    )
    return store


@pytest.fixture
def payment_gateway() -> StubPaymentGateway:
    return StubPaymentGateway()


@pytest.fixture
def flight_resolver() -> FakeFlightResolver:
    return FakeFlightResolver()


@pytest.fixture
def validator(store, clock) -> BookingValidator:
    return BookingValidator(
        vehicle_repo=InMemoryVehicleRepo(store),
        booking_repo=InMemoryBookingRepo(store),
        customer_repo=InMemoryCustomerRepo(store),
        clock=clock,
        business_timezone=BUSINESS_TIMEZONE,
    )


@pytest.fixture
def claimer(store) -> ReferralDiscountClaimer:
    return ReferralDiscountClaimer(
        customer_repo=InMemoryCustomerRepo(store),
        referral_repo=InMemoryReferralRepo(store),
    )


@pytest.fixture
def use_case(store, validator, claimer, payment_gateway, flight_resolver) -> CreateBookingUseCase:
    return CreateBookingUseCase(
        validator=validator,
        referral_claimer=claimer,
        vehicle_repo=InMemoryVehicleRepo(store),
        booking_repo=InMemoryBookingRepo(store),
        customer_repo=InMemoryCustomerRepo(store),
        flight_repo=InMemoryFlightRepo(store),
        rate_provider=InMemoryRateProvider(store),
        flight_resolver=flight_resolver,
        payment_gateway=payment_gateway,
        transaction_manager=InMemoryTransactionManager(store),
        id_generator=IdGeneratorImpl(),
    )


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """
    SQLite in-memory compartido por todas las sesiones del test (StaticPool).
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session
