"""Implementación in-memory del repositorio de clientes."""

from fleet_booking.application.interfaces.customer_repo import CustomerRepo
from fleet_booking.domain.entities.customer import Customer, CustomerReferralState
from fleet_booking.infrastructure.in_memory.store import InMemoryStore


class InMemoryCustomerRepo(CustomerRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, customer_id: str) -> Customer | None:
        return self._store.customers.get(customer_id)

    async def get_by_email(self, email: str) -> Customer | None:
        return next(
            (c for c in self._store.customers.values() if c.email == email),
            None,
        )

    async def get_referral_state(self, customer_id: str) -> CustomerReferralState | None:
        customer = self._store.customers.get(customer_id)
        return _to_state(customer) if customer else None

    async def lock_referral_state(self, customer_id: str) -> CustomerReferralState | None:
        await self._store.lock_row(f"customer:{customer_id}")
        customer = self._store.customers.get(customer_id)
        return _to_state(customer) if customer else None

    async def mark_referral_discount_used(self, customer_id: str) -> None:
        customer = self._store.customers[customer_id]
        previous = customer.referral_discount_used
        customer.referral_discount_used = True

        def undo() -> None:
            customer.referral_discount_used = previous

        self._store.record_undo(undo)

    def add(self, customer: Customer) -> None:
        self._store.customers[customer.id] = customer


def _to_state(customer: Customer) -> CustomerReferralState:
    return CustomerReferralState(
        customer_id=customer.id,
        referred_by_customer_id=customer.referred_by_customer_id,
        referral_discount_used=customer.referral_discount_used,
    )
