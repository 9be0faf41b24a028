from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.application.interfaces.customer_repo import CustomerRepo
from fleet_booking.domain.entities.customer import Customer, CustomerReferralState
from fleet_booking.infrastructure.db.tables import customers


class CustomerRepoSQL(CustomerRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, customer_id: str) -> Customer | None:
        stmt = select(customers).where(customers.c.id == customer_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_customer(row) if row else None

    async def get_by_email(self, email: str) -> Customer | None:
        stmt = select(customers).where(customers.c.email == email).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_customer(row) if row else None

    async def get_referral_state(self, customer_id: str) -> CustomerReferralState | None:
        return await self._read_referral_state(customer_id, for_update=False)

    async def lock_referral_state(self, customer_id: str) -> CustomerReferralState | None:
        return await self._read_referral_state(customer_id, for_update=True)

    async def mark_referral_discount_used(self, customer_id: str) -> None:
        stmt = (
            update(customers)
            .where(customers.c.id == customer_id)
            .values(referral_discount_used=True)
        )
        await self._session.execute(stmt)

    async def _read_referral_state(
        self, customer_id: str, for_update: bool
    ) -> CustomerReferralState | None:
        stmt = select(
            customers.c.id,
            customers.c.referred_by_customer_id,
            customers.c.referral_discount_used,
        ).where(customers.c.id == customer_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return CustomerReferralState(
            customer_id=row["id"],
            referred_by_customer_id=row["referred_by_customer_id"],
            referral_discount_used=bool(row["referral_discount_used"]),
        )


def _to_customer(row) -> Customer:
    return Customer(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        phone=row["phone"],
        referred_by_customer_id=row["referred_by_customer_id"],
        referral_discount_used=bool(row["referral_discount_used"]),
        credits_balance=row["credits_balance"],
    )
