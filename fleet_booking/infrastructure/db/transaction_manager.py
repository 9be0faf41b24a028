from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.application.interfaces.transaction_manager import TransactionManager


class SQLAlchemyTransactionManager(TransactionManager):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        # Las lecturas previas abren una transacción implícita; se cierra para
        # que el bloque corra en una transacción propia.
        if self._session.in_transaction():
            await self._session.commit()
        async with self._session.begin():
            yield
