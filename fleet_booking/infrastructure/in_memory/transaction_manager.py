from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fleet_booking.application.interfaces.transaction_manager import TransactionManager
from fleet_booking.infrastructure.in_memory.store import InMemoryStore


class InMemoryTransactionManager(TransactionManager):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._store.current_transaction() is not None:
            yield
            return

        tx, token = self._store.begin()
        try:
            yield
        except BaseException:
            tx.rollback()
            raise
        finally:
            self._store.release_locks(tx)
            self._store.end(token)
