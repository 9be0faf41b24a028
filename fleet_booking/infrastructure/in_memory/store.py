"""
Almacén compartido por los repositorios in-memory.

Cada transacción (una por tarea, vía contextvars) lleva un registro de
deshacer y los bloqueos de fila que tiene tomados. Los bloqueos se liberan
solo al terminar la transacción, igual que SELECT ... FOR UPDATE, y se
descartan cuando ninguna transacción los tiene ni los espera.
"""

import asyncio
from contextvars import ContextVar
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

from fleet_booking.domain.entities.booking import Booking
from fleet_booking.domain.entities.customer import Customer
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.domain.entities.referral import ReferralReward
from fleet_booking.domain.entities.vehicle import Vehicle


@dataclass
class InMemoryTransaction:
    undo_log: list[Callable[[], None]] = field(default_factory=list)
    held_locks: list[str] = field(default_factory=list)

    def rollback(self) -> None:
        while self.undo_log:
            self.undo_log.pop()()


_current_transaction: ContextVar[InMemoryTransaction | None] = ContextVar(
    "in_memory_transaction", default=None
)


class InMemoryStore:
    def __init__(self) -> None:
        self.vehicles: dict[str, Vehicle] = {}
        self.customers: dict[str, Customer] = {}
        self.bookings: dict[str, Booking] = {}
        self.flights: dict[str, FlightContext] = {}
        self.referral_config: dict[str, Any] = {}
        self.referral_rewards: list[ReferralReward] = []
        self.referral_pending_totals: dict[str, Decimal] = {}
        self.rates: dict[str, Decimal] = {}
        self._row_locks: dict[str, asyncio.Lock] = {}
        # Transacciones que tienen o esperan cada bloqueo
        self._lock_users: dict[str, int] = {}

    @staticmethod
    def current_transaction() -> InMemoryTransaction | None:
        return _current_transaction.get()

    @staticmethod
    def begin() -> tuple[InMemoryTransaction, Any]:
        tx = InMemoryTransaction()
        return tx, _current_transaction.set(tx)

    @staticmethod
    def end(token: Any) -> None:
        _current_transaction.reset(token)

    def record_undo(self, undo: Callable[[], None]) -> None:
        tx = _current_transaction.get()
        if tx is not None:
            tx.undo_log.append(undo)

    async def lock_row(self, key: str) -> None:
        tx = _current_transaction.get()
        if tx is None:
            raise RuntimeError("Row locks require an active transaction")
        if key in tx.held_locks:
            return
        lock = self._row_locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            await lock.acquire()
        except BaseException:
            self._forget_lock_user(key)
            raise
        tx.held_locks.append(key)

    def release_locks(self, tx: InMemoryTransaction) -> None:
        while tx.held_locks:
            key = tx.held_locks.pop()
            self._row_locks[key].release()
            self._forget_lock_user(key)

    def _forget_lock_user(self, key: str) -> None:
        remaining = self._lock_users[key] - 1
        if remaining:
            self._lock_users[key] = remaining
        else:
            del self._lock_users[key]
            del self._row_locks[key]

    def row_lock_count(self) -> int:
        return len(self._row_locks)
