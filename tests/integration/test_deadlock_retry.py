"""
Tests del reintento ante deadlocks.

Verifica que el commit de la reserva se reintenta ante errores transitorios
de la base de datos:
- Detecta MySQL 1213 (Deadlock) y 1205 (Lock wait timeout)
- Detecta los SQLSTATE de PostgreSQL 40P01 y 40001
- Reintenta con backoff exponencial y se rinde tras max_attempts
- Los errores de dominio se propagan en el primer intento
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError

from fleet_booking.domain.errors import DiscountRaceLost
from fleet_booking.infrastructure.db.retry import is_deadlock_error, retry_on_deadlock


def mysql_error(code: int, message: str) -> OperationalError:
    return OperationalError(
        "statement",
        "params",
        f"(asyncmy.errors.OperationalError) ({code}, '{message}')",
        connection_invalidated=False,
    )


def postgres_error(sqlstate: str) -> DBAPIError:
    return DBAPIError("statement", "params", SimpleNamespace(sqlstate=sqlstate), connection_invalidated=False)


class TestDeadlockDetection:
    def test_mysql_deadlock_1213(self):
        assert is_deadlock_error(mysql_error(1213, "Deadlock found when trying to get lock"))

    def test_mysql_lock_wait_timeout_1205(self):
        assert is_deadlock_error(mysql_error(1205, "Lock wait timeout exceeded"))

    @pytest.mark.parametrize("sqlstate", ["40P01", "40001"])
    def test_postgres_sqlstate(self, sqlstate):
        assert is_deadlock_error(postgres_error(sqlstate))

    def test_other_errors_are_not_deadlocks(self):
        assert not is_deadlock_error(Exception("Generic error"))
        assert not is_deadlock_error(mysql_error(2013, "Lost connection to MySQL server"))
        assert not is_deadlock_error(postgres_error("23505"))


class TestRetryLogic:
    async def test_success_on_first_attempt(self):
        func = AsyncMock(return_value="ok")

        assert await retry_on_deadlock(func, max_attempts=3) == "ok"
        assert func.await_count == 1

    async def test_retries_until_success(self):
        func = AsyncMock(
            side_effect=[mysql_error(1213, "Deadlock"), mysql_error(1205, "Lock wait"), "committed"]
        )

        with patch("fleet_booking.infrastructure.db.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await retry_on_deadlock(func, max_attempts=3, base_delay=0.1)

        assert result == "committed"
        assert func.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.1, 0.2]

    async def test_gives_up_after_max_attempts(self):
        func = AsyncMock(side_effect=mysql_error(1213, "Deadlock"))

        with patch("fleet_booking.infrastructure.db.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(OperationalError):
                await retry_on_deadlock(func, max_attempts=3)

        assert func.await_count == 3

    async def test_domain_error_is_not_retried(self):
        func = AsyncMock(side_effect=DiscountRaceLost("cus-1"))

        with pytest.raises(DiscountRaceLost):
            await retry_on_deadlock(func, max_attempts=3)

        assert func.await_count == 1

    async def test_each_retry_is_logged(self):
        func = AsyncMock(side_effect=[mysql_error(1213, "Deadlock"), "committed"])

        with patch("fleet_booking.infrastructure.db.retry.logger") as mock_logger, patch(
            "fleet_booking.infrastructure.db.retry.asyncio.sleep", new=AsyncMock()
        ):
            await retry_on_deadlock(func, max_attempts=3)

        assert mock_logger.warning.called
        assert "deadlock" in mock_logger.warning.call_args[0][0].lower()
