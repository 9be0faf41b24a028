from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from fleet_booking.config import get_settings
from fleet_booking.infrastructure.db.engine import build_engine, build_sessionmaker


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return build_engine(get_settings())


@lru_cache(maxsize=1)
def get_sessionmaker() -> async_sessionmaker:
    return build_sessionmaker(get_engine())
