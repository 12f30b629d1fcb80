import asyncio
import logging

from core.config import settings
from core.database import build_engine
from models.base import Base
# Импорты ниже регистрируют таблицы в Base.metadata
from models.room import Room  # noqa: F401
from models.member import Member  # noqa: F401
from models.swipe import Swipe  # noqa: F401
from models.match import Match  # noqa: F401

log = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


async def async_reset_database(database_url: str):
    engine = build_engine(database_url)
    log.info("Dropping all tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, checkfirst=True)

    log.info("Recreating all tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    await engine.dispose()
    log.info("Database schema has been reset.")


def reset_database():
    asyncio.run(async_reset_database(settings.DATABASE_URL))


if __name__ == "__main__":
    reset_database()
