from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings
from .errors import StorageFailure


def build_engine(database_url: str) -> AsyncEngine:
    """
    Создать асинхронный движок по явному URL.
    Для SQLite в памяти все сессии должны делить одно соединение,
    иначе каждая увидит свою пустую базу.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=False)
    return create_async_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,      # проверка соединения перед использованием
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Асинхронный генератор сессии.
    Используется как Depends(get_db) в роутерах.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def read_guard(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Ошибки драйвера превращаются в StorageFailure, повторов нет."""
    try:
        yield db
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageFailure(f"Storage error: {exc.__class__.__name__}") from exc


@asynccontextmanager
async def write_transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Одна операция ядра = одна транзакция.
    Коммит только при успехе, при любой ошибке откат, чтобы никто не увидел половину записи.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageFailure(f"Storage error: {exc.__class__.__name__}") from exc
    except Exception:
        await db.rollback()
        raise
