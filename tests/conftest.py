import os

# До импорта приложения: глобальный движок не должен создавать файл БД
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core.database import build_engine, build_sessionmaker, get_db
from main import app
from models.base import Base
from schemas.room import RoomConfig
from services import rooms as room_service


@pytest_asyncio.fixture
async def engine():
    test_engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield test_engine
    finally:
        await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def make_room(db):
    """Фабрика: комната с создателем и дополнительными участниками."""

    async def _make(*joiners: str, creator: str = "alice", **config):
        handle = await room_service.create_room(db, creator, creator.title(), RoomConfig(**config))
        for session_id in joiners:
            await room_service.join_room(db, handle.code, session_id, session_id.title())
        return handle

    return _make
