"""
Жизненный цикл комнаты: создание, вход по коду, старт игры, выход и удаление.

Статусы: waiting -> active (start_game) -> matched (детектор совпадений, режим first).
matched конечный. В режиме all комната остаётся active, завершение считает клиент.
"""
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import read_guard, write_transaction
from core.errors import RoomNotFound, StorageFailure, UserNotInRoom
from core.locks import room_locks
from models.room import Room, RoomStatus
from models.member import Member
from models.swipe import Swipe
from models.match import Match
from schemas.room import RoomConfig
from services import queries
from services.swipes import recheck_room

logger = logging.getLogger(__name__)

CODE_MIN = 1000
CODE_MAX = 9999
# Ключ замка на подбор кода внутри процесса, id комнат всегда положительные
CODE_ALLOCATION_KEY = -1


@dataclass(frozen=True)
class RoomHandle:
    room_id: int
    code: str


@dataclass(frozen=True)
class Membership:
    room_id: int
    user_id: int
    created: bool = True


def generate_code() -> str:
    """Четырёхзначный цифровой код, которым удобно поделиться голосом."""
    return str(random.randint(CODE_MIN, CODE_MAX))


def _is_code_clash(exc: StorageFailure) -> bool:
    return isinstance(exc.__cause__, IntegrityError)


async def create_room(
    db: AsyncSession,
    session_id: str,
    name: str,
    config: RoomConfig,
    *,
    code_attempts: int = 20,
    default_limit: Optional[int] = None,
) -> RoomHandle:
    """
    Код подбирается случайно. Занятые коды отсекает предпроверка, а гонку между
    процессами ловит unique на rooms.code: транзакция откатывается целиком
    и повторяется с новым кодом, пока не кончатся попытки.
    """
    for _ in range(code_attempts):
        code = generate_code()
        try:
            async with room_locks.hold(CODE_ALLOCATION_KEY), write_transaction(db):
                if await queries.room_code_in_use(db, code):
                    continue
                room = Room(
                    code=code,
                    status=RoomStatus.waiting.value,
                    creator_id=session_id,
                    media_type=config.media_type.value,
                    genre_ids=list(config.genre_ids),
                    region=config.region,
                    provider_ids=list(config.provider_ids),
                    limit=config.limit if config.limit is not None else default_limit,
                    mode=config.mode.value,
                    random_seed=random.random(),
                    server_config=config.server_config,
                )
                db.add(room)
                await db.flush()

                # Создатель сразу становится первым участником
                db.add(Member(room_id=room.id, session_id=session_id, name=name))
                await db.flush()
        except StorageFailure as exc:
            if not _is_code_clash(exc):
                raise
            logger.info("Room code %s was taken concurrently, drawing another", code)
            continue

        logger.info("Room %s created with code %s (mode=%s)", room.id, code, room.mode)
        return RoomHandle(room_id=room.id, code=code)

    raise StorageFailure(f"Could not allocate a free room code after {code_attempts} attempts")


async def join_room(db: AsyncSession, code: str, session_id: str, name: str) -> Membership:
    async with read_guard(db):
        found = await queries.room_get_by_code(db, code)
    if found is None:
        raise RoomNotFound(code)
    room_id = found.id

    async with room_locks.hold(room_id), write_transaction(db):
        # Комната могла исчезнуть, пока ждали замок
        if await queries.room_get_for_update(db, room_id) is None:
            raise RoomNotFound(code)

        member = await queries.member_get(db, room_id, session_id)
        if member is not None:
            return Membership(room_id=room_id, user_id=member.id, created=False)

        member = Member(room_id=room_id, session_id=session_id, name=name)
        db.add(member)
        await db.flush()

    logger.info("Member %s joined room %s", member.id, room_id)
    return Membership(room_id=room_id, user_id=member.id)


async def start_game(db: AsyncSession, room_id: int, session_id: Optional[str] = None) -> Room:
    async with room_locks.hold(room_id), write_transaction(db):
        room = await queries.room_get_for_update(db, room_id)
        if room is None:
            raise RoomNotFound(room_id)

        # Права хоста только рекомендательные: не отказываем, но фиксируем
        if session_id is not None and session_id != room.creator_id:
            logger.warning("Room %s started by a session that did not create it", room_id)

        if room.status == RoomStatus.waiting.value:
            room.status = RoomStatus.active.value
            logger.info("Room %s is now %s", room_id, room.status)
        else:
            logger.info("Room %s already %s, start ignored", room_id, room.status)
    return room


async def leave_room(db: AsyncSession, room_id: int, session_id: str) -> bool:
    """Возвращает True, если ушёл последний участник и комната удалена."""
    async with room_locks.hold(room_id), write_transaction(db):
        room = await queries.room_get_for_update(db, room_id)
        if room is None:
            return False

        member = await queries.member_get(db, room_id, session_id)
        if member is None:
            return False

        await db.execute(
            delete(Swipe).where(Swipe.room_id == room_id, Swipe.user_id == member.id)
        )
        await db.execute(delete(Member).where(Member.id == member.id))
        logger.info("Member %s left room %s", member.id, room_id)

        if await queries.member_count(db, room_id) == 0:
            await _teardown(db, room_id)
            return True

        await recheck_room(db, room)
    return False


async def _teardown(db: AsyncSession, room_id: int) -> None:
    # Полная зачистка по комнате, а не только по ушедшему
    await db.execute(delete(Match).where(Match.room_id == room_id))
    await db.execute(delete(Swipe).where(Swipe.room_id == room_id))
    await db.execute(delete(Member).where(Member.room_id == room_id))
    await db.execute(delete(Room).where(Room.id == room_id))
    logger.info("Room %s is empty and was deleted", room_id)


async def mark_finished(db: AsyncSession, room_id: int, session_id: str) -> Member:
    async with room_locks.hold(room_id), write_transaction(db):
        if await queries.room_get_for_update(db, room_id) is None:
            raise RoomNotFound(room_id)
        member = await queries.member_get(db, room_id, session_id)
        if member is None:
            raise UserNotInRoom(room_id)
        member.finished = True
    return member


async def get_room(db: AsyncSession, room_id: int) -> Optional[Room]:
    async with read_guard(db):
        return await queries.room_get(db, room_id)


async def get_room_by_code(db: AsyncSession, code: str) -> Optional[Room]:
    async with read_guard(db):
        return await queries.room_get_by_code(db, code)


async def list_members(db: AsyncSession, room_id: int) -> List[Member]:
    async with read_guard(db):
        return list(await queries.member_list(db, room_id))
