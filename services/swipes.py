"""
Журнал свайпов и детектор совпадений.

Голос записывается и проверяется на сходимость в одной транзакции под замком комнаты:
подсчёт положительных голосов читает результат многих писателей и корректен только
при единственном писателе на комнату.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.database import read_guard, write_transaction
from core.errors import RoomNotFound, UserNotInRoom
from core.locks import room_locks
from models.room import Room, RoomMode, RoomStatus
from models.swipe import Swipe, SwipeDirection
from models.match import Match
from models.base import utcnow
from services import queries

logger = logging.getLogger(__name__)


@dataclass
class SwipeOutcome:
    swipe: Swipe
    room_status: str
    match: Optional[Match] = None

    @property
    def matched(self) -> bool:
        return self.match is not None


@dataclass
class ConvergenceResult:
    matches: List[Match] = field(default_factory=list)
    status_changed: bool = False


async def submit_swipe(
    db: AsyncSession,
    room_id: int,
    session_id: str,
    item_id: int,
    direction: SwipeDirection | str,
) -> SwipeOutcome:
    direction = SwipeDirection(direction)

    async with room_locks.hold(room_id), write_transaction(db):
        room = await queries.room_get_for_update(db, room_id)
        if room is None:
            raise RoomNotFound(room_id)

        member = await queries.member_get(db, room_id, session_id)
        if member is None:
            raise UserNotInRoom(room_id)

        swipe = await _record_swipe(db, room_id, member.id, item_id, direction)

        match = None
        if direction is not SwipeDirection.left:
            result = await detect_match(db, room, item_id)
            if result.matches:
                match = result.matches[0]

    return SwipeOutcome(swipe=swipe, room_status=room.status, match=match)


async def _record_swipe(
    db: AsyncSession,
    room_id: int,
    user_id: int,
    item_id: int,
    direction: SwipeDirection,
) -> Swipe:
    # Повторный голос за тот же элемент перезаписывает прежний, а не добавляет второй
    swipe = await queries.swipe_get(db, room_id, user_id, item_id)
    if swipe is None:
        swipe = Swipe(
            room_id=room_id,
            user_id=user_id,
            item_id=item_id,
            direction=direction.value,
        )
        db.add(swipe)
    else:
        logger.info(
            "Re-vote in room %s: user=%s item=%s %s -> %s",
            room_id, user_id, item_id, swipe.direction, direction.value,
        )
        swipe.direction = direction.value
        swipe.timestamp = utcnow()
    await db.flush()
    return swipe


async def detect_match(db: AsyncSession, room: Room, item_id: int) -> ConvergenceResult:
    """
    Проверить сходимость по одному элементу против текущего состава комнаты.
    Вызывается внутри транзакции, которая держит замок комнаты.
    """
    result = ConvergenceResult()
    members = await queries.member_count(db, room.id)
    if members == 0:
        return result

    positive = await queries.positive_vote_count(db, room.id, item_id)
    if positive < members:
        return result

    match = await _create_match(db, room, item_id)
    if match is not None:
        result.matches.append(match)
        result.status_changed = _finish_first_mode(room)
    return result


async def recheck_room(db: AsyncSession, room: Room) -> ConvergenceResult:
    """
    Пересчитать сходимость по всем элементам комнаты.
    Нужно после выхода участника: совпадение могло стать полным без нового голоса.
    """
    result = ConvergenceResult()
    members = await queries.member_count(db, room.id)
    if members == 0:
        return result

    for item_id in await queries.fully_liked_item_ids(db, room.id, members):
        match = await _create_match(db, room, item_id)
        if match is not None:
            result.matches.append(match)

    if result.matches:
        result.status_changed = _finish_first_mode(room)
    return result


async def _create_match(db: AsyncSession, room: Room, item_id: int) -> Optional[Match]:
    # Уникальность (комната, элемент) проверяем явно, ограничение в БД страхует
    if await queries.match_get(db, room.id, item_id) is not None:
        return None

    match = Match(room_id=room.id, item_id=item_id)
    db.add(match)
    await db.flush()
    logger.info("Match in room %s on item %s", room.id, item_id)
    return match


def _finish_first_mode(room: Room) -> bool:
    if room.mode == RoomMode.all.value or room.status == RoomStatus.matched.value:
        return False
    room.status = RoomStatus.matched.value
    logger.info("Room %s is now %s", room.id, room.status)
    return True


async def get_user_swipes(db: AsyncSession, room_id: int, session_id: str) -> List[int]:
    async with read_guard(db):
        member = await queries.member_get(db, room_id, session_id)
        if member is None:
            return []
        return await queries.swipe_item_ids_for_user(db, room_id, member.id)


async def get_match(db: AsyncSession, room_id: int) -> Optional[Match]:
    async with read_guard(db):
        matches = await queries.match_list(db, room_id)
    return matches[0] if matches else None


async def list_matches(db: AsyncSession, room_id: int) -> List[Match]:
    async with read_guard(db):
        return list(await queries.match_list(db, room_id))
