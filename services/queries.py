from typing import List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models.room import Room
from models.member import Member
from models.swipe import Swipe, POSITIVE_DIRECTIONS
from models.match import Match


async def room_get(db: AsyncSession, room_id: int) -> Optional[Room]:
    return await db.get(Room, room_id)


async def room_get_for_update(db: AsyncSession, room_id: int) -> Optional[Room]:
    # FOR UPDATE сериализует писателей одной комнаты на уровне БД
    stmt = (
        select(Room)
        .where(Room.id == room_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def room_get_by_code(db: AsyncSession, code: str) -> Optional[Room]:
    stmt = (
        select(Room)
        .where(Room.code == code)
        .order_by(Room.created_at.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def room_code_in_use(db: AsyncSession, code: str) -> bool:
    result = await db.execute(select(func.count(Room.id)).where(Room.code == code))
    return result.scalar_one() > 0


async def member_get(db: AsyncSession, room_id: int, session_id: str) -> Optional[Member]:
    stmt = select(Member).where(
        Member.room_id == room_id,
        Member.session_id == session_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def member_list(db: AsyncSession, room_id: int) -> Sequence[Member]:
    stmt = (
        select(Member)
        .where(Member.room_id == room_id)
        .order_by(Member.joined_at, Member.id)
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def member_count(db: AsyncSession, room_id: int) -> int:
    result = await db.execute(select(func.count(Member.id)).where(Member.room_id == room_id))
    return result.scalar_one()


def _current_member_ids(room_id: int):
    return select(Member.id).where(Member.room_id == room_id)


async def swipe_get(db: AsyncSession, room_id: int, user_id: int, item_id: int) -> Optional[Swipe]:
    stmt = select(Swipe).where(
        Swipe.room_id == room_id,
        Swipe.user_id == user_id,
        Swipe.item_id == item_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def swipe_item_ids_for_user(db: AsyncSession, room_id: int, user_id: int) -> List[int]:
    stmt = (
        select(Swipe.item_id)
        .where(Swipe.room_id == room_id, Swipe.user_id == user_id)
        .order_by(Swipe.timestamp, Swipe.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def positive_vote_count(db: AsyncSession, room_id: int, item_id: int) -> int:
    """Число текущих участников, проголосовавших за элемент (right или super)."""
    stmt = select(func.count(func.distinct(Swipe.user_id))).where(
        Swipe.room_id == room_id,
        Swipe.item_id == item_id,
        Swipe.direction.in_(POSITIVE_DIRECTIONS),
        Swipe.user_id.in_(_current_member_ids(room_id)),
    )
    result = await db.execute(stmt)
    return result.scalar_one()


async def fully_liked_item_ids(db: AsyncSession, room_id: int, members: int) -> List[int]:
    """Элементы, за которые проголосовали все текущие участники."""
    voters = func.count(func.distinct(Swipe.user_id))
    stmt = (
        select(Swipe.item_id)
        .where(
            Swipe.room_id == room_id,
            Swipe.direction.in_(POSITIVE_DIRECTIONS),
            Swipe.user_id.in_(_current_member_ids(room_id)),
        )
        .group_by(Swipe.item_id)
        .having(voters >= members)
        .order_by(Swipe.item_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def match_get(db: AsyncSession, room_id: int, item_id: int) -> Optional[Match]:
    stmt = select(Match).where(Match.room_id == room_id, Match.item_id == item_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def match_list(db: AsyncSession, room_id: int) -> Sequence[Match]:
    stmt = (
        select(Match)
        .where(Match.room_id == room_id)
        .order_by(Match.matched_at, Match.id)
    )
    result = await db.execute(stmt)
    return result.scalars().all()
