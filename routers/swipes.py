from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from models.base import MAX_BIGINT
from core.security import get_session_id
from schemas.match import MatchRead
from schemas.swipe import SwipeCreate, SwipeResponse, UserSwipes
from services import swipes as swipe_service

router = APIRouter(prefix="/rooms/{room_id}", tags=["swipes"])


@router.post(
    "/swipes",
    response_model=SwipeResponse,
    summary="Проголосовать за элемент и узнать, сложилось ли совпадение",
)
async def submit_swipe(
    payload: SwipeCreate,
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
) -> SwipeResponse:
    outcome = await swipe_service.submit_swipe(
        db, room_id, session_id, payload.item_id, payload.direction
    )
    return SwipeResponse(
        matched=outcome.matched,
        match=MatchRead.model_validate(outcome.match) if outcome.match else None,
        room_status=outcome.room_status,
    )


@router.get(
    "/swipes/me",
    response_model=UserSwipes,
    summary="Элементы, за которые вы уже голосовали",
)
async def my_swipes(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
) -> UserSwipes:
    item_ids = await swipe_service.get_user_swipes(db, room_id, session_id)
    return UserSwipes(item_ids=item_ids)


@router.get(
    "/match",
    response_model=Optional[MatchRead],
    summary="Первое совпадение комнаты, если есть",
)
async def get_match(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
) -> Optional[MatchRead]:
    match = await swipe_service.get_match(db, room_id)
    return MatchRead.model_validate(match) if match else None


@router.get(
    "/matches",
    response_model=List[MatchRead],
    summary="Все совпадения комнаты",
)
async def list_matches(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
) -> List[MatchRead]:
    matches = await swipe_service.list_matches(db, room_id)
    return [MatchRead.model_validate(match) for match in matches]
