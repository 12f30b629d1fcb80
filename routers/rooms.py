from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import get_db
from models.base import MAX_BIGINT
from core.security import get_optional_session_id, get_session_id
from schemas.member import MemberRead
from schemas.room import RoomConfig, RoomCreate, RoomCreated, RoomJoin, RoomJoined, RoomRead
from services import rooms as room_service
from utils.room_helpers import to_room_read

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.post(
    "",
    response_model=RoomCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Создать комнату и войти в неё создателем",
)
async def create_room(
    payload: RoomCreate,
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
) -> RoomCreated:
    config = RoomConfig.model_validate(payload.model_dump(exclude={"name"}))
    handle = await room_service.create_room(
        db,
        session_id,
        payload.name,
        config,
        code_attempts=settings.ROOM_CODE_ATTEMPTS,
        default_limit=settings.DEFAULT_SWIPE_LIMIT,
    )
    return RoomCreated(room_id=handle.room_id, code=handle.code)


@router.post(
    "/join",
    response_model=RoomJoined,
    summary="Войти в комнату по коду (повторный вход возвращает то же членство)",
)
async def join_room(
    payload: RoomJoin,
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
) -> RoomJoined:
    membership = await room_service.join_room(db, payload.code, session_id, payload.name)
    return RoomJoined(room_id=membership.room_id, user_id=membership.user_id)


@router.get(
    "/code/{code}",
    response_model=RoomRead,
    summary="Найти живую комнату по коду",
)
async def get_room_by_code(
    code: str,
    db: AsyncSession = Depends(get_db),
    session_id: Optional[str] = Depends(get_optional_session_id),
) -> RoomRead:
    room = await room_service.get_room_by_code(db, code)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Room {code} not found")
    return to_room_read(room, session_id)


@router.get(
    "/{room_id}",
    response_model=RoomRead,
    summary="Состояние комнаты (клиенты опрашивают его)",
)
async def get_room(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
    session_id: Optional[str] = Depends(get_optional_session_id),
) -> RoomRead:
    room = await room_service.get_room(db, room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Room {room_id} not found")
    return to_room_read(room, session_id)


@router.get(
    "/{room_id}/members",
    response_model=List[MemberRead],
    summary="Участники комнаты",
)
async def list_members(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
) -> List[MemberRead]:
    members = await room_service.list_members(db, room_id)
    return [MemberRead.model_validate(member) for member in members]


@router.post(
    "/{room_id}/start",
    response_model=RoomRead,
    summary="Начать игру (рассчитано на создателя, но не проверяется)",
)
async def start_game(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
) -> RoomRead:
    room = await room_service.start_game(db, room_id, session_id)
    return to_room_read(room, session_id)


@router.post(
    "/{room_id}/leave",
    summary="Покинуть комнату; последний вышедший удаляет её",
)
async def leave_room(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    deleted = await room_service.leave_room(db, room_id, session_id)
    return {"room_deleted": deleted}


@router.post(
    "/{room_id}/finish",
    response_model=MemberRead,
    summary="Отметить, что участник пролистал свою колоду",
)
async def mark_finished(
    room_id: int = Path(..., ge=1, le=MAX_BIGINT, description="ID комнаты"),
    db: AsyncSession = Depends(get_db),
    session_id: str = Depends(get_session_id),
) -> MemberRead:
    member = await room_service.mark_finished(db, room_id, session_id)
    return MemberRead.model_validate(member)
