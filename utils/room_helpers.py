"""Утилиты для преобразования моделей комнаты в схемы Pydantic."""
from typing import Optional

from models.room import Room
from schemas.room import RoomRead
from services.deck import room_seed


def to_room_read(room: Room, session_id: Optional[str] = None) -> RoomRead:
    """Сконвертировать модель комнаты в RoomRead вместе с seed колоды.
    is_creator считается относительно сессии запроса, сама сессия создателя наружу не уходит."""
    return RoomRead(
        id=room.id,
        code=room.code,
        status=room.status,
        created_at=room.created_at,
        is_creator=session_id is not None and session_id == room.creator_id,
        media_type=room.media_type,
        genre_ids=list(room.genre_ids or []),
        region=room.region,
        provider_ids=list(room.provider_ids or []),
        limit=room.limit,
        mode=room.mode,
        random_seed=room.random_seed,
        deck_seed=room_seed(room),
        server_config=room.server_config,
    )
