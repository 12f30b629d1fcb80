from typing import List, Optional

from pydantic import BaseModel, Field

from models.base import MAX_BIGINT
from models.room import RoomStatus
from models.swipe import SwipeDirection
from schemas.match import MatchRead


class SwipeCreate(BaseModel):
    item_id: int = Field(..., ge=1, le=MAX_BIGINT, description="ID элемента каталога")
    direction: SwipeDirection


class SwipeResponse(BaseModel):
    matched: bool
    match: Optional[MatchRead] = None
    room_status: RoomStatus


class UserSwipes(BaseModel):
    item_ids: List[int]
