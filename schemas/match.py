from datetime import datetime

from pydantic import BaseModel


class MatchRead(BaseModel):
    id: int
    room_id: int
    item_id: int
    matched_at: datetime

    class Config:
        from_attributes = True
        validate_by_name = True
