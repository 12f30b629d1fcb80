from datetime import datetime

from pydantic import BaseModel


class MemberRead(BaseModel):
    # session_id наружу не отдаём: это единственный «пароль» участника
    id: int
    room_id: int
    name: str
    joined_at: datetime
    finished: bool

    class Config:
        from_attributes = True
        validate_by_name = True
