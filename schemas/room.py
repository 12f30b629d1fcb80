from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from models.base import MAX_INT
from models.room import MediaType, RoomMode, RoomStatus


class RoomConfig(BaseModel):
    media_type: MediaType = Field(MediaType.movie, description="Что свайпаем: movie или tv")
    genre_ids: List[int] = Field(default_factory=list, description="Жанры каталога")
    region: Optional[str] = Field(None, min_length=2, max_length=2, description="ISO-код страны")
    provider_ids: List[int] = Field(default_factory=list, description="Стриминговые провайдеры каталога")
    limit: Optional[int] = Field(None, ge=1, le=MAX_INT, description="Максимум голосов на участника")
    mode: RoomMode = Field(RoomMode.first, description="first: до первого совпадения, all: собрать все")
    server_config: Optional[str] = Field(
        None, max_length=8192, description="Зашифрованный конфиг медиасервера, хранится как есть"
    )

    @field_validator("region")
    @classmethod
    def normalize_region(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.isalpha():
            raise ValueError("region must be an ISO 3166-1 alpha-2 code")
        return value.upper()

    @field_validator("genre_ids", "provider_ids")
    @classmethod
    def dedupe_ids(cls, value: List[int]) -> List[int]:
        return list(dict.fromkeys(value))


class RoomCreate(RoomConfig):
    name: str = Field(..., min_length=1, max_length=64, description="Имя создателя комнаты")


class RoomCreated(BaseModel):
    room_id: int
    code: str


class RoomJoin(BaseModel):
    code: str = Field(..., pattern=r"^\d{4}$", description="Код комнаты из 4 цифр")
    name: str = Field(..., min_length=1, max_length=64)


class RoomJoined(BaseModel):
    room_id: int
    user_id: int


class RoomRead(BaseModel):
    id: int
    code: str
    status: RoomStatus
    created_at: datetime
    # Сессию создателя не отдаём: по ней можно действовать от его имени
    is_creator: bool = False
    media_type: MediaType
    genre_ids: List[int]
    region: Optional[str] = None
    provider_ids: List[int]
    limit: Optional[int] = None
    mode: RoomMode
    random_seed: float
    deck_seed: int
    server_config: Optional[str] = None

    class Config:
        from_attributes = True
        validate_by_name = True
