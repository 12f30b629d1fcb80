import enum

from sqlalchemy import Column, BigInteger, DateTime, Float, Integer, JSON, String, Text

from .base import Base, utcnow


class RoomStatus(str, enum.Enum):
    waiting = "waiting"
    active = "active"
    matched = "matched"


class MediaType(str, enum.Enum):
    movie = "movie"
    tv = "tv"


class RoomMode(str, enum.Enum):
    # first: игра останавливается на первом общем совпадении
    first = "first"
    # all: каждый пролистывает колоду до конца, копим все совпадения
    all = "all"


class Room(Base):
    __tablename__ = "rooms"

    id = Column(BigInteger, primary_key=True)
    # Комнаты удаляются физически, так что unique и есть «уникален среди живых»
    code = Column(String(4), nullable=False, unique=True, index=True)
    status = Column(String(16), nullable=False, default=RoomStatus.waiting.value)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    creator_id = Column(String(128), nullable=False)

    media_type = Column(String(8), nullable=False, default=MediaType.movie.value)
    genre_ids = Column(JSON, nullable=False, default=list)
    region = Column(String(2), nullable=True)
    provider_ids = Column(JSON, nullable=False, default=list)
    limit = Column(Integer, nullable=True)
    mode = Column(String(8), nullable=False, default=RoomMode.first.value)

    random_seed = Column(Float, nullable=False)
    # Зашифрованный клиентом конфиг домашнего медиасервера, храним как есть
    server_config = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Room id={self.id} code={self.code} status={self.status}>"
