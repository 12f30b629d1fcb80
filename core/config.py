from typing import Optional

from pydantic.v1 import BaseSettings


class Settings(BaseSettings):

    DATABASE_URL: str = "sqlite+aiosqlite:///./swipematch.db"

    # Сколько раз пытаемся подобрать код, не занятый живой комнатой
    ROOM_CODE_ATTEMPTS: int = 20
    DEFAULT_SWIPE_LIMIT: Optional[int] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Создаём глобальный объект, который будем импортировать в роутерах
settings = Settings()
