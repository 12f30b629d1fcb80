# core/security.py
from fastapi import Header, HTTPException
from starlette import status

SESSION_HEADER = "X-Session-Id"
MAX_SESSION_ID_LENGTH = 128


async def get_session_id(
    x_session_id: str | None = Header(default=None, alias=SESSION_HEADER),
) -> str:
    """
    Достаёт непрозрачный идентификатор сессии клиента.
    Никакой криптографической проверки нет: кто знает id, тот и пользователь.
    """
    if x_session_id is None or not x_session_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {SESSION_HEADER} header",
        )
    session_id = x_session_id.strip()
    if len(session_id) > MAX_SESSION_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Session id is too long",
        )
    return session_id


async def get_optional_session_id(
    x_session_id: str | None = Header(default=None, alias=SESSION_HEADER),
) -> str | None:
    """Для публичных чтений: заголовок не обязателен, но если пришёл, проверяем так же."""
    if x_session_id is None or not x_session_id.strip():
        return None
    return await get_session_id(x_session_id)
