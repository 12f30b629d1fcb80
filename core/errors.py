from starlette import status


class SwipeMatchError(Exception):
    """Базовая ошибка ядра комнат. status_code используется HTTP-слоем."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RoomNotFound(SwipeMatchError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, room_ref):
        self.room_ref = room_ref
        super().__init__(f"Room {room_ref} not found")


class UserNotInRoom(SwipeMatchError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, room_id: int):
        self.room_id = room_id
        super().__init__(f"User is not a member of room {room_id}")


class StorageFailure(SwipeMatchError):
    """Хранилище недоступно или транзакция прервана. Повтор остаётся за клиентом."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
