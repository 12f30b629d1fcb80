import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class RoomLocks:
    """
    Один asyncio.Lock на комнату внутри процесса.
    Замок живёт, пока его кто-то держит или ждёт, потом удаляется из реестра.
    """

    def __init__(self) -> None:
        self._locks: Dict[int, asyncio.Lock] = {}
        self._waiters: Dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(room_id, asyncio.Lock())
        self._waiters[room_id] = self._waiters.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[room_id] -= 1
            if self._waiters[room_id] == 0:
                del self._waiters[room_id]
                del self._locks[room_id]

    def __len__(self) -> int:
        return len(self._locks)


room_locks = RoomLocks()
