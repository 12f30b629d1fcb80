import asyncio

from core.locks import RoomLocks


async def test_room_lock_serializes_writers():
    locks = RoomLocks()
    events = []

    async def writer(name: str):
        async with locks.hold(1):
            events.append(f"{name}:start")
            await asyncio.sleep(0.01)
            events.append(f"{name}:end")

    await asyncio.gather(writer("a"), writer("b"))

    assert events in (
        ["a:start", "a:end", "b:start", "b:end"],
        ["b:start", "b:end", "a:start", "a:end"],
    )


async def test_different_rooms_do_not_block_each_other():
    locks = RoomLocks()
    inside = asyncio.Event()

    async def holder():
        async with locks.hold(1):
            await inside.wait()

    task = asyncio.create_task(holder())
    await asyncio.sleep(0)
    async with locks.hold(2):
        inside.set()
    await task


async def test_locks_are_released_from_registry():
    locks = RoomLocks()
    async with locks.hold(5):
        assert len(locks) == 1
    assert len(locks) == 0
