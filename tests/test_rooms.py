import asyncio

import pytest
from sqlalchemy import func, select

from core.errors import RoomNotFound, StorageFailure, UserNotInRoom
from models.match import Match
from models.member import Member
from models.room import Room, RoomStatus
from models.swipe import Swipe
from schemas.room import RoomConfig
from services import queries
from services import rooms as room_service
from services import swipes as swipe_service


async def _count(session_factory, model, room_id):
    async with session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(model).where(model.room_id == room_id)
        )
        return result.scalar_one()


async def test_create_room_persists_config_and_creator(db):
    config = RoomConfig(
        media_type="tv",
        genre_ids=[18, 35, 18],
        region="de",
        provider_ids=[8],
        limit=25,
        mode="all",
        server_config="U2FsdGVkX1+opaque==",
    )
    handle = await room_service.create_room(db, "alice", "Alice", config)

    assert len(handle.code) == 4 and handle.code.isdigit()

    room = await room_service.get_room(db, handle.room_id)
    assert room.status == RoomStatus.waiting.value
    assert room.creator_id == "alice"
    assert room.media_type == "tv"
    assert room.genre_ids == [18, 35]
    assert room.region == "DE"
    assert room.limit == 25
    assert room.mode == "all"
    assert room.server_config == "U2FsdGVkX1+opaque=="
    assert 0 <= room.random_seed < 1

    members = await room_service.list_members(db, handle.room_id)
    assert [m.session_id for m in members] == ["alice"]


async def test_create_room_applies_default_limit(db):
    handle = await room_service.create_room(db, "alice", "Alice", RoomConfig(), default_limit=40)
    room = await room_service.get_room(db, handle.room_id)
    assert room.limit == 40
    assert room.mode == "first"


async def test_code_must_be_free_among_live_rooms(db, monkeypatch):
    monkeypatch.setattr(room_service, "generate_code", lambda: "1234")

    first = await room_service.create_room(db, "alice", "Alice", RoomConfig())
    assert first.code == "1234"

    with pytest.raises(StorageFailure):
        await room_service.create_room(db, "bob", "Bob", RoomConfig(), code_attempts=3)

    # После удаления комнаты код снова свободен
    await room_service.leave_room(db, first.room_id, "alice")
    second = await room_service.create_room(db, "bob", "Bob", RoomConfig())
    assert second.code == "1234"
    assert second.room_id != first.room_id


async def test_code_clash_from_another_process_is_retried(db, session_factory, monkeypatch):
    # Другой процесс успел вставить комнату с тем же кодом после предпроверки
    async with session_factory() as session:
        session.add(Room(code="1234", creator_id="ghost", random_seed=0.5))
        await session.commit()

    async def code_looks_free(*args, **kwargs):
        return False

    codes = iter(["1234", "5678"])
    monkeypatch.setattr(queries, "room_code_in_use", code_looks_free)
    monkeypatch.setattr(room_service, "generate_code", lambda: next(codes))

    handle = await room_service.create_room(db, "bob", "Bob", RoomConfig())
    assert handle.code == "5678"

    async with session_factory() as session:
        clashing = await session.execute(select(func.count(Room.id)).where(Room.code == "1234"))
        assert clashing.scalar_one() == 1
        bobs = await session.execute(
            select(func.count(Member.id)).where(Member.session_id == "bob")
        )
        assert bobs.scalar_one() == 1


async def test_join_unknown_code_fails(db):
    with pytest.raises(RoomNotFound):
        await room_service.join_room(db, "0000", "bob", "Bob")


async def test_join_is_idempotent(db, make_room):
    handle = await make_room()

    first = await room_service.join_room(db, handle.code, "bob", "Bob")
    again = await room_service.join_room(db, handle.code, "bob", "Bobby")

    assert first.user_id == again.user_id
    assert first.created and not again.created
    members = await room_service.list_members(db, handle.room_id)
    assert sorted(m.session_id for m in members) == ["alice", "bob"]


async def test_creator_rejoin_returns_existing_membership(db, make_room):
    handle = await make_room()
    membership = await room_service.join_room(db, handle.code, "alice", "Alice")
    members = await room_service.list_members(db, handle.room_id)
    assert len(members) == 1
    assert membership.user_id == members[0].id


async def test_concurrent_joins_with_same_session_create_one_member(session_factory, make_room):
    handle = await make_room()

    async def join():
        async with session_factory() as session:
            return await room_service.join_room(session, handle.code, "bob", "Bob")

    results = await asyncio.gather(*(join() for _ in range(5)))

    assert len({r.user_id for r in results}) == 1
    assert await _count(session_factory, Member, handle.room_id) == 2


async def test_start_game_transitions_to_active(db, make_room):
    handle = await make_room("bob")
    room = await room_service.start_game(db, handle.room_id, "alice")
    assert room.status == RoomStatus.active.value


async def test_start_game_by_non_creator_is_allowed(db, make_room, caplog):
    handle = await make_room("bob")
    room = await room_service.start_game(db, handle.room_id, "bob")
    assert room.status == RoomStatus.active.value
    assert "did not create" in caplog.text


async def test_start_game_unknown_room(db):
    with pytest.raises(RoomNotFound):
        await room_service.start_game(db, 424242)


async def test_matched_room_is_not_restarted(db, make_room):
    handle = await make_room()
    await room_service.start_game(db, handle.room_id)
    await swipe_service.submit_swipe(db, handle.room_id, "alice", 42, "right")

    room = await room_service.start_game(db, handle.room_id)
    assert room.status == RoomStatus.matched.value


async def test_leave_removes_member_and_their_swipes(db, session_factory, make_room):
    handle = await make_room("bob")
    await swipe_service.submit_swipe(db, handle.room_id, "bob", 1, "left")
    await swipe_service.submit_swipe(db, handle.room_id, "alice", 1, "left")

    deleted = await room_service.leave_room(db, handle.room_id, "bob")

    assert deleted is False
    members = await room_service.list_members(db, handle.room_id)
    assert [m.session_id for m in members] == ["alice"]
    assert await _count(session_factory, Swipe, handle.room_id) == 1


async def test_leave_for_non_member_is_noop(db, make_room):
    handle = await make_room()
    assert await room_service.leave_room(db, handle.room_id, "stranger") is False
    assert await room_service.leave_room(db, 999, "alice") is False
    assert len(await room_service.list_members(db, handle.room_id)) == 1


async def test_last_member_leaving_tears_room_down(db, session_factory, make_room):
    handle = await make_room("bob", mode="all")
    await room_service.start_game(db, handle.room_id)
    await swipe_service.submit_swipe(db, handle.room_id, "alice", 42, "right")
    await swipe_service.submit_swipe(db, handle.room_id, "bob", 42, "super")
    await swipe_service.submit_swipe(db, handle.room_id, "bob", 43, "left")

    assert await room_service.leave_room(db, handle.room_id, "alice") is False
    assert await room_service.leave_room(db, handle.room_id, "bob") is True

    async with session_factory() as session:
        assert await session.get(Room, handle.room_id) is None
    assert await _count(session_factory, Member, handle.room_id) == 0
    assert await _count(session_factory, Swipe, handle.room_id) == 0
    assert await _count(session_factory, Match, handle.room_id) == 0

    with pytest.raises(RoomNotFound):
        await room_service.join_room(db, handle.code, "carol", "Carol")


async def test_member_count_tracks_distinct_sessions(db, make_room):
    handle = await make_room("bob", "carol")
    await room_service.join_room(db, handle.code, "bob", "Bob")
    await room_service.leave_room(db, handle.room_id, "carol")
    await room_service.join_room(db, handle.code, "dave", "Dave")

    members = await room_service.list_members(db, handle.room_id)
    assert sorted(m.session_id for m in members) == ["alice", "bob", "dave"]


async def test_mark_finished(db, make_room):
    handle = await make_room("bob")

    member = await room_service.mark_finished(db, handle.room_id, "bob")
    assert member.finished is True

    with pytest.raises(UserNotInRoom):
        await room_service.mark_finished(db, handle.room_id, "stranger")
    with pytest.raises(RoomNotFound):
        await room_service.mark_finished(db, 31337, "bob")


async def test_get_room_by_code(db, make_room):
    handle = await make_room()
    room = await room_service.get_room_by_code(db, handle.code)
    assert room.id == handle.room_id
