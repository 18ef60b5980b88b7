import uuid
from http import HTTPStatus

import pytest
from fastapi import HTTPException

from eggtracker.modules.rooms import service as rooms_service
from eggtracker.modules.rooms.schemas import RoomCreate, RoomMemberResponse
from eggtracker.modules.rooms.service import RoomService, parse_room_id, split_tray


def test_create_room_bootstraps_membership_and_tray(supabase, make_user):
    asha = make_user("Asha")
    room = RoomService(supabase).create_room(RoomCreate(name=" Flat 3B "), asha)

    assert room.name == "Flat 3B"
    assert room.created_by == asha
    assert room.active_tray_id is not None

    stored = supabase.get("rooms", room.id)
    assert stored["active_tray_id"] == room.active_tray_id
    assert [m["user_id"] for m in supabase.where("room_members", room_id=room.id)] == [asha]
    assert len(supabase.where("trays", room_id=room.id)) == 1
    assert len(supabase.where("eggs", tray_id=room.active_tray_id)) == 30


def test_create_room_requires_name(supabase, make_user):
    asha = make_user()
    with pytest.raises(HTTPException) as exc:
        RoomService(supabase).create_room(RoomCreate(name="  "), asha)
    assert exc.value.status_code == HTTPStatus.BAD_REQUEST
    assert exc.value.detail == "Room name is required."


def test_create_room_requires_existing_user(supabase):
    with pytest.raises(HTTPException) as exc:
        RoomService(supabase).create_room(RoomCreate(name="Flat 3B"), "ghost")
    assert exc.value.status_code == HTTPStatus.NOT_FOUND
    assert exc.value.detail == "User not found."
    assert supabase.rows("rooms") == []


@pytest.mark.parametrize("failing_step", [
    ("room_members", "insert"),
    ("eggs", "insert"),
    ("rooms", "update"),
])
def test_create_room_rolls_back_partial_writes(supabase, make_user, failing_step):
    asha = make_user()
    supabase.failures.add(failing_step)
    with pytest.raises(HTTPException) as exc:
        RoomService(supabase).create_room(RoomCreate(name="Flat 3B"), asha)
    assert exc.value.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    for table in ("rooms", "room_members", "trays", "eggs"):
        assert supabase.rows(table) == []


def test_join_room_is_idempotent(supabase, make_user, make_room):
    room_id = make_room(make_user("Asha"))
    bilal = make_user("Bilal")
    service = RoomService(supabase)

    assert service.join_room(room_id, bilal).joined is True
    assert service.join_room(room_id, bilal).joined is False
    assert len(supabase.where("room_members", room_id=room_id, user_id=bilal)) == 1


def test_creator_rejoining_is_a_noop(supabase, make_user, make_room):
    asha = make_user("Asha")
    room_id = make_room(asha)
    assert RoomService(supabase).join_room(room_id, asha).joined is False


def test_concurrent_duplicate_join_counts_as_already_member(supabase, make_user, make_room, monkeypatch):
    room_id = make_room(make_user("Asha"))
    bilal = make_user("Bilal")
    service = RoomService(supabase)
    service.join_room(room_id, bilal)

    # Simulate losing the race: the lookup misses, the insert hits the unique constraint
    monkeypatch.setattr(rooms_service, "get_membership", lambda *args: None)
    assert service.join_room(room_id, bilal).joined is False
    assert len(supabase.where("room_members", room_id=room_id, user_id=bilal)) == 1


@pytest.mark.parametrize("room_id, user_id, detail", [
    ("missing", None, "Room not found."),
    (None, "ghost", "User not found."),
])
def test_join_room_not_found(supabase, make_user, make_room, room_id, user_id, detail):
    asha = make_user("Asha")
    real_room = make_room(asha)
    with pytest.raises(HTTPException) as exc:
        RoomService(supabase).join_room(room_id or real_room, user_id or asha)
    assert exc.value.status_code == HTTPStatus.NOT_FOUND
    assert exc.value.detail == detail


def test_join_room_by_invite_link(supabase, make_user, make_room):
    room_id = make_room(make_user("Asha"))
    bilal = make_user("Bilal")
    result = RoomService(supabase).join_room_by_invite(f"https://eggs.example.com/room/{room_id}", bilal)
    assert result.joined is True
    assert result.room_id == room_id


def test_join_room_by_blank_invite(supabase, make_user):
    with pytest.raises(HTTPException) as exc:
        RoomService(supabase).join_room_by_invite("   ", make_user())
    assert exc.value.status_code == HTTPStatus.BAD_REQUEST


@pytest.mark.parametrize("value, expected", [
    ("https://eggs.example.com/room/abc-123", "abc-123"),
    ("https://eggs.example.com/room/abc-123/?x=1", "abc-123"),
    ("eggs.example.com/room/abc_123", "abc_123"),
    ("  abc-123  ", "abc-123"),
    ("https://eggs.example.com/other", "https://eggs.example.com/other"),
    ("", None),
    ("   ", None),
])
def test_parse_room_id(value, expected):
    assert parse_room_id(value) == expected


def test_list_rooms_with_member_counts(supabase, make_user, make_room):
    asha = make_user("Asha")
    bilal = make_user("Bilal")
    shared = make_room(asha, "Flat 3B")
    solo = make_room(asha, "Office")
    RoomService(supabase).join_room(shared, bilal)

    rooms = {room.id: room for room in RoomService(supabase).list_rooms(asha)}
    assert rooms[shared].member_count == 2
    assert rooms[solo].member_count == 1
    assert rooms[solo].name == "Office"
    assert rooms[solo].active_tray_id is not None

    assert [room.id for room in RoomService(supabase).list_rooms(bilal)] == [shared]


def test_list_rooms_skips_missing_rooms(supabase, make_user, make_room):
    asha = make_user("Asha")
    room_id = make_room(asha)
    supabase.rows("room_members").append({"id": str(uuid.uuid4()), "room_id": str(uuid.uuid4()), "user_id": asha, "joined_at": "2026-01-01T00:00:00+00:00"})

    assert [room.id for room in RoomService(supabase).list_rooms(asha)] == [room_id]


def test_list_rooms_for_user_without_rooms(supabase, make_user):
    assert RoomService(supabase).list_rooms(make_user()) == []


def test_summary_of_missing_room_is_none(supabase, make_user):
    assert RoomService(supabase).get_room_summary("missing", make_user()) is None


def test_summary_without_tray(supabase, make_user):
    asha = make_user("Asha")
    bare = str(uuid.uuid4())
    supabase.rows("rooms").append({"id": bare, "name": "Bare", "created_by": asha, "active_tray_id": None})

    summary = RoomService(supabase).get_room_summary(bare, asha)
    assert summary.tray is None
    assert summary.eggs == []
    assert summary.counts == {}
    assert summary.is_member is False


def test_summary_for_member(supabase, make_user, make_room):
    asha = make_user("Asha")
    bilal = make_user("Bilal")
    room_id = make_room(asha)
    RoomService(supabase).join_room(room_id, bilal)

    summary = RoomService(supabase).get_room_summary(room_id, bilal)
    assert summary.is_member is True
    assert summary.current_user.name == "Bilal"
    assert [m.name for m in summary.members] == ["Asha", "Bilal"]
    assert summary.tray.id == summary.room.active_tray_id
    assert [egg.position for egg in summary.eggs] == list(range(30))
    assert summary.total_eaten == 0
    assert summary.tray_size == 30
    assert summary.invite_url.endswith(f"/room/{room_id}")
    assert [(s.name, s.target, s.remaining) for s in summary.split] == [("Asha", 15, 15), ("Bilal", 15, 15)]


def test_summary_for_outsider(supabase, make_user, make_room):
    room_id = make_room(make_user("Asha"))
    outsider = make_user("Chen")
    summary = RoomService(supabase).get_room_summary(room_id, outsider)
    assert summary.is_member is False
    assert summary.current_user.name == "Chen"
    assert len(summary.members) == 1


def _members(*names):
    return [
        RoomMemberResponse(user_id=name.lower(), name=name, joined_at=f"2026-10-0{index + 1}T00:00:00+00:00")
        for index, name in enumerate(names)
    ]


def test_split_even():
    shares = split_tray(_members("Asha", "Bilal"), {"asha": 4})
    assert [(s.eaten, s.target, s.remaining) for s in shares] == [(4, 15, 11), (0, 15, 15)]


def test_split_remainder_goes_to_earliest_joiners():
    shares = split_tray(_members("A", "B", "C", "D"), {})
    assert [s.target for s in shares] == [8, 8, 7, 7]
    assert sum(s.target for s in shares) == 30


def test_split_remaining_never_negative():
    shares = split_tray(_members("A", "B"), {"a": 20})
    assert shares[0].remaining == 0


def test_split_without_members():
    assert split_tray([], {}) == []


def test_list_rooms_for_malformed_user_id(supabase):
    assert RoomService(supabase).list_rooms("not-a-uuid") == []


def test_join_room_by_malformed_invite(supabase, make_user):
    with pytest.raises(HTTPException) as exc:
        RoomService(supabase).join_room_by_invite("https://eggs.example.com/room/not-a-uuid", make_user())
    assert exc.value.status_code == HTTPStatus.NOT_FOUND
    assert exc.value.detail == "Room not found."
