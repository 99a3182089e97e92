import pytest

from backend import AlreadyInRoomError, JoinResult, RoomStore
from conftest import RecordingConnection


def assert_consistent(store, connections):
    for room_id, room in store.rooms.items():
        assert 1 <= room.occupant_count <= 2
        for occupant in room.occupants:
            assert occupant.room_id == room_id
    for conn in connections:
        if conn.room_id is not None:
            room = store.rooms[conn.room_id]
            assert [room.slot_a, room.slot_b].count(conn) == 1


@pytest.fixture()
def store():
    return RoomStore()


def test_create_room_assigns_creator_to_first_slot(store):
    alice = RecordingConnection("alice")
    room_id = store.create_room(alice, "A", "", 10, 20)

    assert room_id == "1"
    room = store.get_room(room_id)
    assert room.slot_a is alice
    assert room.slot_b is None
    assert alice.room_id == room_id
    assert (room.width, room.height) == (10, 20)


def test_room_ids_are_not_reused_while_rooms_are_live(store):
    a, b, c = (RecordingConnection() for _ in range(3))
    first = store.create_room(a, "one", "", 1, 1)
    second = store.create_room(b, "two", "", 1, 1)
    store.leave_room(a)
    third = store.create_room(c, "three", "", 1, 1)

    assert first != second
    assert third not in (first, second)
    assert store.get_room(second).slot_a is b


def test_create_room_rejects_connection_already_in_a_room(store):
    alice = RecordingConnection()
    store.create_room(alice, "A", "", 10, 20)
    with pytest.raises(AlreadyInRoomError):
        store.create_room(alice, "B", "", 10, 20)
    assert len(store.rooms) == 1


def test_join_open_room_with_any_password(store):
    alice, bob = RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "", 10, 20)

    result, room = store.join_room(bob, room_id, "whatever")

    assert result is JoinResult.SUCCESS
    assert room.slot_b is bob
    assert bob.room_id == room_id
    assert_consistent(store, [alice, bob])


def test_join_with_wrong_password(store):
    alice, bob = RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "secret", 10, 20)

    result, room = store.join_room(bob, room_id, "guess")

    assert result is JoinResult.WRONG_PASSWORD
    assert room is None
    assert bob.room_id is None
    assert store.get_room(room_id).occupant_count == 1


def test_join_with_correct_password(store):
    alice, bob = RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "secret", 10, 20)

    result, _ = store.join_room(bob, room_id, "secret")

    assert result is JoinResult.SUCCESS


def test_join_missing_room(store):
    bob = RecordingConnection()
    result, room = store.join_room(bob, "42", "")
    assert result is JoinResult.ROOM_NOT_FOUND
    assert room is None
    assert bob.room_id is None


def test_join_full_room_changes_nothing(store):
    alice, bob, carol = RecordingConnection(), RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "", 10, 20)
    store.join_room(bob, room_id, "")

    result, room = store.join_room(carol, room_id, "")

    assert result is JoinResult.ROOM_FULL
    assert room is None
    assert carol.room_id is None
    full_room = store.get_room(room_id)
    assert full_room.slot_a is alice
    assert full_room.slot_b is bob


def test_full_room_is_checked_before_password(store):
    alice, bob, carol = RecordingConnection(), RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "secret", 10, 20)
    store.join_room(bob, room_id, "secret")

    result, _ = store.join_room(carol, room_id, "wrong")

    assert result is JoinResult.ROOM_FULL


def test_sole_occupant_leaving_deletes_room(store):
    alice = RecordingConnection()
    room_id = store.create_room(alice, "A", "", 10, 20)

    remaining = store.leave_room(alice)

    assert remaining is None
    assert store.get_room(room_id) is None
    assert alice.room_id is None


def test_room_survives_first_departure_and_dies_on_second(store):
    alice, bob = RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "", 10, 20)
    store.join_room(bob, room_id, "")

    assert store.leave_room(alice) is bob
    assert store.get_room(room_id).occupant_count == 1
    assert_consistent(store, [alice, bob])

    assert store.leave_room(bob) is None
    assert store.get_room(room_id) is None
    assert_consistent(store, [alice, bob])


def test_leave_without_room_is_a_no_op(store):
    alice = RecordingConnection()
    assert store.leave_room(alice) is None
    assert store.rooms == {}


def test_rejoin_fills_slot_vacated_by_creator(store):
    alice, bob, carol = RecordingConnection(), RecordingConnection(), RecordingConnection()
    room_id = store.create_room(alice, "A", "", 10, 20)
    store.join_room(bob, room_id, "")
    store.leave_room(alice)

    result, room = store.join_room(carol, room_id, "")

    assert result is JoinResult.SUCCESS
    assert room.slot_a is carol
    assert room.slot_b is bob
    assert store.get_opponent(carol) is bob
    assert store.get_opponent(bob) is carol


def test_get_opponent(store):
    alice, bob = RecordingConnection(), RecordingConnection()
    assert store.get_opponent(alice) is None

    room_id = store.create_room(alice, "A", "", 10, 20)
    assert store.get_opponent(alice) is None

    store.join_room(bob, room_id, "")
    assert store.get_opponent(alice) is bob
    assert store.get_opponent(bob) is alice


def test_list_joinable_rooms_skips_full_rooms(store):
    alice, bob, carol = RecordingConnection(), RecordingConnection(), RecordingConnection()
    full_id = store.create_room(alice, "Full", "", 10, 20)
    store.join_room(bob, full_id, "")
    open_id = store.create_room(carol, "Open", "pw", 8, 8)

    listings = store.list_joinable_rooms()

    assert [listing.room_id for listing in listings] == [open_id]
    assert listings[0].name == "Open"
    assert listings[0].has_password is True
    assert listings[0].occupant_count == 1


def test_invariants_hold_through_mixed_sequence(store):
    conns = [RecordingConnection(str(i)) for i in range(6)]
    a, b, c, d, e, f = conns

    steps = [
        lambda: store.create_room(a, "r1", "", 10, 20),
        lambda: store.create_room(b, "r2", "pw", 10, 20),
        lambda: store.join_room(c, "1", ""),
        lambda: store.join_room(d, "1", ""),
        lambda: store.join_room(d, "2", "nope"),
        lambda: store.join_room(d, "2", "pw"),
        lambda: store.leave_room(a),
        lambda: store.join_room(e, "1", ""),
        lambda: store.leave_room(b),
        lambda: store.leave_room(d),
        lambda: store.create_room(f, "r3", "", 4, 4),
        lambda: store.leave_room(c),
        lambda: store.leave_room(e),
    ]
    for step in steps:
        step()
        assert_consistent(store, conns)
        for listing in store.list_joinable_rooms():
            assert not store.get_room(listing.room_id).is_full

    assert list(store.rooms) == ["3"]
