from chat_gateway.services.room_manager import RoomManager


def test_join_is_idempotent():
    rooms = RoomManager()

    assert rooms.join("a", "design") is True
    assert rooms.join("a", "design") is False
    assert rooms.members_of("design") == {"a"}
    assert rooms.rooms_of("a") == {"design"}


def test_connection_can_be_in_several_rooms():
    rooms = RoomManager()
    rooms.join("a", "general")
    rooms.join("a", "design")
    rooms.join("b", "design")

    assert rooms.rooms_of("a") == {"general", "design"}
    assert rooms.members_of("design") == {"a", "b"}
    assert rooms.active_rooms() == {"general": 1, "design": 2}


def test_leave_is_idempotent_and_empty_rooms_disappear():
    rooms = RoomManager()
    rooms.join("a", "design")

    assert rooms.leave("a", "design") is True
    assert rooms.leave("a", "design") is False
    assert rooms.leave("a", "never-joined") is False
    assert rooms.members_of("design") == set()
    assert "design" not in rooms.rooms
    assert "a" not in rooms.connection_rooms


def test_drop_removes_connection_everywhere():
    rooms = RoomManager()
    rooms.join("a", "general")
    rooms.join("a", "design")
    rooms.join("b", "general")

    assert rooms.drop("a") == {"general", "design"}
    assert rooms.members_of("general") == {"b"}
    assert rooms.active_rooms() == {"general": 1}
    assert rooms.drop("a") == set()


def test_members_of_returns_a_copy():
    rooms = RoomManager()
    rooms.join("a", "general")

    members = rooms.members_of("general")
    members.add("intruder")

    assert rooms.members_of("general") == {"a"}
