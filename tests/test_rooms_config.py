"""Tests for per-face room weights."""
from roomcut.rooms_config import (
    RoomsDefinition,
    default_many_rooms,
    default_rooms_definition,
    parse_weights_line,
)


def test_parse_weights_line_drops_invalid_tokens():
    assert parse_weights_line("1 2 x -3 0 inf nan 4.5") == [1.0, 2.0, 4.5]
    assert parse_weights_line("   ") == []


def test_room_weights_default_to_single_room():
    rooms = RoomsDefinition([[2, 1]])
    assert rooms.room_weights(0) == [2.0, 1.0]
    assert rooms.room_weights(1) == [1.0]
    assert rooms.room_weights(-1) == [1.0]
    assert rooms.num_rooms(0) == 2
    assert rooms.num_rooms(5) == 1


def test_line_without_valid_weights_is_one_room():
    rooms = RoomsDefinition.from_text("1 1\nfoo bar\n3\n")
    assert rooms.num_regions() == 3
    assert rooms.room_weights(1) == [1.0]
    assert rooms.room_weights(2) == [3.0]


def test_blank_lines_are_skipped():
    rooms = RoomsDefinition.from_text("\n1 1 1\n\n2 1\n\n")
    assert rooms.num_regions() == 2
    assert rooms.room_weights(1) == [2.0, 1.0]


def test_encode_decode():
    rooms = RoomsDefinition([[1, 1, 1, 1], [2.5, 1]])
    assert rooms.encode() == "1 1 1 1\n2.5 1"
    assert RoomsDefinition.from_text(rooms.encode()).room_weights(1) == [2.5, 1.0]


def test_returned_weights_are_copies():
    rooms = RoomsDefinition([[1, 1]])
    rooms.room_weights(0).append(9)
    assert rooms.room_weights(0) == [1.0, 1.0]


def test_decode_notifies_listeners():
    rooms = RoomsDefinition()
    calls = []
    rooms.add_listener(lambda: calls.append(rooms.num_regions()))
    rooms.decode("1 1\n2")
    assert calls == [2]


def test_defaults():
    assert default_rooms_definition().room_weights(0) == [1, 1, 1, 1]
    many = default_many_rooms()
    assert many.num_regions() == 4
    assert many.room_weights(3) == [3, 1, 1]
