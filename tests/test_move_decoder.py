import pytest

from gridwalk.sim.moves import (
    MOVE_BUFFER_SIZE,
    MOVE_DOWN,
    MOVE_LEFT,
    MOVE_RIGHT,
    MOVE_UP,
    MOVES_PER_BUFFER,
    decode_moves,
    encode_moves,
    iter_moves,
    parse_move_buffer,
)


def test_each_byte_yields_four_moves_most_significant_pair_first() -> None:
    buffer = bytes([0b00011011]) + bytes(MOVE_BUFFER_SIZE - 1)

    moves = decode_moves(buffer)

    assert moves[:4] == (MOVE_DOWN, MOVE_RIGHT, MOVE_LEFT, MOVE_UP)
    assert moves[4:] == (MOVE_DOWN,) * (MOVES_PER_BUFFER - 4)


def test_square_pattern_byte_decodes_to_up_left_down_right() -> None:
    moves = decode_moves(bytes([0xE1]) * MOVE_BUFFER_SIZE)

    assert len(moves) == MOVES_PER_BUFFER
    assert moves == (MOVE_UP, MOVE_LEFT, MOVE_DOWN, MOVE_RIGHT) * 25


def test_reserved_trailing_bytes_are_ignored() -> None:
    base = bytes([0x5A]) * 25
    assert decode_moves(base + bytes(7)) == decode_moves(base + b"\xff" * 7)


def test_iter_moves_is_lazy_and_restartable() -> None:
    buffer = bytes(range(MOVE_BUFFER_SIZE))

    first = iter_moves(buffer)
    assert next(first) == 0
    assert list(iter_moves(buffer)) == list(decode_moves(buffer))
    assert len(list(first)) == MOVES_PER_BUFFER - 1


@pytest.mark.parametrize("size", [0, 25, 31, 33])
def test_buffer_must_be_exactly_32_bytes(size: int) -> None:
    with pytest.raises(ValueError, match="exactly 32 bytes"):
        decode_moves(bytes(size))


def test_encode_moves_packs_codes_into_leading_bytes() -> None:
    moves = [MOVE_UP, MOVE_LEFT, MOVE_DOWN, MOVE_RIGHT, MOVE_RIGHT]

    packed = encode_moves(moves)

    assert len(packed) == MOVE_BUFFER_SIZE
    assert packed[0] == 0xE1
    assert packed[1] == 0b01000000
    assert packed[2:] == bytes(MOVE_BUFFER_SIZE - 2)
    assert decode_moves(packed)[:5] == tuple(moves)


def test_encode_moves_rejects_bad_codes_and_overflow() -> None:
    with pytest.raises(ValueError, match="move code"):
        encode_moves([0, 4])
    with pytest.raises(ValueError, match="at most 100 moves"):
        encode_moves([0] * (MOVES_PER_BUFFER + 1))


def test_parse_move_buffer_accepts_optional_prefix() -> None:
    text = "e1" * 25 + "00" * 7

    assert parse_move_buffer(text) == bytes([0xE1]) * 25 + bytes(7)
    assert parse_move_buffer("0x" + text.upper()) == parse_move_buffer(text)


def test_parse_move_buffer_rejects_wrong_length_and_non_hex() -> None:
    with pytest.raises(ValueError, match="64 hex digits"):
        parse_move_buffer("e1e1")
    with pytest.raises(ValueError, match="not valid hex"):
        parse_move_buffer("zz" * 32)
