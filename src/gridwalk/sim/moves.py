from __future__ import annotations

from collections.abc import Iterable, Iterator

MOVE_BUFFER_SIZE = 32
MOVE_BYTES_USED = 25
MOVES_PER_BYTE = 4
MOVES_PER_BUFFER = MOVE_BYTES_USED * MOVES_PER_BYTE

MOVE_DOWN = 0
MOVE_RIGHT = 1
MOVE_LEFT = 2
MOVE_UP = 3
MOVE_NAMES: dict[int, str] = {
    MOVE_DOWN: "down",
    MOVE_RIGHT: "right",
    MOVE_LEFT: "left",
    MOVE_UP: "up",
}

_BYTE_SHIFTS = (6, 4, 2, 0)


def require_move_buffer(buffer: bytes) -> bytes:
    if not isinstance(buffer, (bytes, bytearray, memoryview)):
        raise ValueError("move buffer must be bytes")
    raw = bytes(buffer)
    if len(raw) != MOVE_BUFFER_SIZE:
        raise ValueError(f"move buffer must be exactly {MOVE_BUFFER_SIZE} bytes; got {len(raw)}")
    return raw


def iter_moves(buffer: bytes) -> Iterator[int]:
    """Yield the 100 move codes packed into the first 25 bytes, MSB pair first.

    Bytes 25..31 are reserved and never read.
    """
    raw = require_move_buffer(buffer)

    def _generate() -> Iterator[int]:
        for value in raw[:MOVE_BYTES_USED]:
            for shift in _BYTE_SHIFTS:
                yield (value >> shift) & 0b11

    return _generate()


def decode_moves(buffer: bytes) -> tuple[int, ...]:
    return tuple(iter_moves(buffer))


def encode_moves(moves: Iterable[int]) -> bytes:
    """Pack move codes into a 32-byte buffer; missing moves and reserved bytes are zero."""
    codes = list(moves)
    if len(codes) > MOVES_PER_BUFFER:
        raise ValueError(f"at most {MOVES_PER_BUFFER} moves fit in a buffer; got {len(codes)}")
    packed = bytearray(MOVE_BUFFER_SIZE)
    for index, code in enumerate(codes):
        if isinstance(code, bool) or not isinstance(code, int) or code not in MOVE_NAMES:
            raise ValueError(f"moves[{index}] must be a move code in 0..3; got {code!r}")
        packed[index // MOVES_PER_BYTE] |= code << _BYTE_SHIFTS[index % MOVES_PER_BYTE]
    return bytes(packed)


def parse_move_buffer(text: str) -> bytes:
    cleaned = text.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    if len(cleaned) != MOVE_BUFFER_SIZE * 2:
        raise ValueError(f"move buffer hex must be {MOVE_BUFFER_SIZE * 2} hex digits; got {len(cleaned)}")
    try:
        return bytes.fromhex(cleaned)
    except ValueError as exc:
        raise ValueError(f"move buffer is not valid hex: {text!r}") from exc
