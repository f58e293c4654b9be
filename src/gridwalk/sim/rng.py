from __future__ import annotations

import hashlib
import json
from typing import Any, Union

from gridwalk.sim.grid import GridConfig

EXPLORE_SEED_DOMAIN = "explore_seed"
EXPLORE_EVENT_DOMAIN = "explore_event"

CallerId = Union[str, int, bytes, tuple[Any, ...]]


def caller_token(caller_id: CallerId) -> str:
    """Render a caller identity as a type-tagged string, unique per identity.

    ``"1"``, ``1`` and ``b"1"`` give ``str:1``, ``int:1`` and ``bytes:31``.
    Tuples of supported identities are tagged element by element.
    """
    if isinstance(caller_id, bytes):
        return "bytes:" + caller_id.hex()
    if isinstance(caller_id, tuple):
        if not caller_id:
            raise ValueError("caller_id tuple must not be empty")
        return "tuple:" + json.dumps([caller_token(item) for item in caller_id], separators=(",", ":"))
    if isinstance(caller_id, bool) or not isinstance(caller_id, (str, int)):
        raise ValueError(f"caller_id must be str, int, bytes or a tuple of those; got {type(caller_id).__name__}")
    if isinstance(caller_id, str):
        if not caller_id:
            raise ValueError("caller_id must be a non-empty string")
        return f"str:{caller_id}"
    return f"int:{caller_id}"


def _digest_to_int(material: str) -> int:
    digest = hashlib.sha256(material.encode("utf-8")).digest()
    return int.from_bytes(digest, byteorder="big", signed=False)


def derive_explore_seed(caller_id: CallerId, nonce: int) -> int:
    """Derive the 256-bit start seed from public values (caller identity, nonce).

    Anyone who knows both inputs can compute the seed ahead of time.
    """
    return _digest_to_int(f"{EXPLORE_SEED_DOMAIN}:{caller_token(caller_id)}:{nonce}")


def derive_event_value(current_time: int, position: int, step_index: int) -> int:
    """Derive the per-step loot roll value for one tile visit."""
    return _digest_to_int(f"{EXPLORE_EVENT_DOMAIN}:{current_time}:{position}:{step_index}")


def start_position(config: GridConfig, caller_id: CallerId, nonce: int) -> int:
    return derive_explore_seed(caller_id, nonce) % config.map_size + 1
