from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

DEFAULT_MAP_SIZE = 2499
DEFAULT_MAX_REWARD_PER_TILE = 7
DEFAULT_LOOT_PROBABILITY_OUT_OF_99 = 50
DEFAULT_COOLDOWN_DURATION = 7 * 86400
LOOT_ROLL_MODULUS = 99


def _require_int(value: Any, *, field_name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    if value < minimum:
        raise ValueError(f"{field_name} must be >= {minimum}")
    return value


@dataclass(frozen=True)
class GridConfig:
    """Process-wide grid and reward parameters, read-only during a walk.

    ``map_size`` is the largest valid linear tile index of an N x N grid, so it
    must be one less than a perfect square. Tiles are numbered ``1..map_size``.
    """

    map_size: int = DEFAULT_MAP_SIZE
    max_reward_per_tile: int = DEFAULT_MAX_REWARD_PER_TILE
    loot_probability_out_of_99: int = DEFAULT_LOOT_PROBABILITY_OUT_OF_99
    cooldown_duration: int = DEFAULT_COOLDOWN_DURATION

    def __post_init__(self) -> None:
        _require_int(self.map_size, field_name="map_size", minimum=3)
        width = math.isqrt(self.map_size + 1)
        if width * width != self.map_size + 1:
            raise ValueError(f"map_size must be one less than a perfect square; got {self.map_size}")
        _require_int(self.max_reward_per_tile, field_name="max_reward_per_tile", minimum=1)
        _require_int(self.loot_probability_out_of_99, field_name="loot_probability_out_of_99", minimum=0)
        if self.loot_probability_out_of_99 > LOOT_ROLL_MODULUS:
            raise ValueError(f"loot_probability_out_of_99 must be <= {LOOT_ROLL_MODULUS}")
        _require_int(self.cooldown_duration, field_name="cooldown_duration", minimum=0)

    @property
    def row_width(self) -> int:
        return math.isqrt(self.map_size + 1)

    def contains(self, position: int) -> bool:
        return 1 <= position <= self.map_size

    def to_dict(self) -> dict[str, int]:
        return {
            "map_size": self.map_size,
            "max_reward_per_tile": self.max_reward_per_tile,
            "loot_probability_out_of_99": self.loot_probability_out_of_99,
            "cooldown_duration": self.cooldown_duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GridConfig":
        if not isinstance(data, dict):
            raise ValueError("grid config must be an object")
        return cls(
            map_size=data.get("map_size", DEFAULT_MAP_SIZE),
            max_reward_per_tile=data.get("max_reward_per_tile", DEFAULT_MAX_REWARD_PER_TILE),
            loot_probability_out_of_99=data.get("loot_probability_out_of_99", DEFAULT_LOOT_PROBABILITY_OUT_OF_99),
            cooldown_duration=data.get("cooldown_duration", DEFAULT_COOLDOWN_DURATION),
        )
