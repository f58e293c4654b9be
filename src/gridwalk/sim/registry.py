from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


def _require_non_negative_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return value


@dataclass(frozen=True)
class PlayerStats:
    last_explore_time: int = 0
    total_reward_count: int = 0
    nonce: int = 0

    def __post_init__(self) -> None:
        _require_non_negative_int(self.last_explore_time, field_name="last_explore_time")
        _require_non_negative_int(self.total_reward_count, field_name="total_reward_count")
        _require_non_negative_int(self.nonce, field_name="nonce")

    def to_dict(self) -> dict[str, int]:
        return {
            "last_explore_time": self.last_explore_time,
            "total_reward_count": self.total_reward_count,
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerStats":
        if not isinstance(data, dict):
            raise ValueError("player stats must be an object")
        return cls(
            last_explore_time=data.get("last_explore_time", 0),
            total_reward_count=data.get("total_reward_count", 0),
            nonce=data.get("nonce", 0),
        )


class PlayerRegistry:
    """Keyed store of per-caller stats with one mutation lock per caller.

    Entries are created on first access and live for the registry's lifetime.
    """

    def __init__(self) -> None:
        self._stats: dict[Hashable, PlayerStats] = {}
        self._locks: dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._stats)

    def __contains__(self, caller_id: object) -> bool:
        with self._guard:
            return caller_id in self._stats

    def callers(self) -> list[Hashable]:
        with self._guard:
            return list(self._stats)

    def get(self, caller_id: Hashable) -> PlayerStats:
        """Return the caller's stats without creating an entry."""
        with self._guard:
            return self._stats.get(caller_id, PlayerStats())

    def get_or_create(self, caller_id: Hashable) -> PlayerStats:
        with self._guard:
            stats = self._stats.get(caller_id)
            if stats is None:
                stats = PlayerStats()
                self._stats[caller_id] = stats
                logger.debug("registered caller %r", caller_id)
            return stats

    def commit(self, caller_id: Hashable, new_stats: PlayerStats) -> None:
        if not isinstance(new_stats, PlayerStats):
            raise TypeError("new_stats must be a PlayerStats")
        with self._guard:
            self._stats[caller_id] = new_stats

    def caller_lock(self, caller_id: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(caller_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[caller_id] = lock
            return lock

    def to_dict(self) -> dict[str, Any]:
        with self._guard:
            items = list(self._stats.items())
        players: dict[str, dict[str, int]] = {}
        for caller_id, stats in items:
            if not isinstance(caller_id, str):
                raise ValueError(f"only string caller ids can be serialized; got {caller_id!r}")
            players[caller_id] = stats.to_dict()
        return {"players": dict(sorted(players.items()))}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerRegistry":
        if not isinstance(data, dict):
            raise ValueError("registry must be an object")
        players = data.get("players", {})
        if not isinstance(players, dict):
            raise ValueError("registry.players must be an object")
        registry = cls()
        for caller_id, row in sorted(players.items()):
            if not isinstance(caller_id, str) or not caller_id:
                raise ValueError("registry.players keys must be non-empty strings")
            registry.commit(caller_id, PlayerStats.from_dict(row))
        return registry
