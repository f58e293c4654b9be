from __future__ import annotations

import hashlib
import json
from typing import Any

from gridwalk.sim.grid import GridConfig
from gridwalk.sim.registry import PlayerRegistry, PlayerStats
from gridwalk.sim.walk import WalkResult


def _canonical_hash(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def stats_hash(stats: PlayerStats) -> str:
    return _canonical_hash(stats.to_dict())


def registry_hash(registry: PlayerRegistry) -> str:
    return _canonical_hash(registry.to_dict())


def config_hash(config: GridConfig) -> str:
    return _canonical_hash(config.to_dict())


def walk_hash(result: WalkResult) -> str:
    return _canonical_hash(result.to_dict())


def save_hash(payload: dict[str, Any]) -> str:
    hash_payload = {
        "schema_version": payload["schema_version"],
        "config": payload["config"],
        "registry": payload["registry"],
    }
    return _canonical_hash(hash_payload)
