from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from gridwalk.content.schema import validate_config_payload, validate_registry_payload
from gridwalk.sim.grid import GridConfig
from gridwalk.sim.hash import save_hash
from gridwalk.sim.registry import PlayerRegistry

SCHEMA_VERSION = 1
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


def _build_config_payload(config: GridConfig) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        **config.to_dict(),
    }


def _build_registry_payload(registry: PlayerRegistry, config: GridConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "config": config.to_dict(),
        "registry": registry.to_dict(),
    }
    payload["save_hash"] = save_hash(payload)
    return payload


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def load_grid_config_json(path: str | Path) -> GridConfig:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    validate_config_payload(payload)
    return GridConfig.from_dict(payload)


def save_grid_config_json(path: str | Path, config: GridConfig) -> None:
    payload = _build_config_payload(config)
    validate_config_payload(payload)
    _write_atomic_json(path, payload)


def save_registry_json(path: str | Path, registry: PlayerRegistry, config: GridConfig) -> None:
    payload = _build_registry_payload(registry, config)
    validate_registry_payload(payload)
    _write_atomic_json(path, payload)


def load_registry_json(path: str | Path) -> tuple[GridConfig, PlayerRegistry]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    validate_registry_payload(payload)

    expected_hash = payload["save_hash"]
    actual_hash = save_hash(payload)
    if expected_hash != actual_hash:
        raise ValueError(
            f"save_hash mismatch while loading registry (stored={expected_hash}, recomputed={actual_hash})"
        )

    config = GridConfig.from_dict(payload["config"])
    registry = PlayerRegistry.from_dict(payload["registry"])
    return config, registry
