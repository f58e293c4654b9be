from __future__ import annotations

from typing import Any

SUPPORTED_SCHEMA_VERSIONS = {1}
REQUIRED_CONFIG_FIELDS = {"map_size", "max_reward_per_tile", "loot_probability_out_of_99", "cooldown_duration"}
REQUIRED_STATS_FIELDS = {"last_explore_time", "total_reward_count", "nonce"}


def _validate_schema_version(payload: dict[str, Any], *, field_prefix: str) -> None:
    version = payload.get("schema_version")
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError(f"{field_prefix}.schema_version must be an integer")
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {version}")


def _validate_int_fields(row: dict[str, Any], fields: set[str], *, field_name: str) -> None:
    missing = fields - set(row.keys())
    if missing:
        raise ValueError(f"{field_name} missing fields: {sorted(missing)}")
    for key in sorted(fields):
        value = row[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{field_name}.{key} must be an integer")


def _validate_config_shape(config: Any, *, field_name: str) -> None:
    if not isinstance(config, dict):
        raise ValueError(f"{field_name} must be an object")
    _validate_int_fields(config, REQUIRED_CONFIG_FIELDS, field_name=field_name)


def validate_config_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("grid config payload must be an object")
    _validate_schema_version(payload, field_prefix="config")
    _validate_config_shape(
        {key: value for key, value in payload.items() if key != "schema_version"},
        field_name="config",
    )


def validate_registry_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("registry save payload must be an object")
    _validate_schema_version(payload, field_prefix="save")

    for key in ("config", "registry", "save_hash"):
        if key not in payload:
            raise ValueError(f"save payload missing field: {key}")
    if not isinstance(payload["save_hash"], str) or not payload["save_hash"]:
        raise ValueError("save.save_hash must be a non-empty string")

    _validate_config_shape(payload["config"], field_name="save.config")

    registry = payload["registry"]
    if not isinstance(registry, dict):
        raise ValueError("save.registry must be an object")
    players = registry.get("players")
    if not isinstance(players, dict):
        raise ValueError("save.registry.players must be an object")
    for caller_id, row in players.items():
        if not isinstance(caller_id, str) or not caller_id:
            raise ValueError("save.registry.players keys must be non-empty strings")
        if not isinstance(row, dict):
            raise ValueError(f"save.registry.players[{caller_id}] must be an object")
        _validate_int_fields(row, REQUIRED_STATS_FIELDS, field_name=f"save.registry.players[{caller_id}]")
