"""
Configuration Loader (``pantry_config.loader``).

Responsibility
--------------
Loads engine configuration YAML files and parses them into the frozen
``pantry_config.schema`` dataclasses.  Runtime callers should use
``pantry_config.get_active_config()`` rather than calling this directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Sections and keys that are absent fall back to schema defaults; unknown
  keys are rejected so that typos do not silently revert to defaults.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed content for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or key -> ``ConfigValidationError``.
* Non-integer ``version`` -> ``ConfigValidationError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, fields, replace
from pathlib import Path
from typing import Any

import yaml

from pantry_config.schema import (
    EngineConfig,
    ExpiryConfig,
    MovementConfig,
    ValuationConfig,
)
from pantry_kernel.exceptions import ConfigValidationError

_SECTIONS: dict[str, type] = {
    "expiry": ExpiryConfig,
    "movements": MovementConfig,
    "valuation": ValuationConfig,
}

_ROOT_KEYS = {"config_id", "version"} | set(_SECTIONS)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def _parse_section(name: str, data: Any) -> Any:
    section_type = _SECTIONS[name]
    if data is None:
        return section_type()
    if not isinstance(data, dict):
        raise ConfigValidationError(name, data, "section must be a mapping")
    allowed = {f.name for f in fields(section_type)}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigValidationError(
            f"{name}.{sorted(unknown)[0]}", data, "unknown key"
        )
    return section_type(**data)


def _parse_version(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigValidationError("version", value, "must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigValidationError("version", value, "must be an integer") from exc


def parse_engine_config(data: dict[str, Any]) -> EngineConfig:
    """Parse a raw YAML mapping into an EngineConfig (checksum included)."""
    unknown = set(data) - _ROOT_KEYS
    if unknown:
        raise ConfigValidationError(sorted(unknown)[0], data, "unknown section")

    config = EngineConfig(
        config_id=str(data.get("config_id", "builtin")),
        version=_parse_version(data.get("version", 1)),
        expiry=_parse_section("expiry", data.get("expiry")),
        movements=_parse_section("movements", data.get("movements")),
        valuation=_parse_section("valuation", data.get("valuation")),
    )
    return replace(config, checksum=compute_checksum(config))


def load_engine_config(path: Path) -> EngineConfig:
    """Load and parse one configuration file."""
    return parse_engine_config(load_yaml_file(path))


def compute_checksum(config: EngineConfig) -> str:
    """Deterministic SHA-256 of the configuration content (checksum excluded)."""
    payload = asdict(config)
    payload.pop("checksum", None)
    canonical = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
