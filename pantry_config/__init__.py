"""
pantry_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain engine configuration at runtime through
    ``get_active_config()``.  Returns a validated, frozen ``EngineConfig``.

Architecture position:
    Configuration -- YAML-driven settings with load-time validation.
    Sits above ``pantry_kernel`` and ``pantry_engines`` and below
    ``pantry_services``.  Engines MUST NEVER import from ``pantry_config``;
    services translate the config into engine constructor arguments.

Failure modes:
    - ``ConfigNotFoundError`` -- no configuration set with the given name.
    - ``ConfigValidationError`` -- structural or semantic validation failed.
    - ``yaml.YAMLError`` -- the file is not valid YAML.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PANTRY_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, tying every computed dashboard to the settings that shaped it.
"""

from __future__ import annotations

from pathlib import Path

from pantry_config.loader import load_engine_config
from pantry_config.schema import (
    EngineConfig,
    ExpiryConfig,
    MovementConfig,
    ValuationConfig,
)
from pantry_config.validator import validate_engine_config
from pantry_kernel.exceptions import ConfigNotFoundError
from pantry_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(
    name: str = "default",
    config_dir: Path | None = None,
) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        name: Configuration set name; resolves to ``<config_dir>/<name>.yaml``.
        config_dir: Override directory (tests).  Defaults to the packaged
            ``sets`` directory.

    Returns:
        A validated EngineConfig.
    """
    directory = config_dir or _DEFAULT_CONFIG_DIR
    path = directory / f"{name}.yaml"
    if not path.is_file():
        raise ConfigNotFoundError(name, str(path))

    config = validate_engine_config(load_engine_config(path))

    _logger.info(
        "PANTRY_CONFIG_TRACE",
        extra={
            "trace_type": "PANTRY_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
        },
    )
    return config


__all__ = [
    "EngineConfig",
    "ExpiryConfig",
    "MovementConfig",
    "ValuationConfig",
    "get_active_config",
]
