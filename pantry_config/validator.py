"""
Configuration validation (``pantry_config.validator``).

Checks the semantic rules a parsed ``EngineConfig`` must satisfy before the
services build engines from it.  Structural problems (unknown keys, bad
section shapes) are caught earlier by the loader.
"""

from __future__ import annotations

from typing import Any

from pantry_config.schema import EngineConfig
from pantry_kernel.exceptions import ConfigValidationError


def _is_int(value: Any) -> bool:
    # YAML ``true`` loads as bool, which is an int subclass.
    return isinstance(value, int) and not isinstance(value, bool)


def validate_engine_config(config: EngineConfig) -> EngineConfig:
    """
    Validate ``config`` and return it unchanged.

    Raises:
        ConfigValidationError: on the first rule that fails.
    """
    expiry = config.expiry
    if not _is_int(expiry.critical_days) or expiry.critical_days < 0:
        raise ConfigValidationError(
            "expiry.critical_days", expiry.critical_days, "must be a non-negative integer"
        )
    if not _is_int(expiry.soon_days) or expiry.soon_days <= expiry.critical_days:
        raise ConfigValidationError(
            "expiry.soon_days", expiry.soon_days, "must be an integer greater than critical_days"
        )

    movements = config.movements
    if not isinstance(movements.unknown_item_name, str) or not movements.unknown_item_name.strip():
        raise ConfigValidationError(
            "movements.unknown_item_name", movements.unknown_item_name, "must be a non-empty string"
        )
    if not _is_int(movements.recent_limit) or movements.recent_limit < 1:
        raise ConfigValidationError(
            "movements.recent_limit", movements.recent_limit, "must be at least 1"
        )
    if not _is_int(movements.trailing_days) or movements.trailing_days < 1:
        raise ConfigValidationError(
            "movements.trailing_days", movements.trailing_days, "must be at least 1"
        )

    valuation = config.valuation
    if not _is_int(valuation.display_places) or valuation.display_places < 0:
        raise ConfigValidationError(
            "valuation.display_places", valuation.display_places, "must be a non-negative integer"
        )
    if not isinstance(valuation.currency, str) or len(valuation.currency) != 3:
        raise ConfigValidationError(
            "valuation.currency", valuation.currency, "must be a three-letter currency code"
        )

    return config
