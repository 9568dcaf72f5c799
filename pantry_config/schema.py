"""
Engine configuration schema.

Defines the typed, frozen form of an engine configuration set.  YAML
fragments are parsed into these types by the loader; services receive an
``EngineConfig`` and build their engines from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pantry_engines.expiry import ExpiryThresholds
from pantry_engines.movements import UNKNOWN_ITEM_NAME

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExpiryConfig:
    """Day limits for the expiry buckets."""

    critical_days: int = 7
    soon_days: int = 30

    def thresholds(self) -> ExpiryThresholds:
        return ExpiryThresholds(
            critical_days=self.critical_days,
            soon_days=self.soon_days,
        )


@dataclass(frozen=True)
class MovementConfig:
    """Movement display settings."""

    unknown_item_name: str = UNKNOWN_ITEM_NAME
    recent_limit: int = 5
    trailing_days: int = 7


@dataclass(frozen=True)
class ValuationConfig:
    """Valuation presentation settings."""

    currency: str = "USD"
    display_places: int = 2


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    """A complete, validated engine configuration set."""

    config_id: str = "builtin"
    version: int = 1
    expiry: ExpiryConfig = field(default_factory=ExpiryConfig)
    movements: MovementConfig = field(default_factory=MovementConfig)
    valuation: ValuationConfig = field(default_factory=ValuationConfig)
    checksum: str = ""

    @classmethod
    def defaults(cls) -> EngineConfig:
        """Built-in defaults, no file access."""
        return cls()
