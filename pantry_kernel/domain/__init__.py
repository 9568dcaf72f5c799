"""
Pure domain layer.

This module contains immutable records and the clock abstraction with NO
dependencies on:
- ORM / database
- Network or file I/O
- Wall-clock time (outside SystemClock)
"""

from pantry_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
)
from pantry_kernel.domain.records import (
    Batch,
    InventoryItem,
    InventorySnapshot,
    MovementType,
    StockMovement,
    to_decimal,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Batch",
    "InventoryItem",
    "InventorySnapshot",
    "MovementType",
    "StockMovement",
    "to_decimal",
]
