"""
Module: pantry_engines.stock
Responsibility:
    Compute an item's current stock as batch stock plus the net of manual
    adjustments that were not applied to a specific batch.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Batch stock counts usable batches only (same rule as costing).
    - Adjustments with a batch_id are excluded: they already changed that
      batch's quantity and would otherwise be counted twice.
    - Inactive adjustments are excluded.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from pantry_engines.costing import usable_batches
from pantry_kernel.domain.records import Batch, StockMovement

ZERO = Decimal("0")


@dataclass(frozen=True)
class StockPosition:
    """Current stock of one item, split by source."""

    item_id: str
    batch_quantity: Decimal
    adjustment_net: Decimal

    @property
    def current_stock(self) -> Decimal:
        return self.batch_quantity + self.adjustment_net


def calculate_current_stock(
    item_id: str,
    batches: Iterable[Batch],
    movements: Iterable[StockMovement],
) -> StockPosition:
    """Stock for ``item_id`` from its batches and unbatched adjustments."""
    batch_quantity = sum(
        (b.quantity for b in usable_batches(batches) if b.inventory_item_id == item_id),
        ZERO,
    )
    adjustment_net = sum(
        (
            m.signed_quantity
            for m in movements
            if m.active and m.inventory_item_id == item_id and m.batch_id is None
        ),
        ZERO,
    )
    return StockPosition(
        item_id=item_id,
        batch_quantity=batch_quantity,
        adjustment_net=adjustment_net,
    )
