"""
Module: pantry_engines.consumption
Responsibility:
    Plan how a requested quantity of an item is drawn down across its
    batches, soonest-expiry first (FEFO), and what that draw-down costs.
    Used when stock leaves an inventory (transfers, usage) so the caller
    can decrement the right batches.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Shares usable-batch and FEFO ordering rules with pantry_engines.costing.
    Applying the plan (updating batch quantities) is the caller's job.

Invariants enforced:
    - Only usable batches are drawn from, in FEFO order.
    - Each line takes min(remaining request, batch quantity).
    - fulfilled_quantity + shortfall == requested_quantity.
    - Batches are never mutated; remaining_after is reported per line.
    - Decimal-only arithmetic.

Failure modes:
    - ValueError when the requested quantity is not positive.
    - InsufficientStockError when allow_partial is False and usable
      batches cannot cover the request.

Usage:
    from decimal import Decimal
    from pantry_engines.consumption import plan_fefo_consumption

    plan = plan_fefo_consumption(batches=item.batches, quantity=Decimal("12"))
    for line in plan.lines:
        decrement(line.batch_id, line.quantity)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from pantry_engines.costing import fefo_order, usable_batches
from pantry_engines.tracer import traced_engine
from pantry_kernel.domain.records import Batch, to_decimal
from pantry_kernel.exceptions import InsufficientStockError
from pantry_kernel.logging_config import get_logger

logger = get_logger("engines.consumption")

ZERO = Decimal("0")


@dataclass(frozen=True)
class ConsumptionLine:
    """Quantity drawn from a single batch."""

    batch_id: str
    expiry_date: date
    quantity: Decimal
    unit_cost: Decimal
    remaining_after: Decimal

    @property
    def cost(self) -> Decimal:
        return self.quantity * self.unit_cost

    @property
    def depletes_batch(self) -> bool:
        return self.remaining_after <= 0


@dataclass(frozen=True)
class ConsumptionPlan:
    """
    FEFO draw-down of a requested quantity.

    Guarantees:
        - ``lines`` are in FEFO order.
        - ``fulfilled_quantity + shortfall == requested_quantity``.
    """

    item_id: str
    requested_quantity: Decimal
    lines: tuple[ConsumptionLine, ...]

    @property
    def fulfilled_quantity(self) -> Decimal:
        return sum((line.quantity for line in self.lines), ZERO)

    @property
    def shortfall(self) -> Decimal:
        return self.requested_quantity - self.fulfilled_quantity

    @property
    def is_complete(self) -> bool:
        return self.shortfall <= 0

    @property
    def total_cost(self) -> Decimal:
        return sum((line.cost for line in self.lines), ZERO)

    @property
    def average_unit_cost(self) -> Decimal:
        """Weighted average unit cost of the drawn quantity."""
        fulfilled = self.fulfilled_quantity
        if fulfilled == 0:
            return ZERO
        return self.total_cost / fulfilled


@traced_engine("consumption", "1.0", fingerprint_fields=("quantity", "item_id", "allow_partial"))
def plan_fefo_consumption(
    *,
    batches: Iterable[Batch],
    quantity: Decimal | int | str,
    item_id: str | None = None,
    allow_partial: bool = True,
) -> ConsumptionPlan:
    """
    Draw ``quantity`` from ``batches`` soonest-expiry first.

    Args:
        batches: Candidate batches of one item (unusable ones are ignored).
        quantity: Requested quantity, must be positive.
        item_id: Item the batches belong to.  Defaults to the first
            batch's ``inventory_item_id``.
        allow_partial: If False, an uncovered request raises instead of
            returning a plan with a shortfall.

    Returns:
        ConsumptionPlan describing the draw-down.

    Raises:
        ValueError: If quantity <= 0.
        InsufficientStockError: If allow_partial is False and stock is short.
    """
    requested = to_decimal(quantity)
    if requested <= 0:
        raise ValueError(f"Consumption quantity must be positive, got {requested}")

    ordered = fefo_order(usable_batches(batches))
    if item_id is None:
        item_id = ordered[0].inventory_item_id if ordered else ""

    available = sum((b.quantity for b in ordered), ZERO)
    if available < requested and not allow_partial:
        logger.warning(
            "consumption_insufficient_stock",
            extra={
                "item_id": item_id,
                "requested": str(requested),
                "available": str(available),
            },
        )
        raise InsufficientStockError(item_id, requested, available)

    lines: list[ConsumptionLine] = []
    remaining = requested
    for batch in ordered:
        if remaining <= 0:
            break
        take = min(remaining, batch.quantity)
        lines.append(
            ConsumptionLine(
                batch_id=batch.id,
                expiry_date=batch.expiry_date,
                quantity=take,
                unit_cost=batch.cost_per_unit,
                remaining_after=batch.quantity - take,
            )
        )
        remaining -= take

    plan = ConsumptionPlan(
        item_id=item_id,
        requested_quantity=requested,
        lines=tuple(lines),
    )
    logger.info(
        "consumption_planned",
        extra={
            "item_id": item_id,
            "requested": str(requested),
            "fulfilled": str(plan.fulfilled_quantity),
            "shortfall": str(plan.shortfall),
            "batch_count": len(lines),
        },
    )
    return plan
