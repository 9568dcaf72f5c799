"""
Inventory Domain Records (``pantry_kernel.domain.records``).

Responsibility
--------------
Frozen value objects for the nouns the engines compute over: inventory
items, the batches that replenish them, manual stock movements, and the
point-in-time snapshot that bundles all three.

Architecture
------------
Layer: **Kernel > Domain** -- pure data structures.  These records carry NO
database identity and NO I/O; an external persistence layer builds them and
hands them to the engines.

Invariants
----------
- All quantity and cost fields are ``Decimal`` after construction; ``int``,
  ``str`` and ``float`` inputs are coerced (floats through ``str()`` so that
  ``0.1`` stays ``Decimal("0.1")``).
- ``Batch.is_usable`` is the single definition of which batches count toward
  on-hand stock, value and expiry alerts: active and ``quantity > 0``.
- ``MovementType`` is a closed two-variant enumeration.  Direction comes from
  the type alone; ``StockMovement.quantity`` is a magnitude.

Failure Modes
-------------
- ``MovementType.from_tag`` raises ``UnknownMovementTypeError`` for any tag
  outside the enumeration.  There is no default branch.
- No other validation: the persistence layer guarantees non-negative
  quantities and costs before records reach the engine.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pantry_kernel.exceptions import UnknownMovementTypeError
from pantry_kernel.logging_config import get_logger

logger = get_logger("domain.records")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric input to ``Decimal`` without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class MovementType(str, Enum):
    """Direction of a manual stock adjustment."""

    POSITIVE_ADJUSTMENT = "positive_adjustment"
    NEGATIVE_ADJUSTMENT = "negative_adjustment"

    @classmethod
    def from_tag(cls, tag: str | MovementType) -> MovementType:
        """Parse a wire tag into a movement type."""
        if isinstance(tag, cls):
            return tag
        for member in cls:
            if member.value == tag:
                return member
        raise UnknownMovementTypeError(str(tag), tuple(m.value for m in cls))

    @property
    def sign(self) -> int:
        """+1 for stock gains, -1 for stock losses."""
        return 1 if self is MovementType.POSITIVE_ADJUSTMENT else -1


@dataclass(frozen=True)
class Batch:
    """
    A discrete lot of an inventory item received at one cost and expiry.

    ``quantity`` is the remaining units; consumption happens outside the
    engine and arrives here already decremented.
    """

    id: str
    inventory_item_id: str
    quantity: Decimal
    cost_per_unit: Decimal
    expiry_date: date
    active: bool = True
    batch_number: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "cost_per_unit", to_decimal(self.cost_per_unit))

    @property
    def is_usable(self) -> bool:
        """True if the batch counts toward stock, value and expiry alerts."""
        return self.active and self.quantity > 0

    @property
    def value(self) -> Decimal:
        """Remaining quantity at the batch's unit cost."""
        return self.quantity * self.cost_per_unit


@dataclass(frozen=True)
class InventoryItem:
    """
    A catalog item tracked by batch.

    ``batches`` is the item-with-batches view used by catalog valuation; it
    is empty when the caller passes batches separately.
    """

    id: str
    name: str
    min_stock: Decimal = Decimal("0")
    active: bool = True
    batches: tuple[Batch, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_stock", to_decimal(self.min_stock))
        object.__setattr__(self, "batches", tuple(self.batches))


@dataclass(frozen=True)
class StockMovement:
    """
    A manual stock correction for an item.

    Movements are item-level and decoupled from FEFO costing.  ``batch_id``
    is set only when the correction was also applied to one batch's
    quantity, in which case the batch already reflects it.
    """

    id: str
    inventory_item_id: str
    movement_type: MovementType
    quantity: Decimal
    created_at: datetime
    reason: str = ""
    active: bool = True
    batch_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "movement_type", MovementType.from_tag(self.movement_type))
        object.__setattr__(self, "quantity", to_decimal(self.quantity))

    @property
    def signed_quantity(self) -> Decimal:
        """Quantity carrying the direction of the movement type."""
        return self.quantity * self.movement_type.sign


@dataclass(frozen=True)
class InventorySnapshot:
    """
    Point-in-time bundle of items, batches and movements.

    Contract:
        Everything in a snapshot is assumed to come from the same fetch.
        The engine cannot detect staleness; ``taken_at`` is the reference
        time the summary service evaluates the snapshot against.
    """

    items: tuple[InventoryItem, ...]
    movements: tuple[StockMovement, ...]
    taken_at: datetime
    snapshot_id: str | None = None
    orphan_batch_ids: tuple[str, ...] = field(default=())

    @classmethod
    def from_records(
        cls,
        items: Iterable[InventoryItem],
        batches: Iterable[Batch],
        movements: Iterable[StockMovement],
        taken_at: datetime,
        snapshot_id: str | None = None,
    ) -> InventorySnapshot:
        """
        Build a snapshot from flat record lists.

        Batches are attached to their item by ``inventory_item_id`` in input
        order.  Batches for unknown items are dropped and their ids recorded
        in ``orphan_batch_ids``.
        """
        items = tuple(items)
        by_item: dict[str, list[Batch]] = {item.id: list(item.batches) for item in items}
        orphans: list[str] = []
        for batch in batches:
            bucket = by_item.get(batch.inventory_item_id)
            if bucket is None:
                orphans.append(batch.id)
                continue
            bucket.append(batch)

        if orphans:
            logger.warning(
                "snapshot_orphan_batches",
                extra={"orphan_count": len(orphans), "batch_ids": orphans},
            )

        attached = tuple(
            InventoryItem(
                id=item.id,
                name=item.name,
                min_stock=item.min_stock,
                active=item.active,
                batches=tuple(by_item[item.id]),
            )
            for item in items
        )
        return cls(
            items=attached,
            movements=tuple(movements),
            taken_at=taken_at,
            snapshot_id=snapshot_id,
            orphan_batch_ids=tuple(orphans),
        )

    @property
    def catalog(self) -> dict[str, InventoryItem]:
        """Items keyed by id, for name resolution."""
        return {item.id: item for item in self.items}
