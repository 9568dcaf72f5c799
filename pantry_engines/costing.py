"""
Module: pantry_engines.costing
Responsibility:
    Value inventory items from their remaining batches using
    earliest-expiry-first (FEFO) ordering, derive on-hand quantity,
    average unit cost, worst expiry status and the low-stock flag, and
    aggregate those valuations across a catalog for dashboard totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on pantry_engines.expiry for batch classification.

Invariants enforced:
    - Only usable batches (active, quantity > 0) count toward on-hand
      quantity, value and expiry status.
    - FEFO: usable batches are ordered by expiry date ascending, ties kept
      in input order.  Valuation aggregates remaining batches; it does not
      simulate consumption (see pantry_engines.consumption for that).
    - Division-safe: average_cost is Decimal("0") when nothing is on hand.
    - Worst-status precedence: expired > critical > soon > good.
    - Low stock is inclusive: on_hand_quantity <= min_stock.
    - Only active items participate in catalog totals, and each item is
      counted in at most one alert bucket (expired, else critical, else
      soon).
    - Decimal-only arithmetic, kept at full precision.  Rounding for
      display is explicit via ``quantize_display``.

Failure modes:
    - None for well-formed records.  Empty batch sets produce zero value,
      zero quantity and no expiry status.

Usage:
    from pantry_engines.costing import BatchCostingEngine

    engine = BatchCostingEngine()
    valuation = engine.value_item(item, batches, reference=today)
    valuation.total_value, valuation.average_cost, valuation.expiry_status
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from pantry_engines.expiry import (
    DEFAULT_THRESHOLDS,
    ExpiryCategory,
    ExpiryClassifier,
    ExpiryStatus,
    ExpiryThresholds,
    worst_category,
)
from pantry_engines.tracer import traced_engine
from pantry_kernel.domain.records import Batch, InventoryItem
from pantry_kernel.logging_config import get_logger

logger = get_logger("engines.costing")

ZERO = Decimal("0")


def usable_batches(batches: Iterable[Batch]) -> tuple[Batch, ...]:
    """Batches that count toward stock: active with positive quantity."""
    return tuple(b for b in batches if b.is_usable)


def fefo_order(batches: Iterable[Batch]) -> tuple[Batch, ...]:
    """Order batches earliest expiry first (stable on equal dates)."""
    return tuple(sorted(batches, key=lambda b: b.expiry_date))


def quantize_display(value: Decimal, places: int = 2) -> Decimal:
    """Round a value for presentation (half-up)."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BatchStatus:
    """A usable batch with its value and classified expiry."""

    batch_id: str
    batch_number: str | None
    expiry_date: date
    quantity: Decimal
    cost_per_unit: Decimal
    value: Decimal
    expiry: ExpiryStatus


@dataclass(frozen=True)
class ItemValuation:
    """
    Valuation of one item at a reference time.

    Contract:
        Frozen result of ``BatchCostingEngine.value_item``.
    Guarantees:
        - ``total_value`` equals the sum of ``batch_statuses`` values.
        - ``on_hand_quantity`` equals the sum of ``batch_statuses`` quantities.
        - ``expiry_status`` is None exactly when ``batch_statuses`` is empty.
    """

    item_id: str
    item_name: str
    on_hand_quantity: Decimal
    total_value: Decimal
    average_cost: Decimal
    expiry_status: ExpiryCategory | None
    is_low_stock: bool
    batch_statuses: tuple[BatchStatus, ...] = ()

    @property
    def batch_count(self) -> int:
        return len(self.batch_statuses)

    @property
    def next_to_expire(self) -> BatchStatus | None:
        """The batch FEFO would draw first."""
        return self.batch_statuses[0] if self.batch_statuses else None


@dataclass(frozen=True)
class CatalogValuation:
    """
    Aggregated valuation across the active items of a catalog.

    Guarantees:
        - ``expired_items + critical_items + soon_items <= total_items``.
        - ``total_value`` equals the sum of ``valuations`` total values.
    """

    reference: date | datetime
    valuations: tuple[ItemValuation, ...]
    total_items: int
    total_value: Decimal
    expired_items: int
    critical_items: int
    soon_items: int
    low_stock_items: int

    @property
    def requires_attention(self) -> bool:
        """True if any item has expired or critical stock."""
        return self.expired_items > 0 or self.critical_items > 0

    def valuation_for(self, item_id: str) -> ItemValuation | None:
        for valuation in self.valuations:
            if valuation.item_id == item_id:
                return valuation
        return None

    def items_in(self, category: ExpiryCategory) -> tuple[ItemValuation, ...]:
        """Valuations whose worst status is ``category``."""
        return tuple(v for v in self.valuations if v.expiry_status is category)

    def low_stock(self) -> tuple[ItemValuation, ...]:
        return tuple(v for v in self.valuations if v.is_low_stock)


class BatchCostingEngine:
    """
    FEFO batch valuation.

    Contract:
        Stateless apart from the frozen expiry thresholds.  Every call is a
        full recomputation over the batches it is given.
    Non-goals:
        - Does not decrement batches or record consumption.
        - Does not validate record values; the persistence layer does.
    """

    def __init__(self, thresholds: ExpiryThresholds = DEFAULT_THRESHOLDS):
        self._classifier = ExpiryClassifier(thresholds)

    @property
    def thresholds(self) -> ExpiryThresholds:
        return self._classifier.thresholds

    def value_item(
        self,
        item: InventoryItem,
        batches: Iterable[Batch] | None = None,
        *,
        reference: date | datetime,
    ) -> ItemValuation:
        """
        Value one item from its batches.

        Args:
            item: The catalog item (supplies id, name and min_stock).
            batches: Batches to value.  Defaults to ``item.batches``.
            reference: Reference time for expiry classification.

        Returns:
            ItemValuation with FEFO-ordered batch statuses.
        """
        candidates = item.batches if batches is None else batches
        ordered = fefo_order(usable_batches(candidates))

        statuses = tuple(
            BatchStatus(
                batch_id=b.id,
                batch_number=b.batch_number,
                expiry_date=b.expiry_date,
                quantity=b.quantity,
                cost_per_unit=b.cost_per_unit,
                value=b.value,
                expiry=self._classifier.classify_batch(b, reference),
            )
            for b in ordered
        )

        on_hand = sum((s.quantity for s in statuses), ZERO)
        total_value = sum((s.value for s in statuses), ZERO)
        average_cost = total_value / on_hand if on_hand > 0 else ZERO

        return ItemValuation(
            item_id=item.id,
            item_name=item.name,
            on_hand_quantity=on_hand,
            total_value=total_value,
            average_cost=average_cost,
            expiry_status=worst_category(s.expiry.category for s in statuses),
            is_low_stock=on_hand <= item.min_stock,
            batch_statuses=statuses,
        )

    @traced_engine("costing", "1.0", fingerprint_fields=("reference",))
    def value_catalog(
        self,
        *,
        items: Sequence[InventoryItem],
        reference: date | datetime,
    ) -> CatalogValuation:
        """
        Value every active item and aggregate dashboard totals.

        Each item's batches come from ``item.batches``.  Inactive items are
        skipped entirely.
        """
        valuations = tuple(
            self.value_item(item, reference=reference)
            for item in items
            if item.active
        )

        expired = critical = soon = low_stock = 0
        for valuation in valuations:
            if valuation.is_low_stock:
                low_stock += 1
            if valuation.expiry_status is ExpiryCategory.EXPIRED:
                expired += 1
            elif valuation.expiry_status is ExpiryCategory.CRITICAL:
                critical += 1
            elif valuation.expiry_status is ExpiryCategory.SOON:
                soon += 1

        result = CatalogValuation(
            reference=reference,
            valuations=valuations,
            total_items=len(valuations),
            total_value=sum((v.total_value for v in valuations), ZERO),
            expired_items=expired,
            critical_items=critical,
            soon_items=soon,
            low_stock_items=low_stock,
        )

        logger.info(
            "catalog_valued",
            extra={
                "total_items": result.total_items,
                "skipped_inactive": len(items) - result.total_items,
                "total_value": str(result.total_value),
                "expired_items": expired,
                "critical_items": critical,
                "soon_items": soon,
                "low_stock_items": low_stock,
            },
        )
        return result
