"""
pantry_services.summary_service -- Inventory dashboard read model.

Responsibility:
    Combine batch valuation and movement aggregation into the single
    ``DashboardMetrics`` read model consumed by presentation layers, and
    expose the per-item operations (valuation, FEFO consumption plans,
    current stock, expiry-filtered batch lists) behind one configured
    entry point.

Architecture position:
    Services -- orchestration over engines.  Owns the clock (the default
    reference time) and the engine configuration; holds no inventory state
    between calls.

Invariants enforced:
    - Stateless recomputation: every call evaluates the snapshot it is
      given from scratch.  Nothing is cached between calls.
    - A single reference time is used for valuation and the movement
      window within one ``summarize`` call.
    - Only active items are counted; see pantry_engines.costing.

Failure modes:
    - InsufficientStockError from ``plan_consumption`` with
      ``allow_partial=False``.
    - Otherwise none for well-formed records.

Usage:
    from pantry_config import get_active_config
    from pantry_services.summary_service import InventorySummaryService

    service = InventorySummaryService(config=get_active_config())
    metrics = service.summarize(items, movements)
    payload = service.render(metrics)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pantry_config.schema import EngineConfig
from pantry_engines.consumption import ConsumptionPlan, plan_fefo_consumption
from pantry_engines.costing import BatchCostingEngine, ItemValuation, quantize_display
from pantry_engines.expiry import ExpiryClassifier, ExpiryFilter, ExpiryStatus
from pantry_engines.movements import (
    DailyMovementStats,
    MovementAggregator,
    MovementSummary,
    MovementWindow,
)
from pantry_engines.stock import StockPosition, calculate_current_stock
from pantry_kernel.domain.clock import Clock, SystemClock
from pantry_kernel.domain.records import (
    Batch,
    InventoryItem,
    InventorySnapshot,
    StockMovement,
)
from pantry_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.summary")


@dataclass(frozen=True)
class DashboardMetrics:
    """
    Inventory dashboard read model.

    Contract:
        Pure field assembly of a CatalogValuation and a MovementSummary
        computed at the same reference time.
    """

    reference: date | datetime
    currency: str
    total_items: int
    expired_items: int
    critical_items: int
    soon_items: int
    low_stock_items: int
    total_value: Decimal
    movements: MovementSummary
    anomaly: bool
    daily_trend: tuple[DailyMovementStats, ...]
    valuations: tuple[ItemValuation, ...]

    @property
    def requires_attention(self) -> bool:
        """True if any item has expired or critical stock."""
        return self.expired_items > 0 or self.critical_items > 0

    def to_dict(self, places: int = 2, recent_limit: int = 5) -> dict[str, Any]:
        """Serializable view; Decimals become strings rounded to ``places``."""

        def amount(value: Decimal) -> str:
            return str(quantize_display(value, places))

        return {
            "reference": self.reference.isoformat(),
            "currency": self.currency,
            "total_items": self.total_items,
            "expired_items": self.expired_items,
            "critical_items": self.critical_items,
            "soon_items": self.soon_items,
            "low_stock_items": self.low_stock_items,
            "total_value": amount(self.total_value),
            "anomaly": self.anomaly,
            "requires_attention": self.requires_attention,
            "movements": {
                "window_start": self.movements.window.start.isoformat(),
                "window_end": self.movements.window.end.isoformat(),
                "positive_total": amount(self.movements.positive_total),
                "negative_total": amount(self.movements.negative_total),
                "net_total": amount(self.movements.net_total),
                "count": self.movements.count,
                "active_movement_count": self.movements.active_movement_count,
                "recent": [
                    {
                        "id": line.movement.id,
                        "item_name": line.item_name,
                        "signed_quantity": amount(line.signed_quantity),
                        "reason": line.movement.reason,
                        "created_at": line.created_at.isoformat(),
                    }
                    for line in self.movements.most_recent(recent_limit)
                ],
                "more_count": self.movements.remaining_count(recent_limit),
            },
            "daily_trend": [
                {
                    "day": day.day.isoformat(),
                    "positive_total": amount(day.positive_total),
                    "negative_total": amount(day.negative_total),
                    "net_total": amount(day.net_total),
                    "anomaly": day.anomaly,
                    "count": day.count,
                }
                for day in self.daily_trend
            ],
            "items": [
                {
                    "id": v.item_id,
                    "name": v.item_name,
                    "on_hand_quantity": amount(v.on_hand_quantity),
                    "total_value": amount(v.total_value),
                    "average_cost": amount(v.average_cost),
                    "expiry_status": v.expiry_status.value if v.expiry_status else None,
                    "is_low_stock": v.is_low_stock,
                }
                for v in self.valuations
            ],
        }


class InventorySummaryService:
    """
    Configured facade over the valuation and movement engines.

    Contract:
        Receives EngineConfig and Clock via constructor injection.  When a
        reference time is omitted, ``clock.now()`` is used.
    Non-goals:
        - Does not fetch or persist records.  Callers must hand over items,
          batches and movements taken from one consistent read.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self._config = config or EngineConfig.defaults()
        self._clock = clock or SystemClock()
        thresholds = self._config.expiry.thresholds()
        self._classifier = ExpiryClassifier(thresholds)
        self._costing = BatchCostingEngine(thresholds)
        self._movements = MovementAggregator(self._config.movements.unknown_item_name)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def _reference(self, reference: date | datetime | None) -> date | datetime:
        return reference if reference is not None else self._clock.now()

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def summarize(
        self,
        items: Sequence[InventoryItem],
        movements: Iterable[StockMovement],
        reference: date | datetime | None = None,
        *,
        batches: Iterable[Batch] | None = None,
    ) -> DashboardMetrics:
        """
        Build dashboard metrics for a catalog and its movements.

        Args:
            items: Catalog items, each carrying its batches.
            movements: Stock movements (any order, may include inactive).
            reference: Reference time; defaults to the clock.
            batches: Optional flat batch list, attached to ``items`` by
                ``inventory_item_id`` before valuation.

        Returns:
            DashboardMetrics for the reference time.
        """
        ref = self._reference(reference)
        movements = tuple(movements)
        if batches is not None:
            items = InventorySnapshot.from_records(items, batches, (), ref).items

        with LogContext.bind(correlation_id=str(uuid4())):
            return self._summarize(tuple(items), movements, ref)

    def summarize_snapshot(self, snapshot: InventorySnapshot) -> DashboardMetrics:
        """Build dashboard metrics for a snapshot at its own ``taken_at``."""
        with LogContext.bind(
            correlation_id=str(uuid4()),
            snapshot_id=snapshot.snapshot_id,
        ):
            return self._summarize(snapshot.items, snapshot.movements, snapshot.taken_at)

    def _summarize(
        self,
        items: tuple[InventoryItem, ...],
        movements: tuple[StockMovement, ...],
        reference: date | datetime,
    ) -> DashboardMetrics:
        catalog = self._costing.value_catalog(items=items, reference=reference)
        movement_summary = self._movements.summarize(
            movements=movements,
            reference=reference,
            catalog={item.id: item for item in items},
        )
        trend = self._movements.daily_breakdown(
            movements=movements,
            window=MovementWindow.trailing(reference, self._config.movements.trailing_days),
        )

        metrics = DashboardMetrics(
            reference=reference,
            currency=self._config.valuation.currency,
            total_items=catalog.total_items,
            expired_items=catalog.expired_items,
            critical_items=catalog.critical_items,
            soon_items=catalog.soon_items,
            low_stock_items=catalog.low_stock_items,
            total_value=catalog.total_value,
            movements=movement_summary,
            anomaly=movement_summary.anomaly,
            daily_trend=trend,
            valuations=catalog.valuations,
        )

        logger.info(
            "dashboard_summarized",
            extra={
                "config_id": self._config.config_id,
                "total_items": metrics.total_items,
                "total_value": str(metrics.total_value),
                "requires_attention": metrics.requires_attention,
                "low_stock_items": metrics.low_stock_items,
                "window_movement_count": movement_summary.count,
                "anomaly": metrics.anomaly,
            },
        )
        return metrics

    def render(self, metrics: DashboardMetrics) -> dict[str, Any]:
        """Serialize metrics with the configured display settings."""
        return metrics.to_dict(
            places=self._config.valuation.display_places,
            recent_limit=self._config.movements.recent_limit,
        )

    # ------------------------------------------------------------------
    # Per-item operations
    # ------------------------------------------------------------------

    def value_item(
        self,
        item: InventoryItem,
        reference: date | datetime | None = None,
    ) -> ItemValuation:
        """FEFO valuation of one item from its attached batches."""
        return self._costing.value_item(item, reference=self._reference(reference))

    def filter_batches(
        self,
        item: InventoryItem,
        expiry_filter: ExpiryFilter | str = ExpiryFilter.ALERTS,
        reference: date | datetime | None = None,
    ) -> tuple[tuple[Batch, ExpiryStatus], ...]:
        """The item's usable batches in the given expiry bucket, FEFO order."""
        return self._classifier.filter_batches(
            batches=item.batches,
            reference=self._reference(reference),
            expiry_filter=expiry_filter,
        )

    def plan_consumption(
        self,
        item: InventoryItem,
        quantity: Decimal | int | str,
        allow_partial: bool = True,
    ) -> ConsumptionPlan:
        """FEFO draw-down plan for ``quantity`` of ``item``."""
        return plan_fefo_consumption(
            batches=item.batches,
            quantity=quantity,
            item_id=item.id,
            allow_partial=allow_partial,
        )

    def current_stock(
        self,
        item: InventoryItem,
        movements: Iterable[StockMovement],
    ) -> StockPosition:
        """Batch stock plus unbatched adjustments for ``item``."""
        return calculate_current_stock(item.id, item.batches, movements)
