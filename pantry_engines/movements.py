"""
Module: pantry_engines.movements
Responsibility:
    Summarize a stream of manual stock adjustments over a calendar window:
    positive, negative and net totals, the loss anomaly flag, the ordered
    list of movements in the window, display lines with resolved item
    names, and per-day breakdowns.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Independent of costing; shares the item catalog only for names.

Invariants enforced:
    - Inactive (reversed) movements never contribute to any total.
    - Direction comes from MovementType alone; quantities are magnitudes.
    - net_total = positive_total - negative_total.
    - anomaly is True exactly when negative_total > positive_total.
    - Window membership compares calendar dates only; callers normalize
      time zones before building records.
    - Window movements are ordered by created_at ascending, ties kept in
      input order.
    - Idempotent: identical inputs always produce equal summaries.

Failure modes:
    - ValueError from MovementWindow when end precedes start.
    - Movements referencing unknown items resolve to a placeholder name;
      aggregation never fails on them.

Usage:
    from pantry_engines.movements import MovementAggregator

    summary = MovementAggregator().summarize(
        movements=movements, reference=now, catalog=catalog,
    )
    summary.net_total, summary.anomaly, summary.most_recent(5)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from pantry_engines.tracer import traced_engine
from pantry_kernel.domain.records import InventoryItem, MovementType, StockMovement
from pantry_kernel.logging_config import get_logger

logger = get_logger("engines.movements")

ZERO = Decimal("0")

UNKNOWN_ITEM_NAME = "N/A"


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class MovementWindow:
    """
    Inclusive range of calendar days.

    Guarantees:
        - start <= end.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _as_date(self.start))
        object.__setattr__(self, "end", _as_date(self.end))
        if self.end < self.start:
            raise ValueError("window end cannot precede window start")

    @classmethod
    def for_day(cls, day: date | datetime) -> MovementWindow:
        """Single-day window containing ``day``."""
        d = _as_date(day)
        return cls(d, d)

    @classmethod
    def trailing(cls, reference: date | datetime, days: int) -> MovementWindow:
        """The ``days`` calendar days ending on the reference day."""
        if days < 1:
            raise ValueError("trailing window must cover at least one day")
        end = _as_date(reference)
        return cls(end - timedelta(days=days - 1), end)

    def contains(self, moment: date | datetime) -> bool:
        return self.start <= _as_date(moment) <= self.end

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


def resolve_item_name(
    item_id: str,
    catalog: Mapping[str, InventoryItem],
    placeholder: str = UNKNOWN_ITEM_NAME,
) -> str:
    """Display name for an item id, or ``placeholder`` if it is unknown."""
    item = catalog.get(item_id)
    if item is None:
        return placeholder
    return item.name


def split_totals(movements: Iterable[StockMovement]) -> tuple[Decimal, Decimal]:
    """(positive_total, negative_total) over the given movements."""
    positive = negative = ZERO
    for movement in movements:
        if movement.movement_type is MovementType.POSITIVE_ADJUSTMENT:
            positive += movement.quantity
        else:
            negative += movement.quantity
    return positive, negative


@dataclass(frozen=True)
class MovementLine:
    """One movement prepared for display."""

    movement: StockMovement
    item_name: str

    @property
    def signed_quantity(self) -> Decimal:
        return self.movement.signed_quantity

    @property
    def created_at(self) -> datetime:
        return self.movement.created_at


@dataclass(frozen=True)
class MovementSummary:
    """
    Movement statistics for one window.

    Contract:
        Frozen result of ``MovementAggregator.summarize``.
    Guarantees:
        - ``window_movements`` holds only active movements inside ``window``,
          oldest first.
        - ``lines`` is parallel to ``window_movements``.
    """

    window: MovementWindow
    window_movements: tuple[StockMovement, ...]
    lines: tuple[MovementLine, ...]
    positive_total: Decimal
    negative_total: Decimal
    net_total: Decimal
    anomaly: bool
    active_movement_count: int

    @property
    def count(self) -> int:
        return len(self.window_movements)

    def most_recent(self, limit: int) -> tuple[MovementLine, ...]:
        """Newest-first slice of at most ``limit`` display lines."""
        if limit <= 0:
            return ()
        return tuple(reversed(self.lines[-limit:]))

    def remaining_count(self, limit: int) -> int:
        """How many window movements ``most_recent(limit)`` leaves out."""
        return max(0, self.count - max(limit, 0))


@dataclass(frozen=True)
class DailyMovementStats:
    """Totals for a single calendar day."""

    day: date
    positive_total: Decimal
    negative_total: Decimal
    net_total: Decimal
    anomaly: bool
    count: int


class MovementAggregator:
    """
    Windowed aggregation of stock adjustments.

    Contract:
        Stateless apart from the placeholder name used for unknown items.
    Non-goals:
        - Does not apply movements to batches; movements are item-level
          corrections independent of FEFO costing.
    """

    def __init__(self, unknown_item_name: str = UNKNOWN_ITEM_NAME):
        self.unknown_item_name = unknown_item_name

    @traced_engine("movements", "1.0", fingerprint_fields=("reference", "window"))
    def summarize(
        self,
        *,
        movements: Iterable[StockMovement],
        reference: date | datetime,
        window: MovementWindow | None = None,
        catalog: Mapping[str, InventoryItem] | None = None,
    ) -> MovementSummary:
        """
        Summarize active movements inside ``window``.

        Args:
            movements: The movement stream (any order, may include inactive).
            reference: Reference time; its calendar day is the default window.
            window: Optional explicit window.
            catalog: Items keyed by id, for display names.

        Returns:
            MovementSummary for the window.
        """
        window = window or MovementWindow.for_day(reference)
        catalog = catalog or {}

        active = [m for m in movements if m.active]
        in_window = tuple(
            sorted(
                (m for m in active if window.contains(m.created_at)),
                key=lambda m: m.created_at,
            )
        )
        positive, negative = split_totals(in_window)
        lines = tuple(
            MovementLine(
                movement=m,
                item_name=resolve_item_name(
                    m.inventory_item_id, catalog, self.unknown_item_name
                ),
            )
            for m in in_window
        )

        summary = MovementSummary(
            window=window,
            window_movements=in_window,
            lines=lines,
            positive_total=positive,
            negative_total=negative,
            net_total=positive - negative,
            anomaly=negative > positive,
            active_movement_count=len(active),
        )

        if summary.anomaly:
            logger.info(
                "movement_loss_anomaly",
                extra={
                    "window_start": window.start,
                    "window_end": window.end,
                    "positive_total": str(positive),
                    "negative_total": str(negative),
                },
            )
        return summary

    @traced_engine("movements_daily", "1.0", fingerprint_fields=("window",))
    def daily_breakdown(
        self,
        *,
        movements: Iterable[StockMovement],
        window: MovementWindow,
    ) -> tuple[DailyMovementStats, ...]:
        """
        Per-day totals for every day of ``window``, including empty days.
        """
        by_day: dict[date, list[StockMovement]] = {d: [] for d in window.days()}
        for movement in movements:
            if not movement.active:
                continue
            day = _as_date(movement.created_at)
            if day in by_day:
                by_day[day].append(movement)

        stats = []
        for day, day_movements in by_day.items():
            positive, negative = split_totals(day_movements)
            stats.append(
                DailyMovementStats(
                    day=day,
                    positive_total=positive,
                    negative_total=negative,
                    net_total=positive - negative,
                    anomaly=negative > positive,
                    count=len(day_movements),
                )
            )
        return tuple(stats)
