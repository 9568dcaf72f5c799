"""
Module: pantry_engines.expiry
Responsibility:
    Classify a batch's remaining shelf life into an expiry bucket
    (expired, critical, soon, good), rank buckets by severity, and filter
    batch lists by bucket for alert views.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import pantry_kernel (records, logging) and sibling engines.

Invariants enforced:
    - Purity: no clock access.  The reference time is always a parameter.
    - Day counts round UP: a batch expiring later today reports 0 days
      (critical), one that expired a few hours ago reports 1 day expired.
    - Exact arithmetic: day counts are computed on integer microseconds,
      never on floats.
    - Buckets are evaluated in order and the first match wins.

Failure modes:
    - ValueError from ExpiryThresholds when critical_days is negative or
      soon_days does not exceed critical_days.
    - classify_expiry itself is total for any valid date pair.

Usage:
    from datetime import date
    from pantry_engines.expiry import classify_expiry, ExpiryCategory

    status = classify_expiry(date(2024, 3, 10), date(2024, 3, 3))
    status.category  # ExpiryCategory.CRITICAL
    status.days      # 7
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from pantry_engines.tracer import traced_engine
from pantry_kernel.domain.records import Batch
from pantry_kernel.logging_config import get_logger

logger = get_logger("engines.expiry")

_MICROSECONDS_PER_DAY = timedelta(days=1) // timedelta(microseconds=1)


class ExpiryCategory(str, Enum):
    """Expiry bucket of a batch, or the worst bucket of an item."""

    GOOD = "good"
    SOON = "soon"
    CRITICAL = "critical"
    EXPIRED = "expired"

    @property
    def severity(self) -> int:
        """Rank used for worst-status precedence (higher is worse)."""
        return _SEVERITY[self]

    @property
    def is_alert(self) -> bool:
        """True for buckets that need immediate attention."""
        return self in (ExpiryCategory.EXPIRED, ExpiryCategory.CRITICAL)


_SEVERITY: dict[ExpiryCategory, int] = {
    ExpiryCategory.GOOD: 0,
    ExpiryCategory.SOON: 1,
    ExpiryCategory.CRITICAL: 2,
    ExpiryCategory.EXPIRED: 3,
}


@dataclass(frozen=True)
class ExpiryThresholds:
    """
    Day limits separating the expiry buckets.

    Contract:
        ``0 <= days <= critical_days`` is critical,
        ``critical_days < days <= soon_days`` is soon, anything later is good.
    Guarantees:
        - critical_days >= 0.
        - soon_days > critical_days.
    """

    critical_days: int = 7
    soon_days: int = 30

    def __post_init__(self) -> None:
        if self.critical_days < 0:
            raise ValueError("critical_days cannot be negative")
        if self.soon_days <= self.critical_days:
            raise ValueError("soon_days must be greater than critical_days")


DEFAULT_THRESHOLDS = ExpiryThresholds()


@dataclass(frozen=True)
class ExpiryStatus:
    """
    Classified expiry of one batch.

    ``days`` is days remaining for non-expired buckets and days since
    expiry (a positive number) for ``EXPIRED``.
    """

    category: ExpiryCategory
    days: int


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def days_until(expiry_date: date, reference: date | datetime) -> int:
    """
    Whole days from ``reference`` to the start of ``expiry_date``, rounded up.

    The expiry day is taken at midnight in the reference's timezone, so
    aware and naive references both work as long as the caller has
    normalized them.
    """
    ref = _as_datetime(reference)
    expiry = datetime.combine(expiry_date, time.min, tzinfo=ref.tzinfo)
    micros = (expiry - ref) // timedelta(microseconds=1)
    return -((-micros) // _MICROSECONDS_PER_DAY)


def classify_expiry(
    expiry_date: date,
    reference: date | datetime,
    thresholds: ExpiryThresholds = DEFAULT_THRESHOLDS,
) -> ExpiryStatus:
    """
    Classify an expiry date relative to a reference time.

    Postconditions:
        - days < 0 -> EXPIRED with the absolute day count.
        - 0 <= days <= critical_days -> CRITICAL.
        - critical_days < days <= soon_days -> SOON.
        - otherwise GOOD.
    """
    days = days_until(expiry_date, reference)
    if days < 0:
        return ExpiryStatus(ExpiryCategory.EXPIRED, abs(days))
    if days <= thresholds.critical_days:
        return ExpiryStatus(ExpiryCategory.CRITICAL, days)
    if days <= thresholds.soon_days:
        return ExpiryStatus(ExpiryCategory.SOON, days)
    return ExpiryStatus(ExpiryCategory.GOOD, days)


def worst_category(
    categories: Iterable[ExpiryCategory],
) -> ExpiryCategory | None:
    """Most severe category, or None when there is nothing to rank."""
    worst: ExpiryCategory | None = None
    for category in categories:
        if worst is None or category.severity > worst.severity:
            worst = category
    return worst


class ExpiryFilter(str, Enum):
    """Batch-list filters offered by alert views."""

    EXPIRED = "expired"
    CRITICAL = "critical"
    SOON = "soon"
    GOOD = "good"
    ALERTS = "alerts"  # expired or critical

    def matches(self, category: ExpiryCategory) -> bool:
        if self is ExpiryFilter.ALERTS:
            return category.is_alert
        return category.value == self.value


class ExpiryClassifier:
    """
    Expiry classification bound to a set of thresholds.

    Contract:
        Stateless apart from the frozen thresholds; safe to share.
    """

    def __init__(self, thresholds: ExpiryThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def classify(self, expiry_date: date, reference: date | datetime) -> ExpiryStatus:
        """Classify one expiry date."""
        return classify_expiry(expiry_date, reference, self.thresholds)

    def classify_batch(self, batch: Batch, reference: date | datetime) -> ExpiryStatus:
        """Classify one batch by its expiry date."""
        return classify_expiry(batch.expiry_date, reference, self.thresholds)

    @traced_engine("expiry_filter", "1.0", fingerprint_fields=("reference", "expiry_filter"))
    def filter_batches(
        self,
        *,
        batches: Iterable[Batch],
        reference: date | datetime,
        expiry_filter: ExpiryFilter | str,
    ) -> tuple[tuple[Batch, ExpiryStatus], ...]:
        """
        Usable batches whose bucket matches ``expiry_filter``, in FEFO order.

        Inactive and empty batches never appear, even under ``expired``.
        """
        wanted = ExpiryFilter(expiry_filter)
        usable = sorted(
            (b for b in batches if b.is_usable),
            key=lambda b: b.expiry_date,
        )
        matched = []
        for batch in usable:
            status = self.classify_batch(batch, reference)
            if wanted.matches(status.category):
                matched.append((batch, status))

        logger.debug(
            "batches_filtered_by_expiry",
            extra={
                "expiry_filter": wanted.value,
                "candidate_count": len(usable),
                "matched_count": len(matched),
            },
        )
        return tuple(matched)


def filter_batches_by_expiry(
    batches: Iterable[Batch],
    reference: date | datetime,
    expiry_filter: ExpiryFilter | str,
    thresholds: ExpiryThresholds = DEFAULT_THRESHOLDS,
) -> tuple[tuple[Batch, ExpiryStatus], ...]:
    """Functional shortcut for ``ExpiryClassifier.filter_batches``."""
    return ExpiryClassifier(thresholds).filter_batches(
        batches=batches,
        reference=reference,
        expiry_filter=expiry_filter,
    )
