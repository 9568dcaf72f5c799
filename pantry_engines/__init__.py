"""
Module: pantry_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    pantry_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import pantry_kernel (records, exceptions, logging) and
    sibling engine modules.  MUST NOT import pantry_services or
    pantry_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Reference times are explicit parameters; services supply them.
    - Decimal-only arithmetic for quantities, costs and values.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from pantry_engines import (
        BatchCostingEngine,
        MovementAggregator,
        classify_expiry,
        plan_fefo_consumption,
    )
"""

from pantry_kernel.logging_config import get_logger

logger = get_logger("engines")

from pantry_engines.consumption import (  # noqa: E402
    ConsumptionLine,
    ConsumptionPlan,
    plan_fefo_consumption,
)
from pantry_engines.costing import (  # noqa: E402
    BatchCostingEngine,
    BatchStatus,
    CatalogValuation,
    ItemValuation,
    fefo_order,
    quantize_display,
    usable_batches,
)
from pantry_engines.expiry import (  # noqa: E402
    DEFAULT_THRESHOLDS,
    ExpiryCategory,
    ExpiryClassifier,
    ExpiryFilter,
    ExpiryStatus,
    ExpiryThresholds,
    classify_expiry,
    days_until,
    filter_batches_by_expiry,
    worst_category,
)
from pantry_engines.movements import (  # noqa: E402
    UNKNOWN_ITEM_NAME,
    DailyMovementStats,
    MovementAggregator,
    MovementLine,
    MovementSummary,
    MovementWindow,
    resolve_item_name,
    split_totals,
)
from pantry_engines.stock import StockPosition, calculate_current_stock  # noqa: E402
from pantry_engines.tracer import compute_input_fingerprint, traced_engine  # noqa: E402

__all__ = [
    # Expiry
    "DEFAULT_THRESHOLDS",
    "ExpiryCategory",
    "ExpiryClassifier",
    "ExpiryFilter",
    "ExpiryStatus",
    "ExpiryThresholds",
    "classify_expiry",
    "days_until",
    "filter_batches_by_expiry",
    "worst_category",
    # Costing
    "BatchCostingEngine",
    "BatchStatus",
    "CatalogValuation",
    "ItemValuation",
    "fefo_order",
    "quantize_display",
    "usable_batches",
    # Movements
    "UNKNOWN_ITEM_NAME",
    "DailyMovementStats",
    "MovementAggregator",
    "MovementLine",
    "MovementSummary",
    "MovementWindow",
    "resolve_item_name",
    "split_totals",
    # Consumption
    "ConsumptionLine",
    "ConsumptionPlan",
    "plan_fefo_consumption",
    # Stock
    "StockPosition",
    "calculate_current_stock",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
