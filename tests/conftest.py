"""
Pytest fixtures for the pantry valuation test suite.

Provides:
- Structured logging configuration and log capture
- Record factories for batches, items and movements
- A fixed default movement timestamp
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from itertools import count

import pytest

from pantry_kernel.domain.records import (
    Batch,
    InventoryItem,
    MovementType,
    StockMovement,
)
from pantry_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Default movement timestamp: 2024-03-01 09:30 UTC
REFERENCE = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture pantry_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.summarize(items, movements)
            logs = captured_logs()
            assert any(r["message"] == "dashboard_summarized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("pantry_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def make_batch():
    """Factory for Batch records with sequential ids."""
    ids = count(1)

    def _make(
        quantity="10",
        cost="1.00",
        expiry=date(2024, 6, 1),
        item_id="item-1",
        active=True,
        batch_id=None,
        batch_number=None,
    ) -> Batch:
        return Batch(
            id=batch_id or f"batch-{next(ids)}",
            inventory_item_id=item_id,
            quantity=Decimal(str(quantity)),
            cost_per_unit=Decimal(str(cost)),
            expiry_date=expiry,
            active=active,
            batch_number=batch_number,
        )

    return _make


@pytest.fixture
def make_item():
    """Factory for InventoryItem records."""

    def _make(
        item_id="item-1",
        name="Tomatoes",
        min_stock="0",
        batches=(),
        active=True,
    ) -> InventoryItem:
        return InventoryItem(
            id=item_id,
            name=name,
            min_stock=Decimal(str(min_stock)),
            active=active,
            batches=tuple(batches),
        )

    return _make


@pytest.fixture
def make_movement():
    """Factory for StockMovement records with sequential ids."""
    ids = count(1)

    def _make(
        quantity="1",
        movement_type=MovementType.POSITIVE_ADJUSTMENT,
        created_at=REFERENCE,
        item_id="item-1",
        active=True,
        reason="count correction",
        batch_id=None,
    ) -> StockMovement:
        return StockMovement(
            id=f"mov-{next(ids)}",
            inventory_item_id=item_id,
            movement_type=movement_type,
            quantity=Decimal(str(quantity)),
            created_at=created_at,
            reason=reason,
            active=active,
            batch_id=batch_id,
        )

    return _make
