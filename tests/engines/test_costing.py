"""
Tests for FEFO batch costing.

Covers:
- Usable-batch filtering and FEFO ordering
- Item valuation (quantity, value, average cost, worst status)
- Low-stock flag boundaries
- Catalog aggregation and alert bucket counting
- Display rounding
"""

from datetime import date
from decimal import Decimal

import pytest

from pantry_engines.costing import (
    BatchCostingEngine,
    fefo_order,
    quantize_display,
    usable_batches,
)
from pantry_engines.expiry import ExpiryCategory, ExpiryThresholds

TODAY = date(2024, 3, 1)


class TestUsableBatches:
    """Only active batches with positive quantity count."""

    def test_filters_inactive_and_empty(self, make_batch):
        batches = [
            make_batch(batch_id="a"),
            make_batch(batch_id="b", active=False),
            make_batch(batch_id="c", quantity="0"),
        ]

        assert [b.id for b in usable_batches(batches)] == ["a"]

    def test_fefo_order_by_expiry(self, make_batch):
        batches = [
            make_batch(batch_id="late", expiry=date(2024, 5, 1)),
            make_batch(batch_id="early", expiry=date(2024, 3, 10)),
            make_batch(batch_id="mid", expiry=date(2024, 4, 1)),
        ]

        assert [b.id for b in fefo_order(batches)] == ["early", "mid", "late"]

    def test_fefo_ties_keep_input_order(self, make_batch):
        batches = [
            make_batch(batch_id="first", expiry=date(2024, 4, 1)),
            make_batch(batch_id="second", expiry=date(2024, 4, 1)),
        ]

        assert [b.id for b in fefo_order(batches)] == ["first", "second"]


class TestValueItem:
    """Single item valuation."""

    def setup_method(self):
        self.engine = BatchCostingEngine()

    def test_fefo_valuation(self, make_item, make_batch):
        """5 @ 2.00 expiring soon, 8 @ 3.00 later -> 13 units worth 34."""
        item = make_item(
            min_stock="20",
            batches=[
                make_batch(quantity="8", cost="3.00", expiry=date(2024, 4, 15), batch_id="b2"),
                make_batch(quantity="5", cost="2.00", expiry=date(2024, 3, 5), batch_id="b1"),
            ],
        )

        valuation = self.engine.value_item(item, reference=TODAY)

        assert valuation.on_hand_quantity == Decimal("13")
        assert valuation.total_value == Decimal("34.00")
        assert valuation.average_cost == Decimal("34") / Decimal("13")
        assert valuation.expiry_status is ExpiryCategory.CRITICAL
        assert valuation.is_low_stock is True
        assert [s.batch_id for s in valuation.batch_statuses] == ["b1", "b2"]
        assert valuation.next_to_expire.batch_id == "b1"
        assert valuation.batch_count == 2

    def test_inactive_batch_excluded_from_value(self, make_item, make_batch):
        """Active 5 @ 2 plus inactive 100 @ 1 is worth 10, not 110."""
        item = make_item(
            batches=[
                make_batch(quantity="5", cost="2"),
                make_batch(quantity="100", cost="1.00", active=False),
            ]
        )

        valuation = self.engine.value_item(item, reference=TODAY)

        assert valuation.total_value == Decimal("10.00")
        assert valuation.on_hand_quantity == Decimal("5")

    def test_expired_and_good_batches_report_expired(self, make_item, make_batch):
        item = make_item(
            batches=[
                make_batch(expiry=date(2024, 2, 1)),
                make_batch(expiry=date(2024, 12, 1)),
            ]
        )

        valuation = self.engine.value_item(item, reference=TODAY)

        assert valuation.expiry_status is ExpiryCategory.EXPIRED

    def test_zero_stock_average_cost_is_zero(self, make_item):
        valuation = self.engine.value_item(make_item(), reference=TODAY)

        assert valuation.on_hand_quantity == Decimal("0")
        assert valuation.total_value == Decimal("0")
        assert valuation.average_cost == Decimal("0")
        assert valuation.expiry_status is None
        assert valuation.next_to_expire is None

    def test_only_empty_batches_has_no_status(self, make_item, make_batch):
        item = make_item(batches=[make_batch(quantity="0", expiry=date(2024, 2, 1))])

        valuation = self.engine.value_item(item, reference=TODAY)

        assert valuation.expiry_status is None
        assert valuation.average_cost == Decimal("0")

    def test_explicit_batches_override_attached(self, make_item, make_batch):
        item = make_item(batches=[make_batch(quantity="99")])

        valuation = self.engine.value_item(
            item, [make_batch(quantity="4", cost="2.50")], reference=TODAY
        )

        assert valuation.on_hand_quantity == Decimal("4")
        assert valuation.total_value == Decimal("10.00")

    def test_full_precision_kept(self, make_item, make_batch):
        item = make_item(batches=[make_batch(quantity="3", cost="0.3333")])

        valuation = self.engine.value_item(item, reference=TODAY)

        assert valuation.total_value == Decimal("0.9999")

    def test_custom_thresholds(self, make_item, make_batch):
        engine = BatchCostingEngine(ExpiryThresholds(critical_days=1, soon_days=3))
        item = make_item(batches=[make_batch(expiry=date(2024, 3, 5))])

        valuation = engine.value_item(item, reference=TODAY)

        assert valuation.expiry_status is ExpiryCategory.GOOD
        assert engine.thresholds.soon_days == 3


class TestLowStock:
    """Low stock is inclusive of min_stock."""

    def setup_method(self):
        self.engine = BatchCostingEngine()

    @pytest.mark.parametrize(
        "on_hand,min_stock,expected",
        [
            ("10", "10", True),
            ("10.01", "10", False),
            ("9.99", "10", True),
            ("0", "0", True),
            ("1", "0", False),
        ],
    )
    def test_boundary(self, make_item, make_batch, on_hand, min_stock, expected):
        batches = [make_batch(quantity=on_hand)] if Decimal(on_hand) > 0 else []
        item = make_item(min_stock=min_stock, batches=batches)

        valuation = self.engine.value_item(item, reference=TODAY)

        assert valuation.is_low_stock is expected


class TestValueCatalog:
    """Catalog aggregation for dashboard totals."""

    def setup_method(self):
        self.engine = BatchCostingEngine()

    def _catalog(self, make_item, make_batch):
        return [
            make_item(
                item_id="milk",
                name="Milk",
                min_stock="5",
                batches=[
                    make_batch(item_id="milk", quantity="4", cost="1.50", expiry=date(2024, 2, 28)),
                    make_batch(item_id="milk", quantity="6", cost="1.50", expiry=date(2024, 3, 4)),
                ],
            ),
            make_item(
                item_id="cheese",
                name="Cheese",
                min_stock="1",
                batches=[make_batch(item_id="cheese", quantity="2", cost="8.00", expiry=date(2024, 3, 6))],
            ),
            make_item(
                item_id="flour",
                name="Flour",
                min_stock="10",
                batches=[make_batch(item_id="flour", quantity="25", cost="0.80", expiry=date(2024, 3, 20))],
            ),
            make_item(
                item_id="rice",
                name="Rice",
                min_stock="50",
                batches=[make_batch(item_id="rice", quantity="40", cost="1.10", expiry=date(2025, 1, 1))],
            ),
            make_item(
                item_id="retired",
                name="Retired",
                active=False,
                batches=[make_batch(item_id="retired", quantity="100", cost="9.00", expiry=date(2024, 2, 1))],
            ),
        ]

    def test_counts_and_totals(self, make_item, make_batch):
        result = self.engine.value_catalog(
            items=self._catalog(make_item, make_batch), reference=TODAY
        )

        assert result.total_items == 4
        assert result.expired_items == 1
        assert result.critical_items == 1
        assert result.soon_items == 1
        assert result.low_stock_items == 1
        assert result.total_value == Decimal("15.00") + Decimal("16.00") + Decimal("20.00") + Decimal("44.00")
        assert result.requires_attention is True

    def test_inactive_item_skipped(self, make_item, make_batch):
        result = self.engine.value_catalog(
            items=self._catalog(make_item, make_batch), reference=TODAY
        )

        assert result.valuation_for("retired") is None

    def test_item_counted_in_one_bucket(self, make_item, make_batch):
        result = self.engine.value_catalog(
            items=self._catalog(make_item, make_batch), reference=TODAY
        )

        assert [v.item_id for v in result.items_in(ExpiryCategory.EXPIRED)] == ["milk"]
        assert [v.item_id for v in result.items_in(ExpiryCategory.CRITICAL)] == ["cheese"]
        assert [v.item_id for v in result.low_stock()] == ["rice"]

    def test_bucket_counts_never_exceed_total(self, make_item, make_batch):
        result = self.engine.value_catalog(
            items=self._catalog(make_item, make_batch), reference=TODAY
        )

        assert result.expired_items + result.critical_items + result.soon_items <= result.total_items

    def test_empty_catalog(self):
        result = self.engine.value_catalog(items=[], reference=TODAY)

        assert result.total_items == 0
        assert result.total_value == Decimal("0")
        assert result.requires_attention is False

    def test_idempotent(self, make_item, make_batch):
        items = self._catalog(make_item, make_batch)

        first = self.engine.value_catalog(items=items, reference=TODAY)
        second = self.engine.value_catalog(items=items, reference=TODAY)

        assert first == second

    def test_logs_catalog_valued(self, make_item, make_batch, captured_logs):
        self.engine.value_catalog(items=self._catalog(make_item, make_batch), reference=TODAY)

        records = [r for r in captured_logs() if r["message"] == "catalog_valued"]
        assert len(records) == 1
        assert records[0]["total_items"] == 4
        assert records[0]["skipped_inactive"] == 1


class TestQuantizeDisplay:
    """Display rounding is explicit and half-up."""

    @pytest.mark.parametrize(
        "value,places,expected",
        [
            ("2.615384615", 2, "2.62"),
            ("2.625", 2, "2.63"),
            ("34", 2, "34.00"),
            ("0.9999", 3, "1.000"),
            ("7.5", 0, "8"),
        ],
    )
    def test_rounding(self, value, places, expected):
        assert str(quantize_display(Decimal(value), places)) == expected
