#!/usr/bin/env python3
"""
Inventory dashboard scenario using the real services.

Builds a small restaurant snapshot (dairy, produce, dry goods, one retired
item and a day of manual adjustments), loads the YAML engine config, and
prints the dashboard payload produced by InventorySummaryService.

Usage:
    python3 scripts/demo_dashboard.py
    python3 scripts/demo_dashboard.py --as-of 2024-03-10
    python3 scripts/demo_dashboard.py --filter alerts --item basil
    python3 scripts/demo_dashboard.py --consume basil=6 --verbose
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from pantry_config import get_active_config
from pantry_engines.expiry import ExpiryFilter
from pantry_kernel.domain.clock import DeterministicClock
from pantry_kernel.domain.records import (
    Batch,
    InventoryItem,
    InventorySnapshot,
    MovementType,
    StockMovement,
)
from pantry_kernel.exceptions import PantryKernelError
from pantry_kernel.logging_config import configure_logging
from pantry_services.summary_service import InventorySummaryService

AS_OF = date(2024, 3, 1)


def build_snapshot(as_of: date) -> InventorySnapshot:
    """Sample catalog with batches expiring around ``as_of``."""

    def day(offset: int) -> date:
        return as_of + timedelta(days=offset)

    def at(hour: int, minute: int = 0) -> datetime:
        return datetime.combine(as_of, time(hour, minute), tzinfo=timezone.utc)

    items = [
        InventoryItem(id="milk", name="Whole milk", min_stock=Decimal("6")),
        InventoryItem(id="basil", name="Fresh basil", min_stock=Decimal("10")),
        InventoryItem(id="flour", name="00 flour", min_stock=Decimal("20")),
        InventoryItem(id="mozz", name="Mozzarella", min_stock=Decimal("4")),
        InventoryItem(id="truffle", name="Truffle oil", active=False),
    ]
    batches = [
        Batch("milk-0228", "milk", "3", "1.20", day(-2), batch_number="L-0228"),
        Batch("milk-0305", "milk", "12", "1.25", day(4), batch_number="L-0305"),
        Batch("basil-a", "basil", "5", "2.00", day(3)),
        Batch("basil-b", "basil", "8", "3.00", day(20)),
        Batch("flour-1", "flour", "50", "0.80", day(180)),
        Batch("mozz-1", "mozz", "6", "7.50", day(12)),
        Batch("mozz-old", "mozz", "4", "7.00", day(-10), active=False),
        Batch("truffle-1", "truffle", "1", "45.00", day(-30)),
    ]
    movements = [
        StockMovement("adj-1", "flour", MovementType.POSITIVE_ADJUSTMENT, "10", at(8), "recount"),
        StockMovement("adj-2", "basil", MovementType.NEGATIVE_ADJUSTMENT, "4", at(11, 30), "wilted"),
        StockMovement("adj-3", "milk", MovementType.NEGATIVE_ADJUSTMENT, "9", at(13), "spoiled"),
        StockMovement("adj-4", "gone", MovementType.NEGATIVE_ADJUSTMENT, "1", at(15), "breakage"),
        StockMovement(
            "adj-5", "mozz", MovementType.NEGATIVE_ADJUSTMENT, "20", at(16), "typo", active=False
        ),
        StockMovement("adj-6", "flour", MovementType.NEGATIVE_ADJUSTMENT, "2", at(9) - timedelta(days=1)),
    ]
    return InventorySnapshot.from_records(
        items,
        batches,
        movements,
        taken_at=at(18),
        snapshot_id=f"demo-{as_of.isoformat()}",
    )


def _parse_consume(value: str) -> tuple[str, Decimal]:
    item_id, _, quantity = value.partition("=")
    if not quantity:
        raise argparse.ArgumentTypeError("expected ITEM=QUANTITY")
    return item_id, Decimal(quantity)


def main() -> int:
    parser = argparse.ArgumentParser(description="Inventory dashboard demo")
    parser.add_argument("--as-of", type=date.fromisoformat, default=AS_OF,
                        help="Snapshot date (YYYY-MM-DD)")
    parser.add_argument("--config", default="default", help="Configuration set name")
    parser.add_argument("--filter", choices=[f.value for f in ExpiryFilter],
                        help="List batches of --item in this expiry bucket")
    parser.add_argument("--item", default="basil", help="Item id for --filter and --consume")
    parser.add_argument("--consume", type=_parse_consume, metavar="ITEM=QTY",
                        help="Plan a FEFO draw-down")
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs to stderr")
    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    snapshot = build_snapshot(args.as_of)
    try:
        config = get_active_config(args.config)
    except PantryKernelError as exc:
        print(f"config error [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    service = InventorySummaryService(config=config, clock=DeterministicClock(snapshot.taken_at))
    metrics = service.summarize_snapshot(snapshot)
    output = {"dashboard": service.render(metrics)}

    catalog = snapshot.catalog
    if args.filter:
        item = catalog[args.item]
        output["batches"] = [
            {
                "batch_id": batch.id,
                "expiry_date": batch.expiry_date.isoformat(),
                "quantity": str(batch.quantity),
                "status": status.category.value,
                "days": status.days,
            }
            for batch, status in service.filter_batches(item, args.filter)
        ]

    if args.consume:
        item_id, quantity = args.consume
        plan = service.plan_consumption(catalog[item_id], quantity)
        output["consumption"] = {
            "item_id": plan.item_id,
            "requested": str(plan.requested_quantity),
            "shortfall": str(plan.shortfall),
            "total_cost": str(plan.total_cost),
            "lines": [
                {
                    "batch_id": line.batch_id,
                    "quantity": str(line.quantity),
                    "remaining_after": str(line.remaining_after),
                }
                for line in plan.lines
            ],
        }

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
