"""
Pantry Kernel

Shared foundation for the perishable inventory valuation engine:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock for deterministic reference times
- Immutable domain records (items, batches, stock movements, snapshots)
"""

__version__ = "0.1.0"
