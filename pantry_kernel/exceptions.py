"""
Typed Exception Hierarchy for the Pantry Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The valuation engines themselves are total: empty batch sets, zero stock and
movements that reference missing items all resolve to safe defaults.  The
errors that remain come from the edges of the system (configuration files,
wire tags for movement types, strict consumption requests), and callers need
to tell them apart without parsing message strings.

Every exception therefore:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        plan = service.plan_consumption(item, Decimal("12"), allow_partial=False)
    except InsufficientStockError as e:
        api_response(code=e.code, requested=e.requested, available=e.available)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PantryKernelError (base)
    |
    +-- MovementError
    |   +-- UnknownMovementTypeError
    |
    +-- StockError
    |   +-- InsufficientStockError
    |
    +-- ConfigError
        +-- ConfigNotFoundError
        +-- ConfigValidationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                   | When Raised
-----------|------------------------|------------------------------------------
Movement   | UNKNOWN_MOVEMENT_TYPE  | Wire tag is not a known adjustment type
-----------|------------------------|------------------------------------------
Stock      | INSUFFICIENT_STOCK     | Strict FEFO plan cannot be fully covered
-----------|------------------------|------------------------------------------
Config     | CONFIG_NOT_FOUND       | Named configuration set does not exist
           | CONFIG_INVALID         | Configuration value fails validation
===============================================================================

Argument errors that indicate a programming mistake (non-positive consumption
quantity, inverted date window) raise ``ValueError``, not a kernel error.
"""

from decimal import Decimal


class PantryKernelError(Exception):
    """
    Base exception for all pantry kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PANTRY_KERNEL_ERROR"


# Movement-related exceptions


class MovementError(PantryKernelError):
    """Base exception for stock movement errors."""

    code: str = "MOVEMENT_ERROR"


class UnknownMovementTypeError(MovementError):
    """Movement type tag is not one of the closed set of adjustment types."""

    code: str = "UNKNOWN_MOVEMENT_TYPE"

    def __init__(self, tag: str, allowed: tuple[str, ...]):
        self.tag = tag
        self.allowed = allowed
        super().__init__(
            f"Unknown movement type {tag!r}; expected one of {', '.join(allowed)}"
        )


# Stock-related exceptions


class StockError(PantryKernelError):
    """Base exception for stock availability errors."""

    code: str = "STOCK_ERROR"


class InsufficientStockError(StockError):
    """Usable batches cannot cover the requested quantity."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: str, requested: Decimal, available: Decimal):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"requested {requested}, available {available}"
        )


# Configuration exceptions


class ConfigError(PantryKernelError):
    """Base exception for engine configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigNotFoundError(ConfigError):
    """Named configuration set does not exist."""

    code: str = "CONFIG_NOT_FOUND"

    def __init__(self, name: str, path: str):
        self.name = name
        self.path = path
        super().__init__(f"Configuration set {name!r} not found at {path}")


class ConfigValidationError(ConfigError):
    """Configuration value fails validation."""

    code: str = "CONFIG_INVALID"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid configuration {field}={value!r}: {reason}")
