"""
Core types for storefront.

Re-exports from kungfu + shared aliases.
"""

from __future__ import annotations

from datetime import UTC, datetime

# Re-export from kungfu
from kungfu import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type UserId = int
type ProductId = int
type OrderId = int
type Cents = int

# ═══════════════════════════════════════════════════════════════════════════════
# Clock
# ═══════════════════════════════════════════════════════════════════════════════


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    # Aliases
    "UserId",
    "ProductId",
    "OrderId",
    "Cents",
    # Clock
    "utcnow",
)
