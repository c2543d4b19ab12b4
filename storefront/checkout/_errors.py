"""
Checkout errors — closed taxonomy.

    CheckoutError = InvalidInput | StockConflict | TransactionFailure

Errors are values carried in Result, not raised. The one exception type,
CheckoutAborted, exists only to unwind an atomic unit so it rolls back.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from storefront._types import ProductId


# ═══════════════════════════════════════════════════════════════════════════════
# Variants
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class InvalidInput:
    """Malformed or empty cart payload. Never retried automatically."""

    message: str
    details: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class StockConflict:
    """
    One or more products unavailable or short on stock.

    Note: Lists every offending product, not just the first one found,
    so the client can fix the whole cart in one round trip.
    """

    unavailable_product_ids: tuple[ProductId, ...]

    @property
    def message(self) -> str:
        ids = ", ".join(str(pid) for pid in self.unavailable_product_ids)
        return f"Insufficient stock or product unavailable: {ids}"


@dataclass(frozen=True, slots=True)
class TransactionFailure:
    """Persistence failure (connectivity, constraint, deadlock, timeout)."""

    message: str
    cause: Exception | None = None

    @classmethod
    def from_exception(cls, context: str, exc: Exception) -> TransactionFailure:
        detail = str(exc) or type(exc).__name__
        return cls(f"{context}: {detail}", exc)


type CheckoutError = InvalidInput | StockConflict | TransactionFailure


# ═══════════════════════════════════════════════════════════════════════════════
# Conflict Reporter
# ═══════════════════════════════════════════════════════════════════════════════


def report_conflict(product_ids: Iterable[ProductId]) -> StockConflict:
    """Package unavailable ids into a StockConflict, first-seen order, no duplicates."""
    return StockConflict(tuple(dict.fromkeys(product_ids)))


# ═══════════════════════════════════════════════════════════════════════════════
# Abort — unwinds an atomic unit
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutAborted(Exception):
    """Raised inside an atomic unit to roll it back with a known reason."""

    def __init__(self, error: CheckoutError) -> None:
        super().__init__(getattr(error, "message", repr(error)))
        self.error = error


def abort_reason(exc: Exception, context: str) -> CheckoutError:
    """Map an exception escaping an atomic unit back to a CheckoutError."""
    if isinstance(exc, CheckoutAborted):
        return exc.error
    return TransactionFailure.from_exception(context, exc)


__all__ = (
    "InvalidInput",
    "StockConflict",
    "TransactionFailure",
    "CheckoutError",
    "report_conflict",
    "CheckoutAborted",
    "abort_reason",
)
