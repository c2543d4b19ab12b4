"""
Idempotency types — client keys and request fingerprints.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass

from kungfu import Result, Ok, Error


MAX_KEY_LENGTH = 200
"""Room left for the scope prefix inside the 255-char column."""


# ═══════════════════════════════════════════════════════════════════════════════
# Idempotency Key
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class IdempotencyKey:
    """
    Client-generated request key.

    Note: Keys are scoped per owner before storage; the same raw key from
    two users maps to two different rows.
    """

    value: str

    def scoped(self, namespace: str, owner: int) -> str:
        return f"{namespace}:{owner}:{self.value}"


def parse_key(raw: str) -> Result[IdempotencyKey, str]:
    """Validate a raw header value."""
    value = raw.strip()
    if not value:
        return Error("Idempotency key must not be blank")
    if len(value) > MAX_KEY_LENGTH:
        return Error(f"Idempotency key must be at most {MAX_KEY_LENGTH} characters")
    if not value.isprintable():
        return Error("Idempotency key must be printable")
    return Ok(IdempotencyKey(value))


# ═══════════════════════════════════════════════════════════════════════════════
# Fingerprint — collision detection
# ═══════════════════════════════════════════════════════════════════════════════


def fingerprint(pairs: Iterable[tuple[int, int]]) -> str:
    """
    Stable hash of (product_id, quantity) pairs.

    Order-insensitive: the same cart submitted in a different order hashes
    the same.
    """
    canonical = ",".join(f"{pid}x{qty}" for pid, qty in sorted(pairs))
    return hashlib.sha256(canonical.encode()).hexdigest()


__all__ = (
    "MAX_KEY_LENGTH",
    "IdempotencyKey",
    "parse_key",
    "fingerprint",
)
