"""
Idempotency — deduplicate retried requests by client key.

    from storefront import idempotency as I

    match I.parse_key(header_value):
        case Ok(key):
            scoped = key.scoped("checkout", user_id)
        case Error(msg):
            ...

    I.fingerprint([(1, 5), (2, 1)])  # sha256 hex, order-insensitive

Flow for a keyed request:

    key ──▶ lookup stored row
              │
      ┌───────┴──────────┐
      ▼                  ▼
    found              not found
      │                  │
    same fingerprint?  execute, store key + fingerprint
      │   │              │ (unique index: one winner)
     yes  no             ▼
      │   └─▶ reject   loser re-reads and replays winner
      ▼
    replay
"""

from storefront.idempotency._types import (
    MAX_KEY_LENGTH,
    IdempotencyKey,
    parse_key,
    fingerprint,
)
from storefront.idempotency._sqlalchemy import IdempotencyMixin

__all__ = (
    "MAX_KEY_LENGTH",
    "IdempotencyKey",
    "parse_key",
    "fingerprint",
    "IdempotencyMixin",
)
