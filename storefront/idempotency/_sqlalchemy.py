"""
SQLAlchemy integration — idempotency columns for any model.

Usage:
    class OrderTable(Base, IdempotencyMixin):
        __tablename__ = "orders"
        id: Mapped[int] = mapped_column(primary_key=True)
        ...

The unique index on idempotency_key is what makes concurrent duplicates
safe: only one insert with a given key can ever commit.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column


class IdempotencyMixin:
    """
    Adds columns:
    - idempotency_key: scoped client key, unique, NULL when the client sent none
    - request_fingerprint: hash of the request that created the row
    """

    idempotency_key: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        index=True,
    )

    request_fingerprint: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )


__all__ = ("IdempotencyMixin",)
