"""
Order history — a user's orders, newest first.

    history = OrderHistory(database.orders)
    match await history.list_for_user(user_id):
        case Ok(orders): ...
        case Error(TransactionFailure(msg)): ...
"""

from __future__ import annotations

from kungfu import Result, Ok, Error
from combinators import lift as L

from storefront._types import UserId
from storefront.checkout import OrderReader, OrderResult, TransactionFailure
from storefront.logging_config import get_logger

log = get_logger(__name__)


class OrderHistory:
    def __init__(self, reader: OrderReader) -> None:
        self._reader = reader

    async def list_for_user(
        self, user_id: UserId
    ) -> Result[list[OrderResult], TransactionFailure]:
        result = await L.catching_async(
            lambda: self._reader.list_for_user(user_id),
            on_error=lambda e: TransactionFailure.from_exception("Order history failed", e),
        )
        match result:
            case Ok(orders):
                log.info("[Orders user=%s] listed %d", user_id, len(orders))
            case Error(e):
                log.error("[Orders user=%s] %s", user_id, e.message)
        return result


__all__ = ("OrderHistory",)
