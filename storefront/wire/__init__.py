"""
HTTP surface (FastAPI).

    POST /checkout   X-User-Id, optional Idempotency-Key
                     201 order | 400 {error, details} | 401 | 409 {error, unavailableProducts} | 500
    GET  /orders     X-User-Id → caller's orders, newest first
    GET  /health     {"status": "ok"}
"""

from storefront.wire._schemas import (
    CheckoutItemIn,
    CheckoutIn,
    OrderItemOut,
    OrderOut,
    ErrorOut,
    InvalidInputOut,
    StockConflictOut,
)
from storefront.wire._app import (
    REPLAY_HEADER,
    Unauthenticated,
    current_user_id,
    error_response,
    router,
    create_app,
    create_app_from_env,
)

__all__ = (
    # Schemas
    "CheckoutItemIn",
    "CheckoutIn",
    "OrderItemOut",
    "OrderOut",
    "ErrorOut",
    "InvalidInputOut",
    "StockConflictOut",
    # App
    "REPLAY_HEADER",
    "Unauthenticated",
    "current_user_id",
    "error_response",
    "router",
    "create_app",
    "create_app_from_env",
)
