"""
FastAPI application — checkout and order history over HTTP.

    app = create_app(checkout=service, history=history)

    # or, configured from STOREFRONT_* environment variables:
    #   uvicorn storefront.wire:create_app_from_env --factory
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from kungfu import Ok, Error

from storefront.checkout import (
    CheckoutError,
    CheckoutService,
    InvalidInput,
    StockConflict,
    TransactionFailure,
)
from storefront.config import Settings
from storefront.db import open_database
from storefront.logging_config import get_logger, setup_logging
from storefront.orders import OrderHistory
from storefront.wire._schemas import (
    CheckoutIn,
    ErrorOut,
    InvalidInputOut,
    OrderOut,
    StockConflictOut,
)

log = get_logger(__name__)

REPLAY_HEADER = "Idempotent-Replayed"


# ═══════════════════════════════════════════════════════════════════════════════
# Dependencies
# ═══════════════════════════════════════════════════════════════════════════════


class Unauthenticated(Exception):
    """No usable caller identity on the request."""


def current_user_id(x_user_id: Annotated[str | None, Header()] = None) -> int:
    raw = (x_user_id or "").strip()
    # isdigit() alone admits superscripts and other digits int() rejects
    if not (raw.isascii() and raw.isdigit()) or int(raw) <= 0:
        raise Unauthenticated("Missing or invalid X-User-Id header")
    return int(raw)


def checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout


def order_history(request: Request) -> OrderHistory:
    return request.app.state.history


# ═══════════════════════════════════════════════════════════════════════════════
# Error mapping
# ═══════════════════════════════════════════════════════════════════════════════


def error_response(err: CheckoutError) -> JSONResponse:
    match err:
        case InvalidInput(message, details):
            body = InvalidInputOut(error=message, details=list(details))
            return JSONResponse(body.model_dump(), status_code=400)
        case StockConflict(ids):
            body = StockConflictOut(error=err.message, unavailable_products=list(ids))
            return JSONResponse(body.model_dump(by_alias=True), status_code=409)
        case TransactionFailure():
            body = ErrorOut(error="Checkout could not be completed")
            return JSONResponse(body.model_dump(), status_code=500)


async def _on_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        f"{'.'.join(str(part) for part in e['loc'] if part != 'body')}: {e['msg']}"
        for e in exc.errors()
    ]
    body = InvalidInputOut(error="Invalid request body", details=details)
    return JSONResponse(body.model_dump(), status_code=400)


async def _on_unauthenticated(_: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(ErrorOut(error=str(exc)).model_dump(), status_code=401)


# ═══════════════════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════════════════


router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/checkout", status_code=201)
async def checkout(
    body: CheckoutIn,
    user_id: Annotated[int, Depends(current_user_id)],
    service: Annotated[CheckoutService, Depends(checkout_service)],
    idempotency_key: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    result = await service.checkout(
        user_id, body.to_domain(), idempotency_key=idempotency_key
    )

    match result:
        case Ok(order):
            headers = {REPLAY_HEADER: "true"} if order.replayed else None
            return JSONResponse(
                OrderOut.from_domain(order).to_json(), status_code=201, headers=headers
            )
        case Error(e):
            return error_response(e)


@router.get("/orders")
async def list_orders(
    user_id: Annotated[int, Depends(current_user_id)],
    history: Annotated[OrderHistory, Depends(order_history)],
) -> JSONResponse:
    match await history.list_for_user(user_id):
        case Ok(orders):
            return JSONResponse([OrderOut.from_domain(o).to_json() for o in orders])
        case Error(_):
            return JSONResponse(
                ErrorOut(error="Orders could not be loaded").model_dump(), status_code=500
            )


# ═══════════════════════════════════════════════════════════════════════════════
# Application
# ═══════════════════════════════════════════════════════════════════════════════


def create_app(
    checkout: CheckoutService | None = None,
    history: OrderHistory | None = None,
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    app = FastAPI(title="storefront", lifespan=lifespan)
    app.state.checkout = checkout
    app.state.history = history

    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(Unauthenticated, _on_unauthenticated)
    app.include_router(router)
    return app


def create_app_from_env() -> FastAPI:
    settings = Settings.from_env()
    setup_logging(settings.log_level, echo_sql=settings.echo_sql)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = await open_database(settings)
        app.state.checkout = CheckoutService(
            catalog=database.catalog, runner=database.runner, orders=database.orders
        )
        app.state.history = OrderHistory(database.orders)
        try:
            yield
        finally:
            await database.close()
            log.info("[App] database closed")

    return create_app(lifespan=lifespan)


__all__ = (
    "REPLAY_HEADER",
    "Unauthenticated",
    "current_user_id",
    "error_response",
    "router",
    "create_app",
    "create_app_from_env",
)
