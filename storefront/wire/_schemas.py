"""
HTTP schemas — pydantic models with domain converters.

    CheckoutIn.to_domain()       -> list[CartLineRequest]
    OrderOut.from_domain(order)  -> response body
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from storefront.checkout import CartLineRequest, OrderResult


# ═══════════════════════════════════════════════════════════════════════════════
# Request
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Range checks happen in normalize_cart so all problems are reported together
    product_id: StrictInt = Field(alias="productId")
    quantity: StrictInt

    def to_domain(self) -> CartLineRequest:
        return CartLineRequest(product_id=self.product_id, quantity=self.quantity)


class CheckoutIn(BaseModel):
    items: list[CheckoutItemIn]

    def to_domain(self) -> list[CartLineRequest]:
        return [item.to_domain() for item in self.items]


# ═══════════════════════════════════════════════════════════════════════════════
# Response
# ═══════════════════════════════════════════════════════════════════════════════


class OrderItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(serialization_alias="productId")
    quantity: int
    unit_price_cents: int
    subtotal_cents: int


class OrderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    status: str
    total_cents: int
    created_at: datetime = Field(serialization_alias="createdAt")
    items: list[OrderItemOut]

    @classmethod
    def from_domain(cls, order: OrderResult) -> OrderOut:
        return cls(
            id=order.id,
            status=order.status.value,
            total_cents=order.total_cents,
            created_at=order.created_at,
            items=[
                OrderItemOut(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    subtotal_cents=item.subtotal_cents,
                )
                for item in order.items
            ],
        )

    def to_json(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorOut(BaseModel):
    error: str


class InvalidInputOut(ErrorOut):
    details: list[str]


class StockConflictOut(ErrorOut):
    unavailable_products: list[int] = Field(serialization_alias="unavailableProducts")


__all__ = (
    "CheckoutItemIn",
    "CheckoutIn",
    "OrderItemOut",
    "OrderOut",
    "ErrorOut",
    "InvalidInputOut",
    "StockConflictOut",
)
