"""
Checkout Example — concurrent buyers, one shelf.

Run: uv run python examples/checkout_demo.py
"""

import tempfile
from pathlib import Path

from combinators import batch, lift as L
from kungfu import Ok, Error

from examples._infra import run, banner
from storefront import checkout as C
from storefront.config import Settings
from storefront.db import open_database
from storefront.logging_config import setup_logging
from storefront.orders import OrderHistory


async def main() -> None:
    banner("Checkout")
    setup_logging("WARNING")

    with tempfile.TemporaryDirectory() as tmp:
        settings = Settings().with_database(f"sqlite+aiosqlite:///{Path(tmp) / 'demo.db'}")
        db = await open_database(settings)

        try:
            await db.add_product(1, name="Lamp", price_cents=4500, stock=5)
            await db.add_product(2, name="Bulb", price_cents=300, stock=100)
            service = C.CheckoutService(catalog=db.catalog, runner=db.runner, orders=db.orders)

            # 1. Duplicate lines are merged, prices come from the catalog
            print("1. Checkout with duplicate lines:")
            r1 = await service.checkout(1, [
                {"productId": 2, "quantity": 2},
                {"productId": 2, "quantity": 1},
            ])
            match r1:
                case Ok(order):
                    print(f"   Order {order.id}: {order.items[0].quantity} bulbs, {order.total_cents} cents")
                case Error(e):
                    print(f"   Error: {e}")

            # 2. Two buyers want 3 of 5 lamps at the same time
            print("\n2. Two concurrent buyers, stock 5, each wants 3:")
            outcomes: dict[int, str] = {}

            async def buy(user: int) -> None:
                match await service.checkout(user, [{"productId": 1, "quantity": 3}]):
                    case Ok(order):
                        outcomes[user] = f"order {order.id}, {order.total_cents} cents"
                    case Error(C.StockConflict(ids)):
                        outcomes[user] = f"conflict, unavailable {list(ids)}"
                    case Error(e):
                        outcomes[user] = f"error {e}"

            await batch(
                [10, 11],
                handler=lambda user: L.catching_async(lambda: buy(user), on_error=str),
                concurrency=2,
            )
            for user, outcome in sorted(outcomes.items()):
                print(f"   Buyer {user}: {outcome}")
            print(f"   Lamps left: {await db.stock_of(1)} (never negative)")

            # 3. A retried request with the same key is replayed
            print("\n3. Retry with Idempotency-Key:")
            cart = [{"productId": 2, "quantity": 10}]
            before = await db.stock_of(2)
            for attempt in (1, 2):
                match await service.checkout(1, cart, idempotency_key="demo-retry"):
                    case Ok(order):
                        print(f"   Attempt {attempt}: order {order.id}, replayed={order.replayed}")
                    case Error(e):
                        print(f"   Attempt {attempt}: {e}")
            print(f"   Bulbs taken: {before - await db.stock_of(2)} (only once)")

            # 4. Everything unavailable is reported at once
            print("\n4. Cart with several problems:")
            match await service.checkout(1, [
                {"productId": 1, "quantity": 50},
                {"productId": 77, "quantity": 1},
            ]):
                case Ok(order):
                    print(f"   Unexpected order {order.id}")
                case Error(C.StockConflict(ids)):
                    print(f"   Unavailable: {list(ids)}")
                case Error(e):
                    print(f"   Error: {e}")

            match await OrderHistory(db.orders).list_for_user(1):
                case Ok(orders):
                    print(f"\nSummary: user 1 has {len(orders)} orders")
                case Error(e):
                    print(f"\nSummary unavailable: {e.message}")

        finally:
            await db.close()


if __name__ == "__main__":
    run(main)
