"""Shared helpers for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine


def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
