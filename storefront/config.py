"""
Storefront settings — immutable, environment-backed.

    settings = Settings.from_env()
    settings = Settings().with_database("sqlite+aiosqlite:///./dev.db").with_tx_timeout(seconds=2)

Environment:
    STOREFRONT_DATABASE_URL         default sqlite+aiosqlite:///./storefront.db
    STOREFRONT_TX_TIMEOUT_SECONDS   default 10
    STOREFRONT_LOG_LEVEL            default INFO
    STOREFRONT_ECHO_SQL             "1" / "true" / "yes" to echo SQL
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import timedelta

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./storefront.db"
DEFAULT_TX_TIMEOUT = timedelta(seconds=10)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class ConfigError(ValueError):
    """Raised at startup for an unusable environment value."""


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Runtime configuration.

    Note: Immutable; each with_* method returns new Settings.
    """

    database_url: str = DEFAULT_DATABASE_URL
    tx_timeout: timedelta = DEFAULT_TX_TIMEOUT
    log_level: str = "INFO"
    echo_sql: bool = False

    def with_database(self, url: str) -> Settings:
        return replace(self, database_url=url)

    def with_tx_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> Settings:
        """
        Set the per-checkout transaction timeout.

        Example:
            .with_tx_timeout(seconds=5)
        """
        if delta is not None:
            timeout = delta
        elif seconds is not None:
            timeout = timedelta(seconds=seconds)
        else:
            timeout = DEFAULT_TX_TIMEOUT
        if timeout <= timedelta(0):
            raise ConfigError("Transaction timeout must be positive")
        return replace(self, tx_timeout=timeout)

    def with_log_level(self, level: str) -> Settings:
        return replace(self, log_level=level.upper())

    def with_echo_sql(self, echo: bool = True) -> Settings:
        return replace(self, echo_sql=echo)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        settings = cls()

        if url := env.get("STOREFRONT_DATABASE_URL"):
            settings = settings.with_database(url)

        if raw_timeout := env.get("STOREFRONT_TX_TIMEOUT_SECONDS"):
            try:
                seconds = float(raw_timeout)
            except ValueError as exc:
                raise ConfigError(
                    f"STOREFRONT_TX_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
                ) from exc
            settings = settings.with_tx_timeout(delta=timedelta(seconds=seconds))

        if level := env.get("STOREFRONT_LOG_LEVEL"):
            settings = settings.with_log_level(level)

        echo = env.get("STOREFRONT_ECHO_SQL", "")
        return settings.with_echo_sql(echo.strip().lower() in _TRUTHY)


__all__ = (
    "DEFAULT_DATABASE_URL",
    "DEFAULT_TX_TIMEOUT",
    "ConfigError",
    "Settings",
)
