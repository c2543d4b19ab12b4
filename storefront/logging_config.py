"""
Logging configuration — one format for the whole service.

    from storefront.logging_config import setup_logging, get_logger

    setup_logging("INFO")
    log = get_logger(__name__)
    log.info("[Checkout user=%s] attempt", user_id)
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_NOISY = ("sqlalchemy.engine", "aiosqlite", "httpx")


def setup_logging(level: str | int = "INFO", *, echo_sql: bool = False) -> None:
    """
    Configure root logging to stdout.

    Third-party loggers are lowered to WARNING unless echo_sql asks for
    the SQLAlchemy engine log.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)
    if echo_sql:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ("LOG_FORMAT", "setup_logging", "get_logger")
