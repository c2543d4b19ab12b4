"""Settings from the environment."""

from datetime import timedelta

import pytest

from storefront.config import DEFAULT_DATABASE_URL, ConfigError, Settings
from storefront.idempotency import IdempotencyKey, fingerprint, parse_key
from tests._results import ok, err


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.tx_timeout == timedelta(seconds=10)
    assert settings.log_level == "INFO"
    assert settings.echo_sql is False


def test_reads_storefront_variables():
    settings = Settings.from_env({
        "STOREFRONT_DATABASE_URL": "sqlite+aiosqlite:///./x.db",
        "STOREFRONT_TX_TIMEOUT_SECONDS": "2.5",
        "STOREFRONT_LOG_LEVEL": "debug",
        "STOREFRONT_ECHO_SQL": "yes",
    })
    assert settings.database_url == "sqlite+aiosqlite:///./x.db"
    assert settings.tx_timeout == timedelta(seconds=2.5)
    assert settings.log_level == "DEBUG"
    assert settings.echo_sql is True


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_rejects_unusable_timeout(raw):
    with pytest.raises(ConfigError):
        Settings.from_env({"STOREFRONT_TX_TIMEOUT_SECONDS": raw})


def test_with_methods_return_new_settings():
    base = Settings()
    changed = base.with_log_level("warning")
    assert base.log_level == "INFO"
    assert changed.log_level == "WARNING"


def test_idempotency_key_parsing_and_scoping():
    key = ok(parse_key("  order-42 "))
    assert key == IdempotencyKey("order-42")
    assert key.scoped("checkout", 7) == "checkout:7:order-42"
    assert "blank" in err(parse_key(""))
    assert err(parse_key("x" * 201))


def test_fingerprint_ignores_line_order():
    assert fingerprint([(1, 2), (3, 1)]) == fingerprint([(3, 1), (1, 2)])
    assert fingerprint([(1, 2)]) != fingerprint([(1, 3)])
