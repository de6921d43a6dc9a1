"""Tests for settings loading."""

from decimal import Decimal
from pathlib import Path

import pytest

from lotledger.config import (
    DEFAULT_COMMISSION_PCT,
    Settings,
    get_default_db_path,
    get_settings,
    reset_settings,
    set_settings,
)
from lotledger.models.enums import Currency


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "DB_PATH",
            "DEFAULT_COMMISSION_PCT",
            "USD_COMMISSION_PCT",
            "REFERENCE_CURRENCY",
            "LOG_LEVEL",
        ):
            monkeypatch.delenv(f"LOTLEDGER_{var}", raising=False)
        settings = Settings(_env_file=None)
        assert settings.default_commission_pct == DEFAULT_COMMISSION_PCT
        assert settings.reference_currency == Currency.UYU
        assert settings.utc_offset_hours == -3
        assert settings.db_path == get_default_db_path()
        assert settings.commission_defaults() == {
            Currency.UYU: DEFAULT_COMMISSION_PCT,
            Currency.USD: DEFAULT_COMMISSION_PCT,
        }

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOTLEDGER_DB_PATH", str(tmp_path / "x.db"))
        monkeypatch.setenv("LOTLEDGER_DEFAULT_COMMISSION_PCT", "0.25")
        monkeypatch.setenv("LOTLEDGER_REFERENCE_CURRENCY", "USD")
        settings = get_settings()
        assert settings.db_path == tmp_path / "x.db"
        assert settings.default_commission_pct == Decimal("0.25")
        assert settings.reference_currency == Currency.USD

    def test_set_settings(self):
        custom = Settings(_env_file=None, db_path=Path("/tmp/custom.db"))
        set_settings(custom)
        assert get_settings() is custom

    def test_cached_until_reset(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first

    def test_commission_defaults_per_currency(self, monkeypatch):
        monkeypatch.setenv("LOTLEDGER_DEFAULT_COMMISSION_PCT", "0.2")
        monkeypatch.setenv("LOTLEDGER_USD_COMMISSION_PCT", "0.5")
        defaults = Settings(_env_file=None).commission_defaults()
        assert defaults[Currency.UYU] == Decimal("0.2")
        assert defaults[Currency.USD] == Decimal("0.5")
