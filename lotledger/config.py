"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from lotledger.models.enums import Currency

# Platform commission applied when a trade does not carry its own, in percent.
DEFAULT_COMMISSION_PCT = Decimal("0.14")

# Currency whose last purchase rate prices asset inflows without a reference rate.
REFERENCE_CURRENCY = Currency.UYU

# Fixed civil offset of the ledger's calendar (no daylight saving).
UTC_OFFSET_HOURS = -3


def get_default_db_path() -> Path:
    return Path.home() / ".lotledger" / "ledger.db"


class Settings(BaseSettings):
    """Configuration loaded from ``LOTLEDGER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LOTLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    db_path: Path = get_default_db_path()
    default_commission_pct: Decimal = DEFAULT_COMMISSION_PCT
    usd_commission_pct: Decimal = DEFAULT_COMMISSION_PCT
    reference_currency: Currency = REFERENCE_CURRENCY
    utc_offset_hours: int = UTC_OFFSET_HOURS
    log_level: str = "WARNING"

    def commission_defaults(self) -> dict[Currency, Decimal]:
        """Platform commission for trades that carry none, per trade currency."""
        return {
            Currency.UYU: self.default_commission_pct,
            Currency.USD: self.usd_commission_pct,
        }


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the cached settings so the next access reloads the environment."""
    global _settings
    _settings = None
