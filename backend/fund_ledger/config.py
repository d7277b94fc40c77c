"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url

from .models import PortfolioSettings

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./fund_ledger.db"
DEFAULT_SNAPSHOT_PATH = ".portfolio-data.local.json"


class AppSettings(BaseSettings):
    """Configuration options for the fund ledger service."""

    app_name: str = Field(default="Fund Ledger")
    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="SQLAlchemy async database URL for the daily history table.",
    )
    snapshot_path: str = Field(
        default=DEFAULT_SNAPSHOT_PATH,
        description="JSON ledger snapshot with tokens, transactions and settings.",
    )

    default_initial_quota_value: float = Field(
        default=1.0,
        gt=0,
        description="Quota value used when the snapshot carries no settings.",
    )
    default_baseline_total_value: float = Field(default=0.0)

    log_level: str = Field(default="INFO")
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    class Config:
        env_prefix = "FUND_LEDGER_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def default_portfolio_settings(self) -> PortfolioSettings:
        return PortfolioSettings(
            baseline_total_value=self.default_baseline_total_value,
            initial_quota_value=self.default_initial_quota_value,
        )

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        values = self.model_dump()
        values["database_url"] = make_url(self.database_url).render_as_string(hide_password=True)
        return values


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = ["AppSettings", "DEFAULT_DATABASE_URL", "DEFAULT_SNAPSHOT_PATH", "get_settings"]
