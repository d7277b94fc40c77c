"""Persistence of daily portfolio values."""

from .daily import delete_daily_from, list_daily, stored_dates, upsert_daily
from .database import Base, Database
from .models import PortfolioDaily

__all__ = [
    "Base",
    "Database",
    "PortfolioDaily",
    "list_daily",
    "stored_dates",
    "upsert_daily",
    "delete_daily_from",
]
