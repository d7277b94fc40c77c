"""ORM model for stored daily portfolio values."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float
from sqlalchemy.orm import Mapped, mapped_column

from ..models import DailyValue
from .database import Base


class PortfolioDaily(Base):
    __tablename__ = "portfolio_daily"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[date] = mapped_column(Date, unique=True, index=True)
    portfolio_value: Mapped[float] = mapped_column(Float)
    total_shares: Mapped[float] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def to_value(self) -> DailyValue:
        return DailyValue(date=self.date, portfolio_value=self.portfolio_value, total_shares=self.total_shares)


__all__ = ["PortfolioDaily"]
