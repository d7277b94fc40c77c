"""Queries over the ``portfolio_daily`` table."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import DailyValue
from .models import PortfolioDaily

logger = logging.getLogger(__name__)


async def list_daily(
    session: AsyncSession, *, start: date | None = None, end: date | None = None
) -> List[DailyValue]:
    """Stored rows between ``start`` and ``end`` (both inclusive), oldest first."""

    stmt = select(PortfolioDaily)
    if start is not None:
        stmt = stmt.where(PortfolioDaily.date >= start)
    if end is not None:
        stmt = stmt.where(PortfolioDaily.date <= end)
    rows = (await session.execute(stmt.order_by(PortfolioDaily.date))).scalars().all()
    return [row.to_value() for row in rows]


async def stored_dates(session: AsyncSession, *, start: date | None = None, end: date | None = None) -> set[date]:
    return {row.date for row in await list_daily(session, start=start, end=end)}


async def upsert_daily(session: AsyncSession, value: DailyValue) -> PortfolioDaily:
    """Insert the row for ``value.date`` or overwrite the existing one."""

    existing = (
        await session.execute(select(PortfolioDaily).where(PortfolioDaily.date == value.date))
    ).scalar_one_or_none()
    if existing is not None:
        existing.portfolio_value = value.portfolio_value
        existing.total_shares = value.total_shares
        existing.updated_at = datetime.utcnow()
        row = existing
    else:
        row = PortfolioDaily(
            date=value.date,
            portfolio_value=value.portfolio_value,
            total_shares=value.total_shares,
        )
        session.add(row)
    await session.commit()
    await session.refresh(row)
    return row


async def delete_daily_from(session: AsyncSession, from_date: date) -> int:
    """Remove rows dated on or after ``from_date``; returns the number removed.

    A ledger edit dated D changes every value from D onward, so those rows
    must be recomputed.
    """

    result = await session.execute(delete(PortfolioDaily).where(PortfolioDaily.date >= from_date))
    await session.commit()
    removed = result.rowcount or 0
    logger.info("Invalidated %d daily rows from %s", removed, from_date.isoformat())
    return removed


__all__ = ["list_daily", "stored_dates", "upsert_daily", "delete_daily_from"]
