"""Fill in daily portfolio values for days that have none on file."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Mapping, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from .db.daily import stored_dates, upsert_daily
from .history import build_daily_value, first_transaction_date, missing_dates
from .models import DailyValue, Ledger, PriceData
from .pricing import pricing_ids

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    """Supplies the price map for one calendar day."""

    async def prices_for(self, day: date, ids: Iterable[str]) -> Mapping[str, PriceData]:
        ...


@dataclass
class BackfillReport:
    written: List[DailyValue] = field(default_factory=list)
    skipped: List[date] = field(default_factory=list)
    stopped: bool = False


async def backfill_daily_history(
    session: AsyncSession,
    ledger: Ledger,
    price_source: PriceSource,
    *,
    today: date,
    stop_event: asyncio.Event | None = None,
) -> BackfillReport:
    """Compute and store one row per missing day up to ``today``.

    Days are processed oldest first. A day whose price map comes back empty
    is skipped and stays missing, so a later run picks it up again. Setting
    ``stop_event`` ends the run before the next day starts.
    """

    report = BackfillReport()
    start = first_transaction_date(ledger.transactions)
    if start is None:
        logger.info("Ledger has no transactions; nothing to backfill")
        return report

    existing = await stored_dates(session, start=start, end=today)
    pending = missing_dates(ledger.transactions, existing, today)
    ids = pricing_ids(ledger.tokens)
    logger.info("Backfilling %d days from %s to %s", len(pending), start.isoformat(), today.isoformat())

    for index, day in enumerate(pending, start=1):
        if stop_event is not None and stop_event.is_set():
            logger.info("Backfill stopped before %s", day.isoformat())
            report.stopped = True
            break
        prices = await price_source.prices_for(day, ids)
        if not prices:
            logger.warning("No prices for %s, skipping", day.isoformat())
            report.skipped.append(day)
            continue
        value = build_daily_value(ledger, prices, day)
        await upsert_daily(session, value)
        report.written.append(value)
        logger.info(
            "Stored %s (%d/%d): value=%.2f shares=%.4f",
            day.isoformat(),
            index,
            len(pending),
            value.portfolio_value,
            value.total_shares,
        )
    return report


__all__ = ["PriceSource", "BackfillReport", "backfill_daily_history"]
