"""Daily portfolio history: which days need a value and how to compute it."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from .ledger import replay
from .models import DailyValue, HistoryPoint, Ledger, Transaction
from .pricing import PriceMap
from .valuation import calculate_portfolio_value


def first_transaction_date(transactions: Iterable[Transaction]) -> Optional[date]:
    dates = [tx.date for tx in transactions]
    if not dates:
        return None
    return min(dates)


def date_range(start: date, end: date) -> List[date]:
    """Every calendar day from ``start`` to ``end`` inclusive."""

    days: List[date] = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def missing_dates(
    transactions: Sequence[Transaction], existing: Iterable[date], today: date
) -> List[date]:
    """Days between the first transaction and ``today`` that have no stored value."""

    start = first_transaction_date(transactions)
    if start is None:
        return []
    stored = set(existing)
    return [day for day in date_range(start, today) if day not in stored]


def build_daily_value(ledger: Ledger, prices: PriceMap, day: date) -> DailyValue:
    """Replay the ledger as of ``day`` and value it, cash included."""

    state = replay(ledger.transactions, day, ledger.settings.initial_quota_value)
    return DailyValue(
        date=day,
        portfolio_value=calculate_portfolio_value(state, prices, ledger.tokens),
        total_shares=state.total_shares,
    )


def history_series(rows: Sequence[DailyValue]) -> List[HistoryPoint]:
    """Chart points for stored rows: share value and % change since the first row."""

    if not rows:
        return []

    def _share_value(row: DailyValue) -> float:
        return 0.0 if row.total_shares == 0 else row.portfolio_value / row.total_shares

    base_value = rows[0].portfolio_value or 0.0
    base_share = _share_value(rows[0])
    points: List[HistoryPoint] = []
    for row in rows:
        share_value = _share_value(row)
        points.append(
            HistoryPoint(
                date=row.date,
                portfolio_value=row.portfolio_value,
                total_shares=row.total_shares,
                share_value=share_value,
                percent_value=(row.portfolio_value / base_value - 1) * 100 if base_value > 0 else 0.0,
                percent_share=(share_value / base_share - 1) * 100 if base_share > 0 else 0.0,
            )
        )
    return points


__all__ = [
    "first_transaction_date",
    "date_range",
    "missing_dates",
    "build_daily_value",
    "history_series",
]
