import asyncio
from datetime import date

import pytest

from fund_ledger import Buy, DailyValue, Deposit, Ledger, PortfolioSettings, PriceData, Token, TokenCategory
from fund_ledger.backfill import backfill_daily_history
from fund_ledger.db import delete_daily_from, list_daily, stored_dates, upsert_daily
from fund_ledger.pricing import InMemoryPriceHistory

FET = Token(id="fetch-ai", symbol="FET", name="Fetch.ai", category=TokenCategory.AI)


def _ledger() -> Ledger:
    return Ledger(
        tokens=[FET],
        transactions=[
            Deposit(id="d1", date=date(2025, 5, 1), amount=1000.0, usd_value=1000.0),
            Buy(id="b1", date=date(2025, 5, 2), token_symbol="FET", amount=100.0, usd_value=500.0),
        ],
        settings=PortfolioSettings(),
    )


async def test_upsert_overwrites_same_day(database):
    await database.create_all()
    try:
        async with database.session() as session:
            await upsert_daily(session, DailyValue(date=date(2025, 5, 1), portfolio_value=100.0, total_shares=100.0))
            await upsert_daily(session, DailyValue(date=date(2025, 5, 1), portfolio_value=120.0, total_shares=100.0))
            rows = await list_daily(session)
    finally:
        await database.dispose()

    assert rows == [DailyValue(date=date(2025, 5, 1), portfolio_value=120.0, total_shares=100.0)]


async def test_list_range_and_invalidate(database):
    await database.create_all()
    try:
        async with database.session() as session:
            for day in (3, 1, 2, 4):
                await upsert_daily(
                    session, DailyValue(date=date(2025, 5, day), portfolio_value=float(day), total_shares=1.0)
                )
            window = await list_daily(session, start=date(2025, 5, 2), end=date(2025, 5, 3))
            ordered = await list_daily(session)
            removed = await delete_daily_from(session, date(2025, 5, 3))
            remaining = await stored_dates(session)
    finally:
        await database.dispose()

    assert [row.date.day for row in window] == [2, 3]
    assert [row.date.day for row in ordered] == [1, 2, 3, 4]
    assert removed == 2
    assert remaining == {date(2025, 5, 1), date(2025, 5, 2)}


async def test_backfill_writes_missing_days_and_skips_unpriced(database):
    history = InMemoryPriceHistory(
        prices={
            date(2025, 5, 1): {"fetch-ai": PriceData(price=4.0)},
            date(2025, 5, 3): {"fetch-ai": PriceData(price=6.0)},
        }
    )
    await database.create_all()
    try:
        async with database.session() as session:
            await upsert_daily(session, DailyValue(date=date(2025, 5, 1), portfolio_value=1.0, total_shares=1.0))
            report = await backfill_daily_history(session, _ledger(), history, today=date(2025, 5, 3))
            rows = await list_daily(session)
    finally:
        await database.dispose()

    assert [value.date for value in report.written] == [date(2025, 5, 3)]
    assert report.skipped == [date(2025, 5, 2)]
    assert report.stopped is False
    assert [row.date for row in rows] == [date(2025, 5, 1), date(2025, 5, 3)]
    assert rows[0].portfolio_value == 1.0
    assert rows[1].portfolio_value == pytest.approx(500 + 100 * 6.0)
    assert rows[1].total_shares == pytest.approx(1000)


async def test_backfill_honours_stop_event(database):
    history = InMemoryPriceHistory(prices={date(2025, 5, 1): {"fetch-ai": PriceData(price=4.0)}})
    stop = asyncio.Event()
    stop.set()
    await database.create_all()
    try:
        async with database.session() as session:
            report = await backfill_daily_history(
                session, _ledger(), history, today=date(2025, 5, 2), stop_event=stop
            )
            rows = await list_daily(session)
    finally:
        await database.dispose()

    assert report.stopped is True
    assert report.written == []
    assert rows == []


async def test_backfill_on_empty_ledger(database):
    await database.create_all()
    try:
        async with database.session() as session:
            report = await backfill_daily_history(
                session,
                Ledger(tokens=[], transactions=[], settings=PortfolioSettings()),
                InMemoryPriceHistory(prices={}),
                today=date(2025, 5, 2),
            )
    finally:
        await database.dispose()

    assert report.written == []
    assert report.skipped == []
