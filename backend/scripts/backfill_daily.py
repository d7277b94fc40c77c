"""Backfill missing daily portfolio values from a dated price file."""

from __future__ import annotations

import argparse
import asyncio
import json
from datetime import date
from pathlib import Path

from fund_ledger.backfill import backfill_daily_history
from fund_ledger.config import get_settings
from fund_ledger.core.logging import setup_logging
from fund_ledger.db import Database
from fund_ledger.pricing import InMemoryPriceHistory
from fund_ledger.snapshot import load_snapshot


async def _run(snapshot: str, prices_file: str, today: date) -> None:
    settings = get_settings()
    ledger = load_snapshot(snapshot, settings.default_portfolio_settings())
    history = InMemoryPriceHistory.from_dict(json.loads(Path(prices_file).read_text(encoding="utf-8")))
    database = Database(settings.database_url)
    await database.create_all()
    try:
        async with database.session() as session:
            report = await backfill_daily_history(session, ledger, history, today=today)
    finally:
        await database.dispose()
    print(f"Stored {len(report.written)} days; skipped {len(report.skipped)} without prices")


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill missing daily portfolio values")
    parser.add_argument("--snapshot", default=get_settings().snapshot_path)
    parser.add_argument("--prices", required=True, help="JSON object of YYYY-MM-DD -> {pricing id -> {price, ...}}")
    parser.add_argument("--today", type=date.fromisoformat, default=date.today())
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    asyncio.run(_run(args.snapshot, args.prices, args.today))


if __name__ == "__main__":
    main()
