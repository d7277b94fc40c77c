"""Print the portfolio valuation for a ledger snapshot and a price file."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from fund_ledger.aggregation import aggregate_bitcoin_ethereum_categories
from fund_ledger.config import get_settings
from fund_ledger.core.logging import setup_logging
from fund_ledger.pricing import price_map_from_dict
from fund_ledger.snapshot import load_snapshot
from fund_ledger.valuation import value_portfolio


def _run(snapshot: str, prices_file: str, as_of: str | None, aggregate: bool) -> None:
    settings = get_settings()
    ledger = load_snapshot(snapshot, settings.default_portfolio_settings())
    prices = price_map_from_dict(json.loads(Path(prices_file).read_text(encoding="utf-8")))
    result = value_portfolio(ledger, prices, as_of)
    items = aggregate_bitcoin_ethereum_categories(result.items) if aggregate else result.items

    summary = result.summary
    print(f"As of:            {summary.as_of.isoformat() if summary.as_of else 'latest'}")
    print(f"Total value:      {summary.total_value:,.2f}")
    print(f"Cash balance:     {summary.cash_balance:,.2f}")
    print(f"Portfolio value:  {summary.portfolio_value:,.2f}")
    print(f"Total shares:     {summary.total_shares:,.4f}")
    print(f"Quota value:      {summary.quota_value:,.4f} ({summary.quota_performance:+.2f}%)")
    print(f"Vs baseline:      {summary.total_performance:+.2f}%")
    print()
    for item in items:
        print(
            f"{item.token.symbol:<8} {item.token.category.value:<12} {item.amount:>16,.6f} "
            f"{item.current_value:>14,.2f} {item.percentage:>7.2f}% {item.performance:>+8.2f}%"
        )
    print()
    for category in summary.categories:
        print(f"{category.category.value:<12} {category.total_value:>14,.2f} {category.percentage:>7.2f}%")


def main() -> None:
    parser = argparse.ArgumentParser(description="Value a fund ledger snapshot against a price file")
    parser.add_argument("--snapshot", default=get_settings().snapshot_path)
    parser.add_argument("--prices", required=True, help="JSON object of pricing id -> {price, ...}")
    parser.add_argument("--as-of", default=None, help="Replay the ledger up to this day (YYYY-MM-DD)")
    parser.add_argument("--aggregate", action="store_true", help="Collapse Btc/Eth variants into one row each")
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    _run(args.snapshot, args.prices, args.as_of, args.aggregate)


if __name__ == "__main__":
    main()
