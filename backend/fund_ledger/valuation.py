"""Valuation of a replayed fund against a price snapshot."""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Mapping, Sequence

from .aggregation import aggregate_by_category
from .ledger import coerce_date, replay_ledger
from .metrics import (
    calculate_percentages,
    calculate_performance,
    calculate_quota_performance,
    calculate_quota_value,
    calculate_total_performance,
)
from .models import (
    FundState,
    Ledger,
    PortfolioItem,
    PortfolioSettings,
    PortfolioSummary,
    PortfolioValuation,
    SpecialCalculation,
    Token,
)
from .pricing import PriceMap, price_of, pricing_id_for

logger = logging.getLogger(__name__)


def token_value(token: Token, amount: float, prices: PriceMap) -> float:
    """Return the USD value of ``amount`` units of ``token``.

    ETH_AMOUNT and BTC_AMOUNT tokens track the ``ethereum`` / ``bitcoin``
    price instead of their own.
    """

    pricing_id = pricing_id_for(token)
    if pricing_id not in prices and token.special_calculation in (
        SpecialCalculation.ETH_AMOUNT,
        SpecialCalculation.BTC_AMOUNT,
    ):
        logger.warning(
            "No %s price available to value %s (%s); valuing at 0",
            pricing_id,
            token.symbol,
            token.special_calculation.value,
        )
    return amount * price_of(prices, pricing_id)


def create_portfolio_item(token: Token, amount: float, cost: float, prices: PriceMap) -> PortfolioItem:
    """Value one holding; ``percentage`` is filled in once every item is valued."""

    # Special tokens report the reference asset's price, 24h change, market cap
    # and fdv, not the figures quoted under their own id.
    pricing_id = pricing_id_for(token)
    current_value = token_value(token, amount, prices)
    price_data = prices.get(pricing_id)
    return PortfolioItem(
        token=token,
        amount=amount,
        current_price=price_of(prices, pricing_id),
        current_value=current_value,
        percentage=0.0,
        performance=calculate_performance(current_value, cost),
        cost_basis=cost,
        change_24h=price_data.change_24h if price_data else None,
        market_cap=price_data.market_cap if price_data else None,
        fdv=price_data.fdv if price_data else None,
    )


def build_portfolio_items(
    fund_state: FundState,
    cost_basis: Mapping[str, float],
    prices: PriceMap,
    tokens: Iterable[Token],
) -> List[PortfolioItem]:
    """Return one item per registry token with a non-zero holding, in registry order."""

    items: List[PortfolioItem] = []
    for token in tokens:
        amount = fund_state.holdings.get(token.symbol, 0.0)
        if amount == 0:
            continue
        items.append(create_portfolio_item(token, amount, cost_basis.get(token.symbol, 0.0), prices))
    return calculate_percentages(items)


def calculate_portfolio_value(fund_state: FundState, prices: PriceMap, tokens: Sequence[Token]) -> float:
    """Cash balance plus the value of every holding with a registry entry."""

    registry = {token.symbol: token for token in tokens}
    total = fund_state.cash_balance
    for symbol, amount in fund_state.holdings.items():
        token = registry.get(symbol)
        if token is None:
            logger.warning("Holding %s has no token metadata; excluded from portfolio value", symbol)
            continue
        total += token_value(token, amount, prices)
    return total


def summarize(
    items: Sequence[PortfolioItem],
    fund_state: FundState,
    settings: PortfolioSettings,
    *,
    portfolio_value: float,
    as_of: date | None = None,
) -> PortfolioSummary:
    """Fund-level metrics over valued items.

    ``total_value`` is the sum of item values and excludes cash;
    ``portfolio_value`` is the cash-inclusive figure stored in daily history.
    """

    total_value = sum(item.current_value for item in items)
    initial = settings.initial_quota_value
    quota_value = calculate_quota_value(total_value, fund_state.total_shares, initial)
    return PortfolioSummary(
        total_value=total_value,
        baseline_value=settings.baseline_total_value,
        total_performance=calculate_total_performance(total_value, settings.baseline_total_value),
        categories=aggregate_by_category(items),
        quota_value=quota_value,
        initial_quota_value=initial,
        total_shares=fund_state.total_shares,
        quota_performance=calculate_quota_performance(quota_value, initial),
        cash_balance=fund_state.cash_balance,
        portfolio_value=portfolio_value,
        as_of=as_of,
    )


def value_portfolio(
    ledger: Ledger,
    prices: PriceMap,
    as_of: date | str | None = None,
) -> PortfolioValuation:
    """Replay ``ledger`` up to ``as_of`` and value it with ``prices``."""

    cutoff = coerce_date(as_of)
    settings = ledger.settings
    state = replay_ledger(ledger.transactions, cutoff, settings.initial_quota_value)
    items = build_portfolio_items(state.fund_state, state.cost_basis, prices, ledger.tokens)
    summary = summarize(
        items,
        state.fund_state,
        settings,
        portfolio_value=calculate_portfolio_value(state.fund_state, prices, ledger.tokens),
        as_of=cutoff,
    )
    return PortfolioValuation(items=items, summary=summary)


__all__ = [
    "token_value",
    "create_portfolio_item",
    "build_portfolio_items",
    "calculate_portfolio_value",
    "summarize",
    "value_portfolio",
]
