"""Grouping of valued holdings for tables and charts."""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Sequence

from .metrics import calculate_percentages, calculate_performance, share_of
from .models import CategoryBreakdown, PortfolioItem, SpecialCalculation, TokenCategory

_MERGED_ROWS = (
    (TokenCategory.BTC, "BTC", "Bitcoin (Aggregated)", SpecialCalculation.BTC_AMOUNT),
    (TokenCategory.ETH, "ETH", "Ethereum (Aggregated)", SpecialCalculation.ETH_AMOUNT),
)


def aggregate_by_category(items: Sequence[PortfolioItem]) -> List[CategoryBreakdown]:
    """Group ``items`` by token category in first-seen order."""

    grouped: Dict[TokenCategory, List[PortfolioItem]] = {}
    for item in items:
        grouped.setdefault(item.token.category, []).append(item)

    grand_total = sum(item.current_value for item in items)
    breakdown: List[CategoryBreakdown] = []
    for category, members in grouped.items():
        category_total = sum(item.current_value for item in members)
        breakdown.append(
            CategoryBreakdown(
                category=category,
                total_value=category_total,
                percentage=share_of(category_total, grand_total),
                items=members,
            )
        )
    return breakdown


def _merge(
    members: Sequence[PortfolioItem], symbol: str, name: str, special: SpecialCalculation
) -> PortfolioItem:
    template = members[0]
    total_value = sum(item.current_value for item in members)
    total_cost = sum(item.cost_basis for item in members)
    # Price and 24h change come from the first constituent, not a weighted average.
    return replace(
        template,
        token=replace(template.token, symbol=symbol, name=name, special_calculation=special),
        amount=sum(item.amount for item in members),
        current_value=total_value,
        cost_basis=total_cost,
        performance=calculate_performance(total_value, total_cost),
        percentage=0.0,
    )


def aggregate_bitcoin_ethereum_categories(items: Sequence[PortfolioItem]) -> List[PortfolioItem]:
    """Collapse Btc and Eth category variants into one row each.

    Merged rows come first (BTC, then ETH), followed by every other item
    unchanged; percentages are recomputed over the combined rows. Only
    defined on rows that have not been aggregated already.
    """

    special = {category for category, *_ in _MERGED_ROWS}
    rows: List[PortfolioItem] = []
    for category, symbol, name, calculation in _MERGED_ROWS:
        members = [item for item in items if item.token.category == category]
        if members:
            rows.append(_merge(members, symbol, name, calculation))
    rows.extend(item for item in items if item.token.category not in special)
    return calculate_percentages(rows)


__all__ = ["aggregate_by_category", "aggregate_bitcoin_ethereum_categories"]
