"""Fund accounting engine for a pooled crypto portfolio."""

from .aggregation import aggregate_bitcoin_ethereum_categories, aggregate_by_category
from .ledger import cost_basis, filter_transactions_by_date, replay, replay_ledger
from .models import (
    Buy,
    CategoryBreakdown,
    DailyValue,
    Deposit,
    FundState,
    Ledger,
    LedgerState,
    PortfolioItem,
    PortfolioSettings,
    PortfolioSummary,
    PortfolioValuation,
    PriceData,
    Sell,
    SpecialCalculation,
    Token,
    TokenCategory,
    Transaction,
    TransactionType,
    Withdraw,
)
from .valuation import build_portfolio_items, calculate_portfolio_value, value_portfolio

__all__ = [
    "Token",
    "TokenCategory",
    "SpecialCalculation",
    "Transaction",
    "TransactionType",
    "Deposit",
    "Withdraw",
    "Buy",
    "Sell",
    "FundState",
    "LedgerState",
    "Ledger",
    "PortfolioSettings",
    "PriceData",
    "PortfolioItem",
    "CategoryBreakdown",
    "PortfolioSummary",
    "PortfolioValuation",
    "DailyValue",
    "replay",
    "replay_ledger",
    "cost_basis",
    "filter_transactions_by_date",
    "build_portfolio_items",
    "calculate_portfolio_value",
    "value_portfolio",
    "aggregate_by_category",
    "aggregate_bitcoin_ethereum_categories",
]
