"""Domain models used by the fund accounting engine."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional


class TokenCategory(str, Enum):
    BTC = "Btc"
    ETH = "Eth"
    AI = "AI"
    GAMING_MEME = "Gaming/Meme"
    DEFI = "Defi"
    MICRO = "Micro"
    PRIVACY = "Privacy"


class PreferredAPI(str, Enum):
    COINGECKO = "coingecko"
    COINMARKETCAP = "coinmarketcap"


class SpecialCalculation(str, Enum):
    ETH_AMOUNT = "ETH_AMOUNT"
    BTC_AMOUNT = "BTC_AMOUNT"
    REGULAR = "REGULAR"


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Token:
    """Reference record for a token tracked by the fund.

    ``symbol`` joins transactions to token metadata; ``id`` is the key used
    against the pricing API.
    """

    id: str
    symbol: str
    name: str
    category: TokenCategory
    preferred_api: PreferredAPI = PreferredAPI.COINGECKO
    cmc_symbol: Optional[str] = None
    special_calculation: Optional[SpecialCalculation] = None


@dataclass(frozen=True, kw_only=True)
class Transaction(ABC):
    """Fields shared by every ledger entry; only the four subclasses are instantiable."""

    id: str
    date: date
    amount: float
    usd_value: float
    price_at_transaction: Optional[float] = None

    @property
    @abstractmethod
    def type(self) -> TransactionType:
        ...


@dataclass(frozen=True, kw_only=True)
class Deposit(Transaction):
    """Cash contribution; ``amount`` and ``usd_value`` are USD."""

    quota_value_at_transaction: Optional[float] = None

    @property
    def type(self) -> TransactionType:
        return TransactionType.DEPOSIT


@dataclass(frozen=True, kw_only=True)
class Withdraw(Transaction):
    """Cash redemption; ``amount`` and ``usd_value`` are USD."""

    quota_value_at_transaction: Optional[float] = None

    @property
    def type(self) -> TransactionType:
        return TransactionType.WITHDRAW


@dataclass(frozen=True, kw_only=True)
class Buy(Transaction):
    """Token purchase; ``amount`` is in token units."""

    token_symbol: str

    @property
    def type(self) -> TransactionType:
        return TransactionType.BUY


@dataclass(frozen=True, kw_only=True)
class Sell(Transaction):
    """Token sale; ``amount`` is in token units."""

    token_symbol: str

    @property
    def type(self) -> TransactionType:
        return TransactionType.SELL


@dataclass(frozen=True)
class PortfolioSettings:
    baseline_total_value: float = 0.0
    initial_quota_value: float = 1.0


@dataclass(frozen=True)
class PriceData:
    """Market data for one pricing id."""

    price: float
    change_24h: Optional[float] = None
    market_cap: Optional[float] = None
    fdv: Optional[float] = None


@dataclass(frozen=True)
class FundState:
    """Point-in-time fund state produced by replaying the ledger.

    ``quota_value`` carries the initial quota value baseline; the current
    per-share value is derived during valuation. Shares, cash and holdings
    are signed and never clamped.
    """

    total_shares: float
    quota_value: float
    cash_balance: float
    holdings: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class LedgerState:
    """Fund state and cost basis produced by a single pass over the ledger.

    ``fund_state.holdings`` follows raw ledger arithmetic and can go negative
    when sells exceed buys. ``cost_basis`` clamps each sell to the amount the
    tracker holds, so it never drops below zero.
    """

    fund_state: FundState
    cost_basis: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PortfolioItem:
    token: Token
    amount: float
    current_price: float
    current_value: float
    percentage: float
    performance: float
    cost_basis: float
    change_24h: Optional[float] = None
    market_cap: Optional[float] = None
    fdv: Optional[float] = None


@dataclass(frozen=True)
class CategoryBreakdown:
    category: TokenCategory
    total_value: float
    percentage: float
    items: List[PortfolioItem] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioSummary:
    """Fund-level metrics for one valuation request."""

    total_value: float
    baseline_value: float
    total_performance: float
    categories: List[CategoryBreakdown]
    quota_value: float
    initial_quota_value: float
    total_shares: float
    quota_performance: float
    cash_balance: float
    portfolio_value: float
    as_of: Optional[date] = None


@dataclass(frozen=True)
class PortfolioValuation:
    items: List[PortfolioItem]
    summary: PortfolioSummary


@dataclass(frozen=True)
class Ledger:
    """Token registry, ordered transactions and settings of one fund."""

    tokens: List[Token]
    transactions: List[Transaction]
    settings: PortfolioSettings = field(default_factory=PortfolioSettings)

    def token_by_symbol(self) -> Dict[str, Token]:
        return {token.symbol: token for token in self.tokens}


@dataclass(frozen=True)
class DailyValue:
    """Cash-inclusive portfolio value and shares outstanding for one day."""

    date: date
    portfolio_value: float
    total_shares: float


@dataclass(frozen=True)
class HistoryPoint:
    date: date
    portfolio_value: float
    total_shares: float
    share_value: float
    percent_value: float
    percent_share: float
