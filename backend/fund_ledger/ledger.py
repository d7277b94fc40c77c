"""Ledger replay: fund state and weighted-average cost basis."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence

from .models import Buy, Deposit, FundState, LedgerState, Sell, Transaction, Withdraw

logger = logging.getLogger(__name__)


def coerce_date(value: date | str | None) -> date | None:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""

    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def filter_transactions_by_date(
    transactions: Sequence[Transaction], cutoff: date | str | None = None
) -> List[Transaction]:
    """Return the transactions dated on or before ``cutoff`` in their original order."""

    cutoff_date = coerce_date(cutoff)
    if cutoff_date is None:
        return list(transactions)
    return [tx for tx in transactions if tx.date <= cutoff_date]


def shares_for_amount(usd_amount: float, quota_value: float) -> float:
    """Shares issued or redeemed for a USD amount at ``quota_value``; 0 when the quota is not positive."""

    if quota_value <= 0:
        return 0.0
    return usd_amount / quota_value


@dataclass
class _Accumulator:
    """Running totals for one pass over the ledger."""

    initial_quota_value: float
    total_shares: float = 0.0
    cash_balance: float = 0.0
    holdings: Dict[str, float] = field(default_factory=dict)
    cost: Dict[str, float] = field(default_factory=dict)
    # Amount backing ``cost``; sells are clamped to it, unlike ``holdings``.
    tracked_amount: Dict[str, float] = field(default_factory=dict)

    def apply(self, tx: Transaction) -> None:
        if isinstance(tx, Deposit):
            quota = self._quota_for(tx)
            self.total_shares += shares_for_amount(tx.usd_value, quota)
            self.cash_balance += tx.usd_value
        elif isinstance(tx, Withdraw):
            quota = self._quota_for(tx)
            self.total_shares -= shares_for_amount(tx.usd_value, quota)
            self.cash_balance -= tx.usd_value
        elif isinstance(tx, Buy):
            symbol = tx.token_symbol
            self.cash_balance -= tx.usd_value
            self.holdings[symbol] = self.holdings.get(symbol, 0.0) + tx.amount
            self.cost[symbol] = self.cost.get(symbol, 0.0) + tx.usd_value
            self.tracked_amount[symbol] = self.tracked_amount.get(symbol, 0.0) + tx.amount
        elif isinstance(tx, Sell):
            symbol = tx.token_symbol
            self.cash_balance += tx.usd_value
            self.holdings[symbol] = self.holdings.get(symbol, 0.0) - tx.amount
            if self.holdings[symbol] < 0:
                logger.debug(
                    "Holding for %s is negative (%s) after transaction %s",
                    symbol,
                    self.holdings[symbol],
                    tx.id,
                )
            self._reduce_cost(symbol, tx.amount)
        else:
            logger.warning("Skipping transaction %s with unsupported type %r", tx.id, type(tx).__name__)

    def _quota_for(self, tx: Deposit | Withdraw) -> float:
        quota = tx.quota_value_at_transaction
        if quota is None:
            return self.initial_quota_value
        if quota <= 0:
            logger.warning(
                "Transaction %s has quota value %s; using initial quota value %s",
                tx.id,
                quota,
                self.initial_quota_value,
            )
            return self.initial_quota_value
        return quota

    def _reduce_cost(self, symbol: str, amount: float) -> None:
        held = self.tracked_amount.get(symbol, 0.0)
        if held <= 0:
            return
        current_cost = self.cost.get(symbol, 0.0)
        average_cost = current_cost / held
        sold = min(amount, held)
        self.cost[symbol] = max(0.0, current_cost - average_cost * sold)
        self.tracked_amount[symbol] = held - sold

    def fund_state(self) -> FundState:
        return FundState(
            total_shares=self.total_shares,
            quota_value=self.initial_quota_value,
            cash_balance=self.cash_balance,
            holdings=dict(self.holdings),
        )


def replay_ledger(
    transactions: Sequence[Transaction],
    cutoff: date | str | None = None,
    initial_quota_value: float = 1.0,
) -> LedgerState:
    """Fold the ledger into fund state and cost basis in a single pass.

    Transactions are applied in the order given; callers supply them sorted
    by date with a stable order for same-day entries. With ``cutoff`` only
    transactions dated on or before that day are applied.
    """

    acc = _Accumulator(initial_quota_value=initial_quota_value)
    for tx in filter_transactions_by_date(transactions, cutoff):
        acc.apply(tx)
    return LedgerState(fund_state=acc.fund_state(), cost_basis=dict(acc.cost))


def replay(
    transactions: Sequence[Transaction],
    cutoff: date | str | None = None,
    initial_quota_value: float = 1.0,
) -> FundState:
    """Return shares outstanding, cash balance and holdings as of ``cutoff``."""

    return replay_ledger(transactions, cutoff, initial_quota_value).fund_state


def cost_basis(
    transactions: Sequence[Transaction], cutoff: date | str | None = None
) -> Dict[str, float]:
    """Return the weighted-average USD cost basis per symbol as of ``cutoff``."""

    return replay_ledger(transactions, cutoff).cost_basis


__all__ = [
    "coerce_date",
    "filter_transactions_by_date",
    "replay_ledger",
    "replay",
    "cost_basis",
    "shares_for_amount",
]
