"""Load a fund ledger snapshot (tokens, transactions, settings) from JSON.

The snapshot is the seeding format of the fund: a single document with a
``tokens`` list, a ``transactions`` list and a ``settings`` object. Keys are
camelCase; tokens may use ``id`` or ``tokenId`` and transactions ``id`` or
``transactionId``. Settings may also appear as top-level
``baselineTotalValue`` / ``initialQuotaValue`` keys.

Document-level problems (an invalid token or settings record, a duplicate
token symbol) raise :class:`SnapshotError`. A transaction that cannot be
applied, such as one missing a required field, a BUY without a token symbol
or a DEPOSIT at a non-positive quota, is skipped with a warning so the rest
of the ledger still loads.
"""
from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .models import (
    Buy,
    Deposit,
    Ledger,
    PortfolioSettings,
    PreferredAPI,
    Sell,
    SpecialCalculation,
    Token,
    TokenCategory,
    Transaction,
    TransactionType,
    Withdraw,
)

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a ledger snapshot cannot be loaded."""


class TokenRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_id: str = Field(validation_alias=AliasChoices("tokenId", "id", "token_id"), min_length=1)
    symbol: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: TokenCategory
    cmc_symbol: Optional[str] = Field(default=None, validation_alias=AliasChoices("cmcSymbol", "cmc_symbol"))
    preferred_api: PreferredAPI = Field(validation_alias=AliasChoices("preferredAPI", "preferred_api"))
    special_calculation: Optional[SpecialCalculation] = Field(
        default=None, validation_alias=AliasChoices("specialCalculation", "special_calculation")
    )

    def to_token(self) -> Token:
        return Token(
            id=self.token_id,
            symbol=self.symbol,
            name=self.name,
            category=self.category,
            preferred_api=self.preferred_api,
            cmc_symbol=self.cmc_symbol,
            special_calculation=self.special_calculation,
        )


class TransactionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str = Field(
        validation_alias=AliasChoices("transactionId", "id", "transaction_id"), min_length=1
    )
    date: datetime.date
    type: str
    token_symbol: Optional[str] = Field(default=None, validation_alias=AliasChoices("tokenSymbol", "token_symbol"))
    amount: float
    price_at_transaction: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("priceAtTransaction", "price_at_transaction")
    )
    quota_value_at_transaction: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("quotaValueAtTransaction", "quota_value_at_transaction")
    )
    usd_value: float = Field(validation_alias=AliasChoices("usdValue", "usd_value"))

    def to_transaction(self) -> Optional[Transaction]:
        """Return the ledger entry for this record, or ``None`` when it cannot be applied."""

        try:
            tx_type = TransactionType(self.type.upper())
        except ValueError:
            logger.warning("Skipping transaction %s: unknown type %r", self.transaction_id, self.type)
            return None

        common = dict(
            id=self.transaction_id,
            date=self.date,
            amount=self.amount,
            usd_value=self.usd_value,
            price_at_transaction=self.price_at_transaction,
        )
        if tx_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAW) and (
            self.quota_value_at_transaction is not None and self.quota_value_at_transaction <= 0
        ):
            logger.warning(
                "Skipping %s transaction %s: quota value %s is not positive",
                tx_type.value,
                self.transaction_id,
                self.quota_value_at_transaction,
            )
            return None
        if tx_type is TransactionType.DEPOSIT:
            return Deposit(quota_value_at_transaction=self.quota_value_at_transaction, **common)
        if tx_type is TransactionType.WITHDRAW:
            return Withdraw(quota_value_at_transaction=self.quota_value_at_transaction, **common)
        if not self.token_symbol:
            logger.warning(
                "Skipping %s transaction %s: missing token symbol", tx_type.value, self.transaction_id
            )
            return None
        if tx_type is TransactionType.BUY:
            return Buy(token_symbol=self.token_symbol, **common)
        return Sell(token_symbol=self.token_symbol, **common)


class SettingsRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    baseline_total_value: float = Field(
        default=0.0,
        validation_alias=AliasChoices("baselineTotalValue", "baseline_total_value")
    )
    initial_quota_value: float = Field(
        default=1.0, validation_alias=AliasChoices("initialQuotaValue", "initial_quota_value"), gt=0
    )

    def to_settings(self) -> PortfolioSettings:
        return PortfolioSettings(
            baseline_total_value=self.baseline_total_value,
            initial_quota_value=self.initial_quota_value,
        )


def sort_transactions(transactions: List[Transaction]) -> List[Transaction]:
    """Order by date; same-day entries keep their recorded order."""

    return sorted(transactions, key=lambda tx: tx.date)


def _read_transactions(items: List[Any]) -> List[Transaction]:
    """Validate each record on its own; an invalid record is skipped with a warning."""

    transactions: List[Transaction] = []
    for index, item in enumerate(items):
        try:
            record = TransactionRecord.model_validate(item)
        except ValidationError as exc:
            label = (item.get("transactionId") or item.get("id")) if isinstance(item, dict) else None
            logger.warning(
                "Skipping transaction %s at index %d: %d validation error(s): %s",
                label or "<unknown>",
                index,
                exc.error_count(),
                exc.errors(include_url=False),
            )
            continue
        tx = record.to_transaction()
        if tx is not None:
            transactions.append(tx)
    return transactions


def _settings_payload(payload: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    if payload.get("settings") is not None:
        return payload["settings"]
    if "baselineTotalValue" in payload or "initialQuotaValue" in payload:
        return {key: payload[key] for key in ("baselineTotalValue", "initialQuotaValue") if key in payload}
    return None


def parse_snapshot(payload: Mapping[str, Any], default_settings: PortfolioSettings | None = None) -> Ledger:
    """Build a :class:`Ledger` from a decoded snapshot document."""

    try:
        token_records = [TokenRecord.model_validate(item) for item in payload.get("tokens") or []]
        settings_payload = _settings_payload(payload)
        settings_record = SettingsRecord.model_validate(settings_payload) if settings_payload else None
    except ValidationError as exc:
        raise SnapshotError(f"Invalid portfolio snapshot: {exc}") from exc

    tokens = [record.to_token() for record in token_records]
    seen: set[str] = set()
    for token in tokens:
        if token.symbol in seen:
            raise SnapshotError(f"Duplicate token symbol in snapshot: {token.symbol}")
        seen.add(token.symbol)

    raw_transactions = payload.get("transactions") or []
    transactions = _read_transactions(raw_transactions)
    if settings_record is not None:
        settings = settings_record.to_settings()
    else:
        settings = default_settings or PortfolioSettings()

    logger.info(
        "Loaded snapshot with %d tokens and %d transactions (%d skipped)",
        len(tokens),
        len(transactions),
        len(raw_transactions) - len(transactions),
    )
    return Ledger(tokens=tokens, transactions=sort_transactions(transactions), settings=settings)


def load_snapshot(path: str | Path, default_settings: PortfolioSettings | None = None) -> Ledger:
    """Read and parse the snapshot file at ``path``."""

    snapshot_path = Path(path)
    if not snapshot_path.exists():
        raise SnapshotError(f"Snapshot file not found: {snapshot_path}")
    try:
        payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot file {snapshot_path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise SnapshotError(f"Snapshot file {snapshot_path} must contain a JSON object")
    return parse_snapshot(payload, default_settings)


__all__ = [
    "SnapshotError",
    "TokenRecord",
    "TransactionRecord",
    "SettingsRecord",
    "sort_transactions",
    "parse_snapshot",
    "load_snapshot",
]
