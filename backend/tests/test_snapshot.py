import json
import logging
from datetime import date

import pytest

from fund_ledger import Buy, Deposit, PortfolioSettings, SpecialCalculation, TokenCategory
from fund_ledger.snapshot import SnapshotError, load_snapshot, parse_snapshot


def _payload():
    return {
        "tokens": [
            {
                "tokenId": "bitcoin",
                "symbol": "BTC",
                "name": "Bitcoin",
                "category": "Btc",
                "preferredAPI": "coingecko",
            },
            {
                "id": "staked-ether",
                "symbol": "STETH",
                "name": "Lido Staked Ether",
                "category": "Eth",
                "cmcSymbol": "STETH",
                "preferredAPI": "coinmarketcap",
                "specialCalculation": "ETH_AMOUNT",
            },
        ],
        "transactions": [
            {"transactionId": "t3", "date": "2025-07-03", "type": "BUY", "tokenSymbol": "BTC", "amount": 0.01, "usdValue": 600},
            {"id": "t1", "date": "2025-07-01", "type": "DEPOSIT", "amount": 1000, "usdValue": 1000, "quotaValueAtTransaction": 1},
            {"id": "t2", "date": "2025-07-03", "type": "BUY", "tokenSymbol": "STETH", "amount": 0.1, "usdValue": 300},
        ],
        "settings": {"baselineTotalValue": 950, "initialQuotaValue": 1},
    }


def test_parse_snapshot_builds_ledger():
    ledger = parse_snapshot(_payload())

    assert [token.symbol for token in ledger.tokens] == ["BTC", "STETH"]
    steth = ledger.tokens[1]
    assert steth.id == "staked-ether"
    assert steth.category is TokenCategory.ETH
    assert steth.special_calculation is SpecialCalculation.ETH_AMOUNT
    assert steth.cmc_symbol == "STETH"

    assert ledger.settings == PortfolioSettings(baseline_total_value=950, initial_quota_value=1)
    first = ledger.transactions[0]
    assert isinstance(first, Deposit)
    assert first.date == date(2025, 7, 1)
    assert first.quota_value_at_transaction == 1


def test_same_day_transactions_keep_recorded_order():
    ledger = parse_snapshot(_payload())
    assert [tx.id for tx in ledger.transactions] == ["t1", "t3", "t2"]
    assert all(isinstance(tx, Buy) for tx in ledger.transactions[1:])


def test_malformed_records_are_skipped_with_a_warning(caplog):
    payload = _payload()
    payload["transactions"].append(
        {"id": "bad-buy", "date": "2025-07-04", "type": "BUY", "amount": 1, "usdValue": 10}
    )
    payload["transactions"].append(
        {"id": "bad-type", "date": "2025-07-04", "type": "STAKE", "amount": 1, "usdValue": 10}
    )
    with caplog.at_level(logging.WARNING, logger="fund_ledger.snapshot"):
        ledger = parse_snapshot(payload)

    assert [tx.id for tx in ledger.transactions] == ["t1", "t3", "t2"]
    warnings = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert any("bad-buy" in message and "missing token symbol" in message for message in warnings)
    assert any("bad-type" in message for message in warnings)


def test_transaction_missing_required_field_is_skipped(caplog):
    payload = _payload()
    del payload["transactions"][0]["usdValue"]
    payload["transactions"].append("not a record")
    with caplog.at_level(logging.WARNING, logger="fund_ledger.snapshot"):
        ledger = parse_snapshot(payload)

    assert [tx.id for tx in ledger.transactions] == ["t1", "t2"]
    warnings = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert any("t3" in message and "index 0" in message for message in warnings)
    assert any("<unknown>" in message and "index 3" in message for message in warnings)


def test_cash_flow_at_non_positive_quota_is_skipped(caplog):
    payload = _payload()
    payload["transactions"].append(
        {"id": "d0", "date": "2025-07-05", "type": "DEPOSIT", "amount": 50, "usdValue": 50, "quotaValueAtTransaction": 0}
    )
    payload["transactions"].append(
        {"id": "w0", "date": "2025-07-05", "type": "WITHDRAW", "amount": 5, "usdValue": 5, "quotaValueAtTransaction": -1}
    )
    with caplog.at_level(logging.WARNING, logger="fund_ledger.snapshot"):
        ledger = parse_snapshot(payload)

    assert [tx.id for tx in ledger.transactions] == ["t1", "t3", "t2"]
    messages = [record.getMessage() for record in caplog.records]
    assert any("d0" in message and "not positive" in message for message in messages)
    assert any("w0" in message and "not positive" in message for message in messages)


def test_invalid_settings_raise():
    payload = _payload()
    payload["settings"] = {"baselineTotalValue": 950, "initialQuotaValue": 0}
    with pytest.raises(SnapshotError):
        parse_snapshot(payload)


def test_duplicate_symbol_raises():
    payload = _payload()
    payload["tokens"].append(dict(payload["tokens"][0], tokenId="wrapped-bitcoin"))
    with pytest.raises(SnapshotError, match="Duplicate token symbol"):
        parse_snapshot(payload)


def test_settings_fallbacks():
    payload = _payload()
    del payload["settings"]
    assert parse_snapshot(payload).settings == PortfolioSettings(baseline_total_value=0.0, initial_quota_value=1.0)

    defaults = PortfolioSettings(baseline_total_value=500.0, initial_quota_value=10.0)
    assert parse_snapshot(payload, defaults).settings == defaults

    payload["baselineTotalValue"] = 1200
    payload["initialQuotaValue"] = 2
    assert parse_snapshot(payload).settings == PortfolioSettings(baseline_total_value=1200, initial_quota_value=2)


def test_load_snapshot_from_file(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(_payload()))
    ledger = load_snapshot(path)
    assert len(ledger.transactions) == 3


def test_load_snapshot_errors(tmp_path):
    with pytest.raises(SnapshotError, match="not found"):
        load_snapshot(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(SnapshotError, match="not valid JSON"):
        load_snapshot(broken)
