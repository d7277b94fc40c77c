from datetime import date

import pytest

from fund_ledger import Buy, Deposit, Sell, Withdraw, cost_basis


def test_weighted_average_cost_after_partial_sell():
    transactions = [
        Buy(id="b1", date=date(2025, 1, 1), token_symbol="TOK", amount=2.0, usd_value=200.0),
        Sell(id="s1", date=date(2025, 1, 5), token_symbol="TOK", amount=1.0, usd_value=150.0),
    ]
    assert cost_basis(transactions) == {"TOK": pytest.approx(100)}


def test_average_cost_blends_multiple_buys():
    transactions = [
        Buy(id="b1", date=date(2025, 1, 1), token_symbol="TOK", amount=1.0, usd_value=100.0),
        Buy(id="b2", date=date(2025, 1, 2), token_symbol="TOK", amount=3.0, usd_value=500.0),
        Sell(id="s1", date=date(2025, 1, 3), token_symbol="TOK", amount=2.0, usd_value=10.0),
    ]
    # average 150 per unit; two units left
    assert cost_basis(transactions)["TOK"] == pytest.approx(300)


def test_sell_beyond_tracked_amount_floors_at_zero():
    transactions = [
        Buy(id="b1", date=date(2025, 1, 1), token_symbol="TOK", amount=1.0, usd_value=100.0),
        Sell(id="s1", date=date(2025, 1, 2), token_symbol="TOK", amount=5.0, usd_value=600.0),
        Sell(id="s2", date=date(2025, 1, 3), token_symbol="TOK", amount=1.0, usd_value=100.0),
    ]
    assert cost_basis(transactions)["TOK"] == 0


def test_buy_after_full_exit_starts_fresh():
    transactions = [
        Buy(id="b1", date=date(2025, 1, 1), token_symbol="TOK", amount=1.0, usd_value=100.0),
        Sell(id="s1", date=date(2025, 1, 2), token_symbol="TOK", amount=2.0, usd_value=250.0),
        Buy(id="b2", date=date(2025, 1, 3), token_symbol="TOK", amount=4.0, usd_value=40.0),
        Sell(id="s2", date=date(2025, 1, 4), token_symbol="TOK", amount=1.0, usd_value=12.0),
    ]
    assert cost_basis(transactions)["TOK"] == pytest.approx(30)


def test_sell_without_prior_buy_is_ignored():
    transactions = [Sell(id="s1", date=date(2025, 1, 1), token_symbol="TOK", amount=1.0, usd_value=50.0)]
    assert cost_basis(transactions) == {}


def test_cash_flows_do_not_touch_cost_basis():
    transactions = [
        Deposit(id="d1", date=date(2025, 1, 1), amount=1000.0, usd_value=1000.0),
        Buy(id="b1", date=date(2025, 1, 2), token_symbol="TOK", amount=1.0, usd_value=100.0),
        Withdraw(id="w1", date=date(2025, 1, 3), amount=500.0, usd_value=500.0),
    ]
    assert cost_basis(transactions) == {"TOK": pytest.approx(100)}


def test_cutoff_applies_to_cost_basis():
    transactions = [
        Buy(id="b1", date=date(2025, 1, 1), token_symbol="TOK", amount=2.0, usd_value=200.0),
        Sell(id="s1", date=date(2025, 1, 5), token_symbol="TOK", amount=1.0, usd_value=150.0),
    ]
    assert cost_basis(transactions, date(2025, 1, 4)) == {"TOK": pytest.approx(200)}
    assert cost_basis(transactions, "2025-01-05") == {"TOK": pytest.approx(100)}
