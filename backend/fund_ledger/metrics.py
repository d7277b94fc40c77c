"""Ratio helpers shared by valuation and aggregation.

Every ratio has a defined fallback for a zero denominator so a partially
funded or empty portfolio still produces a summary.
"""
from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from .models import PortfolioItem


def calculate_performance(current_value: float, cost: float) -> float:
    """Percentage gain of ``current_value`` over ``cost``; 0 when there is no cost."""

    if cost == 0:
        return 0.0
    return (current_value - cost) / cost * 100


def calculate_quota_value(total_value: float, total_shares: float, initial_quota_value: float = 1.0) -> float:
    if total_shares == 0:
        return initial_quota_value
    return total_value / total_shares


def calculate_quota_performance(quota_value: float, initial_quota_value: float = 1.0) -> float:
    if initial_quota_value == 0:
        return 0.0
    return (quota_value - initial_quota_value) / initial_quota_value * 100


def calculate_total_performance(total_value: float, baseline_value: float) -> float:
    return calculate_performance(total_value, baseline_value)


def share_of(value: float, total: float) -> float:
    if total == 0:
        return 0.0
    return value / total * 100


def calculate_percentages(items: Sequence[PortfolioItem]) -> List[PortfolioItem]:
    """Return copies of ``items`` with ``percentage`` set against their combined value."""

    total_value = sum(item.current_value for item in items)
    return [replace(item, percentage=share_of(item.current_value, total_value)) for item in items]


__all__ = [
    "calculate_performance",
    "calculate_quota_value",
    "calculate_quota_performance",
    "calculate_total_performance",
    "share_of",
    "calculate_percentages",
]
