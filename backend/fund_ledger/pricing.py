"""Price lookup helpers."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import PriceData, SpecialCalculation, Token

ETHEREUM_PRICE_ID = "ethereum"
BITCOIN_PRICE_ID = "bitcoin"

PriceMap = Mapping[str, PriceData]


def pricing_id_for(token: Token) -> str:
    """Return the pricing id whose price values ``token``."""

    if token.special_calculation == SpecialCalculation.ETH_AMOUNT:
        return ETHEREUM_PRICE_ID
    if token.special_calculation == SpecialCalculation.BTC_AMOUNT:
        return BITCOIN_PRICE_ID
    return token.id


def pricing_ids(tokens: Iterable[Token]) -> List[str]:
    """Return the unique pricing ids needed to value ``tokens``, in first-seen order."""

    ids: Dict[str, None] = {}
    for token in tokens:
        ids.setdefault(pricing_id_for(token), None)
    return list(ids)


def price_of(prices: PriceMap, pricing_id: str) -> float:
    """Return the USD price for ``pricing_id``; missing data prices at zero."""

    data = prices.get(pricing_id)
    if data is None:
        return 0.0
    return data.price


def price_data_from_dict(payload: Mapping[str, Any]) -> PriceData:
    """Build ``PriceData`` from a camelCase or snake_case JSON object."""

    def _pick(*keys: str) -> Optional[float]:
        for key in keys:
            if payload.get(key) is not None:
                return float(payload[key])
        return None

    return PriceData(
        price=_pick("price") or 0.0,
        change_24h=_pick("change24h", "change_24h"),
        market_cap=_pick("marketCap", "market_cap"),
        fdv=_pick("fdv"),
    )


def price_map_from_dict(payload: Mapping[str, Any]) -> Dict[str, PriceData]:
    """Parse ``{pricing_id: {price, ...}}``; bare numbers are accepted as prices."""

    prices: Dict[str, PriceData] = {}
    for pricing_id, value in payload.items():
        if isinstance(value, Mapping):
            prices[pricing_id] = price_data_from_dict(value)
        else:
            prices[pricing_id] = PriceData(price=float(value))
    return prices


@dataclass
class InMemoryPriceHistory:
    """Dated price maps, keyed by calendar day."""

    prices: Dict[date, Dict[str, PriceData]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Mapping[str, Any]]) -> "InMemoryPriceHistory":
        return cls(
            prices={date.fromisoformat(day): price_map_from_dict(values) for day, values in payload.items()}
        )

    async def prices_for(self, day: date, ids: Iterable[str]) -> Dict[str, PriceData]:
        """Return the prices known for ``day`` restricted to ``ids``."""

        known = self.prices.get(day, {})
        return {pricing_id: known[pricing_id] for pricing_id in ids if pricing_id in known}


__all__ = [
    "ETHEREUM_PRICE_ID",
    "BITCOIN_PRICE_ID",
    "PriceMap",
    "pricing_id_for",
    "pricing_ids",
    "price_of",
    "price_data_from_dict",
    "price_map_from_dict",
    "InMemoryPriceHistory",
]
