"""Pydantic schemas for API payloads."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..models import PreferredAPI, PriceData, SpecialCalculation, TokenCategory


class PriceDataSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price: float = 0.0
    change_24h: Optional[float] = Field(default=None, validation_alias=AliasChoices("change24h", "change_24h"))
    market_cap: Optional[float] = Field(default=None, validation_alias=AliasChoices("marketCap", "market_cap"))
    fdv: Optional[float] = None

    def to_price_data(self) -> PriceData:
        return PriceData(price=self.price, change_24h=self.change_24h, market_cap=self.market_cap, fdv=self.fdv)


def to_price_map(prices: Dict[str, PriceDataSchema]) -> Dict[str, PriceData]:
    return {pricing_id: data.to_price_data() for pricing_id, data in prices.items()}


class ValuationRequest(BaseModel):
    prices: Dict[str, PriceDataSchema] = Field(default_factory=dict)
    as_of: Optional[date] = Field(default=None, description="Replay the ledger up to this day (inclusive)")
    aggregate: bool = Field(default=False, description="Collapse Btc and Eth variants into single rows")


class TokenSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    symbol: str
    name: str
    category: TokenCategory
    preferred_api: PreferredAPI
    cmc_symbol: Optional[str] = None
    special_calculation: Optional[SpecialCalculation] = None


class PortfolioItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: TokenSchema
    amount: float
    current_price: float
    current_value: float
    percentage: float
    performance: float
    cost_basis: float
    change_24h: Optional[float] = None
    market_cap: Optional[float] = None
    fdv: Optional[float] = None


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: TokenCategory
    total_value: float
    percentage: float
    items: List[PortfolioItemSchema]


class SummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_value: float
    baseline_value: float
    total_performance: float
    categories: List[CategorySchema]
    quota_value: float
    initial_quota_value: float
    total_shares: float
    quota_performance: float
    cash_balance: float
    portfolio_value: float
    as_of: Optional[date] = None


class ValuationResponse(BaseModel):
    items: List[PortfolioItemSchema]
    summary: SummarySchema


class FundStateResponse(BaseModel):
    as_of: Optional[date] = None
    total_shares: float
    quota_value: float
    cash_balance: float
    holdings: Dict[str, float]
    cost_basis: Dict[str, float]


class DailyValueSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    portfolio_value: float
    total_shares: float


class HistoryPointSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    portfolio_value: float
    total_shares: float
    share_value: float
    percent_value: float
    percent_share: float


class DailyHistoryResponse(BaseModel):
    rows: List[DailyValueSchema]
    series: List[HistoryPointSchema]


class MissingDatesResponse(BaseModel):
    first_transaction_date: Optional[date] = None
    dates: List[date]


class BackfillRequest(BaseModel):
    prices_by_date: Dict[date, Dict[str, PriceDataSchema]] = Field(default_factory=dict)
    today: Optional[date] = None


class BackfillResponse(BaseModel):
    written: List[DailyValueSchema]
    skipped: List[date]
    stopped: bool = False


class InvalidateResponse(BaseModel):
    from_date: date
    removed: int


class HealthResponse(BaseModel):
    status: str
    service: str
    database_url: Optional[str]
