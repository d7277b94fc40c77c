"""Portfolio valuation and daily history routes."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..aggregation import aggregate_bitcoin_ethereum_categories
from ..backfill import backfill_daily_history
from ..db import Database, delete_daily_from, list_daily, stored_dates
from ..history import first_transaction_date, history_series, missing_dates
from ..ledger import replay_ledger
from ..models import Ledger
from ..pricing import InMemoryPriceHistory
from ..snapshot import SnapshotError
from ..valuation import value_portfolio
from .schemas import (
    BackfillRequest,
    BackfillResponse,
    DailyHistoryResponse,
    DailyValueSchema,
    FundStateResponse,
    HistoryPointSchema,
    InvalidateResponse,
    MissingDatesResponse,
    PortfolioItemSchema,
    SummarySchema,
    ValuationRequest,
    ValuationResponse,
    to_price_map,
)

logger = logging.getLogger(__name__)

LedgerLoader = Callable[[], Ledger]


def get_portfolio_router(database: Database, ledger_loader: LedgerLoader) -> APIRouter:
    router = APIRouter(prefix="/portfolio", tags=["portfolio"])

    def current_ledger() -> Ledger:
        try:
            return ledger_loader()
        except SnapshotError as exc:
            logger.warning("Portfolio snapshot unavailable: %s", exc)
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    @router.post("/valuation", response_model=ValuationResponse)
    async def valuation(payload: ValuationRequest, ledger: Ledger = Depends(current_ledger)) -> ValuationResponse:
        result = value_portfolio(ledger, to_price_map(payload.prices), payload.as_of)
        items = aggregate_bitcoin_ethereum_categories(result.items) if payload.aggregate else result.items
        return ValuationResponse(
            items=[PortfolioItemSchema.model_validate(item) for item in items],
            summary=SummarySchema.model_validate(result.summary),
        )

    @router.get("/fund-state", response_model=FundStateResponse)
    async def fund_state(
        as_of: date | None = Query(default=None),
        ledger: Ledger = Depends(current_ledger),
    ) -> FundStateResponse:
        state = replay_ledger(ledger.transactions, as_of, ledger.settings.initial_quota_value)
        return FundStateResponse(
            as_of=as_of,
            total_shares=state.fund_state.total_shares,
            quota_value=state.fund_state.quota_value,
            cash_balance=state.fund_state.cash_balance,
            holdings=state.fund_state.holdings,
            cost_basis=state.cost_basis,
        )

    @router.get("/daily", response_model=DailyHistoryResponse)
    async def daily_history(
        start: date | None = Query(default=None),
        end: date | None = Query(default=None),
        session: AsyncSession = Depends(database.get_session),
    ) -> DailyHistoryResponse:
        rows = await list_daily(session, start=start, end=end)
        return DailyHistoryResponse(
            rows=[DailyValueSchema.model_validate(row) for row in rows],
            series=[HistoryPointSchema.model_validate(point) for point in history_series(rows)],
        )

    @router.get("/daily/missing", response_model=MissingDatesResponse)
    async def daily_missing(
        today: date | None = Query(default=None),
        ledger: Ledger = Depends(current_ledger),
        session: AsyncSession = Depends(database.get_session),
    ) -> MissingDatesResponse:
        end = today or date.today()
        start = first_transaction_date(ledger.transactions)
        existing = await stored_dates(session, start=start, end=end) if start else set()
        return MissingDatesResponse(
            first_transaction_date=start,
            dates=missing_dates(ledger.transactions, existing, end),
        )

    @router.post("/daily/backfill", response_model=BackfillResponse)
    async def daily_backfill(
        payload: BackfillRequest,
        ledger: Ledger = Depends(current_ledger),
        session: AsyncSession = Depends(database.get_session),
    ) -> BackfillResponse:
        history = InMemoryPriceHistory(
            prices={day: to_price_map(prices) for day, prices in payload.prices_by_date.items()}
        )
        report = await backfill_daily_history(session, ledger, history, today=payload.today or date.today())
        return BackfillResponse(
            written=[DailyValueSchema.model_validate(row) for row in report.written],
            skipped=report.skipped,
            stopped=report.stopped,
        )

    @router.delete("/daily", response_model=InvalidateResponse)
    async def daily_invalidate(
        from_date: date = Query(...),
        session: AsyncSession = Depends(database.get_session),
    ) -> InvalidateResponse:
        removed = await delete_daily_from(session, from_date)
        return InvalidateResponse(from_date=from_date, removed=removed)

    return router


__all__ = ["LedgerLoader", "get_portfolio_router"]
