"""Entrypoint for the fund ledger FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from ..config import get_settings
from ..core.logging import setup_logging
from ..db import Database
from ..snapshot import load_snapshot
from .routes import LedgerLoader, get_portfolio_router
from .schemas import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database):
    await db.create_all()
    yield
    await db.dispose()


def _snapshot_loader() -> LedgerLoader:
    settings = get_settings()

    def _load():
        return load_snapshot(settings.snapshot_path, settings.default_portfolio_settings())

    return _load


def create_app(db: Database | None = None, ledger_loader: LedgerLoader | None = None) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    database_instance = db or Database(settings.database_url)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(get_portfolio_router(database_instance, ledger_loader or _snapshot_loader()))
    logger.info("Fund ledger configuration: %s", settings.dict_for_logging())

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            service="fund-ledger",
            database_url=make_url(database_instance.url).render_as_string(hide_password=True),
        )

    return app


app = create_app()
