"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from rollcall.api.routes import health, participants
from rollcall.core.config import AppSettings
from rollcall.core.logging import setup_logging
from rollcall.importer.coordinator import ImportCoordinator
from rollcall.persistence import create_persistence


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings = app.state.settings or AppSettings()
    setup_logging(settings)
    if app.state.roster_store is None or app.state.file_store is None:
        roster_store, file_store = create_persistence(settings)
        if app.state.roster_store is None:
            app.state.roster_store = roster_store
        if app.state.file_store is None:
            app.state.file_store = file_store
    app.state.settings = settings
    app.state.coordinator = ImportCoordinator(settings=settings, store=app.state.roster_store)
    yield


def create_app(settings: AppSettings | None = None, roster_store=None, file_store=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Stores passed in here replace the ones built from settings.
    """
    app = FastAPI(
        title="Rollcall Participant Roster",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.roster_store = roster_store
    app.state.file_store = file_store
    app.include_router(health.router)
    app.include_router(participants.router, prefix="/participants")
    return app
