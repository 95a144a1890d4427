"""
Dashboard Kernel API — FastAPI endpoints.

Exposes the dashboard's display boundary over HTTP:
- Current dashboard state (metadata, loading, revealed actions, clock)
- Building selection, the one command the dashboard accepts
- Health and configuration inspection
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from dashboard_kernel.gateway.client import DataFetchGateway, HttpDataFetchGateway
from dashboard_kernel.gateway.static import StaticDataFetchGateway
from dashboard_kernel.models.config import DashboardConfig
from dashboard_kernel.orchestrator.controller import DashboardOrchestrator
from dashboard_kernel.scheduling.scheduler import Scheduler
from dashboard_kernel.selection.store import BuildingSelectionStore, SqliteKeyValueStore


# --- Request/Response Models ---

class BuildingSelectRequest(BaseModel):
    building: str = Field(min_length=1, pattern=r"\S")


# --- Application Factory ---

def create_app(
    config: Optional[DashboardConfig] = None,
    gateway: Optional[DataFetchGateway] = None,
    selection_store: Optional[BuildingSelectionStore] = None,
    scheduler: Optional[Scheduler] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or DashboardConfig.from_env()
    logging.getLogger("dashboard_kernel").setLevel(config.log_level.upper())

    # Initialize components
    if gateway is None:
        if config.api_base_url:
            gateway = HttpDataFetchGateway(
                config.api_base_url,
                timeout_seconds=config.request_timeout_seconds,
            )
        else:
            gateway = StaticDataFetchGateway()
    store = selection_store or BuildingSelectionStore(
        SqliteKeyValueStore(config.storage_path),
        key=config.storage_key,
    )

    orchestrator = DashboardOrchestrator(
        gateway=gateway,
        selection_store=store,
        config=config,
        scheduler=scheduler,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await orchestrator.start()
        try:
            yield
        finally:
            await orchestrator.aclose()
            if isinstance(gateway, HttpDataFetchGateway):
                await gateway.aclose()

    app = FastAPI(
        title="Building Dashboard Kernel API",
        description="Building selection, live clock and sequential action reveal",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store components on app state for access in endpoints
    app.state.config = config
    app.state.gateway = gateway
    app.state.selection_store = store
    app.state.orchestrator = orchestrator

    # === HEALTH ===

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "generation": orchestrator.generation,
            "reveal": orchestrator.reveal.current.to_dict() if orchestrator.reveal.current else None,
        }

    # === DASHBOARD ===

    @app.get("/dashboard")
    def get_dashboard():
        """Current dashboard state snapshot."""
        return orchestrator.snapshot().model_dump(mode="json")

    @app.post("/dashboard/building")
    async def select_building(req: BuildingSelectRequest):
        """Switch buildings; returns the state once both fetches have settled."""
        await orchestrator.select_building(req.building)
        return orchestrator.snapshot().model_dump(mode="json")

    @app.get("/dashboard/config")
    def get_dashboard_config():
        """Current dashboard configuration."""
        return config.model_dump()

    return app


# Default application instance
app = create_app()
