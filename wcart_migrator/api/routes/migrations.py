"""Migration start and status endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from ..dependencies import ServiceContainer, get_services
from ..models import (
    MigrationListResponse,
    MigrationLogResponse,
    MigrationRunResponse,
    MigrationStartRequest,
    MigrationStartResponse,
    MigrationStatusResponse,
)
from ...exceptions import RunNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/start", response_model=MigrationStartResponse)
def start_migration(
    data: MigrationStartRequest,
    services: ServiceContainer = Depends(get_services),
    x_shopify_shop_domain: Optional[str] = Header(default=None),
):
    """
    Start a migration run.

    Returns as soon as the run record exists; poll the status endpoint to
    follow progress.
    """
    store = x_shopify_shop_domain or services.settings.shopify_store
    if not store:
        raise HTTPException(status_code=400, detail="No Shopify store is associated with this session")

    job = services.jobs.submit(store, data.data_type)
    return MigrationStartResponse(run_id=job.run_id)


@router.get("", response_model=MigrationListResponse)
def list_migrations(
    limit: int = Query(default=50, ge=1, le=500),
    services: ServiceContainer = Depends(get_services),
):
    """List recent migration runs."""
    runs = services.run_store.list_runs(limit)
    return MigrationListResponse(
        migrations=[MigrationRunResponse.from_run(run) for run in runs],
        total=len(runs),
    )


@router.get("/{run_id}", response_model=MigrationStatusResponse)
def get_migration_status(run_id: str, services: ServiceContainer = Depends(get_services)):
    """Get a run with its most recent log entries."""
    try:
        run = services.run_store.get_run(run_id)
    except RunNotFoundError:
        raise HTTPException(status_code=404, detail="Migration not found")

    logs = services.run_store.list_recent_logs(run_id, services.settings.log_page_size)
    return MigrationStatusResponse(
        run=MigrationRunResponse.from_run(run),
        logs=[MigrationLogResponse.from_entry(entry) for entry in logs],
    )
