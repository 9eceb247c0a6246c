"""FastAPI application entry point.

Run with ``uvicorn wcart_migrator.api.main:create_app --factory``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .dependencies import ServiceContainer
from .models import ErrorResponse
from .routes import mappings, migrations, wcart
from ..exceptions import MigrationError
from ..jobs import JobManager
from ..loaders.base import BasePublisher
from ..loaders.wcart_loader import WcartPublisher
from ..models.settings import MigrationSettings
from ..orchestrator import BatchProcessor
from ..services.mapper import FieldMapper
from ..storage import CachedRecordRepository, Database, MappingStore, MigrationRunStore

logger = logging.getLogger(__name__)


def build_services(
    settings: MigrationSettings,
    publisher: Optional[BasePublisher] = None
) -> ServiceContainer:
    """Wire the database, stores, publisher, processor and job manager."""
    database = Database(settings.database_url)
    database.create_all()

    run_store = MigrationRunStore(database)
    mapping_store = MappingStore(database)
    cache = CachedRecordRepository(database)
    mapper = FieldMapper()
    processor = BatchProcessor(
        settings=settings,
        run_store=run_store,
        mapping_store=mapping_store,
        cache=cache,
        publisher=publisher or WcartPublisher.from_settings(settings),
        mapper=mapper,
    )

    return ServiceContainer(
        settings=settings,
        database=database,
        run_store=run_store,
        mapping_store=mapping_store,
        cache=cache,
        mapper=mapper,
        processor=processor,
        jobs=JobManager(processor, max_workers=settings.max_workers),
    )


def create_app(
    settings: Optional[MigrationSettings] = None,
    publisher: Optional[BasePublisher] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Settings to use; read from the environment when omitted
        publisher: Destination publisher override (tests, dry runs)
    """
    settings = settings or MigrationSettings.from_env()
    services = build_services(settings, publisher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down: waiting for running migrations")
        services.jobs.shutdown(wait=True)
        services.database.dispose()

    app = FastAPI(
        title="Shopify to Wcart Migration API",
        description="API for migrating Shopify data into Wcart",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MigrationError)
    async def migration_error_handler(request: Request, exc: MigrationError):
        logger.error(f"Request {request.method} {request.url.path} failed: {exc}")
        body = ErrorResponse(error="Migration request failed", detail=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump())

    # Include routers
    app.include_router(migrations.router, prefix="/api/migrations", tags=["migrations"])
    app.include_router(mappings.router, prefix="/api/mappings", tags=["mappings"])
    app.include_router(wcart.router, prefix="/api/wcart", tags=["wcart"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
