"""Shared services for request handlers."""

from dataclasses import dataclass

from fastapi import Request

from ..jobs import JobManager
from ..models.settings import MigrationSettings
from ..orchestrator import BatchProcessor
from ..services.mapper import FieldMapper
from ..storage import CachedRecordRepository, Database, MappingStore, MigrationRunStore


@dataclass
class ServiceContainer:
    """Everything the routes need, built once per application."""
    settings: MigrationSettings
    database: Database
    run_store: MigrationRunStore
    mapping_store: MappingStore
    cache: CachedRecordRepository
    mapper: FieldMapper
    processor: BatchProcessor
    jobs: JobManager


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
