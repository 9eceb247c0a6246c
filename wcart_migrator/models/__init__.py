"""Data models for the migration service."""

from .migration import (
    MigrationStatus,
    LogStatus,
    DataType,
    MigrationRun,
    MigrationLogEntry,
)
from .mapping import (
    TransformType,
    FieldMapping,
)
from .record import (
    CachedRecord,
    PublishResult,
    ItemOutcome,
)
from .settings import MigrationSettings

__all__ = [
    "MigrationStatus",
    "LogStatus",
    "DataType",
    "MigrationRun",
    "MigrationLogEntry",
    "TransformType",
    "FieldMapping",
    "CachedRecord",
    "PublishResult",
    "ItemOutcome",
    "MigrationSettings",
]
