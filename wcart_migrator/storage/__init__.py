"""Relational persistence for runs, logs, mappings and the Shopify cache."""

from .database import Database
from .run_store import MigrationRunStore
from .mapping_store import MappingStore
from .cache import CachedRecordRepository

__all__ = [
    "Database",
    "MigrationRunStore",
    "MappingStore",
    "CachedRecordRepository",
]
