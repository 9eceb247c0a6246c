"""
Pytest configuration and fixtures.

Every test that touches storage gets its own sqlite file under tmp_path so
worker threads and the test body see the same database.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

import pytest

from wcart_migrator.loaders.base import BasePublisher
from wcart_migrator.models.mapping import FieldMapping
from wcart_migrator.models.record import PublishResult
from wcart_migrator.models.settings import MigrationSettings
from wcart_migrator.orchestrator import BatchProcessor
from wcart_migrator.storage import CachedRecordRepository, Database, MappingStore, MigrationRunStore


class FakePublisher(BasePublisher):
    """Publisher that records calls and fails for records matching fail_when."""

    def __init__(self, fail_when: Optional[Callable[[Dict[str, Any]], bool]] = None):
        super().__init__("fake")
        self.fail_when = fail_when or (lambda record: False)
        self.published: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def publish(self, data_type: str, record: Dict[str, Any]) -> PublishResult:
        with self._lock:
            self.published.append(record)
            count = len(self.published)
        if self.fail_when(record):
            return PublishResult.failure("Wcart API returned 422: invalid record", status_code=422)
        return PublishResult.ok(destination_id=f"wc_{count}", status_code=201)


@pytest.fixture
def settings(tmp_path) -> MigrationSettings:
    return MigrationSettings(
        wcart_api_url="https://wcart.test/api",
        wcart_api_key="secret",
        database_url=f"sqlite:///{tmp_path / 'migrator.db'}",
        batch_size=50,
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def run_store(database) -> MigrationRunStore:
    return MigrationRunStore(database)


@pytest.fixture
def mapping_store(database) -> MappingStore:
    return MappingStore(database)


@pytest.fixture
def cache(database) -> CachedRecordRepository:
    return CachedRecordRepository(database)


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def processor(settings, run_store, mapping_store, cache, publisher) -> BatchProcessor:
    return BatchProcessor(
        settings=settings,
        run_store=run_store,
        mapping_store=mapping_store,
        cache=cache,
        publisher=publisher,
    )


@pytest.fixture
def product_mappings() -> List[FieldMapping]:
    return [
        FieldMapping("title", "product_name", "trim"),
        FieldMapping("vendor", "brand", "uppercase"),
        FieldMapping("variants.0.sku", "sku"),
        FieldMapping("variants.0.price", "price"),
    ]


def _products(count: int) -> List[Dict[str, Any]]:
    return [
        {
            "id": 1000 + i,
            "title": f"  Product {i}  ",
            "vendor": "acme",
            "tags": "sale",
            "variants": [{"sku": f"SKU-{i}", "price": f"{i}.00"}],
        }
        for i in range(count)
    ]


@pytest.fixture
def make_products() -> Callable[[int], List[Dict[str, Any]]]:
    """Factory for Shopify-shaped product payloads."""
    return _products


@pytest.fixture
def make_processor(settings, run_store, mapping_store, cache):
    """Factory for processors with a custom publisher or collaborators."""

    def _make(fail_when=None, **overrides) -> BatchProcessor:
        components = {
            "settings": settings,
            "run_store": run_store,
            "mapping_store": mapping_store,
            "cache": cache,
            "publisher": FakePublisher(fail_when),
        }
        components.update(overrides)
        return BatchProcessor(**components)

    return _make


@pytest.fixture
def rejecting_publisher() -> FakePublisher:
    """Publisher that rejects every record."""
    return FakePublisher(lambda record: True)
