"""Batch processor - drives a migration run from cache to Wcart."""

import logging
import threading
from datetime import datetime
from typing import List, Optional, Sequence, TypeVar

from .exceptions import InvalidTransitionError, MigrationError
from .models.mapping import FieldMapping
from .models.migration import MigrationRun, MigrationStatus
from .models.record import CachedRecord, ItemOutcome
from .models.settings import MigrationSettings
from .loaders.base import BasePublisher
from .services.mapper import FieldMapper
from .storage.cache import CachedRecordRepository
from .storage.mapping_store import MappingStore
from .storage.run_store import MigrationRunStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RunCancelled(MigrationError):
    """Raised inside a run when its cancel event is set."""


def partition(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """Split items into consecutive batches of at most batch_size."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchProcessor:
    """
    Runs the migration state machine for one data type.

    pending -> in_progress -> completed | failed

    Per run it:
    - Loads the current mapping set and a snapshot of cached records
    - Fixes the run's total item count
    - Maps and publishes items one at a time, batch by batch
    - Records one log entry and one counter increment per item

    Item failures are recorded and skipped over. Anything that goes wrong
    outside the per-item scope ends the run as failed.
    """

    def __init__(
        self,
        settings: MigrationSettings,
        run_store: MigrationRunStore,
        mapping_store: MappingStore,
        cache: CachedRecordRepository,
        publisher: BasePublisher,
        mapper: Optional[FieldMapper] = None
    ):
        """
        Initialize the processor.

        Args:
            settings: Migration settings (batch size is read from here)
            run_store: Store for runs and item logs
            mapping_store: Store for field mappings
            cache: Cached Shopify records
            publisher: Destination publisher
            mapper: Field mapper (a default one is created if omitted)
        """
        self.settings = settings
        self.run_store = run_store
        self.mapping_store = mapping_store
        self.cache = cache
        self.publisher = publisher
        self.mapper = mapper or FieldMapper()

    def start_run(self, source_store: str, data_type: str) -> str:
        """Create a pending run and return its id."""
        return self.run_store.create_run(source_store, data_type)

    def process(
        self,
        run_id: str,
        data_type: str,
        cancel_event: Optional[threading.Event] = None
    ) -> MigrationRun:
        """
        Process a pending run to a terminal status.

        Args:
            run_id: Run created by :meth:`start_run`
            data_type: Data type to migrate
            cancel_event: Checked between items; when set the run is failed

        Returns:
            The run as stored after it reached its final status
        """
        try:
            self.run_store.transition_status(run_id, MigrationStatus.IN_PROGRESS)
        except InvalidTransitionError as e:
            # Another worker owns the run, or it already finished
            logger.warning(f"Not processing run {run_id}: {e}")
            return self.run_store.get_run(run_id)

        try:
            # Mappings are read now, not when the run was created
            mappings = self.mapping_store.get_mappings(data_type)
            records = self.cache.load_records(data_type)
            self.run_store.set_total_items(run_id, len(records))

            if not mappings:
                logger.warning(f"No field mappings defined for {data_type}; items will publish empty payloads")

            batches = partition(records, self.settings.batch_size)
            logger.info(
                f"Run {run_id}: migrating {len(records)} {data_type} "
                f"in {len(batches)} batches of up to {self.settings.batch_size}"
            )

            for batch_number, batch in enumerate(batches, 1):
                logger.info(f"Run {run_id}: batch {batch_number}/{len(batches)} ({len(batch)} items)")
                for cached in batch:
                    if cancel_event is not None and cancel_event.is_set():
                        raise RunCancelled(f"Run {run_id} cancelled")

                    outcome = self.process_item(data_type, cached, mappings)
                    self.run_store.record_item_outcome(run_id, outcome)

            run = self.run_store.transition_status(run_id, MigrationStatus.COMPLETED)
            logger.info(
                f"Run {run_id} completed: {run.processed_items} succeeded, "
                f"{run.failed_items} failed of {run.total_items}"
            )
            return run

        except RunCancelled as e:
            logger.warning(str(e))
            return self._fail_run(run_id)

        except Exception as e:
            logger.error(f"Run {run_id} failed: {e}", exc_info=True)
            return self._fail_run(run_id)

    def process_item(
        self,
        data_type: str,
        cached: CachedRecord,
        mappings: Sequence[FieldMapping]
    ) -> ItemOutcome:
        """
        Map and publish one cached record.

        Never raises: every error becomes a failed ItemOutcome.
        """
        source = None
        try:
            source = cached.payload
            destination = self.mapper.map_record(source, mappings)
            result = self.publisher.publish(data_type, destination)
        except Exception as e:
            logger.warning(f"Item {cached.source_id} failed before publishing: {e}")
            return ItemOutcome.failed(cached.source_id, str(e) or type(e).__name__, source)

        if not result.success:
            logger.warning(f"Item {cached.source_id} rejected: {result.error}")
            return ItemOutcome.failed(cached.source_id, result.error or "Publish failed", source)

        return ItemOutcome.succeeded(
            cached.source_id,
            source_payload=source,
            destination_payload=destination,
            destination_id=result.destination_id,
        )

    def _fail_run(self, run_id: str) -> MigrationRun:
        try:
            return self.run_store.transition_status(run_id, MigrationStatus.FAILED, datetime.utcnow())
        except MigrationError as e:
            # Already terminal, or the run disappeared
            logger.error(f"Could not mark run {run_id} as failed: {e}")
            return self.run_store.get_run(run_id)
