"""Background execution of migration runs."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional

from .models.migration import MigrationRun
from .orchestrator import BatchProcessor

logger = logging.getLogger(__name__)


class MigrationJob:
    """Handle for a run being processed in the background."""

    def __init__(self, run_id: str, data_type: str, future: Future, cancel_event: threading.Event):
        self.run_id = run_id
        self.data_type = data_type
        self._future = future
        self._cancel_event = cancel_event

    def cancel(self) -> None:
        """Ask the run to stop before its next item."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> MigrationRun:
        """Block until the run reaches a terminal status and return it."""
        return self._future.result(timeout=timeout)


class JobManager:
    """
    Starts runs on a thread pool and keeps their handles.

    Each run is processed by one worker; different runs proceed
    independently. Handles of finished runs are kept so callers can still
    wait on them, up to ``keep_finished`` of the most recent ones.
    """

    def __init__(self, processor: BatchProcessor, max_workers: int = 4, keep_finished: int = 100):
        self.processor = processor
        self.keep_finished = keep_finished
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="migration")
        self._jobs: Dict[str, MigrationJob] = {}
        self._lock = threading.Lock()

    def submit(self, source_store: str, data_type: str) -> MigrationJob:
        """
        Create a pending run and schedule it.

        The run record exists when this returns; processing happens later.
        """
        run_id = self.processor.start_run(source_store, data_type)
        cancel_event = threading.Event()
        future = self._executor.submit(self._run, run_id, data_type, cancel_event)
        job = MigrationJob(run_id, data_type, future, cancel_event)

        with self._lock:
            self._prune_finished()
            self._jobs[run_id] = job

        logger.info(f"Scheduled run {run_id} for {data_type}")
        return job

    def _run(self, run_id: str, data_type: str, cancel_event: threading.Event) -> MigrationRun:
        try:
            return self.processor.process(run_id, data_type, cancel_event)
        except Exception:
            logger.exception(f"Run {run_id} crashed outside the processor")
            raise

    def _prune_finished(self) -> None:
        # Caller holds the lock; dict order is submission order
        finished = [run_id for run_id, job in self._jobs.items() if job.done()]
        for run_id in finished[:max(len(finished) - self.keep_finished, 0)]:
            del self._jobs[run_id]

    def get(self, run_id: str) -> Optional[MigrationJob]:
        with self._lock:
            return self._jobs.get(run_id)

    def active_jobs(self) -> List[MigrationJob]:
        """Jobs that have not finished yet."""
        with self._lock:
            return [job for job in self._jobs.values() if not job.done()]

    def shutdown(self, wait: bool = True, cancel: bool = False) -> None:
        """Stop accepting runs; optionally cancel the ones still going."""
        if cancel:
            for job in self.active_jobs():
                job.cancel()
        self._executor.shutdown(wait=wait)
