"""Durable store for migration runs and their item logs."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..exceptions import InvalidTransitionError, RunNotFoundError, RunStateError
from ..models.migration import (
    ALLOWED_TRANSITIONS,
    LogStatus,
    MigrationLogEntry,
    MigrationRun,
    MigrationStatus,
)
from ..models.record import ItemOutcome
from .database import Database
from .tables import MigrationLogRow, MigrationRow

logger = logging.getLogger(__name__)


def _to_run(row: MigrationRow) -> MigrationRun:
    return MigrationRun(
        id=row.id,
        source_store=row.shopify_store,
        data_type=row.data_type,
        status=MigrationStatus(row.status),
        total_items=row.total_items,
        processed_items=row.processed_items,
        failed_items=row.failed_items,
        created_at=row.created_at,
        started_at=row.started_at,
        completed_at=row.completed_at,
    )


def _to_log_entry(row: MigrationLogRow) -> MigrationLogEntry:
    return MigrationLogEntry(
        id=row.id,
        migration_id=row.migration_id,
        item_id=row.item_id,
        status=LogStatus(row.status),
        source_payload=row.shopify_data,
        destination_payload=row.wcart_data,
        error_message=row.error_message,
        created_at=row.created_at,
    )


class MigrationRunStore:
    """
    CRUD over migration runs plus the append-only item log.

    Counter changes are single conditional UPDATE statements
    (``col = col + 1 WHERE ...``), so the guards on status and totals are
    checked by the database in the same statement that applies the change.
    An update that matches no row means a guard failed.
    """

    def __init__(self, database: Database):
        self.db = database

    def create_run(self, source_store: str, data_type: str) -> str:
        """Create a pending run with zeroed counters and return its id."""
        run_id = uuid.uuid4().hex
        with self.db.session() as session:
            session.add(MigrationRow(
                id=run_id,
                shopify_store=source_store,
                data_type=data_type,
                status=MigrationStatus.PENDING.value,
                total_items=0,
                processed_items=0,
                failed_items=0,
                created_at=datetime.utcnow(),
            ))
        logger.info(f"Created migration run {run_id} for {data_type} from {source_store}")
        return run_id

    def get_run(self, run_id: str) -> MigrationRun:
        """Get a run by id."""
        with self.db.session() as session:
            row = session.get(MigrationRow, run_id)
            if row is None:
                raise RunNotFoundError(run_id)
            return _to_run(row)

    def list_runs(self, limit: int = 50) -> List[MigrationRun]:
        """List the most recently created runs."""
        with self.db.session() as session:
            rows = session.scalars(
                select(MigrationRow).order_by(MigrationRow.created_at.desc()).limit(limit)
            ).all()
            return [_to_run(row) for row in rows]

    def set_total_items(self, run_id: str, total: int) -> None:
        """
        Fix the number of items in a run.

        Allowed once the run is in progress and before any item outcome has
        been recorded.
        """
        if total < 0:
            raise ValueError(f"total_items must be non-negative, got {total}")

        with self.db.session() as session:
            result = session.execute(
                update(MigrationRow)
                .where(
                    MigrationRow.id == run_id,
                    MigrationRow.status == MigrationStatus.IN_PROGRESS.value,
                    MigrationRow.processed_items == 0,
                    MigrationRow.failed_items == 0,
                )
                .values(total_items=total)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                run = self._require_run(session, run_id)
                raise RunStateError(
                    f"Cannot set total items on run {run_id} "
                    f"(status={run.status}, processed={run.processed_items}, failed={run.failed_items})"
                )

    def record_item_outcome(self, run_id: str, outcome: ItemOutcome) -> MigrationLogEntry:
        """
        Append a log entry and bump the matching counter in one transaction.

        Success increments ``processed_items``; failure increments
        ``failed_items``. Never both.
        """
        if outcome.success:
            counter = MigrationRow.processed_items
            values = {"processed_items": MigrationRow.processed_items + 1}
        else:
            counter = MigrationRow.failed_items
            values = {"failed_items": MigrationRow.failed_items + 1}

        with self.db.session() as session:
            result = session.execute(
                update(MigrationRow)
                .where(
                    MigrationRow.id == run_id,
                    MigrationRow.status == MigrationStatus.IN_PROGRESS.value,
                    MigrationRow.processed_items + MigrationRow.failed_items < MigrationRow.total_items,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                run = self._require_run(session, run_id)
                raise RunStateError(
                    f"Cannot record {counter.key} for item {outcome.item_id} on run {run_id} "
                    f"(status={run.status}, processed={run.processed_items}, "
                    f"failed={run.failed_items}, total={run.total_items})"
                )

            row = MigrationLogRow(
                migration_id=run_id,
                item_id=outcome.item_id,
                status=outcome.status.value,
                shopify_data=outcome.source_payload,
                wcart_data=outcome.destination_payload if outcome.success else None,
                error_message=None if outcome.success else outcome.error_message,
                created_at=datetime.utcnow(),
            )
            session.add(row)
            session.flush()
            return _to_log_entry(row)

    def transition_status(
        self,
        run_id: str,
        new_status: MigrationStatus,
        timestamp: Optional[datetime] = None
    ) -> MigrationRun:
        """
        Move a run forward in the state machine.

        ``in_progress`` stamps ``started_at``; ``completed`` and ``failed``
        stamp ``completed_at``. Terminal runs never change again.
        """
        new_status = MigrationStatus(new_status)
        timestamp = timestamp or datetime.utcnow()
        allowed_from = [
            status.value for status, targets in ALLOWED_TRANSITIONS.items()
            if new_status in targets
        ]

        values = {"status": new_status.value}
        if new_status == MigrationStatus.IN_PROGRESS:
            values["started_at"] = timestamp
        elif new_status.is_terminal:
            values["completed_at"] = timestamp

        with self.db.session() as session:
            result = session.execute(
                update(MigrationRow)
                .where(MigrationRow.id == run_id, MigrationRow.status.in_(allowed_from))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                run = self._require_run(session, run_id)
                raise InvalidTransitionError(run_id, run.status, new_status.value)

            row = session.get(MigrationRow, run_id, populate_existing=True)
            logger.debug(f"Run {run_id} -> {new_status.value}")
            return _to_run(row)

    def list_recent_logs(self, run_id: str, limit: int = 100) -> List[MigrationLogEntry]:
        """Get a run's log entries, most recent first."""
        with self.db.session() as session:
            rows = session.scalars(
                select(MigrationLogRow)
                .where(MigrationLogRow.migration_id == run_id)
                .order_by(MigrationLogRow.created_at.desc(), MigrationLogRow.id.desc())
                .limit(limit)
            ).all()
            return [_to_log_entry(row) for row in rows]

    def count_logs(self, run_id: str, status: Optional[LogStatus] = None) -> int:
        """Count log entries for a run, optionally by status."""
        with self.db.session() as session:
            stmt = select(func.count(MigrationLogRow.id)).where(MigrationLogRow.migration_id == run_id)
            if status is not None:
                stmt = stmt.where(MigrationLogRow.status == LogStatus(status).value)
            return session.scalar(stmt) or 0

    def _require_run(self, session: Session, run_id: str) -> MigrationRow:
        row = session.get(MigrationRow, run_id, populate_existing=True)
        if row is None:
            raise RunNotFoundError(run_id)
        return row
