"""Migration run and log models."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum
from datetime import datetime


class MigrationStatus(str, Enum):
    """Status of a migration run."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (MigrationStatus.COMPLETED, MigrationStatus.FAILED)

    def can_transition_to(self, new_status: "MigrationStatus") -> bool:
        """Check whether the state machine allows moving to new_status."""
        return new_status in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS = {
    MigrationStatus.PENDING: (MigrationStatus.IN_PROGRESS, MigrationStatus.FAILED),
    MigrationStatus.IN_PROGRESS: (MigrationStatus.COMPLETED, MigrationStatus.FAILED),
    MigrationStatus.COMPLETED: (),
    MigrationStatus.FAILED: (),
}


class LogStatus(str, Enum):
    """Outcome of a single migrated item."""
    SUCCESS = "success"
    FAILED = "failed"


class DataType:
    """Well-known Shopify data types. Any other string is accepted as-is."""
    PRODUCTS = "products"
    CUSTOMERS = "customers"
    ORDERS = "orders"

    ALL = (PRODUCTS, CUSTOMERS, ORDERS)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class MigrationRun:
    """One execution of the batch migration for a data type."""
    id: str
    source_store: str
    data_type: str
    status: MigrationStatus = MigrationStatus.PENDING

    # Progress
    total_items: int = 0
    processed_items: int = 0
    failed_items: int = 0

    # Timing
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "source_store": self.source_store,
            "data_type": self.data_type,
            "status": self.status.value,
            "total_items": self.total_items,
            "processed_items": self.processed_items,
            "failed_items": self.failed_items,
            "created_at": _isoformat(self.created_at),
            "started_at": _isoformat(self.started_at),
            "completed_at": _isoformat(self.completed_at),
        }

    @property
    def remaining_items(self) -> int:
        return self.total_items - self.processed_items - self.failed_items

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationLogEntry:
    """Append-only record of what happened to one item in a run."""
    migration_id: str
    item_id: str
    status: LogStatus
    source_payload: Optional[Dict[str, Any]] = None
    destination_payload: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "migration_id": self.migration_id,
            "item_id": self.item_id,
            "status": self.status.value,
            "source_payload": self.source_payload,
            "destination_payload": self.destination_payload,
            "error_message": self.error_message,
            "created_at": _isoformat(self.created_at),
        }
