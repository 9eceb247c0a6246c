"""Record models for cached source data and per-item results."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime

from .migration import LogStatus


@dataclass
class CachedRecord:
    """A Shopify record previously fetched into the local cache."""
    data_type: str
    source_id: str
    raw_payload: str  # JSON text exactly as cached
    fetched_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def payload(self) -> Dict[str, Any]:
        """Decode the cached JSON payload."""
        return json.loads(self.raw_payload)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "data_type": self.data_type,
            "source_id": self.source_id,
            "data": self.payload,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
        }


@dataclass
class PublishResult:
    """Result of attempting to send one record to the destination."""
    success: bool = False
    destination_id: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    response_data: Optional[Dict[str, Any]] = None
    published_at: Optional[datetime] = None

    @classmethod
    def ok(
        cls,
        destination_id: Optional[str],
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None
    ) -> "PublishResult":
        return cls(
            success=True,
            destination_id=destination_id,
            status_code=status_code,
            response_data=response_data,
            published_at=datetime.utcnow(),
        )

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "PublishResult":
        return cls(success=False, error=error, status_code=status_code)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "success": self.success,
            "destination_id": self.destination_id,
            "error": self.error,
            "status_code": self.status_code,
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }


@dataclass
class ItemOutcome:
    """Outcome of mapping and publishing one cached record."""
    item_id: str
    status: LogStatus
    source_payload: Optional[Dict[str, Any]] = None
    destination_payload: Optional[Dict[str, Any]] = None
    destination_id: Optional[str] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def succeeded(
        cls,
        item_id: str,
        source_payload: Dict[str, Any],
        destination_payload: Dict[str, Any],
        destination_id: Optional[str] = None
    ) -> "ItemOutcome":
        return cls(
            item_id=item_id,
            status=LogStatus.SUCCESS,
            source_payload=source_payload,
            destination_payload=destination_payload,
            destination_id=destination_id,
        )

    @classmethod
    def failed(
        cls,
        item_id: str,
        error_message: str,
        source_payload: Optional[Dict[str, Any]] = None
    ) -> "ItemOutcome":
        return cls(
            item_id=item_id,
            status=LogStatus.FAILED,
            source_payload=source_payload,
            error_message=error_message,
        )

    @property
    def success(self) -> bool:
        return self.status == LogStatus.SUCCESS
