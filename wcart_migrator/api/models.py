"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from ..models.mapping import FieldMapping
from ..models.migration import MigrationLogEntry, MigrationRun


# Request Models
class MigrationStartRequest(BaseModel):
    data_type: str = Field(min_length=1, max_length=50)


class FieldMappingModel(BaseModel):
    source_field: str = Field(min_length=1)
    destination_field: str = Field(min_length=1)
    transformation: Optional[str] = None
    is_required: bool = False

    def to_field_mapping(self, data_type: str) -> FieldMapping:
        return FieldMapping(
            source_field=self.source_field,
            destination_field=self.destination_field,
            transformation=self.transformation or None,
            is_required=self.is_required,
            data_type=data_type,
        )

    @classmethod
    def from_field_mapping(cls, mapping: FieldMapping) -> "FieldMappingModel":
        return cls(
            source_field=mapping.source_field,
            destination_field=mapping.destination_field,
            transformation=mapping.transformation,
            is_required=mapping.is_required,
        )


class MappingSaveRequest(BaseModel):
    mappings: List[FieldMappingModel]


class ConnectionTestRequest(BaseModel):
    api_url: str = Field(min_length=1)
    api_key: Optional[str] = None


# Response Models
class MigrationStartResponse(BaseModel):
    run_id: str
    status: str = "started"


class MigrationRunResponse(BaseModel):
    id: str
    source_store: str
    data_type: str
    status: str
    total_items: int
    processed_items: int
    failed_items: int
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_run(cls, run: MigrationRun) -> "MigrationRunResponse":
        return cls(
            id=run.id,
            source_store=run.source_store,
            data_type=run.data_type,
            status=run.status.value,
            total_items=run.total_items,
            processed_items=run.processed_items,
            failed_items=run.failed_items,
            created_at=run.created_at,
            started_at=run.started_at,
            completed_at=run.completed_at,
        )


class MigrationLogResponse(BaseModel):
    id: Optional[int] = None
    item_id: str
    status: str
    source_payload: Optional[Dict[str, Any]] = None
    destination_payload: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: MigrationLogEntry) -> "MigrationLogResponse":
        return cls(
            id=entry.id,
            item_id=entry.item_id,
            status=entry.status.value,
            source_payload=entry.source_payload,
            destination_payload=entry.destination_payload,
            error_message=entry.error_message,
            created_at=entry.created_at,
        )


class MigrationStatusResponse(BaseModel):
    run: MigrationRunResponse
    logs: List[MigrationLogResponse]


class MigrationListResponse(BaseModel):
    migrations: List[MigrationRunResponse]
    total: int


class MappingListResponse(BaseModel):
    data_type: str
    mappings: List[FieldMappingModel]


class MappingSaveResponse(BaseModel):
    data_type: str
    saved: int


class PreviewItem(BaseModel):
    item_id: str
    source: Dict[str, Any]
    destination: Dict[str, Any]


class PreviewResponse(BaseModel):
    data_type: str
    items: List[PreviewItem]


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
