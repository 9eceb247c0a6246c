"""Field mapping management endpoints."""

from fastapi import APIRouter, Depends, Query

from ..dependencies import ServiceContainer, get_services
from ..models import (
    FieldMappingModel,
    MappingListResponse,
    MappingSaveRequest,
    MappingSaveResponse,
    PreviewItem,
    PreviewResponse,
)

router = APIRouter()


@router.get("/{data_type}", response_model=MappingListResponse)
def get_mappings(data_type: str, services: ServiceContainer = Depends(get_services)):
    """Get the current mapping set for a data type."""
    mappings = services.mapping_store.get_mappings(data_type)
    return MappingListResponse(
        data_type=data_type,
        mappings=[FieldMappingModel.from_field_mapping(m) for m in mappings],
    )


@router.post("/{data_type}", response_model=MappingSaveResponse)
def save_mappings(
    data_type: str,
    request: MappingSaveRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Replace the whole mapping set for a data type."""
    mappings = [m.to_field_mapping(data_type) for m in request.mappings]
    saved = services.mapping_store.replace_mappings(data_type, mappings)
    return MappingSaveResponse(data_type=data_type, saved=saved)


@router.get("/{data_type}/preview", response_model=PreviewResponse)
def preview_mappings(
    data_type: str,
    limit: int = Query(default=10, ge=1, le=100),
    services: ServiceContainer = Depends(get_services),
):
    """Show how the first cached records map with the current mappings."""
    mappings = services.mapping_store.get_mappings(data_type)
    records = services.cache.sample(data_type, limit)
    previews = services.mapper.preview(records, mappings)
    return PreviewResponse(
        data_type=data_type,
        items=[PreviewItem(**item) for item in previews],
    )
