"""Wcart connectivity endpoint."""

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import ServiceContainer, get_services
from ..models import ConnectionTestRequest, ConnectionTestResponse
from ...loaders.wcart_loader import WcartPublisher

router = APIRouter()


@router.post("/test-connection", response_model=ConnectionTestResponse)
def test_connection(
    request: ConnectionTestRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Check that a Wcart API answers with the given credentials."""
    publisher = WcartPublisher(
        base_url=request.api_url,
        api_key=request.api_key,
        connect_timeout=services.settings.connect_timeout,
    )

    try:
        connected = publisher.validate_connection()
    finally:
        publisher.close()

    if not connected:
        raise HTTPException(status_code=502, detail="Connection failed")

    return ConnectionTestResponse(success=True, message="Connection successful")
