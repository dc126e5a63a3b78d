"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health        -- simple health check
GET /api/v1/admin/client-config -- polling cadence for the mobile clients
GET /api/v1/admin/active-riders -- riders on duty with an unexpired report
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_presence, get_settings
from src.api.schemas import ClientConfigResponse, HealthResponse
from src.config import Settings

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        storage_backend=settings.storage_backend,
        presence_backend=settings.presence_backend,
    )


@router.get(
    "/client-config",
    response_model=ClientConfigResponse,
    summary="How often clients should poll for status changes",
)
async def client_config(settings: Settings = Depends(get_settings)):
    return ClientConfigResponse(
        guardian_poll_seconds=settings.guardian_poll_seconds,
        rider_poll_seconds=settings.rider_poll_seconds,
        nearby_radius_km=settings.nearby_radius_km,
    )


@router.get(
    "/active-riders",
    response_model=list[int],
    summary="Ids of riders currently on duty",
)
async def active_riders(presence=Depends(get_presence)):
    return await presence.active_riders()
