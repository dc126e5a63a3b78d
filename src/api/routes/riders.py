"""
Rider endpoints
===============

GET  /api/v1/riders/requests/available             -- pending requests, FIFO
GET  /api/v1/riders/my-requests                     -- requests bound to the caller
POST /api/v1/riders/requests/{request_id}/accept    -- claim a pending request
POST /api/v1/riders/requests/{request_id}/advance   -- move one step along the chain
PUT  /api/v1/riders/presence                        -- report position / on-duty flag
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import acting_user_id, get_gateway, get_presence
from src.api.middleware import limiter, rate_limit
from src.api.routes.requests import ERROR_RESPONSES, render, render_all
from src.api.schemas import PresenceUpdate, RequestResponse
from src.domain.entities import Location
from src.domain.enums import UserRole
from src.services.dispatch import DispatchGateway

router = APIRouter(prefix="/riders", tags=["riders"])


@router.get(
    "/requests/available",
    response_model=list[RequestResponse],
    summary="Pending requests offered to riders (oldest first)",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def available_requests(
    request: Request,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    await gateway.require_role(user_id, UserRole.RIDER)
    return await render_all(gateway, await gateway.available_requests())


@router.get(
    "/my-requests",
    response_model=list[RequestResponse],
    summary="Requests bound to the calling rider",
)
@limiter.limit(rate_limit)
async def my_rider_requests(
    request: Request,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return await render_all(gateway, await gateway.my_rider_requests(user_id))


@router.post(
    "/requests/{request_id}/accept",
    response_model=RequestResponse,
    summary="Accept a pending request",
    description="Exactly one of several racing riders wins; the rest get 409.",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def accept_request(
    request: Request,
    request_id: int,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return await render(gateway, await gateway.accept_request(request_id, user_id))


@router.post(
    "/requests/{request_id}/advance",
    response_model=RequestResponse,
    summary="Advance an assigned request to its next status",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def advance_status(
    request: Request,
    request_id: int,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return await render(gateway, await gateway.advance_status(request_id, user_id))


@router.put(
    "/presence",
    status_code=204,
    summary="Report the rider's position and on-duty flag",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def update_presence(
    request: Request,
    body: PresenceUpdate,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
    presence=Depends(get_presence),
):
    await gateway.require_role(user_id, UserRole.RIDER)
    await presence.update(
        user_id, Location(body.latitude, body.longitude), body.is_active
    )
