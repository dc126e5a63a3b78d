"""
Guardian request endpoints
==========================

POST  /api/v1/requests                          -- create an emergency request (201)
GET   /api/v1/requests/my                       -- the caller's requests, oldest first
GET   /api/v1/requests/statuses                 -- status vocabulary for clients
GET   /api/v1/requests/{request_id}             -- one request (owner / rider view)
PATCH /api/v1/requests/{request_id}/cancel      -- cancel while pending / assigned
GET   /api/v1/requests/{request_id}/rider-location -- rider marker position
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import (
    acting_user_id,
    get_gateway,
    get_presence,
    get_settings,
)
from src.api.middleware import limiter, rate_limit
from src.api.schemas import (
    ErrorResponse,
    RequestCreate,
    RequestResponse,
    RiderLocationResponse,
    StatusInfo,
    status_vocabulary,
)
from src.config import Settings
from src.domain.entities import EmergencyRequest, Location
from src.services.dispatch import DispatchGateway

router = APIRouter(prefix="/requests", tags=["requests"])

ERROR_RESPONSES = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


async def render(gateway: DispatchGateway, emergency: EmergencyRequest) -> RequestResponse:
    return RequestResponse.from_details(await gateway.details(emergency))


async def render_all(
    gateway: DispatchGateway, emergencies: list[EmergencyRequest]
) -> list[RequestResponse]:
    return [await render(gateway, e) for e in emergencies]


@router.post(
    "",
    status_code=201,
    response_model=RequestResponse,
    summary="Create an emergency transport request",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def create_request(
    request: Request,
    body: RequestCreate,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    created = await gateway.create_request(
        user_id,
        body.pet_id,
        body.hospital_id,
        body.symptoms,
        Location(body.pickup_latitude, body.pickup_longitude),
    )
    return await render(gateway, created)


@router.get(
    "/my",
    response_model=list[RequestResponse],
    summary="List the calling guardian's requests",
)
@limiter.limit(rate_limit)
async def my_requests(
    request: Request,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return await render_all(gateway, await gateway.my_requests(user_id))


@router.get(
    "/statuses",
    response_model=list[StatusInfo],
    summary="Status labels and legal next steps",
)
async def statuses():
    return status_vocabulary()


@router.get(
    "/{request_id}",
    response_model=RequestResponse,
    summary="Get one request",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def get_request(
    request: Request,
    request_id: int,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return await render(gateway, await gateway.view_request(request_id, user_id))


@router.patch(
    "/{request_id}/cancel",
    response_model=RequestResponse,
    summary="Cancel a request",
    description="Legal only while the request is pending or rider_assigned.",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def cancel_request(
    request: Request,
    request_id: int,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return await render(gateway, await gateway.cancel_request(request_id, user_id))


@router.get(
    "/{request_id}/rider-location",
    response_model=RiderLocationResponse,
    summary="Where to draw the rider on the map",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def rider_location(
    request: Request,
    request_id: int,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
    presence=Depends(get_presence),
    settings: Settings = Depends(get_settings),
):
    emergency = await gateway.view_request(request_id, user_id)
    last_known = None
    if emergency.rider_id is not None:
        last_known = await presence.last_known(emergency.rider_id)
    if last_known is None:
        last_known = Location(settings.default_rider_lat, settings.default_rider_lng)

    location = await gateway.locate(emergency, last_known)
    return RiderLocationResponse.build(request_id, emergency.status, location)
