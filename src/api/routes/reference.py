"""
Reference data endpoints
========================

GET    /api/v1/pets                   -- the calling guardian's pets
POST   /api/v1/pets                   -- register a pet (201)
PUT    /api/v1/pets/{pet_id}          -- update one of the caller's pets
DELETE /api/v1/pets/{pet_id}          -- delete one of the caller's pets (204)
GET    /api/v1/hospitals/nearby       -- hospitals within a radius, nearest first
GET    /api/v1/hospitals/{hospital_id} -- one hospital
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import acting_user_id, get_gateway, get_settings
from src.api.middleware import limiter, rate_limit
from src.api.routes.requests import ERROR_RESPONSES
from src.api.schemas import HospitalResponse, PetCreate, PetResponse, PetUpdate
from src.config import Settings
from src.domain.distance import within_radius
from src.domain.entities import Pet
from src.services.dispatch import DispatchGateway

pets_router = APIRouter(prefix="/pets", tags=["pets"])
hospitals_router = APIRouter(prefix="/hospitals", tags=["hospitals"])


@pets_router.get(
    "",
    response_model=list[PetResponse],
    summary="List my pets",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def my_pets(
    request: Request,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    return [PetResponse.from_entity(p) for p in await gateway.my_pets(user_id)]


@pets_router.post(
    "",
    status_code=201,
    response_model=PetResponse,
    summary="Register a pet",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def create_pet(
    request: Request,
    body: PetCreate,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    pet = await gateway.register_pet(
        user_id, Pet(id=0, owner_id=user_id, **body.model_dump())
    )
    return PetResponse.from_entity(pet)


@pets_router.put(
    "/{pet_id}",
    response_model=PetResponse,
    summary="Update one of my pets",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def update_pet(
    request: Request,
    pet_id: int,
    body: PetUpdate,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    pet = await gateway.update_pet(pet_id, user_id, **body.model_dump(exclude_unset=True))
    return PetResponse.from_entity(pet)


@pets_router.delete(
    "/{pet_id}",
    status_code=204,
    summary="Delete one of my pets",
    description="Requests already made for the pet still show its details.",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def delete_pet(
    request: Request,
    pet_id: int,
    user_id: int = Depends(acting_user_id),
    gateway: DispatchGateway = Depends(get_gateway),
):
    await gateway.delete_pet(pet_id, user_id)


@hospitals_router.get(
    "/nearby",
    response_model=list[HospitalResponse],
    summary="Hospitals near a point, nearest first",
)
@limiter.limit(rate_limit)
async def nearby_hospitals(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, le=100, description="km"),
    gateway: DispatchGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    hospitals = await gateway.directory.list_hospitals()
    radius_km = radius if radius is not None else settings.nearby_radius_km
    return [
        HospitalResponse.from_entity(h)
        for h in within_radius(hospitals, lat, lng, radius_km)
    ]


@hospitals_router.get(
    "/{hospital_id}",
    response_model=HospitalResponse,
    summary="Get one hospital",
    responses=ERROR_RESPONSES,
)
@limiter.limit(rate_limit)
async def get_hospital(
    request: Request,
    hospital_id: int,
    gateway: DispatchGateway = Depends(get_gateway),
):
    return HospitalResponse.from_entity(await gateway.directory.get_hospital(hospital_id))
