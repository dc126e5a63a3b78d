"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.domain import transitions
from src.domain.entities import Hospital, Location, Pet
from src.domain.enums import (
    NEXT_ACTION_LABELS,
    STATUS_DESCRIPTIONS,
    STATUS_LABELS,
    PetSize,
    RequestStatus,
)
from src.services.dispatch import RequestDetails


# ── Requests ──────────────────────────────────────────────────────────


class RequestCreate(BaseModel):
    pet_id: int
    hospital_id: int
    symptoms: str = Field(..., min_length=1, max_length=2000)
    pickup_latitude: float = Field(..., ge=-90, le=90)
    pickup_longitude: float = Field(..., ge=-180, le=180)


class PetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    species: str = Field(..., min_length=1, max_length=40)
    breed: Optional[str] = Field(None, max_length=80)
    age: Optional[int] = Field(None, ge=0, le=60)
    weight_kg: Optional[float] = Field(None, gt=0, le=200)
    size: Optional[PetSize] = None
    medical_notes: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=512)


class PetUpdate(BaseModel):
    """Partial update; fields left out keep their stored value."""

    name: str = Field(None, min_length=1, max_length=80)
    species: str = Field(None, min_length=1, max_length=40)
    breed: Optional[str] = Field(None, max_length=80)
    age: Optional[int] = Field(None, ge=0, le=60)
    weight_kg: Optional[float] = Field(None, gt=0, le=200)
    size: Optional[PetSize] = None
    medical_notes: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=512)


class PresenceUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    is_active: bool = True


# ── Responses ─────────────────────────────────────────────────────────


class PetResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    species: str
    breed: Optional[str] = None
    age: Optional[int] = None
    weight_kg: Optional[float] = None
    size: Optional[PetSize] = None
    medical_notes: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_entity(cls, pet: Pet) -> "PetResponse":
        return cls(
            id=pet.id,
            owner_id=pet.owner_id,
            name=pet.name,
            species=pet.species,
            breed=pet.breed,
            age=pet.age,
            weight_kg=pet.weight_kg,
            size=pet.size,
            medical_notes=pet.medical_notes,
            photo_url=pet.photo_url,
        )


class HospitalResponse(BaseModel):
    id: int
    name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    is_24hour: bool
    specialties: Optional[str] = None

    @classmethod
    def from_entity(cls, hospital: Hospital) -> "HospitalResponse":
        return cls(
            id=hospital.id,
            name=hospital.name,
            address=hospital.address,
            phone=hospital.phone,
            latitude=hospital.location.latitude,
            longitude=hospital.location.longitude,
            is_24hour=hospital.is_24hour,
            specialties=hospital.specialties,
        )


class RequestResponse(BaseModel):
    id: int
    guardian_id: int
    pet_id: int
    hospital_id: int
    rider_id: Optional[int] = None
    symptoms: str
    pickup_latitude: float
    pickup_longitude: float
    status: RequestStatus
    status_label: str
    next_action_label: Optional[str] = None
    can_cancel: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pet: Optional[PetResponse] = None
    hospital: Optional[HospitalResponse] = None

    @classmethod
    def from_details(cls, details: RequestDetails) -> "RequestResponse":
        r = details.request
        return cls(
            id=r.id,
            guardian_id=r.guardian_id,
            pet_id=r.pet_id,
            hospital_id=r.hospital_id,
            rider_id=r.rider_id,
            symptoms=r.symptoms,
            pickup_latitude=r.pickup.latitude,
            pickup_longitude=r.pickup.longitude,
            status=r.status,
            status_label=STATUS_LABELS[r.status],
            next_action_label=NEXT_ACTION_LABELS.get(r.status),
            can_cancel=transitions.can_cancel(r.status),
            created_at=r.created_at,
            updated_at=r.updated_at,
            pet=PetResponse.from_entity(details.pet) if details.pet else None,
            hospital=(
                HospitalResponse.from_entity(details.hospital)
                if details.hospital
                else None
            ),
        )


class StatusInfo(BaseModel):
    status: RequestStatus
    label: str
    description: str
    next_status: Optional[RequestStatus] = None
    next_action_label: Optional[str] = None
    can_cancel: bool
    terminal: bool


class RiderLocationResponse(BaseModel):
    request_id: int
    status: RequestStatus
    latitude: float
    longitude: float

    @classmethod
    def build(
        cls, request_id: int, status: RequestStatus, location: Location
    ) -> "RiderLocationResponse":
        return cls(
            request_id=request_id,
            status=status,
            latitude=location.latitude,
            longitude=location.longitude,
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    storage_backend: str
    presence_backend: str


class ClientConfigResponse(BaseModel):
    guardian_poll_seconds: int
    rider_poll_seconds: int
    nearby_radius_km: float


class ErrorResponse(BaseModel):
    detail: str
    error: Optional[str] = None


def status_vocabulary() -> list[StatusInfo]:
    return [
        StatusInfo(
            status=status,
            label=STATUS_LABELS[status],
            description=STATUS_DESCRIPTIONS[status],
            next_status=transitions.next_status(status),
            next_action_label=NEXT_ACTION_LABELS.get(status),
            can_cancel=transitions.can_cancel(status),
            terminal=status in transitions.TERMINAL,
        )
        for status in RequestStatus
    ]
