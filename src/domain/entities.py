"""
Domain entities and dispatch errors.

Entities are frozen dataclasses: the request repository is the only owner
of ``EmergencyRequest`` records and hands out immutable snapshots, so
callers must re-read through the repository instead of holding on to a
mutable copy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import PetSize, RequestStatus, UserRole


# ── Errors ────────────────────────────────────────────────────────────


class DispatchError(Exception):
    """Base class for every rejection raised by the dispatch core."""

    kind = "dispatch_error"


class NotFound(DispatchError):
    kind = "not_found"


class InvalidTransition(DispatchError):
    """Raised when the current status does not permit the requested move."""

    kind = "invalid_transition"


class Forbidden(DispatchError):
    """Raised when the acting user lacks the role or ownership required."""

    kind = "forbidden"


class AlreadyAssigned(DispatchError):
    """Raised to the loser of a race to accept the same request."""

    kind = "already_assigned"


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class User:
    id: int
    email: str
    name: str
    role: UserRole
    phone: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Pet:
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


@dataclass(frozen=True)
class Hospital:
    id: int
    name: str
    address: str
    phone: str
    location: Location
    is_24hour: bool = False
    specialties: Optional[str] = None


@dataclass(frozen=True)
class EmergencyRequest:
    id: int
    guardian_id: int
    pet_id: int
    hospital_id: int
    symptoms: str
    pickup: Location
    status: RequestStatus = RequestStatus.PENDING
    rider_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (RequestStatus.COMPLETED, RequestStatus.CANCELLED)
