"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
the same contract as the in-memory backends in ``memory.py``.  Rows are
converted to frozen domain entities on the way out; ORM objects never
leave this module.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .memory import Clock, utcnow
from .models import EmergencyRequestModel, HospitalModel, PetModel, UserModel
from src.domain.entities import (
    EmergencyRequest,
    Hospital,
    Location,
    NotFound,
    Pet,
    User,
)
from src.domain.enums import PetSize, RequestStatus, UserRole
from src.domain.transitions import Transition

logger = logging.getLogger(__name__)


# ── Row -> entity mapping ─────────────────────────────────────────────


def _request(row: EmergencyRequestModel) -> EmergencyRequest:
    return EmergencyRequest(
        id=row.id,
        guardian_id=row.guardian_id,
        pet_id=row.pet_id,
        hospital_id=row.hospital_id,
        rider_id=row.rider_id,
        symptoms=row.symptoms,
        pickup=Location(row.pickup_lat, row.pickup_lng),
        status=RequestStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _user(row: UserModel) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        phone=row.phone,
        role=UserRole(row.role),
        created_at=row.created_at,
    )


def _pet(row: PetModel) -> Pet:
    return Pet(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        species=row.species,
        breed=row.breed,
        age=row.age,
        weight_kg=row.weight_kg,
        size=PetSize(row.size) if row.size else None,
        medical_notes=row.medical_notes,
        photo_url=row.photo_url,
    )


def _hospital(row: HospitalModel) -> Hospital:
    return Hospital(
        id=row.id,
        name=row.name,
        address=row.address,
        phone=row.phone,
        location=Location(row.latitude, row.longitude),
        is_24hour=row.is_24hour,
        specialties=row.specialties,
    )


# ── Repositories ──────────────────────────────────────────────────────


class SqlRequestRepository:
    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self._clock = clock

    async def create(
        self,
        *,
        guardian_id: int,
        pet_id: int,
        hospital_id: int,
        symptoms: str,
        pickup: Location,
    ) -> EmergencyRequest:
        now = self._clock()
        row = EmergencyRequestModel(
            guardian_id=guardian_id,
            pet_id=pet_id,
            hospital_id=hospital_id,
            symptoms=symptoms,
            pickup_lat=pickup.latitude,
            pickup_lng=pickup.longitude,
            status=RequestStatus.PENDING,
            rider_id=None,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        await self.session.flush()
        logger.debug("Inserted request %d", row.id)
        return _request(row)

    async def get(self, request_id: int) -> EmergencyRequest:
        row = await self.session.get(EmergencyRequestModel, request_id)
        if row is None:
            raise NotFound(f"Request {request_id} not found")
        return _request(row)

    async def _list(self, *criteria) -> list[EmergencyRequest]:
        result = await self.session.execute(
            select(EmergencyRequestModel)
            .where(*criteria)
            .order_by(EmergencyRequestModel.id)
        )
        return [_request(row) for row in result.scalars().all()]

    async def list_for_guardian(self, guardian_id: int) -> list[EmergencyRequest]:
        return await self._list(EmergencyRequestModel.guardian_id == guardian_id)

    async def list_available_for_riders(self) -> list[EmergencyRequest]:
        return await self._list(EmergencyRequestModel.status == RequestStatus.PENDING)

    async def list_for_rider(self, rider_id: int) -> list[EmergencyRequest]:
        return await self._list(EmergencyRequestModel.rider_id == rider_id)

    async def mutate(self, request_id: int, transition: Transition) -> EmergencyRequest:
        """SELECT ... FOR UPDATE, apply *transition*, write back.

        The row lock is held until the surrounding session commits, so a
        second mutate on the same id sees the first one's result.
        """
        result = await self.session.execute(
            select(EmergencyRequestModel)
            .where(EmergencyRequestModel.id == request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFound(f"Request {request_id} not found")

        proposed = transition(_request(row))
        row.status = proposed.status
        row.rider_id = proposed.rider_id
        row.updated_at = self._clock()
        await self.session.flush()
        return _request(row)


class SqlDirectory:
    """Users, pets and hospitals backed by the same session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user(self, user_id: int) -> User:
        row = await self.session.get(UserModel, user_id)
        if row is None:
            raise NotFound(f"User {user_id} not found")
        return _user(row)

    async def _live_pet_row(self, pet_id: int) -> PetModel:
        row = await self.session.get(PetModel, pet_id)
        if row is None or row.is_deleted:
            raise NotFound(f"Pet {pet_id} not found")
        return row

    async def get_pet(self, pet_id: int) -> Pet:
        return _pet(await self._live_pet_row(pet_id))

    async def get_hospital(self, hospital_id: int) -> Hospital:
        hospital = await self.find_hospital(hospital_id)
        if hospital is None:
            raise NotFound(f"Hospital {hospital_id} not found")
        return hospital

    async def find_pet(self, pet_id: int) -> Optional[Pet]:
        row = await self.session.get(PetModel, pet_id)
        return _pet(row) if row else None

    async def find_hospital(self, hospital_id: int) -> Optional[Hospital]:
        row = await self.session.get(HospitalModel, hospital_id)
        return _hospital(row) if row else None

    async def list_pets_for_owner(self, owner_id: int) -> list[Pet]:
        result = await self.session.execute(
            select(PetModel)
            .where(PetModel.owner_id == owner_id, PetModel.is_deleted.is_(False))
            .order_by(PetModel.id)
        )
        return [_pet(row) for row in result.scalars().all()]

    async def add_pet(self, pet: Pet) -> Pet:
        row = PetModel(
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
        self.session.add(row)
        await self.session.flush()
        return _pet(row)

    async def update_pet(self, pet: Pet) -> Pet:
        row = await self._live_pet_row(pet.id)
        row.name = pet.name
        row.species = pet.species
        row.breed = pet.breed
        row.age = pet.age
        row.weight_kg = pet.weight_kg
        row.size = pet.size
        row.medical_notes = pet.medical_notes
        row.photo_url = pet.photo_url
        await self.session.flush()
        return _pet(row)

    async def delete_pet(self, pet_id: int) -> None:
        row = await self._live_pet_row(pet_id)
        row.is_deleted = True
        await self.session.flush()

    async def list_hospitals(self) -> list[Hospital]:
        result = await self.session.execute(
            select(HospitalModel).order_by(HospitalModel.id)
        )
        return [_hospital(row) for row in result.scalars().all()]
