"""
In-memory backends for demo mode and tests.

``InMemoryRequestRepository`` and ``InMemoryDirectory`` expose the same
async contract as their SQL counterparts in ``repositories.py`` so the
dispatch gateway never knows which one it is talking to.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from src.domain.entities import (
    EmergencyRequest,
    Hospital,
    Location,
    NotFound,
    Pet,
    User,
)
from src.domain.enums import RequestStatus
from src.domain.transitions import Transition

from .locks import KeyedLock

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRequestRepository:
    def __init__(self, clock: Clock = utcnow):
        self._rows: dict[int, EmergencyRequest] = {}
        self._ids = itertools.count(1)
        self._locks = KeyedLock()
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
        request = EmergencyRequest(
            id=next(self._ids),
            guardian_id=guardian_id,
            pet_id=pet_id,
            hospital_id=hospital_id,
            symptoms=symptoms,
            pickup=pickup,
            status=RequestStatus.PENDING,
            rider_id=None,
            created_at=now,
            updated_at=now,
        )
        self._rows[request.id] = request
        logger.debug("Stored request %d", request.id)
        return request

    async def get(self, request_id: int) -> EmergencyRequest:
        try:
            return self._rows[request_id]
        except KeyError:
            raise NotFound(f"Request {request_id} not found") from None

    async def list_for_guardian(self, guardian_id: int) -> list[EmergencyRequest]:
        return [r for r in self._rows.values() if r.guardian_id == guardian_id]

    async def list_available_for_riders(self) -> list[EmergencyRequest]:
        return [r for r in self._rows.values() if r.status == RequestStatus.PENDING]

    async def list_for_rider(self, rider_id: int) -> list[EmergencyRequest]:
        return [r for r in self._rows.values() if r.rider_id == rider_id]

    async def mutate(self, request_id: int, transition: Transition) -> EmergencyRequest:
        """Apply *transition* under the per-id lock and persist the result."""
        async with self._locks.hold(request_id):
            current = await self.get(request_id)
            proposed = transition(current)
            updated = replace(
                current,
                status=proposed.status,
                rider_id=proposed.rider_id,
                updated_at=self._clock(),
            )
            self._rows[request_id] = updated
            return updated

    def __len__(self) -> int:
        return len(self._rows)


class InMemoryDirectory:
    """Read-mostly lookup of users, pets and hospitals."""

    def __init__(
        self,
        users: Iterable[User] = (),
        pets: Iterable[Pet] = (),
        hospitals: Iterable[Hospital] = (),
    ):
        self._users = {u.id: u for u in users}
        self._pets = {p.id: p for p in pets}
        self._hospitals = {h.id: h for h in hospitals}
        # Deleted pets stay resolvable for the requests that reference them
        self._deleted_pets: set[int] = set()

    async def get_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user

    async def get_pet(self, pet_id: int) -> Pet:
        pet = self._pets.get(pet_id)
        if pet is None or pet_id in self._deleted_pets:
            raise NotFound(f"Pet {pet_id} not found")
        return pet

    async def get_hospital(self, hospital_id: int) -> Hospital:
        hospital = self._hospitals.get(hospital_id)
        if hospital is None:
            raise NotFound(f"Hospital {hospital_id} not found")
        return hospital

    async def find_pet(self, pet_id: int) -> Optional[Pet]:
        return self._pets.get(pet_id)

    async def find_hospital(self, hospital_id: int) -> Optional[Hospital]:
        return self._hospitals.get(hospital_id)

    async def list_pets_for_owner(self, owner_id: int) -> list[Pet]:
        return [
            p
            for p in self._pets.values()
            if p.owner_id == owner_id and p.id not in self._deleted_pets
        ]

    async def add_pet(self, pet: Pet) -> Pet:
        pet = replace(pet, id=max(self._pets, default=0) + 1)
        self._pets[pet.id] = pet
        return pet

    async def update_pet(self, pet: Pet) -> Pet:
        await self.get_pet(pet.id)
        self._pets[pet.id] = pet
        return pet

    async def delete_pet(self, pet_id: int) -> None:
        await self.get_pet(pet_id)
        self._deleted_pets.add(pet_id)

    async def list_hospitals(self) -> list[Hospital]:
        return list(self._hospitals.values())

    def add_user(self, user: User) -> None:
        self._users[user.id] = user
