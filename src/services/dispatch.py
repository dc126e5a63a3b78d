"""
Dispatch gateway
================

The single entry point the API layer calls.  It resolves the acting user
through the directory, hands a transition from ``src.domain.transitions``
to the request repository's ``mutate`` and returns the stored result.

Every operation touches at most one request and never retries: any
``DispatchError`` raised by the directory, the repository or the
transition table reaches the caller unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import partial
from typing import Optional, Protocol

from src.domain import transitions
from src.domain.entities import (
    DispatchError,
    EmergencyRequest,
    Forbidden,
    Hospital,
    Location,
    Pet,
    User,
)
from src.domain.enums import RequestStatus, UserRole
from src.domain.interpolation import rider_display_location
from src.domain.transitions import Transition

logger = logging.getLogger(__name__)


class RequestRepository(Protocol):
    async def create(
        self,
        *,
        guardian_id: int,
        pet_id: int,
        hospital_id: int,
        symptoms: str,
        pickup: Location,
    ) -> EmergencyRequest: ...

    async def get(self, request_id: int) -> EmergencyRequest: ...

    async def list_for_guardian(self, guardian_id: int) -> list[EmergencyRequest]: ...

    async def list_available_for_riders(self) -> list[EmergencyRequest]: ...

    async def list_for_rider(self, rider_id: int) -> list[EmergencyRequest]: ...

    async def mutate(
        self, request_id: int, transition: Transition
    ) -> EmergencyRequest: ...


class Directory(Protocol):
    async def get_user(self, user_id: int) -> User: ...

    async def get_pet(self, pet_id: int) -> Pet: ...

    async def get_hospital(self, hospital_id: int) -> Hospital: ...

    async def find_pet(self, pet_id: int) -> Optional[Pet]: ...

    async def find_hospital(self, hospital_id: int) -> Optional[Hospital]: ...

    async def list_pets_for_owner(self, owner_id: int) -> list[Pet]: ...

    async def add_pet(self, pet: Pet) -> Pet: ...

    async def update_pet(self, pet: Pet) -> Pet: ...

    async def delete_pet(self, pet_id: int) -> None: ...

    async def list_hospitals(self) -> list[Hospital]: ...


@dataclass(frozen=True)
class RequestDetails:
    """A request with its pet and hospital resolved at read time."""

    request: EmergencyRequest
    pet: Optional[Pet]
    hospital: Optional[Hospital]


class DispatchGateway:
    def __init__(
        self,
        requests: RequestRepository,
        directory: Directory,
        rider_can_cancel: bool = False,
    ):
        self.requests = requests
        self.directory = directory
        self.rider_can_cancel = rider_can_cancel

    async def require_role(self, user_id: int, role: UserRole) -> User:
        user = await self.directory.get_user(user_id)
        if user.role != role:
            raise Forbidden(f"User {user_id} is not a {role.value}")
        return user

    async def _apply(
        self, request_id: int, action: str, actor: User, transition: Transition
    ) -> EmergencyRequest:
        try:
            updated = await self.requests.mutate(request_id, transition)
        except DispatchError as exc:
            logger.warning(
                "Rejected %s on request %d by user %d: %s",
                action, request_id, actor.id, exc,
            )
            raise
        logger.info(
            "Request %d %s by user %d -> %s",
            request_id, action, actor.id, updated.status.value,
        )
        return updated

    # ── Guardian operations ───────────────────────────────────────────

    async def create_request(
        self,
        guardian_id: int,
        pet_id: int,
        hospital_id: int,
        symptoms: str,
        pickup: Location,
    ) -> EmergencyRequest:
        await self.require_role(guardian_id, UserRole.GUARDIAN)
        pet = await self.directory.get_pet(pet_id)
        if pet.owner_id != guardian_id:
            raise Forbidden(f"Pet {pet_id} does not belong to guardian {guardian_id}")
        await self.directory.get_hospital(hospital_id)

        request = await self.requests.create(
            guardian_id=guardian_id,
            pet_id=pet_id,
            hospital_id=hospital_id,
            symptoms=symptoms,
            pickup=pickup,
        )
        logger.info(
            "Request %d created by guardian %d (pet=%d, hospital=%d)",
            request.id, guardian_id, pet_id, hospital_id,
        )
        return request

    async def my_requests(self, guardian_id: int) -> list[EmergencyRequest]:
        await self.directory.get_user(guardian_id)
        return await self.requests.list_for_guardian(guardian_id)

    async def cancel_request(
        self, request_id: int, acting_user_id: int
    ) -> EmergencyRequest:
        actor = await self.directory.get_user(acting_user_id)
        return await self._apply(
            request_id,
            "cancelled",
            actor,
            partial(
                transitions.cancel,
                actor=actor,
                rider_can_cancel=self.rider_can_cancel,
            ),
        )

    # ── Rider operations ──────────────────────────────────────────────

    async def available_requests(self) -> list[EmergencyRequest]:
        return await self.requests.list_available_for_riders()

    async def my_rider_requests(self, rider_id: int) -> list[EmergencyRequest]:
        await self.directory.get_user(rider_id)
        return await self.requests.list_for_rider(rider_id)

    async def accept_request(self, request_id: int, rider_id: int) -> EmergencyRequest:
        rider = await self.directory.get_user(rider_id)
        return await self._apply(
            request_id, "accepted", rider, partial(transitions.accept, rider=rider)
        )

    async def advance_status(self, request_id: int, rider_id: int) -> EmergencyRequest:
        rider = await self.directory.get_user(rider_id)
        return await self._apply(
            request_id, "advanced", rider, partial(transitions.advance, actor=rider)
        )

    # ── Reads ─────────────────────────────────────────────────────────

    async def get_request(self, request_id: int) -> EmergencyRequest:
        return await self.requests.get(request_id)

    async def view_request(self, request_id: int, user_id: int) -> EmergencyRequest:
        """Fetch a request on behalf of *user_id*.

        Visible to the owning guardian, to the bound rider, and to any
        rider while it is still pending (so it can be offered).
        """
        user = await self.directory.get_user(user_id)
        request = await self.requests.get(request_id)
        if user.role == UserRole.GUARDIAN and request.guardian_id == user.id:
            return request
        if user.role == UserRole.RIDER and (
            request.rider_id == user.id or request.status == RequestStatus.PENDING
        ):
            return request
        raise Forbidden(f"User {user_id} may not view request {request_id}")

    async def details(self, request: EmergencyRequest) -> RequestDetails:
        return RequestDetails(
            request=request,
            pet=await self.directory.find_pet(request.pet_id),
            hospital=await self.directory.find_hospital(request.hospital_id),
        )

    async def rider_display_location(
        self, request_id: int, last_known: Location
    ) -> Location:
        return await self.locate(await self.requests.get(request_id), last_known)

    async def locate(self, request: EmergencyRequest, last_known: Location) -> Location:
        """Rider display position computed from this snapshot of *request*."""
        hospital = await self.directory.find_hospital(request.hospital_id)
        return rider_display_location(
            request.status,
            request.pickup,
            hospital.location if hospital else None,
            last_known,
            rider_bound=request.rider_id is not None,
        )

    # ── Pets ──────────────────────────────────────────────────────────

    async def my_pets(self, owner_id: int) -> list[Pet]:
        await self.directory.get_user(owner_id)
        return await self.directory.list_pets_for_owner(owner_id)

    async def register_pet(self, owner_id: int, pet: Pet) -> Pet:
        await self.require_role(owner_id, UserRole.GUARDIAN)
        created = await self.directory.add_pet(replace(pet, owner_id=owner_id))
        logger.info("Pet %d registered by guardian %d", created.id, owner_id)
        return created

    async def _owned_pet(self, pet_id: int, owner_id: int) -> Pet:
        await self.directory.get_user(owner_id)
        pet = await self.directory.get_pet(pet_id)
        if pet.owner_id != owner_id:
            raise Forbidden(f"Pet {pet_id} does not belong to user {owner_id}")
        return pet

    async def update_pet(self, pet_id: int, owner_id: int, **changes) -> Pet:
        pet = await self._owned_pet(pet_id, owner_id)
        return await self.directory.update_pet(replace(pet, **changes))

    async def delete_pet(self, pet_id: int, owner_id: int) -> None:
        """Remove a pet from its owner's list.

        Requests already made for it keep resolving the pet at read time.
        """
        await self._owned_pet(pet_id, owner_id)
        await self.directory.delete_pet(pet_id)
        logger.info("Pet %d deleted by guardian %d", pet_id, owner_id)
