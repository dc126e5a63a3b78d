"""
Request lifecycle transition table.

State machine
-------------
  pending -> rider_assigned -> picking_up -> on_way_to_hospital -> completed
  pending | rider_assigned -> cancelled

``pending`` leaves the chain only through :func:`accept`; the generic
:func:`advance` covers the three rider-driven hops after that.

Every function here is pure: it takes a request snapshot plus the acting
user and returns the next snapshot (or raises).  Serialization of
concurrent calls is the repository's job, never this module's.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Optional

from .entities import (
    AlreadyAssigned,
    EmergencyRequest,
    Forbidden,
    InvalidTransition,
    User,
)
from .enums import RequestStatus, UserRole

# A pure step from one request snapshot to the next; may raise DispatchError
Transition = Callable[[EmergencyRequest], EmergencyRequest]

NEXT_STATUS: dict[RequestStatus, RequestStatus] = {
    RequestStatus.RIDER_ASSIGNED: RequestStatus.PICKING_UP,
    RequestStatus.PICKING_UP: RequestStatus.ON_WAY_TO_HOSPITAL,
    RequestStatus.ON_WAY_TO_HOSPITAL: RequestStatus.COMPLETED,
}

CANCELLABLE = frozenset({RequestStatus.PENDING, RequestStatus.RIDER_ASSIGNED})

TERMINAL = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})


def next_status(current: RequestStatus) -> Optional[RequestStatus]:
    """Successor on the rider chain, or ``None`` for pending and terminal states."""
    return NEXT_STATUS.get(current)


def can_cancel(current: RequestStatus) -> bool:
    return current in CANCELLABLE


def accept(request: EmergencyRequest, rider: User) -> EmergencyRequest:
    """Bind *rider* to a pending request."""
    if rider.role != UserRole.RIDER:
        raise Forbidden(f"User {rider.id} is not a rider")
    if request.status in TERMINAL:
        raise InvalidTransition(
            f"Request {request.id} is {request.status.value} and cannot be accepted"
        )
    if request.rider_id is not None:
        raise AlreadyAssigned(
            f"Request {request.id} is already assigned to rider {request.rider_id}"
        )
    if request.status != RequestStatus.PENDING:
        raise InvalidTransition(
            f"Cannot accept request {request.id} in status {request.status.value}"
        )
    return replace(request, status=RequestStatus.RIDER_ASSIGNED, rider_id=rider.id)


def advance(request: EmergencyRequest, actor: User) -> EmergencyRequest:
    """Move a rider-owned request one step along the chain."""
    if actor.role != UserRole.RIDER:
        raise Forbidden(f"User {actor.id} is not a rider")
    successor = next_status(request.status)
    if successor is None:
        raise InvalidTransition(
            f"Request {request.id} in status {request.status.value} cannot advance"
        )
    if request.rider_id != actor.id:
        raise Forbidden(f"Rider {actor.id} is not assigned to request {request.id}")
    return replace(request, status=successor)


def cancel(
    request: EmergencyRequest, actor: User, rider_can_cancel: bool = False
) -> EmergencyRequest:
    """Cancel on behalf of the owning guardian (or the bound rider, if allowed)."""
    if not can_cancel(request.status):
        raise InvalidTransition(
            f"Cannot cancel request {request.id} in status {request.status.value}"
        )
    is_owner = actor.role == UserRole.GUARDIAN and actor.id == request.guardian_id
    is_bound_rider = (
        rider_can_cancel
        and actor.role == UserRole.RIDER
        and request.rider_id is not None
        and actor.id == request.rider_id
    )
    if not (is_owner or is_bound_rider):
        raise Forbidden(f"User {actor.id} may not cancel request {request.id}")
    return replace(request, status=RequestStatus.CANCELLED)
