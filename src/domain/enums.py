"""Domain enumerations and the human-facing status vocabulary."""

import enum


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    RIDER_ASSIGNED = "rider_assigned"
    PICKING_UP = "picking_up"
    ON_WAY_TO_HOSPITAL = "on_way_to_hospital"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class UserRole(str, enum.Enum):
    GUARDIAN = "guardian"
    RIDER = "rider"


class PetSize(str, enum.Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


STATUS_LABELS: dict[RequestStatus, str] = {
    RequestStatus.PENDING: "Finding a rider",
    RequestStatus.RIDER_ASSIGNED: "Rider assigned",
    RequestStatus.PICKING_UP: "Picking up",
    RequestStatus.ON_WAY_TO_HOSPITAL: "On the way to hospital",
    RequestStatus.COMPLETED: "Completed",
    RequestStatus.CANCELLED: "Cancelled",
}

STATUS_DESCRIPTIONS: dict[RequestStatus, str] = {
    RequestStatus.PENDING: "Looking for a nearby rider to take the request.",
    RequestStatus.RIDER_ASSIGNED: "A rider accepted and is heading to the pickup point.",
    RequestStatus.PICKING_UP: "The rider has arrived and is picking up your pet.",
    RequestStatus.ON_WAY_TO_HOSPITAL: "Your pet is on the way to the hospital.",
    RequestStatus.COMPLETED: "Your pet arrived safely at the hospital.",
    RequestStatus.CANCELLED: "The request was cancelled.",
}

# Rider-facing button text for the action that advances each status
NEXT_ACTION_LABELS: dict[RequestStatus, str] = {
    RequestStatus.RIDER_ASSIGNED: "Start pickup",
    RequestStatus.PICKING_UP: "Depart for hospital",
    RequestStatus.ON_WAY_TO_HOSPITAL: "Complete",
}
