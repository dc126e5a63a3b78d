"""
Rider display position derived from request status.

Assumption
----------
There is no live telemetry feed behind the map, so the rider marker is
placed by a fixed policy: half-way to the pickup once assigned, on the
pickup while picking up, half-way to the hospital while en route, and on
the hospital once completed.  Midpoints are the plain arithmetic mean of
latitude and longitude, with no geodesic correction, which is only
reasonable over the short intra-city distances involved.

Complexity: O(1) per call.
"""

from __future__ import annotations

from typing import Optional

from .entities import Location
from .enums import RequestStatus


def midpoint(a: Location, b: Location) -> Location:
    return Location(
        latitude=(a.latitude + b.latitude) / 2,
        longitude=(a.longitude + b.longitude) / 2,
    )


def rider_display_location(
    status: RequestStatus,
    pickup: Location,
    hospital: Optional[Location],
    last_known: Location,
    rider_bound: bool = True,
) -> Location:
    """Return where the rider should be drawn for a request in *status*."""
    if not rider_bound:
        return last_known

    if status == RequestStatus.RIDER_ASSIGNED:
        return midpoint(last_known, pickup)
    if status == RequestStatus.PICKING_UP:
        return pickup
    if hospital is None:
        return last_known
    if status == RequestStatus.ON_WAY_TO_HOSPITAL:
        return midpoint(pickup, hospital)
    if status == RequestStatus.COMPLETED:
        return hospital
    return last_known
