"""
Distance calculation using the Haversine formula.

Assumption
----------
We use great-circle (Haversine) distance instead of a real routing engine
to keep the service self-contained.  It is only used to shortlist nearby
hospitals, where straight-line distance is good enough.

Complexity: O(1) per call.
"""

import math

EARTH_RADIUS_KM = 6_371.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def within_radius(hospitals, lat: float, lng: float, radius_km: float) -> list:
    """Hospitals within *radius_km* of (lat, lng), nearest first."""
    scored = [
        (haversine_km(lat, lng, h.location.latitude, h.location.longitude), h)
        for h in hospitals
    ]
    return [h for d, h in sorted(scored, key=lambda pair: pair[0]) if d <= radius_km]
