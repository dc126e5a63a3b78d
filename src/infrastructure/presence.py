"""
Rider presence: last-known coordinate and on-duty flag per rider.

The rider app reports its position periodically; the dispatch gateway
only ever reads the last report to feed the location interpolator.
Reports expire after ``ttl_seconds``, so a rider who closed the app
stops counting as active and has no last-known position.

Redis layout
------------
* ``rider:{id}:presence`` -- hash ``{lat, lng, active}`` with a TTL
* ``riders:active``       -- sorted set of on-duty rider ids, scored by
  the epoch second their report expires; stale members are trimmed with
  ``ZREMRANGEBYSCORE`` before every read
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Optional

import redis.asyncio as aioredis

from src.domain.entities import Location

ACTIVE_SET = "riders:active"

Clock = Callable[[], float]


class InMemoryRiderPresence:
    def __init__(self, ttl_seconds: int = 300, clock: Clock = time.time) -> None:
        self.ttl = ttl_seconds
        self._clock = clock
        self._reports: dict[int, tuple[Location, bool, float]] = {}

    async def update(self, rider_id: int, location: Location, is_active: bool) -> None:
        self._reports[rider_id] = (location, is_active, self._clock() + self.ttl)

    def _live(self) -> dict[int, tuple[Location, bool, float]]:
        now = self._clock()
        return {rid: r for rid, r in self._reports.items() if r[2] > now}

    async def last_known(self, rider_id: int) -> Optional[Location]:
        report = self._live().get(rider_id)
        return report[0] if report else None

    async def active_riders(self) -> list[int]:
        return sorted(rid for rid, (_, active, _) in self._live().items() if active)


class RedisRiderPresence:
    def __init__(
        self, client: aioredis.Redis, ttl_seconds: int = 300, clock: Clock = time.time
    ):
        self.redis = client
        self.ttl = ttl_seconds
        self._clock = clock

    @staticmethod
    def _key(rider_id: int) -> str:
        return f"rider:{rider_id}:presence"

    async def update(self, rider_id: int, location: Location, is_active: bool) -> None:
        key = self._key(rider_id)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hset(
                key,
                mapping={
                    "lat": location.latitude,
                    "lng": location.longitude,
                    "active": int(is_active),
                },
            )
            pipe.expire(key, self.ttl)
            if is_active:
                pipe.zadd(ACTIVE_SET, {rider_id: self._clock() + self.ttl})
            else:
                pipe.zrem(ACTIVE_SET, rider_id)
            await pipe.execute()

    async def last_known(self, rider_id: int) -> Optional[Location]:
        data = await self.redis.hgetall(self._key(rider_id))
        if not data:
            return None
        return Location(float(data["lat"]), float(data["lng"]))

    async def active_riders(self) -> list[int]:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(ACTIVE_SET, "-inf", self._clock())
            pipe.zrange(ACTIVE_SET, 0, -1)
            _, members = await pipe.execute()
        return sorted(int(m) for m in members)
