"""
FastAPI application factory.

* Wires the storage backend (in-memory demo store or SQL) and the rider
  presence backend (in-memory or Redis) onto ``app.state``.
* Seeds the demo requests on startup when running in memory mode.
* Maps dispatch errors to HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import configure_rate_limit, limiter
from src.api.routes import admin, reference, requests, riders
from src.config import Settings, settings as default_settings
from src.domain.entities import (
    AlreadyAssigned,
    DispatchError,
    Forbidden,
    InvalidTransition,
    NotFound,
)
from src.infrastructure import demo_data
from src.infrastructure.database import make_engine, make_session_factory
from src.infrastructure.memory import InMemoryDirectory, InMemoryRequestRepository
from src.infrastructure.presence import InMemoryRiderPresence, RedisRiderPresence
from src.infrastructure.redis_client import create_redis
from src.services.dispatch import DispatchGateway

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[DispatchError], int] = {
    NotFound: 404,
    Forbidden: 403,
    InvalidTransition: 409,
    AlreadyAssigned: 409,
}


async def _dispatch_error_handler(request: Request, exc: DispatchError):
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(type(exc), 400),
        content={"detail": str(exc), "error": exc.kind},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed demo requests on startup; release connections on shutdown."""
    state = app.state
    if state.settings.seed_demo_data and state.session_factory is None:
        gateway = DispatchGateway(
            state.requests,
            state.directory,
            rider_can_cancel=state.settings.rider_can_cancel,
        )
        count = await demo_data.seed_requests(gateway)
        logger.info("Demo mode: seeded %d requests", count)
    yield
    if state.engine is not None:
        await state.engine.dispose()
    if state.redis is not None:
        await state.redis.aclose()


def _configure_state(app: FastAPI, settings: Settings) -> None:
    state = app.state
    state.settings = settings
    state.engine = None
    state.session_factory = None
    state.requests = None
    state.directory = None
    state.redis = None

    if settings.storage_backend == "sql":
        state.engine = make_engine(settings.database_url)
        state.session_factory = make_session_factory(state.engine)
    elif settings.storage_backend == "memory":
        state.requests = InMemoryRequestRepository()
        state.directory = InMemoryDirectory(
            demo_data.USERS, demo_data.PETS, demo_data.HOSPITALS
        )
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")

    if settings.presence_backend == "redis":
        state.redis = create_redis(settings.redis_url)
        state.presence = RedisRiderPresence(state.redis, settings.presence_ttl_seconds)
    elif settings.presence_backend == "memory":
        state.presence = InMemoryRiderPresence(settings.presence_ttl_seconds)
    else:
        raise ValueError(f"Unknown presence backend: {settings.presence_backend!r}")

    logger.info(
        "Storage backend=%s, presence backend=%s",
        settings.storage_backend,
        settings.presence_backend,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(
        title="Pet Emergency Transport Dispatch API",
        description=(
            "Connects guardians who need to get a sick pet to hospital with "
            "riders who transport it.  Owns the emergency request lifecycle: "
            "creation, rider acceptance, status progression and cancellation."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    settings = settings or default_settings
    _configure_state(app, settings)

    # Rate limiter
    configure_rate_limit(settings.rate_limit)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(DispatchError, _dispatch_error_handler)

    # Routers
    app.include_router(requests.router, prefix="/api/v1")
    app.include_router(riders.router, prefix="/api/v1")
    app.include_router(reference.pets_router, prefix="/api/v1")
    app.include_router(reference.hospitals_router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
