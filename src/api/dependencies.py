"""FastAPI dependency injection helpers."""

from collections.abc import AsyncIterator

from fastapi import Header, Request

from src.config import Settings
from src.infrastructure.repositories import SqlDirectory, SqlRequestRepository
from src.services.dispatch import DispatchGateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_presence(request: Request):
    return request.app.state.presence


async def get_gateway(request: Request) -> AsyncIterator[DispatchGateway]:
    """Yield a gateway over the configured backend.

    For the SQL backend each HTTP request gets its own session; commit on
    success, rollback on error.  The in-memory backend is shared app state.
    """
    state = request.app.state
    policy = state.settings.rider_can_cancel

    if state.session_factory is None:
        yield DispatchGateway(state.requests, state.directory, rider_can_cancel=policy)
        return

    async with state.session_factory() as session:
        try:
            yield DispatchGateway(
                SqlRequestRepository(session),
                SqlDirectory(session),
                rider_can_cancel=policy,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def acting_user_id(x_user_id: int = Header(..., description="Acting user id")) -> int:
    """Identity of the caller, asserted by the upstream auth layer."""
    return x_user_id
