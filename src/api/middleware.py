"""Rate limiter shared by all routers (per client address)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import settings

limiter = Limiter(key_func=get_remote_address)

_rate_limit = settings.rate_limit


def configure_rate_limit(limit: str) -> None:
    """Set the per-client limit; called by ``create_app`` with its settings."""
    global _rate_limit
    _rate_limit = limit


def rate_limit() -> str:
    """Evaluated on every request, so the app's configured limit applies."""
    return _rate_limit
