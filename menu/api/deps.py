"""Shared FastAPI dependencies: repository, admin guard, rate limiting and app state accessors."""
import logging
import math
from typing import Optional

from fastapi import Header, HTTPException, Request, Response

from menu.events.Event_Bus import EventBus
from menu.infra.Menu_Repository import MenuRepository
from menu.infra.paths import SEED_FILE
from menu.utilities import config
from menu.utilities.cache import SimpleCache
from menu.utilities.constants import NO_STORE_HEADERS

logger = logging.getLogger(__name__)


def get_repository() -> MenuRepository:
    return MenuRepository(config.MENU_DATA_FILE, seed_file=SEED_FILE)


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_menu_cache(request: Request) -> SimpleCache:
    return request.app.state.menu_cache


def require_admin(x_admin_token: Optional[str] = Header(default=None)):
    """Admin routes need X-Admin-Token when ADMIN_API_TOKEN is configured."""
    expected = config.ADMIN_API_TOKEN
    if expected and x_admin_token != expected:
        raise HTTPException(status_code=403, detail="Admin access required.", headers=NO_STORE_HEADERS)


def no_store(response: Response):
    response.headers.update(NO_STORE_HEADERS)


def public_rate_limit(request: Request, response: Response):
    limiter = request.app.state.rate_limiter
    client = request.client.host if request.client else "anonymous"
    result = limiter.hit(f"public:{client}", config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW_SECONDS)
    if not result.allowed:
        logger.warning("Rate limited public request from %s to %s", client, request.url.path)
        raise HTTPException(
            status_code=429,
            detail="Too many requests.",
            headers={"Retry-After": str(max(1, math.ceil(result.reset_seconds)))},
        )
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)


__all__ = [
    'get_repository', 'get_event_bus', 'get_menu_cache',
    'require_admin', 'no_store', 'public_rate_limit',
]
