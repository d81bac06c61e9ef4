from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from typing import Optional
import logging

from menu.api.routes import admin, public
from menu.domain.errors import InvalidInput, MenuConflict, MenuNotFound
from menu.events.Event_Bus import EventBus
from menu.events.web_observers import EventRecorder
from menu.utilities import config
from menu.utilities.cache import SimpleCache
from menu.utilities.rate_limit import RateLimiter

# Logging
logger = logging.getLogger("menu_app")


def create_app() -> FastAPI:
    """Build the API with its own event bus, recorder, cache and rate limiter."""
    app = FastAPI(title="Weekly Menu API", debug=config.DEBUG)

    app.state.event_bus = EventBus()
    app.state.event_recorder = EventRecorder()
    app.state.event_recorder.attach(app.state.event_bus)
    app.state.menu_cache = SimpleCache(default_ttl=config.MENU_CACHE_TTL_SECONDS)
    app.state.rate_limiter = RateLimiter()

    app.include_router(public.router)
    app.include_router(admin.router)

    # -------------------- Error mapping --------------------
    @app.exception_handler(InvalidInput)
    async def _invalid_input(request: Request, exc: InvalidInput):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(MenuNotFound)
    async def _not_found(request: Request, exc: MenuNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(MenuConflict)
    async def _conflict(request: Request, exc: MenuConflict):
        logger.warning("Conflict on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # -------------------- Events --------------------
    @app.get("/api/events")
    def api_events(request: Request, since: Optional[int] = Query(default=None, ge=0)):
        """Menu workflow events newer than ``since``; poll again with next_cursor."""
        return request.app.state.event_recorder.get_events(since)

    @app.get("/api/health")
    def api_health():
        return {"status": "ok"}

    logger.info("Weekly Menu API ready (timezone=%s, rotation=%s x%d)",
                config.MENU_TIMEZONE, config.ROTATION_MODE, config.ROTATION_LENGTH)
    return app


app = create_app()
