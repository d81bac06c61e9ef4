from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from menu.api.deps import get_menu_cache, get_repository, public_rate_limit
from menu.infra.Menu_Repository import MenuRepository
from menu.logic.menus.workflow import current_menu
from menu.logic.schedule.week_schedule import (
    parse_week_start,
    today,
    upcoming_week_starts,
    week_schedule,
    week_start_for_date,
)
from menu.utilities import config
from menu.utilities.cache import SimpleCache, cache_key

router = APIRouter(prefix="/api/menu", dependencies=[Depends(public_rate_limit)])

CURRENT_MENU_KEY = "weekly-menu-current"


def _public_headers() -> dict:
    ttl = config.MENU_CACHE_TTL_SECONDS
    return {"Cache-Control": f"public, max-age={ttl}, s-maxage={ttl}, stale-while-revalidate=60"}


@router.get("/weekly/current")
def weekly_menu_current(response: Response,
                        repo: MenuRepository = Depends(get_repository),
                        cache: SimpleCache = Depends(get_menu_cache)):
    """Published menu customers can still order from, with dishes grouped per day."""
    response.headers.update(_public_headers())
    cached = cache.get(CURRENT_MENU_KEY)
    if cached is not None:
        return cached

    menu = current_menu(repo)
    if menu is None:
        raise HTTPException(status_code=404, detail="No menu available for this week.",
                            headers=_public_headers())
    payload = {"menu": menu}
    cache.set(CURRENT_MENU_KEY, payload, ttl=config.MENU_CACHE_TTL_SECONDS)
    return payload


@router.get("/schedule")
def menu_schedule(response: Response,
                  week_start: Optional[str] = Query(default=None,
                                                    description="Week start (YYYY-MM-DD); current week if omitted"),
                  cache: SimpleCache = Depends(get_menu_cache)):
    start = parse_week_start(week_start) if week_start is not None else week_start_for_date(today())
    response.headers.update(_public_headers())
    key = cache_key({"route": "schedule", "week_start": start.isoformat()})
    cached = cache.get(key)
    if cached is None:
        cached = week_schedule(start)
        cache.set(key, cached, ttl=config.MENU_CACHE_TTL_SECONDS)
    return cached


@router.get("/upcoming-weeks")
def menu_upcoming_weeks(response: Response,
                        count: int = Query(default=4, ge=1, le=12),
                        cache: SimpleCache = Depends(get_menu_cache)):
    response.headers.update(_public_headers())
    # Keyed by today's date so the list moves on at midnight
    key = cache_key({"route": "upcoming-weeks", "count": count, "today": today().isoformat()})
    cached = cache.get(key)
    if cached is None:
        weeks = [week_schedule(d) for d in upcoming_week_starts(count)]
        cached = {"count": len(weeks), "weeks": weeks}
        cache.set(key, cached, ttl=config.MENU_CACHE_TTL_SECONDS)
    return cached
