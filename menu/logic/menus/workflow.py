"""Admin workflows over templates and weekly menus.

Functions take the repository (and optionally an event bus) explicitly so the
API layer, scripts and tests can hand in their own.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from menu.domain.MenuTemplate import MenuTemplate
from menu.domain.WeeklyMenu import WeeklyMenu, WeeklyMenuItem
from menu.domain.errors import InvalidInput, MenuConflict, MenuNotFound
from menu.events.Event_Bus import EventBus
from menu.events.event_helpers import (
    publish_item_updated,
    publish_menu_generated,
    publish_status_changed,
)
from menu.infra.Menu_Repository import MenuRepository
from menu.logic.schedule.grouping import day_menus_to_dicts, group_menu_items_by_day
from menu.logic.schedule.week_schedule import (
    RotationPolicy,
    format_timestamp,
    parse_timestamp,
    parse_week_start,
    template_for_week,
    week_schedule,
)
from menu.utilities.constants import MENU_STATUSES

logger = logging.getLogger(__name__)


def _position(item: WeeklyMenuItem) -> int:
    return item.meal_position if item.meal_position is not None else 0


# -------------------- templates --------------------
def create_template_with_dishes(repo: MenuRepository, data: Dict[str, Any], dishes: List[Dict[str, Any]],
                                created_by: Optional[str] = None) -> MenuTemplate:
    """Create an active template and its dishes; the template is removed again if the dishes fail."""
    template = repo.add_template(data, created_by=created_by)
    try:
        repo.upsert_template_dishes([{**d, "template_id": template.id} for d in dishes])
    except Exception:
        logger.error("Failed to save dishes for template %s; removing it", template.id)
        repo.delete_template(template.id)
        raise
    return repo.get_template(template.id)


# -------------------- weekly menus --------------------
def generate_weekly_menu(repo: MenuRepository, template_id: str, week_start_date: Any,
                         bus: Optional[EventBus] = None,
                         policy: Optional[RotationPolicy] = None) -> Tuple[WeeklyMenu, bool]:
    """Create the draft menu for a week from a template.

    Returns (menu, created). A week that already has a menu is returned as is
    with created=False, so repeated calls are safe.
    """
    start = parse_week_start(week_start_date)
    existing = repo.find_menu_by_week_start(start.isoformat())
    if existing:
        logger.info("Weekly menu for %s already exists (%s)", start, existing.id)
        return existing, False

    template = repo.get_template(template_id)
    if template is None:
        raise MenuNotFound("Menu template not found.")

    schedule = week_schedule(start, policy)
    try:
        menu = repo.add_weekly_menu({"template_id": template_id, "status": "draft", **schedule})
    except MenuConflict:
        # Another request created the week between the lookup and the insert
        existing = repo.find_menu_by_week_start(start.isoformat())
        if existing is None:
            raise
        logger.info("Weekly menu for %s was created concurrently (%s)", start, existing.id)
        return existing, False

    rows = [{
        "dish_id": td.dish_id,
        "day_of_week": td.day_of_week,
        "meal_position": td.meal_position,
        "is_available": True,
    } for td in template.dishes]
    if rows:
        try:
            repo.add_menu_items(menu.id, rows)
        except Exception:
            logger.error("Failed to copy template dishes into menu %s; removing it", menu.id)
            repo.delete_weekly_menu(menu.id)
            raise

    menu = repo.get_weekly_menu(menu.id)
    logger.info("Generated weekly menu %s for %s from template %s (%d items, week %s)",
                menu.id, start, template_id, len(rows), menu.week_number)
    publish_menu_generated(bus, menu, len(rows), template_id)
    return menu, True


def generate_from_rotation(repo: MenuRepository, week_start_date: Any, template_ids: Sequence[str],
                           bus: Optional[EventBus] = None,
                           policy: Optional[RotationPolicy] = None) -> Tuple[WeeklyMenu, bool]:
    """Generate the week's menu from whichever template of the rotation is due."""
    template_id = template_for_week(week_start_date, template_ids, policy)
    return generate_weekly_menu(repo, template_id, week_start_date, bus=bus, policy=policy)


def update_menu_status(repo: MenuRepository, menu_id: str, status: str,
                       now: Optional[datetime] = None, bus: Optional[EventBus] = None) -> WeeklyMenu:
    if status not in MENU_STATUSES:
        raise InvalidInput(f"Unknown menu status {status!r}")
    menu = repo.get_weekly_menu(menu_id, include_items=False)
    if menu is None:
        raise MenuNotFound("Weekly menu not found.")

    changes: Dict[str, Any] = {"status": status}
    if status == "published" and menu.status != "published":
        changes["published_at"] = format_timestamp(now or datetime.now(timezone.utc))
    updated = repo.update_weekly_menu(menu_id, changes)
    logger.info("Weekly menu %s status %s -> %s", menu_id, menu.status, status)
    publish_status_changed(bus, updated, menu.status, status)
    return updated


def menu_with_day_menus(menu: WeeklyMenu) -> Dict[str, Any]:
    data = menu.to_dict()
    if menu.week_start_date:
        data["day_menus"] = day_menus_to_dicts(group_menu_items_by_day(menu.items, menu.week_start_date))
    else:
        data["day_menus"] = []
    return data


def current_menu(repo: MenuRepository, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """The published menu with the earliest week start whose order deadline is still open."""
    now = now or datetime.now(timezone.utc)
    open_menus = []
    for menu in repo.list_weekly_menus(status="published"):
        if not menu.order_deadline:
            continue
        try:
            deadline = parse_timestamp(menu.order_deadline)
        except InvalidInput:
            logger.warning("Weekly menu %s has an unreadable order_deadline %r", menu.id, menu.order_deadline)
            continue
        if deadline >= now:
            open_menus.append(menu)
    if not open_menus:
        return None
    chosen = repo.get_weekly_menu(min(open_menus, key=lambda m: m.week_start_date or "").id)
    # Customers only see dishes that still exist
    chosen.items = [i for i in chosen.items if i.dish]
    data = menu_with_day_menus(chosen)
    template = repo.get_template(chosen.template_id) if chosen.template_id else None
    data["template"] = template_summary(template) if template else None
    return data


def template_summary(template: MenuTemplate) -> Dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "theme": template.theme,
    }


# -------------------- menu items --------------------
def update_menu_item(repo: MenuRepository, item_id: str, changes: Dict[str, Any],
                     bus: Optional[EventBus] = None) -> WeeklyMenuItem:
    if not changes:
        raise InvalidInput("No updates provided.")
    item = repo.update_menu_item(item_id, changes)
    publish_item_updated(bus, item, changes)
    return item


def reorder_menu_item(repo: MenuRepository, item_id: str, direction: str,
                      bus: Optional[EventBus] = None) -> List[WeeklyMenuItem]:
    """Swap an item's meal position with its neighbour on the same day.

    Returns that day's items in display order. Moving past either end is a no-op.
    """
    if direction not in ("up", "down"):
        raise InvalidInput("direction must be 'up' or 'down'")
    item = repo.get_menu_item(item_id)
    if item is None:
        raise MenuNotFound("Menu item not found.")

    siblings = sorted(
        (i for i in repo.list_menu_items(item.weekly_menu_id) if i.day_of_week == item.day_of_week),
        key=_position,
    )
    index = next(k for k, i in enumerate(siblings) if i.id == item_id)
    target_index = index - 1 if direction == "up" else index + 1
    if target_index < 0 or target_index >= len(siblings):
        return siblings

    target = siblings[target_index]
    changes = {
        item.id: {"meal_position": target.meal_position},
        target.id: {"meal_position": item.meal_position},
    }
    repo.update_menu_items(changes)
    publish_item_updated(bus, item, changes[item.id])

    return sorted(
        (i for i in repo.list_menu_items(item.weekly_menu_id) if i.day_of_week == item.day_of_week),
        key=_position,
    )


__all__ = [
    'create_template_with_dishes', 'generate_weekly_menu', 'generate_from_rotation',
    'update_menu_status', 'menu_with_day_menus', 'current_menu', 'template_summary',
    'update_menu_item', 'reorder_menu_item',
]
