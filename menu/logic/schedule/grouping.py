"""Day grouping for weekly menus.

Turns the flat list of menu line items loaded for a week into the per-day
structure the menu pages and the JSON API present. Items that were only
partially joined (no day assigned, or the dish row is missing) are dropped
without notice; referential integrity is the store's job.
"""
from collections import OrderedDict
from datetime import timedelta
from typing import Any, Dict, Iterable, List

from menu.domain.WeeklyMenu import DayMenu, WeeklyMenuItem
from menu.logic.schedule.week_schedule import DateLike, parse_week_start
from menu.utilities.constants import DAY_LABELS


def _day_name(day_of_week: int) -> str:
    if 0 <= day_of_week < len(DAY_LABELS):
        return DAY_LABELS[day_of_week]
    return ""


def _position(item: WeeklyMenuItem) -> int:
    return item.meal_position if item.meal_position is not None else 0


def group_menu_items_by_day(items: Iterable[Any], week_start_date: DateLike) -> List[DayMenu]:
    """Group menu items into DayMenu objects.

    Args:
        items: WeeklyMenuItem objects (plain dicts are converted).
        week_start_date: YYYY-MM-DD string or date of the week's first day.

    Returns:
        DayMenus ascending by day_of_week, each with its dishes ascending by
        meal_position (missing positions count as 0, ties keep input order).
        Only days with at least one usable item are present.
    """
    start = parse_week_start(week_start_date)
    grouped: Dict[int, List[WeeklyMenuItem]] = OrderedDict()

    for raw in items:
        item = WeeklyMenuItem.from_dict(raw) if isinstance(raw, dict) else raw
        if item.day_of_week is None or not item.dish:
            continue
        grouped.setdefault(item.day_of_week, []).append(item)

    days = []
    for day_of_week, day_items in grouped.items():
        days.append(DayMenu(
            day_of_week=day_of_week,
            day_name=_day_name(day_of_week),
            date=(start + timedelta(days=day_of_week)).isoformat(),
            dishes=sorted(day_items, key=_position),
        ))
    days.sort(key=lambda d: d.day_of_week)
    return days


def day_menus_to_dicts(day_menus: Iterable[DayMenu]) -> List[Dict[str, Any]]:
    return [d.to_dict() for d in day_menus]


__all__ = ['group_menu_items_by_day', 'day_menus_to_dicts']
