"""Weekly menu entities: the published week, its line items and the per-day view."""
from typing import List, Optional
from menu.domain.Dish import Dish


def _coerce_dish(value) -> Optional[Dish]:
    # Joined rows sometimes arrive as a one-element list
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, Dish):
        return value
    if isinstance(value, dict):
        return Dish.from_dict(value)
    return None


class WeeklyMenuItem:
    def __init__(self, id: str = "", weekly_menu_id: str = "", dish_id: Optional[str] = None,
                 day_of_week: Optional[int] = None, meal_position: Optional[int] = None,
                 is_available: bool = True, max_portions: Optional[int] = None,
                 current_orders: int = 0, created_at: Optional[str] = None,
                 dish: Optional[Dish] = None):
        self.id = id
        self.weekly_menu_id = weekly_menu_id
        self.dish_id = dish_id
        self.day_of_week = day_of_week
        self.meal_position = meal_position
        self.is_available = is_available
        self.max_portions = max_portions
        self.current_orders = current_orders
        self.created_at = created_at
        self.dish = dish

    def __str__(self) -> str:
        name = self.dish.name if self.dish else "?"
        return f"{name} day={self.day_of_week} pos={self.meal_position}"

    __repr__ = __str__

    def remaining_portions(self) -> Optional[int]:
        """Portions still orderable, or None when the item is unlimited."""
        if self.max_portions is None:
            return None
        return max(0, self.max_portions - (self.current_orders or 0))

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        return WeeklyMenuItem(
            id=d.get("id", ""),
            weekly_menu_id=d.get("weekly_menu_id", ""),
            dish_id=d.get("dish_id"),
            day_of_week=d.get("day_of_week"),
            meal_position=d.get("meal_position"),
            is_available=bool(d.get("is_available", True)),
            max_portions=d.get("max_portions"),
            current_orders=d.get("current_orders", 0) or 0,
            created_at=d.get("created_at"),
            dish=_coerce_dish(d.get("dish")),
        )

    def to_dict(self, include_dish: bool = True):
        data = {
            "id": self.id,
            "weekly_menu_id": self.weekly_menu_id,
            "dish_id": self.dish_id,
            "day_of_week": self.day_of_week,
            "meal_position": self.meal_position,
            "is_available": self.is_available,
            "max_portions": self.max_portions,
            "current_orders": self.current_orders,
            "created_at": self.created_at,
        }
        if include_dish:
            data["dish"] = self.dish.to_dict() if self.dish else None
        return data


class WeeklyMenu:
    def __init__(self, id: str = "", template_id: Optional[str] = None,
                 week_start_date: Optional[str] = None, week_number: Optional[int] = None,
                 order_deadline: Optional[str] = None, delivery_date: Optional[str] = None,
                 status: str = "draft", published_at: Optional[str] = None,
                 created_at: Optional[str] = None, updated_at: Optional[str] = None,
                 items: Optional[List[WeeklyMenuItem]] = None):
        self.id = id
        self.template_id = template_id
        self.week_start_date = week_start_date
        self.week_number = week_number
        self.order_deadline = order_deadline
        self.delivery_date = delivery_date
        self.status = status
        self.published_at = published_at
        self.created_at = created_at
        self.updated_at = updated_at
        self.items = items[:] if items else []

    def __str__(self) -> str:
        return f"WeeklyMenu {self.week_start_date} (week {self.week_number}) - {self.status}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        return WeeklyMenu(
            id=d.get("id", ""),
            template_id=d.get("template_id"),
            week_start_date=d.get("week_start_date"),
            week_number=d.get("week_number"),
            order_deadline=d.get("order_deadline"),
            delivery_date=d.get("delivery_date"),
            status=d.get("status", "draft"),
            published_at=d.get("published_at"),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
            items=[WeeklyMenuItem.from_dict(i) for i in d.get("items", []) or []],
        )

    def to_dict(self, include_items: bool = True):
        data = {
            "id": self.id,
            "template_id": self.template_id,
            "week_start_date": self.week_start_date,
            "week_number": self.week_number,
            "order_deadline": self.order_deadline,
            "delivery_date": self.delivery_date,
            "status": self.status,
            "published_at": self.published_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_items:
            data["items"] = [i.to_dict() for i in self.items]
        return data


class DayMenu:
    """One day of a weekly menu: derived for presentation, never persisted."""

    def __init__(self, day_of_week: int, day_name: str, date: str,
                 dishes: Optional[List[WeeklyMenuItem]] = None):
        self.day_of_week = day_of_week
        self.day_name = day_name
        self.date = date
        self.dishes = dishes[:] if dishes else []

    def __str__(self) -> str:
        return f"{self.day_name} {self.date}: " + ", ".join(str(d) for d in self.dishes)

    __repr__ = __str__

    def __eq__(self, other):
        if not isinstance(other, DayMenu):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self):
        return {
            "dayOfWeek": self.day_of_week,
            "dayName": self.day_name,
            "date": self.date,
            "dishes": [d.to_dict() for d in self.dishes],
        }
