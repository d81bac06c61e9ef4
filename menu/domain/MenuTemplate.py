"""Menu template entities: a reusable week of dishes the rotation draws from."""
from typing import List, Optional
from menu.domain.Dish import Dish


class TemplateDish:
    def __init__(self, id: str = "", template_id: str = "", dish_id: str = "",
                 day_of_week: int = 0, meal_position: int = 1,
                 created_at: Optional[str] = None, dish: Optional[Dish] = None):
        self.id = id
        self.template_id = template_id
        self.dish_id = dish_id
        self.day_of_week = day_of_week
        self.meal_position = meal_position
        self.created_at = created_at
        self.dish = dish

    def __str__(self) -> str:
        return f"TemplateDish {self.dish_id} day={self.day_of_week} pos={self.meal_position}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        dish = d.get("dish")
        return TemplateDish(
            id=d.get("id", ""),
            template_id=d.get("template_id", ""),
            dish_id=d.get("dish_id", ""),
            day_of_week=d.get("day_of_week", 0),
            meal_position=d.get("meal_position", 1),
            created_at=d.get("created_at"),
            dish=Dish.from_dict(dish) if isinstance(dish, dict) else dish,
        )

    def to_dict(self, include_dish: bool = True):
        data = {
            "id": self.id,
            "template_id": self.template_id,
            "dish_id": self.dish_id,
            "day_of_week": self.day_of_week,
            "meal_position": self.meal_position,
            "created_at": self.created_at,
        }
        if include_dish:
            data["dish"] = self.dish.to_dict() if self.dish else None
        return data


class MenuTemplate:
    def __init__(self, id: str = "", name: str = "", name_my: Optional[str] = None,
                 description: Optional[str] = None, description_my: Optional[str] = None,
                 theme: Optional[str] = None, is_active: bool = True, created_by: Optional[str] = None,
                 created_at: Optional[str] = None, updated_at: Optional[str] = None,
                 dishes: Optional[List[TemplateDish]] = None):
        self.id = id
        self.name = name
        self.name_my = name_my
        self.description = description
        self.description_my = description_my
        self.theme = theme
        self.is_active = is_active
        self.created_by = created_by
        self.created_at = created_at
        self.updated_at = updated_at
        self.dishes = dishes[:] if dishes else []

    def __str__(self) -> str:
        return f"{self.name} ({self.theme or 'no theme'}) - {len(self.dishes)} dishes"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        return MenuTemplate(
            id=d.get("id", ""),
            name=d.get("name", ""),
            name_my=d.get("name_my"),
            description=d.get("description"),
            description_my=d.get("description_my"),
            theme=d.get("theme"),
            is_active=bool(d.get("is_active", True)),
            created_by=d.get("created_by"),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
            dishes=[TemplateDish.from_dict(td) for td in d.get("dishes", []) or []],
        )

    def to_dict(self, include_dishes: bool = True):
        data = {
            "id": self.id,
            "name": self.name,
            "name_my": self.name_my,
            "description": self.description,
            "description_my": self.description_my,
            "theme": self.theme,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_dishes:
            data["dishes"] = [td.to_dict() for td in self.dishes]
        return data
