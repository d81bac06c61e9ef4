"""
Input validation schemas using Pydantic for the admin and public API payloads.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional
from uuid import UUID

from menu.domain.errors import InvalidInput
from menu.logic.schedule.week_schedule import parse_week_start
from menu.utilities.constants import MAX_MEAL_POSITION, MIN_MEAL_POSITION

MenuTheme = Literal["traditional", "street_food", "regional", "fusion", "vegetarian"]
MenuStatus = Literal["draft", "published", "closed", "completed", "archived"]


def _clean_optional(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def _week_start(v):
    try:
        return parse_week_start(v).isoformat()
    except InvalidInput as e:
        raise ValueError(str(e)) from e


class DishInput(BaseModel):
    """Schema for a new dish."""
    name: str = Field(..., min_length=1, max_length=200)
    name_my: Optional[str] = None
    description: Optional[str] = None
    description_my: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    price_cents: Optional[int] = Field(None, ge=0)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Dish name cannot be empty')
        return v.strip()

    @field_validator('name_my', 'description', 'description_my', 'image_url')
    @classmethod
    def strip_optional(cls, v):
        return _clean_optional(v)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        """Drop empty tags."""
        return [tag.strip() for tag in v if tag and tag.strip()]


class TemplateDishSlot(BaseModel):
    """A dish placed on a day / meal slot of a template."""
    dish_id: UUID
    day_of_week: int = Field(..., ge=0, le=6)
    meal_position: int = Field(..., ge=MIN_MEAL_POSITION, le=MAX_MEAL_POSITION)


class TemplateDishInput(TemplateDishSlot):
    template_id: UUID


class TemplateDishesInput(BaseModel):
    dishes: List[TemplateDishInput] = Field(..., min_length=1)


class MenuTemplateInput(BaseModel):
    name: str = Field(..., min_length=1)
    name_my: Optional[str] = None
    description: Optional[str] = None
    description_my: Optional[str] = None
    theme: Optional[MenuTheme] = None

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Template name cannot be empty')
        return v.strip()

    @field_validator('name_my', 'description', 'description_my')
    @classmethod
    def strip_optional(cls, v):
        return _clean_optional(v)


class MenuTemplateWithDishesInput(MenuTemplateInput):
    dishes: List[TemplateDishSlot] = Field(..., min_length=1)


class GenerateWeeklyMenuInput(BaseModel):
    """Either a single template_id, or the full rotation of template ids."""
    week_start_date: str
    template_id: Optional[UUID] = None
    template_ids: Optional[List[UUID]] = None

    @field_validator('week_start_date')
    @classmethod
    def validate_week_start(cls, v):
        return _week_start(v)

    @model_validator(mode='after')
    def one_template_source(self):
        if (self.template_id is None) == (self.template_ids is None):
            raise ValueError('Provide exactly one of template_id or template_ids')
        return self


class UpdateWeeklyMenuStatusInput(BaseModel):
    weekly_menu_id: UUID
    status: MenuStatus


class UpdateWeeklyMenuItemInput(BaseModel):
    is_available: Optional[bool] = None
    max_portions: Optional[int] = Field(None, ge=0)
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    meal_position: Optional[int] = Field(None, ge=MIN_MEAL_POSITION, le=MAX_MEAL_POSITION)

    @model_validator(mode='after')
    def has_updates(self):
        if not self.model_fields_set:
            raise ValueError('No updates provided.')
        nulls = sorted(f for f in self.model_fields_set if getattr(self, f) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> dict:
        return self.model_dump(include=self.model_fields_set)


class ReorderWeeklyMenuItemInput(BaseModel):
    item_id: UUID
    direction: Literal["up", "down"]
