"""JSON-file store for dishes, menu templates and weekly menus.

The store is a single JSON document holding one list per table. Rows are
plain dicts; the repository joins them into domain objects on the way out
(``item.dish``, ``template.dishes``). A dangling ``dish_id`` joins to None.
"""
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from menu.domain.Dish import Dish
from menu.domain.MenuTemplate import MenuTemplate, TemplateDish
from menu.domain.WeeklyMenu import WeeklyMenu, WeeklyMenuItem
from menu.domain.errors import MenuConflict, MenuNotFound
from menu.infra.paths import MENU_DATA_FILE
from menu.logic.schedule.week_schedule import format_timestamp

logger = logging.getLogger(__name__)

TABLES = ("dishes", "menu_templates", "template_dishes", "weekly_menus", "weekly_menu_items")

_DISH_FIELDS = {"name", "name_my", "description", "description_my", "tags", "image_url", "price_cents"}
_TEMPLATE_FIELDS = {"name", "name_my", "description", "description_my", "theme", "is_active"}
_MENU_FIELDS = {"template_id", "week_start_date", "week_number", "order_deadline", "delivery_date",
                "status", "published_at"}
_ITEM_FIELDS = {"dish_id", "day_of_week", "meal_position", "is_available", "max_portions", "current_orders"}

# One lock for every repository instance: requests build their own repository
_STORE_LOCK = RLock()


def _now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def _new_id() -> str:
    return str(uuid4())


def _empty_store() -> Dict[str, List[dict]]:
    return {t: [] for t in TABLES}


def _pick(data: Dict[str, Any], allowed: Iterable[str]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k in allowed}


class MenuRepository:
    def __init__(self, path: Optional[Path] = None, seed_file: Optional[Path] = None):
        self.path = Path(path or MENU_DATA_FILE)
        self.seed_file = Path(seed_file) if seed_file else None

    # -------------------- storage --------------------
    def _initial_store(self) -> Dict[str, List[dict]]:
        if self.seed_file and self.seed_file.exists():
            with open(self.seed_file, encoding="utf-8") as f:
                store = json.load(f)
            logger.info("Seeding menu store %s from %s", self.path, self.seed_file)
            for table in TABLES:
                store.setdefault(table, [])
            return store
        return _empty_store()

    def _load(self) -> Dict[str, List[dict]]:
        if not self.path.exists():
            self._write(self._initial_store())
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                store = json.load(f) or {}
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in menu store %s: %s", self.path, e)
            raise MenuConflict(f"Menu store {self.path.name} is unreadable") from e
        for table in TABLES:
            store.setdefault(table, [])
        return store

    def _write(self, store: Dict[str, List[dict]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".menus_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(store, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    @contextmanager
    def _transaction(self):
        """Load, let the caller mutate, write back. Nothing is written if the body raises."""
        with _STORE_LOCK:
            store = self._load()
            yield store
            self._write(store)

    def _read(self) -> Dict[str, List[dict]]:
        with _STORE_LOCK:
            return self._load()

    # -------------------- joins --------------------
    @staticmethod
    def _dish_index(store) -> Dict[str, dict]:
        return {d["id"]: d for d in store["dishes"]}

    @staticmethod
    def _join_item(row: dict, dishes: Dict[str, dict]) -> WeeklyMenuItem:
        item = WeeklyMenuItem.from_dict(row)
        dish_row = dishes.get(row.get("dish_id"))
        item.dish = Dish.from_dict(dish_row) if dish_row else None
        return item

    def _join_template(self, row: dict, store) -> MenuTemplate:
        template = MenuTemplate.from_dict(row)
        dishes = self._dish_index(store)
        rows = [td for td in store["template_dishes"] if td["template_id"] == row["id"]]
        rows.sort(key=lambda td: (td["day_of_week"], td["meal_position"]))
        for td_row in rows:
            td = TemplateDish.from_dict(td_row)
            dish_row = dishes.get(td.dish_id)
            td.dish = Dish.from_dict(dish_row) if dish_row else None
            template.dishes.append(td)
        return template

    def _join_menu(self, row: dict, store, include_items: bool = True) -> WeeklyMenu:
        menu = WeeklyMenu.from_dict(row)
        if include_items:
            dishes = self._dish_index(store)
            menu.items = [self._join_item(i, dishes) for i in store["weekly_menu_items"]
                          if i["weekly_menu_id"] == row["id"]]
        return menu

    # -------------------- dishes --------------------
    def list_dishes(self) -> List[Dish]:
        store = self._read()
        return sorted((Dish.from_dict(d) for d in store["dishes"]), key=lambda d: d.name.lower())

    def get_dish(self, dish_id: str) -> Optional[Dish]:
        row = self._dish_index(self._read()).get(dish_id)
        return Dish.from_dict(row) if row else None

    def add_dish(self, data: Dict[str, Any]) -> Dish:
        row = {"id": data.get("id") or _new_id(), **_pick(data, _DISH_FIELDS)}
        with self._transaction() as store:
            if any(d["id"] == row["id"] for d in store["dishes"]):
                raise MenuConflict(f"Dish {row['id']} already exists")
            store["dishes"].append(row)
        return Dish.from_dict(row)

    # -------------------- templates --------------------
    def list_templates(self, include_dishes: bool = False) -> List[MenuTemplate]:
        store = self._read()
        rows = sorted(store["menu_templates"], key=lambda t: t.get("created_at") or "", reverse=True)
        if include_dishes:
            return [self._join_template(r, store) for r in rows]
        return [MenuTemplate.from_dict(r) for r in rows]

    def get_template(self, template_id: str) -> Optional[MenuTemplate]:
        store = self._read()
        for row in store["menu_templates"]:
            if row["id"] == template_id:
                return self._join_template(row, store)
        return None

    def add_template(self, data: Dict[str, Any], created_by: Optional[str] = None) -> MenuTemplate:
        now = _now()
        row = {
            "id": data.get("id") or _new_id(),
            **_pick(data, _TEMPLATE_FIELDS),
            "is_active": data.get("is_active", True),
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        with self._transaction() as store:
            store["menu_templates"].append(row)
        return MenuTemplate.from_dict(row)

    def delete_template(self, template_id: str) -> bool:
        with self._transaction() as store:
            before = len(store["menu_templates"])
            store["menu_templates"] = [t for t in store["menu_templates"] if t["id"] != template_id]
            store["template_dishes"] = [td for td in store["template_dishes"] if td["template_id"] != template_id]
            return len(store["menu_templates"]) != before

    def upsert_template_dishes(self, rows: List[Dict[str, Any]]) -> List[TemplateDish]:
        """Insert template dishes; an existing (template, day, position) slot is replaced."""
        saved: List[dict] = []
        with self._transaction() as store:
            template_ids = {t["id"] for t in store["menu_templates"]}
            dish_ids = {d["id"] for d in store["dishes"]}
            for data in rows:
                if data["template_id"] not in template_ids:
                    raise MenuNotFound(f"Menu template {data['template_id']} not found")
                if data["dish_id"] not in dish_ids:
                    raise MenuNotFound(f"Dish {data['dish_id']} not found")
                key = (data["template_id"], data["day_of_week"], data["meal_position"])
                existing = next((td for td in store["template_dishes"]
                                 if (td["template_id"], td["day_of_week"], td["meal_position"]) == key), None)
                if existing:
                    existing["dish_id"] = data["dish_id"]
                    saved.append(existing)
                else:
                    row = {
                        "id": _new_id(),
                        "template_id": data["template_id"],
                        "dish_id": data["dish_id"],
                        "day_of_week": data["day_of_week"],
                        "meal_position": data["meal_position"],
                        "created_at": _now(),
                    }
                    store["template_dishes"].append(row)
                    saved.append(row)
        return [TemplateDish.from_dict(r) for r in saved]

    # -------------------- weekly menus --------------------
    def list_weekly_menus(self, status: Optional[str] = None) -> List[WeeklyMenu]:
        store = self._read()
        rows = [m for m in store["weekly_menus"] if status is None or m.get("status") == status]
        rows.sort(key=lambda m: m.get("week_start_date") or "")
        return [self._join_menu(r, store, include_items=False) for r in rows]

    def get_weekly_menu(self, menu_id: str, include_items: bool = True) -> Optional[WeeklyMenu]:
        store = self._read()
        for row in store["weekly_menus"]:
            if row["id"] == menu_id:
                return self._join_menu(row, store, include_items)
        return None

    def find_menu_by_week_start(self, week_start_date: str) -> Optional[WeeklyMenu]:
        store = self._read()
        for row in store["weekly_menus"]:
            if row.get("week_start_date") == week_start_date:
                return self._join_menu(row, store, include_items=False)
        return None

    def add_weekly_menu(self, data: Dict[str, Any]) -> WeeklyMenu:
        now = _now()
        row = {
            "id": data.get("id") or _new_id(),
            "published_at": None,
            **_pick(data, _MENU_FIELDS),
            "created_at": now,
            "updated_at": now,
        }
        row.setdefault("status", "draft")
        with self._transaction() as store:
            if any(m.get("week_start_date") == row.get("week_start_date") for m in store["weekly_menus"]):
                raise MenuConflict(f"A weekly menu for {row.get('week_start_date')} already exists")
            store["weekly_menus"].append(row)
        return WeeklyMenu.from_dict(row)

    def update_weekly_menu(self, menu_id: str, changes: Dict[str, Any]) -> WeeklyMenu:
        with self._transaction() as store:
            row = next((m for m in store["weekly_menus"] if m["id"] == menu_id), None)
            if row is None:
                raise MenuNotFound(f"Weekly menu {menu_id} not found")
            row.update(_pick(changes, _MENU_FIELDS))
            row["updated_at"] = _now()
        return WeeklyMenu.from_dict(row)

    def delete_weekly_menu(self, menu_id: str) -> bool:
        with self._transaction() as store:
            before = len(store["weekly_menus"])
            store["weekly_menus"] = [m for m in store["weekly_menus"] if m["id"] != menu_id]
            store["weekly_menu_items"] = [i for i in store["weekly_menu_items"] if i["weekly_menu_id"] != menu_id]
            return len(store["weekly_menus"]) != before

    # -------------------- weekly menu items --------------------
    def add_menu_items(self, menu_id: str, rows: List[Dict[str, Any]]) -> List[WeeklyMenuItem]:
        created: List[dict] = []
        with self._transaction() as store:
            if not any(m["id"] == menu_id for m in store["weekly_menus"]):
                raise MenuNotFound(f"Weekly menu {menu_id} not found")
            for data in rows:
                row = {
                    "id": _new_id(),
                    "weekly_menu_id": menu_id,
                    "is_available": True,
                    "max_portions": None,
                    "current_orders": 0,
                    **_pick(data, _ITEM_FIELDS),
                    "created_at": _now(),
                }
                store["weekly_menu_items"].append(row)
                created.append(row)
            dishes = self._dish_index(store)
        return [self._join_item(r, dishes) for r in created]

    def list_menu_items(self, menu_id: str) -> List[WeeklyMenuItem]:
        store = self._read()
        dishes = self._dish_index(store)
        return [self._join_item(i, dishes) for i in store["weekly_menu_items"] if i["weekly_menu_id"] == menu_id]

    def get_menu_item(self, item_id: str) -> Optional[WeeklyMenuItem]:
        store = self._read()
        dishes = self._dish_index(store)
        for row in store["weekly_menu_items"]:
            if row["id"] == item_id:
                return self._join_item(row, dishes)
        return None

    def update_menu_items(self, changes_by_id: Dict[str, Dict[str, Any]]) -> List[WeeklyMenuItem]:
        """Apply several item updates in one write (all or nothing)."""
        updated: List[dict] = []
        with self._transaction() as store:
            index = {i["id"]: i for i in store["weekly_menu_items"]}
            missing = [item_id for item_id in changes_by_id if item_id not in index]
            if missing:
                raise MenuNotFound(f"Menu item {missing[0]} not found")
            for item_id, changes in changes_by_id.items():
                index[item_id].update(_pick(changes, _ITEM_FIELDS))
                updated.append(index[item_id])
            dishes = self._dish_index(store)
        return [self._join_item(r, dishes) for r in updated]

    def update_menu_item(self, item_id: str, changes: Dict[str, Any]) -> WeeklyMenuItem:
        return self.update_menu_items({item_id: changes})[0]


__all__ = ['MenuRepository', 'TABLES']
