import json
import tempfile
import unittest
from pathlib import Path

from menu.domain.errors import MenuConflict, MenuNotFound
from menu.infra.Menu_Repository import TABLES, MenuRepository
from menu.infra.paths import SEED_FILE


class TestMenuRepository(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "menus.json"
        self.repo = MenuRepository(self.path)

    def tearDown(self):
        self._tmp.cleanup()

    def _stored(self):
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def test_creates_empty_store(self):
        self.assertEqual(self.repo.list_dishes(), [])
        self.assertEqual(set(self._stored()), set(TABLES))

    def test_seeds_from_seed_file(self):
        repo = MenuRepository(Path(self._tmp.name) / "seeded.json", seed_file=SEED_FILE)
        names = [d.name for d in repo.list_dishes()]
        self.assertEqual(names, ["Mohinga", "Shan noodles", "Tea leaf salad"])
        template = repo.list_templates(include_dishes=True)[0]
        self.assertEqual(template.name, "Yangon classics")
        self.assertEqual([(td.day_of_week, td.meal_position) for td in template.dishes], [(0, 1), (0, 2), (2, 1)])
        self.assertEqual(template.dishes[0].dish.name, "Mohinga")

    def test_add_dish_ignores_unknown_fields(self):
        dish = self.repo.add_dish({"name": "Mohinga", "price_cents": 1450, "secret": "x"})
        self.assertTrue(dish.id)
        row = self._stored()["dishes"][0]
        self.assertNotIn("secret", row)
        self.assertEqual(self.repo.get_dish(dish.id), dish)
        with self.assertRaises(MenuConflict):
            self.repo.add_dish({"id": dish.id, "name": "Again"})

    def test_template_slot_is_replaced(self):
        first = self.repo.add_dish({"name": "Mohinga"})
        second = self.repo.add_dish({"name": "Shan noodles"})
        template = self.repo.add_template({"name": "Week A", "theme": "traditional"}, created_by="admin")
        self.assertTrue(template.is_active)
        self.assertEqual(template.created_by, "admin")

        self.repo.upsert_template_dishes([
            {"template_id": template.id, "dish_id": first.id, "day_of_week": 1, "meal_position": 1},
        ])
        self.repo.upsert_template_dishes([
            {"template_id": template.id, "dish_id": second.id, "day_of_week": 1, "meal_position": 1},
        ])
        dishes = self.repo.get_template(template.id).dishes
        self.assertEqual(len(dishes), 1)
        self.assertEqual(dishes[0].dish.name, "Shan noodles")

    def test_failed_write_leaves_store_untouched(self):
        dish = self.repo.add_dish({"name": "Mohinga"})
        template = self.repo.add_template({"name": "Week A"})
        before = self._stored()
        with self.assertRaises(MenuNotFound):
            self.repo.upsert_template_dishes([
                {"template_id": template.id, "dish_id": dish.id, "day_of_week": 0, "meal_position": 1},
                {"template_id": template.id, "dish_id": "missing", "day_of_week": 0, "meal_position": 2},
            ])
        self.assertEqual(self._stored(), before)

    def test_delete_template_removes_its_dishes(self):
        dish = self.repo.add_dish({"name": "Mohinga"})
        template = self.repo.add_template({"name": "Week A"})
        self.repo.upsert_template_dishes([
            {"template_id": template.id, "dish_id": dish.id, "day_of_week": 0, "meal_position": 1},
        ])
        self.assertTrue(self.repo.delete_template(template.id))
        self.assertIsNone(self.repo.get_template(template.id))
        self.assertEqual(self._stored()["template_dishes"], [])
        self.assertFalse(self.repo.delete_template(template.id))

    def test_one_menu_per_week(self):
        self.repo.add_weekly_menu({"week_start_date": "2025-01-05"})
        with self.assertRaises(MenuConflict):
            self.repo.add_weekly_menu({"week_start_date": "2025-01-05"})
        self.assertIsNotNone(self.repo.find_menu_by_week_start("2025-01-05"))
        self.assertIsNone(self.repo.find_menu_by_week_start("2025-01-12"))

    def test_menu_items_join_dishes(self):
        dish = self.repo.add_dish({"name": "Mohinga"})
        menu = self.repo.add_weekly_menu({"week_start_date": "2025-01-05", "status": "draft"})
        self.repo.add_menu_items(menu.id, [
            {"dish_id": dish.id, "day_of_week": 0, "meal_position": 1},
            {"dish_id": "gone", "day_of_week": 1, "meal_position": 1},
        ])
        items = self.repo.get_weekly_menu(menu.id).items
        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].dish.name, "Mohinga")
        self.assertIsNone(items[1].dish)
        self.assertTrue(items[0].is_available)
        self.assertEqual(items[0].current_orders, 0)

    def test_update_items_is_all_or_nothing(self):
        dish = self.repo.add_dish({"name": "Mohinga"})
        menu = self.repo.add_weekly_menu({"week_start_date": "2025-01-05"})
        item = self.repo.add_menu_items(menu.id, [{"dish_id": dish.id, "day_of_week": 0, "meal_position": 1}])[0]
        with self.assertRaises(MenuNotFound):
            self.repo.update_menu_items({item.id: {"meal_position": 2}, "missing": {"meal_position": 1}})
        self.assertEqual(self.repo.get_menu_item(item.id).meal_position, 1)

        updated = self.repo.update_menu_item(item.id, {"max_portions": 20, "weekly_menu_id": "other"})
        self.assertEqual(updated.max_portions, 20)
        self.assertEqual(updated.weekly_menu_id, menu.id)

    def test_delete_menu_removes_items(self):
        dish = self.repo.add_dish({"name": "Mohinga"})
        menu = self.repo.add_weekly_menu({"week_start_date": "2025-01-05"})
        self.repo.add_menu_items(menu.id, [{"dish_id": dish.id, "day_of_week": 0, "meal_position": 1}])
        self.assertTrue(self.repo.delete_weekly_menu(menu.id))
        self.assertEqual(self.repo.list_menu_items(menu.id), [])
        with self.assertRaises(MenuNotFound):
            self.repo.update_weekly_menu(menu.id, {"status": "published"})

    def test_unreadable_store(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(MenuConflict):
            self.repo.list_dishes()


if __name__ == '__main__':
    unittest.main()
