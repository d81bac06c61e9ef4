import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from menu.domain.errors import InvalidInput, MenuNotFound
from menu.events.Event_Bus import EventBus, MENU_GENERATED, MENU_ITEM_UPDATED, MENU_STATUS_CHANGED
from menu.events.web_observers import EventRecorder
from menu.infra.Menu_Repository import MenuRepository
from menu.logic.menus.workflow import (
    create_template_with_dishes,
    current_menu,
    generate_from_rotation,
    generate_weekly_menu,
    reorder_menu_item,
    update_menu_item,
    update_menu_status,
)
from menu.logic.schedule.week_schedule import RotationPolicy

POLICY = RotationPolicy(4, "day_of_year")


class WorkflowTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.repo = MenuRepository(Path(self._tmp.name) / "menus.json")
        self.bus = EventBus()
        self.recorder = EventRecorder()
        self.recorder.attach(self.bus)

        self.mohinga = self.repo.add_dish({"name": "Mohinga", "price_cents": 1450})
        self.salad = self.repo.add_dish({"name": "Tea leaf salad", "price_cents": 1200})
        self.noodles = self.repo.add_dish({"name": "Shan noodles", "price_cents": 1350})
        self.template = create_template_with_dishes(self.repo, {"name": "Yangon classics"}, [
            {"dish_id": self.salad.id, "day_of_week": 0, "meal_position": 2},
            {"dish_id": self.mohinga.id, "day_of_week": 0, "meal_position": 1},
            {"dish_id": self.noodles.id, "day_of_week": 2, "meal_position": 1},
        ])

    def tearDown(self):
        self._tmp.cleanup()

    def event_types(self):
        return [e["type"] for e in self.recorder.get_events()["events"]]


class TestTemplates(WorkflowTestCase):

    def test_template_created_with_dishes(self):
        self.assertEqual(len(self.template.dishes), 3)
        self.assertEqual(self.template.dishes[0].dish.name, "Mohinga")

    def test_template_removed_when_dishes_fail(self):
        before = len(self.repo.list_templates())
        with self.assertRaises(MenuNotFound):
            create_template_with_dishes(self.repo, {"name": "Broken"}, [
                {"dish_id": "no-such-dish", "day_of_week": 0, "meal_position": 1},
            ])
        self.assertEqual(len(self.repo.list_templates()), before)


class TestGenerateWeeklyMenu(WorkflowTestCase):

    def test_generates_draft_with_schedule(self):
        menu, created = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", bus=self.bus, policy=POLICY)
        self.assertTrue(created)
        self.assertEqual(menu.status, "draft")
        self.assertEqual(menu.week_start_date, "2025-01-05")
        self.assertEqual(menu.week_number, 1)
        self.assertEqual(menu.order_deadline, "2025-01-08T23:59:59.999Z")
        self.assertEqual(menu.delivery_date, "2025-01-11")
        self.assertEqual(len(menu.items), 3)
        self.assertTrue(all(i.is_available for i in menu.items))
        self.assertEqual(self.event_types(), [MENU_GENERATED])

    def test_second_call_returns_existing_menu(self):
        first, _ = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", bus=self.bus, policy=POLICY)
        again, created = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", bus=self.bus, policy=POLICY)
        self.assertFalse(created)
        self.assertEqual(again.id, first.id)
        self.assertEqual(len(self.repo.list_weekly_menus()), 1)
        self.assertEqual(len(self.repo.list_menu_items(first.id)), 3)
        self.assertEqual(self.event_types(), [MENU_GENERATED])

    def test_concurrent_generate_returns_existing_menu(self):
        first, _ = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", policy=POLICY)
        lookup = self.repo.find_menu_by_week_start
        calls = []

        def stale_then_fresh(week_start):
            # First lookup misses the menu another request just created
            calls.append(week_start)
            return None if len(calls) == 1 else lookup(week_start)

        with mock.patch.object(self.repo, "find_menu_by_week_start", side_effect=stale_then_fresh):
            menu, created = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", policy=POLICY)
        self.assertFalse(created)
        self.assertEqual(menu.id, first.id)
        self.assertEqual(len(self.repo.list_weekly_menus()), 1)
        self.assertEqual(len(self.repo.list_menu_items(first.id)), 3)

    def test_missing_template(self):
        with self.assertRaises(MenuNotFound):
            generate_weekly_menu(self.repo, "missing", "2025-01-05")
        self.assertEqual(self.repo.list_weekly_menus(), [])

    def test_invalid_week_start(self):
        with self.assertRaises(InvalidInput):
            generate_weekly_menu(self.repo, self.template.id, "2025-13-01")

    def test_rotation_picks_template_for_week(self):
        others = [self.repo.add_template({"name": f"Week {n}"}) for n in (2, 3, 4)]
        rotation = [self.template.id] + [t.id for t in others]
        menu, created = generate_from_rotation(self.repo, "2025-01-12", rotation, policy=POLICY)
        self.assertTrue(created)
        self.assertEqual(menu.week_number, 2)
        self.assertEqual(menu.template_id, others[0].id)
        self.assertEqual(menu.items, [])

        with self.assertRaises(InvalidInput):
            generate_from_rotation(self.repo, "2025-01-19", rotation[:2], policy=POLICY)


class TestStatusAndCurrentMenu(WorkflowTestCase):

    def test_publish_stamps_published_at_once(self):
        menu, _ = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", policy=POLICY)
        first_now = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
        published = update_menu_status(self.repo, menu.id, "published", now=first_now, bus=self.bus)
        self.assertEqual(published.status, "published")
        self.assertEqual(published.published_at, "2025-01-01T09:00:00.000Z")

        again = update_menu_status(self.repo, menu.id, "published", now=datetime(2025, 1, 2, tzinfo=timezone.utc))
        self.assertEqual(again.published_at, "2025-01-01T09:00:00.000Z")

        events = self.recorder.get_events()["events"]
        self.assertEqual(events[-1]["type"], MENU_STATUS_CHANGED)
        self.assertEqual((events[-1]["previous"], events[-1]["status"]), ("draft", "published"))

    def test_status_errors(self):
        with self.assertRaises(InvalidInput):
            update_menu_status(self.repo, "whatever", "live")
        with self.assertRaises(MenuNotFound):
            update_menu_status(self.repo, "missing", "published")

    def test_current_menu_is_earliest_open_published_week(self):
        for week in ("2025-01-05", "2025-01-12", "2025-01-19"):
            generate_weekly_menu(self.repo, self.template.id, week, policy=POLICY)
        for week in ("2025-01-05", "2025-01-12"):
            menu = self.repo.find_menu_by_week_start(week)
            update_menu_status(self.repo, menu.id, "published")

        current = current_menu(self.repo, now=datetime(2025, 1, 6, tzinfo=timezone.utc))
        self.assertEqual(current["week_start_date"], "2025-01-05")
        self.assertEqual([d["dayOfWeek"] for d in current["day_menus"]], [0, 2])
        self.assertEqual([i["dish"]["name"] for i in current["day_menus"][0]["dishes"]],
                         ["Mohinga", "Tea leaf salad"])
        self.assertEqual(current["day_menus"][1]["date"], "2025-01-07")

        # Deadline for 2025-01-05 has passed; the draft for 01-19 never counts
        current = current_menu(self.repo, now=datetime(2025, 1, 9, tzinfo=timezone.utc))
        self.assertEqual(current["week_start_date"], "2025-01-12")

        self.assertIsNone(current_menu(self.repo, now=datetime(2025, 1, 20, tzinfo=timezone.utc)))

    def test_current_menu_carries_template_and_skips_missing_dishes(self):
        menu, _ = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", policy=POLICY)
        self.repo.add_menu_items(menu.id, [{"dish_id": "deleted-dish", "day_of_week": 4, "meal_position": 1}])
        update_menu_status(self.repo, menu.id, "published")

        current = current_menu(self.repo, now=datetime(2025, 1, 6, tzinfo=timezone.utc))
        self.assertEqual(current["template"], {
            "id": self.template.id,
            "name": "Yangon classics",
            "description": None,
            "theme": None,
        })
        self.assertEqual(len(current["items"]), 3)
        self.assertTrue(all(i["dish"] for i in current["items"]))
        self.assertEqual([d["dayOfWeek"] for d in current["day_menus"]], [0, 2])


class TestMenuItems(WorkflowTestCase):

    def setUp(self):
        super().setUp()
        self.menu, _ = generate_weekly_menu(self.repo, self.template.id, "2025-01-05", policy=POLICY)
        by_name = {i.dish.name: i for i in self.menu.items}
        self.first = by_name["Mohinga"]
        self.second = by_name["Tea leaf salad"]

    def test_move_down_swaps_positions(self):
        items = reorder_menu_item(self.repo, self.first.id, "down", bus=self.bus)
        self.assertEqual([i.dish.name for i in items], ["Tea leaf salad", "Mohinga"])
        self.assertEqual([i.meal_position for i in items], [1, 2])
        self.assertEqual(self.event_types()[-1], MENU_ITEM_UPDATED)

    def test_move_past_edge_is_a_noop(self):
        items = reorder_menu_item(self.repo, self.first.id, "up")
        self.assertEqual([i.id for i in items], [self.first.id, self.second.id])
        self.assertEqual(self.repo.get_menu_item(self.first.id).meal_position, 1)

    def test_reorder_errors(self):
        with self.assertRaises(InvalidInput):
            reorder_menu_item(self.repo, self.first.id, "sideways")
        with self.assertRaises(MenuNotFound):
            reorder_menu_item(self.repo, "missing", "up")

    def test_update_item(self):
        item = update_menu_item(self.repo, self.first.id, {"is_available": False, "max_portions": 10}, bus=self.bus)
        self.assertFalse(item.is_available)
        self.assertEqual(item.remaining_portions(), 10)
        event = self.recorder.get_events()["events"][-1]
        self.assertEqual(event["item_id"], self.first.id)
        self.assertEqual(event["menu_id"], self.menu.id)
        self.assertEqual(event["changes"], {"is_available": False, "max_portions": 10})

        with self.assertRaises(InvalidInput):
            update_menu_item(self.repo, self.first.id, {})


if __name__ == '__main__':
    unittest.main()
