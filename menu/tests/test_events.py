import unittest

from menu.domain.WeeklyMenu import WeeklyMenu, WeeklyMenuItem
from menu.events.Event_Bus import EventBus, MENU_GENERATED, MENU_ITEM_UPDATED, MENU_STATUS_CHANGED
from menu.events.event_helpers import publish_item_updated, publish_menu_generated, publish_status_changed
from menu.events.web_observers import EventRecorder


class TestEventBus(unittest.TestCase):

    def test_failing_subscriber_does_not_reach_publisher(self):
        bus = EventBus()
        received = []

        def broken(name, payload):
            raise RuntimeError("boom")

        bus.subscribe(MENU_GENERATED, broken)
        bus.subscribe(MENU_GENERATED, lambda name, payload: received.append((name, payload)))
        with self.assertLogs("menu.events.Event_Bus", level="ERROR"):
            bus.publish(MENU_GENERATED, {"items": 3})
        self.assertEqual(received, [(MENU_GENERATED, {"items": 3})])

    def test_subscribe_once_and_unsubscribe(self):
        bus = EventBus()
        calls = []
        cb = lambda name, payload: calls.append(name)  # noqa: E731
        bus.subscribe(MENU_STATUS_CHANGED, cb)
        bus.subscribe(MENU_STATUS_CHANGED, cb)
        self.assertEqual(len(bus.subscribers(MENU_STATUS_CHANGED)), 1)
        bus.unsubscribe(MENU_STATUS_CHANGED, cb)
        bus.unsubscribe(MENU_STATUS_CHANGED, cb)
        bus.publish(MENU_STATUS_CHANGED)
        self.assertEqual(calls, [])

    def test_helpers_without_bus_do_nothing(self):
        publish_menu_generated(None, WeeklyMenu(id="m1"), 0, "t1")
        publish_status_changed(None, WeeklyMenu(id="m1"), "draft", "published")
        publish_item_updated(None, WeeklyMenuItem(id="i1"), {"is_available": False})


class TestEventRecorder(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.recorder = EventRecorder(max_events=3)
        self.recorder.attach(self.bus)

    def test_records_payload_fields(self):
        menu = WeeklyMenu(id="m1", week_start_date="2025-01-05")
        publish_menu_generated(self.bus, menu, 3, "t1")
        publish_status_changed(self.bus, menu, "draft", "published")
        publish_item_updated(self.bus, WeeklyMenuItem(id="i1", weekly_menu_id="m1"), {"meal_position": 2})

        events = self.recorder.get_events()["events"]
        self.assertEqual([e["type"] for e in events], [MENU_GENERATED, MENU_STATUS_CHANGED, MENU_ITEM_UPDATED])
        self.assertEqual(events[0]["week_start_date"], "2025-01-05")
        self.assertEqual(events[0]["items"], 3)
        self.assertEqual(events[0]["template_id"], "t1")
        self.assertEqual(events[1]["status"], "published")
        self.assertEqual(events[2]["item_id"], "i1")
        self.assertEqual(events[2]["menu_id"], "m1")
        self.assertTrue(events[0]["ts"].endswith("Z"))

    def test_cursor_and_cap(self):
        menu = WeeklyMenu(id="m1")
        for _ in range(5):
            publish_status_changed(self.bus, menu, "draft", "published")
        result = self.recorder.get_events()
        self.assertEqual([e["id"] for e in result["events"]], [3, 4, 5])
        self.assertEqual(result["next_cursor"], 5)
        self.assertEqual([e["id"] for e in self.recorder.get_events(since=4)["events"]], [5])
        self.assertEqual(self.recorder.get_events(since=5), {"events": [], "next_cursor": 5})

    def test_attach_is_idempotent_and_detach_stops_recording(self):
        self.recorder.attach(self.bus)
        publish_menu_generated(self.bus, WeeklyMenu(id="m1"), 0, "t1")
        self.assertEqual(len(self.recorder.get_events()["events"]), 1)

        self.recorder.detach(self.bus)
        publish_menu_generated(self.bus, WeeklyMenu(id="m2"), 0, "t1")
        self.assertEqual(len(self.recorder.get_events()["events"]), 1)

    def test_empty_recorder(self):
        self.assertEqual(EventRecorder().get_events(), {"events": [], "next_cursor": 0})
        self.assertEqual(EventRecorder().get_events(since=7), {"events": [], "next_cursor": 7})


if __name__ == '__main__':
    unittest.main()
