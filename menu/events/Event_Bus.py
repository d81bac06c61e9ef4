"""Event Bus / Observer implementation for menu workflow events.

Event names:
  menu.generated       -> payload {"menu": WeeklyMenu, "items": int, "template_id": str}
  menu.status_changed  -> payload {"menu": WeeklyMenu, "previous": str, "status": str}
  menu.item_updated    -> payload {"item": WeeklyMenuItem, "changes": dict}

A bus is a plain value: the application creates one and hands it to whoever
publishes or subscribes (see ``menu.api.api_run``). Subscribers are callables
taking ``(event_name, payload)``.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
MENU_GENERATED = "menu.generated"
MENU_STATUS_CHANGED = "menu.status_changed"
MENU_ITEM_UPDATED = "menu.item_updated"

Subscriber = Callable[[str, Any], None]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, event_name: str, callback: Subscriber):
        if callback not in self._subscribers[event_name]:
            self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: Subscriber):
        try:
            self._subscribers[event_name].remove(callback)
        except (ValueError, KeyError):
            pass

    def subscribers(self, event_name: str) -> List[Subscriber]:
        return list(self._subscribers.get(event_name, []))

    def publish(self, event_name: str, payload: Any = None):
        """Deliver to every subscriber; a failing subscriber never reaches the publisher."""
        for cb in self.subscribers(event_name):
            try:
                cb(event_name, payload)
            except Exception:
                logger.exception("Error delivering %s to %r", event_name, cb)


__all__ = [
    'EventBus', 'Subscriber',
    'MENU_GENERATED', 'MENU_STATUS_CHANGED', 'MENU_ITEM_UPDATED',
]
