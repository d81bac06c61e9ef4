"""Web-facing observer for menu events.

An EventRecorder subscribes to a bus for the menu workflow events and keeps a
bounded buffer of recent events that the web layer serves from /api/events,
so admin pages can poll for changes without reloading.

  * Each event gets an auto-increment integer id (cursor); clients ask only for
    newer events with since=<last_id_seen>.
  * Access is guarded by a Lock; the buffer is per process.
  * ``max_events`` caps memory use.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import (
    EventBus, MENU_GENERATED, MENU_STATUS_CHANGED, MENU_ITEM_UPDATED
)

logger = logging.getLogger(__name__)

MAX_EVENTS = 300
WATCHED_EVENTS = (MENU_GENERATED, MENU_STATUS_CHANGED, MENU_ITEM_UPDATED)


class EventRecorder:
    def __init__(self, max_events: int = MAX_EVENTS):
        self.max_events = max_events
        self._lock = Lock()
        self._events: List[Dict[str, Any]] = []
        self._next_id = 1
        self._buses: List[EventBus] = []

    def attach(self, bus: EventBus) -> None:
        """Idempotent: subscribe to ``bus`` once."""
        if any(b is bus for b in self._buses):
            return
        for name in WATCHED_EVENTS:
            bus.subscribe(name, self.record)
        self._buses.append(bus)

    def detach(self, bus: EventBus) -> None:
        for name in WATCHED_EVENTS:
            bus.unsubscribe(name, self.record)
        self._buses = [b for b in self._buses if b is not bus]

    def record(self, event_name: str, payload: Any):  # signature expected by EventBus
        evt: Dict[str, Any] = {
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }
        if isinstance(payload, dict):
            menu = payload.get('menu')
            if menu is not None:
                evt['menu_id'] = getattr(menu, 'id', None)
                evt['week_start_date'] = getattr(menu, 'week_start_date', None)
            item = payload.get('item')
            if item is not None:
                evt['item_id'] = getattr(item, 'id', None)
                evt['menu_id'] = getattr(item, 'weekly_menu_id', None)
            for k in ('items', 'template_id', 'previous', 'status', 'changes'):
                if k in payload:
                    evt[k] = payload[k]
        with self._lock:
            evt['id'] = self._next_id
            self._next_id += 1
            self._events.append(evt)
            if len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]
        logger.debug("Recorded event %s #%s", event_name, evt['id'])

    def get_events(self, since: Optional[int] = None) -> Dict[str, Any]:
        """Return events newer than 'since' (exclusive), plus next_cursor for the following poll."""
        with self._lock:
            if since is None:
                data = list(self._events)
            else:
                data = [e for e in self._events if e['id'] > since]
            next_cursor = self._events[-1]['id'] if self._events else since or 0
        return {'events': data, 'next_cursor': next_cursor}


__all__ = ['EventRecorder', 'MAX_EVENTS', 'WATCHED_EVENTS']
