"""Event helper utilities.

Thin wrappers that build the payloads for menu workflow events. Each takes the
bus explicitly; a ``None`` bus means nobody is listening and nothing happens.
"""
from __future__ import annotations
from typing import Any, Dict, Optional
from .Event_Bus import (
    EventBus, MENU_GENERATED, MENU_STATUS_CHANGED, MENU_ITEM_UPDATED
)

__all__ = [
    'publish_menu_generated', 'publish_status_changed', 'publish_item_updated',
    'MENU_GENERATED', 'MENU_STATUS_CHANGED', 'MENU_ITEM_UPDATED',
]


def publish_menu_generated(bus: Optional[EventBus], menu: Any, items: int, template_id: str):
    if bus is None:
        return
    bus.publish(MENU_GENERATED, {
        'menu': menu,
        'items': items,
        'template_id': template_id,
    })


def publish_status_changed(bus: Optional[EventBus], menu: Any, previous: str, status: str):
    if bus is None:
        return
    bus.publish(MENU_STATUS_CHANGED, {
        'menu': menu,
        'previous': previous,
        'status': status,
    })


def publish_item_updated(bus: Optional[EventBus], item: Any, changes: Dict[str, Any]):
    if bus is None:
        return
    bus.publish(MENU_ITEM_UPDATED, {
        'item': item,
        'changes': dict(changes),
    })
