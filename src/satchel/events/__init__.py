"""Module for events."""

from satchel.events.base import (
    Event,
    EventBus,
    InventoryLoadedEvent,
    InventorySavedEvent,
    ItemsAddedEvent,
    ItemsRemovedEvent,
    LoggedInEvent,
    LoggedOutEvent,
)

__all__ = [
    "Event",
    "EventBus",
    "InventoryLoadedEvent",
    "InventorySavedEvent",
    "ItemsAddedEvent",
    "ItemsRemovedEvent",
    "LoggedInEvent",
    "LoggedOutEvent",
]
