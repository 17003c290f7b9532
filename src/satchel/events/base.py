"""Event system for decoupled inventory and session notifications.

This module provides a publish/subscribe event bus that lets the ledger, the
session and engine glue communicate without holding references to each other.
The ledger publishes events when quantities change, the session publishes
events when inventories are loaded or saved, and whoever handles login
publishes LoggedInEvent so the session can load the right inventory.

Example usage:
    event_bus = EventBus()

    def on_added(event: ItemsAddedEvent):
        print(f"{event.name}: now {event.total}")

    event_bus.subscribe(ItemsAddedEvent, on_added)
    event_bus.publish(ItemsAddedEvent(name="gold", qty=10, total=25))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class Event:
    """Base event class."""

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {}


@dataclass
class LoggedInEvent(Event):
    """Fired when a player logs in.

    The inventory session listens for this event and loads the player's saved
    inventory, replacing whatever ledger was active before.

    Attributes:
        username: Identifier of the player who logged in.
    """

    username: str

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {"username": self.username}


@dataclass
class LoggedOutEvent(Event):
    """Fired when a player logs out.

    Attributes:
        username: Identifier of the player who logged out.
    """

    username: str

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {"username": self.username}


@dataclass
class ItemsAddedEvent(Event):
    """Fired after a quantity is added to an inventory item.

    Attributes:
        name: Item name.
        qty: Quantity that was added.
        total: Item quantity after the addition.
    """

    name: str
    qty: int
    total: int

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {"name": self.name, "qty": self.qty, "total": self.total}


@dataclass
class ItemsRemovedEvent(Event):
    """Fired after a quantity is removed from an inventory item.

    A remaining quantity of 0 means the item left the inventory.

    Attributes:
        name: Item name.
        qty: Quantity that was removed.
        remaining: Item quantity after the removal.
    """

    name: str
    qty: int
    remaining: int

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {"name": self.name, "qty": self.qty, "remaining": self.remaining}


@dataclass
class InventoryLoadedEvent(Event):
    """Fired when the session installs a freshly loaded ledger.

    Attributes:
        key: Save key the inventory was loaded from.
        source: Where it came from ("local", "remote" or "state").
        item_count: Number of items in the loaded ledger.
    """

    key: str
    source: str
    item_count: int

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {"key": self.key, "source": self.source, "item_count": self.item_count}


@dataclass
class InventorySavedEvent(Event):
    """Fired after the session persisted the ledger.

    Attributes:
        key: Save key the inventory was stored under.
        destination: Where it went ("local" or "remote").
    """

    key: str
    destination: str

    def get_script_data(self) -> dict[str, Any]:
        """Get data for script triggers."""
        return {"key": self.key, "destination": self.destination}


class EventBus:
    """Central event bus for publish/subscribe event handling.

    Thread safety: This implementation is NOT thread-safe. All subscribe, publish, and
    unsubscribe calls should happen on the main game thread.

    Example usage:
        bus = EventBus()
        bus.subscribe(LoggedInEvent, session.on_logged_in)
        bus.publish(LoggedInEvent("alice"))
        bus.unsubscribe(LoggedInEvent, session.on_logged_in)
    """

    def __init__(self) -> None:
        """Initialize the event bus with no registered listeners."""
        self.listeners: dict[type[Event], list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[Event], handler: Callable[[Any], None]) -> None:
        """Subscribe a handler to an event type.

        Handlers are called in the order they were registered. The same handler can be
        subscribed more than once and will then be called once per subscription.

        Args:
            event_type: The type of event to listen for (e.g., LoggedInEvent).
            handler: Callback that takes the event as its only argument.
        """
        if event_type not in self.listeners:
            self.listeners[event_type] = []
        self.listeners[event_type].append(handler)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Any], None]) -> None:
        """Unsubscribe a handler from an event type.

        Removes ALL subscriptions of the handler. Unknown handlers are ignored.
        """
        if event_type in self.listeners:
            self.listeners[event_type] = [h for h in self.listeners[event_type] if h != handler]

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribed handlers.

        Handlers are called synchronously. An exception raised by a handler propagates
        and prevents subsequent handlers from running.
        """
        event_type = type(event)
        if event_type in self.listeners:
            for handler in list(self.listeners[event_type]):
                handler(event)

    def clear(self) -> None:
        """Clear all event listeners."""
        self.listeners.clear()

    def unregister_all(self, subscriber: object) -> None:
        """Unregister all bound-method handlers belonging to ``subscriber``."""
        for event_type in self.listeners:
            self.listeners[event_type] = [
                h for h in self.listeners[event_type] if not (hasattr(h, "__self__") and h.__self__ == subscriber)
            ]
