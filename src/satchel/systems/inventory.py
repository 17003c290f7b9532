"""Engine integration for the inventory session.

InventorySystem hooks an InventorySession into the game loop:

- setup() subscribes the session to login/logout events on the context's event bus
- cleanup() saves the inventory locally (settings.SAVE_ON_CLEANUP) and unsubscribes
- get_state()/restore_state() embed the serialized ledger in game save files
- F5 saves and F9 reloads the local inventory while a player is logged in
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import arcade

from satchel.conf import settings
from satchel.document import DocumentParseError
from satchel.session import InventorySession
from satchel.systems.base import BaseSystem

if TYPE_CHECKING:
    from satchel.ledger import InventoryLedger

logger = logging.getLogger(__name__)


class InventorySystem(BaseSystem):
    """Plugs the player's inventory into the engine lifecycle.

    Attributes:
        session: The inventory session. Created in setup() if not supplied.
    """

    name: ClassVar[str] = "inventory"
    dependencies: ClassVar[list[str]] = []

    def __init__(self, session: InventorySession | None = None) -> None:
        """Initialize the system.

        Args:
            session: Optional existing session to drive. Useful when game code
                    already holds one.
        """
        self.session = session
        self.context: Any = None

    @property
    def ledger(self) -> InventoryLedger:
        """Shortcut to the session's current ledger."""
        if self.session is None:
            msg = "InventorySystem.setup() has not been called"
            raise RuntimeError(msg)
        return self.session.ledger

    def setup(self, context: Any) -> None:  # noqa: ANN401
        """Create or attach the session to the context's event bus."""
        self.context = context
        event_bus = getattr(context, "event_bus", None)
        if self.session is None:
            self.session = InventorySession(event_bus=event_bus)
        if event_bus is not None:
            self.session.attach(event_bus)
        logger.debug("InventorySystem setup complete")

    def cleanup(self) -> None:
        """Save the inventory if configured to, then detach from the event bus."""
        if self.session is None:
            return
        if settings.SAVE_ON_CLEANUP and self.session.logged_in:
            self.session.save()
        self.session.detach()
        logger.debug("InventorySystem cleanup complete")

    def get_state(self) -> dict[str, Any]:
        """Return the player and serialized ledger for the game save."""
        if self.session is None:
            return {}
        return {
            "username": self.session.username,
            "document": self.session.ledger.serialize(),
        }

    def restore_state(self, state: dict[str, Any]) -> None:
        """Restore the player and ledger from a game save."""
        if self.session is None or not state.get("document"):
            return
        previous_username = self.session.username
        self.session.username = state.get("username")
        try:
            self.session.restore(state["document"])
        except DocumentParseError:
            self.session.username = previous_username
            logger.exception("Inventory in save data is corrupt; keeping current inventory")

    def on_key_press(self, symbol: int, modifiers: int, context: Any) -> bool:  # noqa: ANN401
        """Handle the inventory save/load hotkeys."""
        if self.session is None or not self.session.logged_in:
            return False
        if symbol == arcade.key.F5:
            if self.session.save():
                logger.info("Inventory quick save completed")
            else:
                logger.warning("Inventory quick save failed")
            return True
        if symbol == arcade.key.F9:
            self.session.load()
            logger.info("Inventory quick load completed")
            return True
        return False
