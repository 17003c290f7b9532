"""Base class for pluggable engine systems.

Systems plug a piece of functionality into the game loop's lifecycle: they are
set up when a scene loads, receive input events, contribute to game saves and
are cleaned up when the scene unloads.

Example:
    Creating a custom system::

        from satchel.systems.base import BaseSystem

        class WalletSystem(BaseSystem):
            name = "wallet"

            def setup(self, context):
                self.event_bus = context.event_bus
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BaseSystem(ABC):
    """Base class for all pluggable systems.

    Attributes:
        name: Unique identifier for the system. Must be defined as a class variable.
        dependencies: List of system names this system depends on.
    """

    name: ClassVar[str]

    dependencies: ClassVar[list[str]] = []

    @abstractmethod
    def setup(self, context: Any) -> None:  # noqa: ANN401
        """Initialize the system when a scene loads.

        Args:
            context: Game context. Systems read shared services such as ``event_bus`` from it.
        """

    def update(self, delta_time: float, context: Any) -> None:  # noqa: ANN401, B027
        """Called every frame during the game loop."""

    def cleanup(self) -> None:  # noqa: B027
        """Called when the scene unloads or the game exits."""

    def get_state(self) -> dict[str, Any]:
        """Return serializable state for saving. Must be JSON-serializable."""
        return {}

    def restore_state(self, state: dict[str, Any]) -> None:  # noqa: B027
        """Restore state from save data returned by get_state()."""

    def on_key_press(self, symbol: int, modifiers: int, context: Any) -> bool:  # noqa: ANN401
        """Handle key press events.

        Args:
            symbol: Arcade key constant for the pressed key.
            modifiers: Bitfield of modifier keys held.
            context: Game context.

        Returns:
            True if the event was handled and should stop propagating, False otherwise.
        """
        return False
