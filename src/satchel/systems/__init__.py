"""Engine systems for plugging the inventory into a game loop."""

from satchel.systems.base import BaseSystem
from satchel.systems.inventory import InventorySystem

__all__ = ["BaseSystem", "InventorySystem"]
