"""Base classes for inventory stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any

SAVE_VERSION = "1.0"


@dataclass
class InventorySaveData:
    """A persisted inventory snapshot.

    Attributes:
        key: Save key the snapshot belongs to (e.g., "aliceInventory").
        document: Serialized ledger as produced by InventoryLedger.serialize().
        save_timestamp: Unix timestamp when the snapshot was written.
        save_version: Save format version string for future compatibility.
    """

    key: str
    document: str
    save_timestamp: float = 0.0
    save_version: str = SAVE_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InventorySaveData:
        """Create from dictionary loaded from JSON.

        Raises:
            KeyError: If the key or document entry is missing.
            TypeError: If the document entry is not serialized text.
        """
        if not isinstance(data["document"], str):
            msg = f"Saved document must be a string, got {type(data['document']).__name__}"
            raise TypeError(msg)
        return cls(
            key=data["key"],
            document=data["document"],
            save_timestamp=data.get("save_timestamp", 0.0),
            save_version=data.get("save_version", SAVE_VERSION),
        )


class BaseInventoryStore(ABC):
    """Abstract base class for places a serialized inventory can be kept.

    Stores deal in serialized ledger text only. They never parse it; the session
    turns the text into an InventoryLedger.
    """

    @abstractmethod
    def load(self, key: str) -> str | None:
        """Return the serialized inventory saved under key, or None if there is none."""

    @abstractmethod
    def save(self, key: str, text: str) -> bool:
        """Store serialized inventory text under key. Returns True on success."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether an inventory is saved under key."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete the inventory saved under key. Returns True if something was deleted."""
