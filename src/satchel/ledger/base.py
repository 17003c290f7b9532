"""Base class and result types for InventoryLedger."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum, auto

from satchel.document import Scalar

ALLOW_NEGATIVE_VALUES = False
"""Whether quantities and meta values may go below zero. Fixed for this ledger."""

LONG_MAX = 2**63 - 1
"""Largest quantity or meta value the ledger will store."""


class RemoveResult(Enum):
    """Outcome of InventoryLedger.remove_items().

    INVALID: the quantity was not positive or the item does not exist.
    REJECTED: the item exists but does not hold enough to remove.
    SUCCESS: the quantity was removed.
    """

    INVALID = auto()
    REJECTED = auto()
    SUCCESS = auto()

    def __bool__(self) -> bool:
        return self is RemoveResult.SUCCESS


class StaleLedgerError(RuntimeError):
    """Raised when a ledger is used after the session replaced it."""


class InventoryLedgerBase(ABC):
    """Base class for InventoryLedger."""

    @abstractmethod
    def add_items(self, name: str, qty: int, meta: Mapping[str, Scalar] | None = None) -> int | None:
        """Add to an item's quantity, creating the item if needed."""
        ...

    @abstractmethod
    def remove_items(self, name: str, qty: int) -> RemoveResult:
        """Subtract from an item's quantity."""
        ...

    @abstractmethod
    def meta_math_add(self, item_name: str, meta_field: str, qty: int) -> int | None:
        """Add to the value of a meta field."""
        ...

    @abstractmethod
    def meta_math_subtract(
        self, item_name: str, meta_field: str, qty: int, *, clamp_to_zero: bool = False
    ) -> int | None:
        """Subtract from the value of a meta field."""
        ...

    @abstractmethod
    def set_meta_fields(self, item_name: str, fields: Mapping[str, Scalar]) -> bool:
        """Set or create several meta fields on an item."""
        ...

    @abstractmethod
    def quantity(self, name: str) -> int:
        """Get an item's quantity, 0 when absent."""
        ...

    @abstractmethod
    def serialize(self) -> str:
        """Serialize the whole ledger to a string."""
        ...
