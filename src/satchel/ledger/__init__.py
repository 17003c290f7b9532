"""Inventory ledger: item quantities and per-item meta fields.

This package provides:
- InventoryLedger: Invariant-preserving add/remove/meta operations over a Document
- RemoveResult: Tri-state outcome of removing items
- StaleLedgerError: Raised when a replaced ledger is still being used
"""

from satchel.ledger.base import ALLOW_NEGATIVE_VALUES, LONG_MAX, InventoryLedgerBase, RemoveResult, StaleLedgerError
from satchel.ledger.manager import InventoryLedger

__all__ = [
    "ALLOW_NEGATIVE_VALUES",
    "LONG_MAX",
    "InventoryLedger",
    "InventoryLedgerBase",
    "RemoveResult",
    "StaleLedgerError",
]
