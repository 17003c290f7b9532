"""Satchel - a per-player inventory ledger for Python games.

This package provides:
- InventoryLedger: item quantities and per-item meta fields with safe arithmetic
- InventorySession: login-driven loading and local/remote saving of the ledger
- InventorySystem: engine lifecycle integration (save on exit, hotkeys, game saves)

Quick start:
    from satchel import InventoryLedger, RemoveResult

    ledger = InventoryLedger()
    ledger.add_items("sword", 1, meta={"ATT": 10})
    ledger.meta_math_add("sword", "ATT", 5)  # 15

    if ledger.remove_items("sword", 2) is RemoveResult.REJECTED:
        print("Not enough swords")
"""

__version__ = "0.1.0"

from satchel.conf import settings
from satchel.document import Document, DocumentNode, DocumentParseError
from satchel.events import EventBus, LoggedInEvent, LoggedOutEvent
from satchel.ledger import InventoryLedger, RemoveResult, StaleLedgerError
from satchel.saves import LocalInventoryStore, RemoteInventoryStore, RemoteSyncError
from satchel.session import InventorySession

__all__ = [
    "Document",
    "DocumentNode",
    "DocumentParseError",
    "EventBus",
    "InventoryLedger",
    "InventorySession",
    "LocalInventoryStore",
    "LoggedInEvent",
    "LoggedOutEvent",
    "RemoteInventoryStore",
    "RemoteSyncError",
    "RemoveResult",
    "StaleLedgerError",
    "settings",
]
