"""Inventory stores for persisting ledgers locally and remotely."""

from satchel.saves.base import BaseInventoryStore, InventorySaveData
from satchel.saves.local import LocalInventoryStore
from satchel.saves.remote import RemoteInventoryStore, RemoteSyncError, decode_payload, encode_payload

__all__ = [
    "BaseInventoryStore",
    "InventorySaveData",
    "LocalInventoryStore",
    "RemoteInventoryStore",
    "RemoteSyncError",
    "decode_payload",
    "encode_payload",
]
