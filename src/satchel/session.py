"""Per-player inventory session.

The InventorySession owns the current InventoryLedger for whoever is logged in.
It decides the save key, loads the ledger when a player logs in, saves it
locally or remotely, and swaps in a new ledger wholesale whenever one is
loaded. Game code holds a reference to the session and reads session.ledger
whenever it needs the inventory; a ledger reference kept across a reload is
retired and raises StaleLedgerError on mutation.

Example usage:
    event_bus = EventBus()
    session = InventorySession(event_bus=event_bus)
    session.attach()

    event_bus.publish(LoggedInEvent("alice"))  # loads saves/aliceInventory.json
    session.ledger.add_items("gold", 50)
    session.save()

    # With a remote service configured:
    await session.save_online()
    await session.load_online()  # falls back to the local copy on failure
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from satchel.conf import settings
from satchel.document import DocumentParseError
from satchel.events import InventoryLoadedEvent, InventorySavedEvent, LoggedInEvent, LoggedOutEvent
from satchel.ledger import InventoryLedger
from satchel.saves import LocalInventoryStore, RemoteInventoryStore, RemoteSyncError

if TYPE_CHECKING:
    from satchel.events import EventBus
    from satchel.saves import BaseInventoryStore

logger = logging.getLogger(__name__)


class InventorySession:
    """Holds the active player's inventory ledger and its persistence.

    Attributes:
        event_bus: Optional event bus for login notifications and inventory events.
        store: Local store used by load() and save().
        remote: Remote sync client, or None when remote sync is not configured.
        username: Identifier of the logged-in player, or None.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        store: BaseInventoryStore | None = None,
        remote: RemoteInventoryStore | None = None,
    ) -> None:
        """Create a session with an empty ledger and nobody logged in.

        Args:
            event_bus: Optional event bus. Ledgers created by the session publish to it.
            store: Local store. Defaults to a LocalInventoryStore in settings.SAVES_DIR.
            remote: Remote sync client. Defaults to one built from settings when
                   settings.REMOTE_SYNC_URL is set.
        """
        self.event_bus = event_bus
        self.store = store if store is not None else LocalInventoryStore()
        if remote is None and settings.REMOTE_SYNC_URL:
            remote = RemoteInventoryStore()
        self.remote = remote
        self.username: str | None = None
        self._save_key: str | None = None
        self._ledger = InventoryLedger(event_bus=event_bus)

    @property
    def ledger(self) -> InventoryLedger:
        """The current ledger. Re-read after any load; old references go stale."""
        return self._ledger

    @property
    def logged_in(self) -> bool:
        """Whether a save key can be determined (a player is logged in or a key was assigned)."""
        return self.username is not None or bool(self._save_key)

    @property
    def save_key(self) -> str:
        """Name the inventory is saved under: the username plus settings.INVENTORY_SAVE_SUFFIX.

        Assign to this property to use a different key until the next login.

        Raises:
            RuntimeError: If nobody is logged in and no key was assigned.
        """
        if self._save_key:
            return self._save_key
        if self.username is None:
            msg = "No player is logged in; cannot determine the inventory save key"
            raise RuntimeError(msg)
        return f"{self.username}{settings.INVENTORY_SAVE_SUFFIX}"

    @save_key.setter
    def save_key(self, key: str | None) -> None:
        self._save_key = key

    # Login handling

    def attach(self, event_bus: EventBus | None = None) -> None:
        """Subscribe to login and logout events on the event bus."""
        if event_bus is not None:
            self.event_bus = event_bus
            self._ledger.event_bus = event_bus
        if self.event_bus is None:
            msg = "InventorySession.attach() needs an event bus"
            raise RuntimeError(msg)
        self.event_bus.subscribe(LoggedInEvent, self.on_logged_in)
        self.event_bus.subscribe(LoggedOutEvent, self.on_logged_out)

    def detach(self) -> None:
        """Unsubscribe every session handler from the event bus."""
        if self.event_bus is not None:
            self.event_bus.unregister_all(self)

    def on_logged_in(self, event: LoggedInEvent) -> None:
        """Load the player's inventory when they log in."""
        self.login(event.username)

    def on_logged_out(self, event: LoggedOutEvent) -> None:
        """Drop the inventory when the active player logs out."""
        if event.username == self.username:
            self.logout()

    def login(self, username: str) -> InventoryLedger:
        """Make username the active player and load their local inventory."""
        self.username = username
        self._save_key = None
        logger.info("Player logged in: %s", username)
        return self.load()

    def logout(self, *, save: bool = False) -> None:
        """Forget the active player and install an empty ledger.

        Args:
            save: Save the current inventory locally first.
        """
        if save and self.username is not None:
            self.save()
        logger.info("Player logged out: %s", self.username)
        self.username = None
        self._save_key = None
        self.replace(InventoryLedger(event_bus=self.event_bus))

    # Ledger replacement

    def replace(self, ledger: InventoryLedger) -> None:
        """Install ledger as the current one, retiring the previous ledger."""
        if ledger is self._ledger:
            return
        if ledger.event_bus is None:
            ledger.event_bus = self.event_bus
        previous = self._ledger
        self._ledger = ledger
        previous.retire()
        logger.debug("Replaced inventory ledger (%d items)", len(ledger))

    def _install(self, ledger: InventoryLedger, source: str) -> InventoryLedger:
        self.replace(ledger)
        key = self.save_key if self.logged_in else ""
        logger.info("Loaded inventory %s from %s (%d items)", key, source, len(ledger))
        if self.event_bus:
            self.event_bus.publish(InventoryLoadedEvent(key=key, source=source, item_count=len(ledger)))
        return ledger

    def _parse(self, text: str | None) -> InventoryLedger:
        if text is None:
            return InventoryLedger(event_bus=self.event_bus)
        try:
            return InventoryLedger.parse(text, event_bus=self.event_bus)
        except DocumentParseError:
            logger.exception("Saved inventory %s is corrupt; starting empty", self.save_key)
            return InventoryLedger(event_bus=self.event_bus)

    # Local persistence

    def load(self) -> InventoryLedger:
        """Replace the ledger with the locally saved inventory (empty if none is saved)."""
        ledger = self._parse(self.store.load(self.save_key))
        return self._install(ledger, "local")

    def save(self) -> bool:
        """Save the current ledger locally. Returns True on success."""
        key = self.save_key
        if not self.store.save(key, self._ledger.serialize()):
            return False
        if self.event_bus:
            self.event_bus.publish(InventorySavedEvent(key=key, destination="local"))
        return True

    def restore(self, text: str, source: str = "state") -> InventoryLedger:
        """Replace the ledger with one parsed from serialized text.

        Raises:
            DocumentParseError: If the text is not a serialized ledger.
        """
        ledger = InventoryLedger.parse(text, event_bus=self.event_bus)
        return self._install(ledger, source)

    # Remote persistence

    def _require_remote(self) -> RemoteInventoryStore:
        if self.remote is None or not self.remote.enabled:
            msg = "Remote sync is not configured (set REMOTE_SYNC_URL)"
            raise RuntimeError(msg)
        return self.remote

    async def save_online(self) -> InventoryLedger:
        """Upload the current ledger to the remote service.

        Returns:
            The ledger that was uploaded.

        Raises:
            RemoteSyncError: If the upload failed. Its payload attribute holds what was sent.
        """
        remote = self._require_remote()
        key = self.save_key
        ledger = self._ledger
        await remote.upload(key, ledger.serialize())
        if self.event_bus:
            self.event_bus.publish(InventorySavedEvent(key=key, destination="remote"))
        return ledger

    async def load_online(self) -> InventoryLedger:
        """Replace the ledger with the remotely saved inventory.

        If the download fails or returns something unparseable, the locally saved
        inventory is loaded instead.

        Returns:
            The ledger now installed in the session.
        """
        remote = self._require_remote()
        key = self.save_key
        try:
            text = await remote.download(key)
            ledger = InventoryLedger.parse(text, event_bus=self.event_bus)
        except (RemoteSyncError, DocumentParseError) as e:
            logger.warning("Could not fetch inventory %s online (%s); loading local copy", key, e)
            return self.load()
        return self._install(ledger, "remote")
