"""Local file storage for player inventories.

Each save key gets its own JSON file in the saves directory, e.g.
saves/aliceInventory.json:

    {
      "key": "aliceInventory",
      "document": "{\"version\": 1, \"nodes\": [...]}",
      "save_timestamp": 1760000000.0,
      "save_version": "1.0"
    }

The serialized ledger is kept as an opaque string so the file layout does not
depend on the document format.
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from satchel.conf import settings
from satchel.saves.base import BaseInventoryStore, InventorySaveData

logger = logging.getLogger(__name__)


class LocalInventoryStore(BaseInventoryStore):
    """Stores serialized inventories as JSON files on disk.

    Attributes:
        saves_dir: Directory containing the save files.
    """

    def __init__(self, saves_dir: Path | None = None) -> None:
        """Initialize the store.

        Args:
            saves_dir: Optional directory for save files. If None, uses settings.SAVES_DIR
                      (relative paths resolve against the current working directory).
        """
        if saves_dir is None:
            saves_dir = Path(settings.SAVES_DIR)
            if not saves_dir.is_absolute():
                saves_dir = Path.cwd() / saves_dir

        self.saves_dir = saves_dir
        self.saves_dir.mkdir(parents=True, exist_ok=True)

    def load(self, key: str) -> str | None:
        """Load the serialized inventory saved under key.

        Returns:
            The serialized ledger text, or None if no file exists or it could not be read.
        """
        try:
            save_path = self._get_save_path(key)

            if not save_path.exists():
                logger.info("No local inventory saved for %s", key)
                return None

            with save_path.open() as f:
                save_data = InventorySaveData.from_dict(json.load(f))

        except Exception:
            logger.exception("Failed to load inventory %s", key)
            return None
        else:
            logger.info("Loaded local inventory %s", key)
            return save_data.document

    def save(self, key: str, text: str) -> bool:
        """Write serialized inventory text to the file for key, replacing any previous save."""
        try:
            save_data = InventorySaveData(
                key=key,
                document=text,
                save_timestamp=datetime.now(UTC).timestamp(),
            )
            with self._get_save_path(key).open("w") as f:
                json.dump(save_data.to_dict(), f, indent=2)

        except Exception:
            logger.exception("Failed to save inventory %s", key)
            return False
        else:
            logger.info("Saved local inventory %s", key)
            return True

    def exists(self, key: str) -> bool:
        """Check if a save file exists for key."""
        return self._get_save_path(key).exists()

    def delete(self, key: str) -> bool:
        """Delete the save file for key.

        Returns:
            True if the file existed and was deleted, False otherwise.
        """
        try:
            save_path = self._get_save_path(key)

            if save_path.exists():
                save_path.unlink()
            else:
                logger.warning("No local inventory to delete for %s", key)
                return False

        except Exception:
            logger.exception("Failed to delete inventory %s", key)
            return False
        else:
            logger.info("Deleted local inventory %s", key)
            return True

    def _get_save_path(self, key: str) -> Path:
        """Get the file path for a save key.

        Raises:
            ValueError: If the key would escape the saves directory.
        """
        if not key or Path(key).name != key:
            msg = f"Invalid save key: {key!r}"
            raise ValueError(msg)
        return self.saves_dir / f"{key}{settings.SAVE_FILE_EXTENSION}"
