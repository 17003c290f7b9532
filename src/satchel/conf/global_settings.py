"""Default settings for Satchel.

Users can override these in their project's settings.py file.

Example:
    # In your project's settings.py:
    SAVES_DIR = "/var/lib/mygame/saves"
    REMOTE_SYNC_URL = "https://sync.example.com/api"
"""

# Persistence settings
INVENTORY_SAVE_SUFFIX = "Inventory"
"""Suffix appended to the username to build the inventory save key."""

SAVES_DIR = "saves"
"""Directory for local inventory save files (relative paths resolve against the cwd)."""

SAVE_FILE_EXTENSION = ".json"
"""Extension used for local inventory save files."""

SAVE_ON_CLEANUP = True
"""Whether the inventory system saves the ledger locally when the engine shuts it down."""

# Remote sync settings
REMOTE_SYNC_URL = ""
"""Base URL of the remote sync service (empty string disables remote sync)."""

REMOTE_SYNC_FIELD = "Inventory"
"""Name of the field that holds the encoded inventory on the remote service."""

REMOTE_SYNC_TIMEOUT = 10.0
"""Timeout in seconds for remote sync requests."""
