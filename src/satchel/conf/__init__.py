"""Lazy settings for Satchel.

Defaults live in satchel.conf.global_settings. A project overrides them with
uppercase names in its own settings module, found through the
SATCHEL_SETTINGS_MODULE environment variable (default: a top-level "settings"
module):

    # settings.py
    SAVES_DIR = "player_saves"
    REMOTE_SYNC_URL = "https://sync.example.com/api"

    # game code
    from satchel.conf import settings

    store_dir = settings.SAVES_DIR  # "player_saves"

Tests skip the module lookup with settings.configure(...) and call
settings.reset() afterwards.
"""

import importlib
import os
from types import ModuleType
from typing import Any

from satchel.conf import global_settings

SETTINGS_MODULE_ENV = "SATCHEL_SETTINGS_MODULE"


class Settings:
    """Container for all settings with attribute access."""

    def __init__(self, overrides: ModuleType | None = None) -> None:
        """Copy the library defaults, then any uppercase names from overrides."""
        for source in (global_settings, overrides):
            if source is None:
                continue
            for setting in dir(source):
                if setting.isupper():
                    setattr(self, setting, getattr(source, setting))


class LazySettings:
    """Settings proxy that loads the project's settings module on first access."""

    def __init__(self) -> None:
        """Initialize the lazy settings proxy."""
        self._wrapped: Settings | None = None

    def _setup(self) -> Settings:
        settings_module = os.environ.get(SETTINGS_MODULE_ENV, "settings")
        try:
            mod = importlib.import_module(settings_module)
        except ImportError:
            # No project settings module, use defaults only
            mod = None
        self._wrapped = Settings(mod)
        return self._wrapped

    def __getattr__(self, name: str) -> Any:  # noqa: ANN401
        """Get a setting value, loading settings if not yet loaded."""
        wrapped = self._wrapped if self._wrapped is not None else self._setup()
        return getattr(wrapped, name)

    def configure(self, **options: Any) -> None:  # noqa: ANN401
        """Override settings by keyword without loading a settings module.

        Example:
            settings.configure(SAVES_DIR="/tmp/saves", REMOTE_SYNC_URL="")

        Raises:
            ValueError: If an option name is not an uppercase setting name.
        """
        invalid = [name for name in options if not name.isupper()]
        if invalid:
            msg = f"Setting names must be uppercase: {', '.join(sorted(invalid))}"
            raise ValueError(msg)
        if self._wrapped is None:
            self._wrapped = Settings()
        for name, value in options.items():
            setattr(self._wrapped, name, value)

    def is_configured(self) -> bool:
        """Check if settings have been loaded."""
        return self._wrapped is not None

    def reset(self) -> None:
        """Forget loaded settings; the next access loads them again."""
        self._wrapped = None


settings = LazySettings()

__all__ = ["LazySettings", "Settings", "global_settings", "settings"]
