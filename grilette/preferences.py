"""Application-wide preferences."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from grilette.storage import PersistenceAdapter

logger = logging.getLogger("grilette.preferences")


@dataclass
class AppPreferences:
    """User preferences, loaded once and saved on every change."""

    is_dark_mode: bool = False

    @classmethod
    def load(cls, persistence: PersistenceAdapter) -> AppPreferences:
        """Read stored preferences, falling back to defaults."""
        return cls(is_dark_mode=persistence.read_dark_mode())

    def save(self, persistence: PersistenceAdapter) -> None:
        persistence.write_dark_mode(self.is_dark_mode)

    def set_dark_mode(self, enabled: bool, persistence: PersistenceAdapter) -> None:
        """Change the dark-mode flag and write it through."""
        if enabled == self.is_dark_mode:
            return
        self.is_dark_mode = enabled
        logger.info("Dark mode %s", "enabled" if enabled else "disabled")
        self.save(persistence)

    def toggle_dark_mode(self, persistence: PersistenceAdapter) -> bool:
        self.set_dark_mode(not self.is_dark_mode, persistence)
        return self.is_dark_mode
