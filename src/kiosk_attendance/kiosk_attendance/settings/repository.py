from __future__ import annotations

from typing import Protocol

from .model import Settings


class SettingsRepository(Protocol):
    def load(self) -> Settings:
        """Stored settings merged over the defaults."""

        raise NotImplementedError

    def save(self, settings: Settings) -> None:
        raise NotImplementedError
