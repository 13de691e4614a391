from __future__ import annotations

import logging
from dataclasses import replace

from ..common.validators import require_hhmm, require_non_negative
from .model import Settings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    """Use case: read and edit the site configuration (admin)."""

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get(self) -> Settings:
        return self._settings.load()

    def save(self, **changes) -> Settings:
        current = self._settings.load()
        updated = replace(
            current,
            shift_start=require_hhmm(changes.get("shift_start", current.shift_start), "Shift start"),
            shift_end=require_hhmm(changes.get("shift_end", current.shift_end), "Shift end"),
            daily_rate=require_non_negative(changes.get("daily_rate", current.daily_rate), "Daily rate"),
            overtime_rate=require_non_negative(changes.get("overtime_rate", current.overtime_rate), "Overtime rate"),
            annual_leave_days=int(
                require_non_negative(changes.get("annual_leave_days", current.annual_leave_days), "Annual leave days")
            ),
        )
        self._settings.save(updated)
        logger.info("Settings saved: shift %s-%s", updated.shift_start, updated.shift_end)
        return updated
