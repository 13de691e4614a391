from __future__ import annotations

from ..core.constants import APP_SETTINGS, SETTINGS_DOC_ID
from ..database.documents import decode_number, optional_str
from ..database.store import CreateOp, DocumentStore, UpdateOp
from .model import Settings
from .repository import SettingsRepository


class DocumentSettingsRepository(SettingsRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def load(self) -> Settings:
        doc = self._store.get(APP_SETTINGS, SETTINGS_DOC_ID)
        defaults = Settings()
        if not doc:
            return defaults
        return Settings(
            shift_start=optional_str(doc, "shiftStart") or defaults.shift_start,
            shift_end=optional_str(doc, "shiftEnd") or defaults.shift_end,
            daily_rate=decode_number(doc, "dailyRate", defaults.daily_rate),
            overtime_rate=decode_number(doc, "overtimeRate", defaults.overtime_rate),
            annual_leave_days=int(decode_number(doc, "annualLeaveDays", defaults.annual_leave_days)),
        )

    def save(self, settings: Settings) -> None:
        body = {
            "shiftStart": settings.shift_start,
            "shiftEnd": settings.shift_end,
            "dailyRate": settings.daily_rate,
            "overtimeRate": settings.overtime_rate,
            "annualLeaveDays": settings.annual_leave_days,
        }
        if self._store.get(APP_SETTINGS, SETTINGS_DOC_ID) is None:
            self._store.batch_commit([CreateOp(APP_SETTINGS, body, doc_id=SETTINGS_DOC_ID)])
        else:
            self._store.batch_commit([UpdateOp(APP_SETTINGS, SETTINGS_DOC_ID, body)])
