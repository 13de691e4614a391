from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, json_body, to_jsonable
from ..container import Container

EDITABLE = ("shift_start", "shift_end", "daily_rate", "overtime_rate", "annual_leave_days")


def register(app: Flask, container: Container) -> None:
    @app.get("/admin/settings")
    @admin_required
    def admin_get_settings():
        return jsonify(to_jsonable(container.settings_service.get()))

    @app.put("/admin/settings")
    @admin_required
    def admin_save_settings():
        data = json_body()
        changes = {k: data[k] for k in EDITABLE if k in data}
        return jsonify(to_jsonable(container.settings_service.save(**changes)))
