from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, id_list, json_body, to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    notifications = container.notification_service

    @app.get("/admin/notifications")
    @admin_required
    def admin_list_notifications():
        if request.args.get("unread") in ("1", "true"):
            items = notifications.list_unread()
        else:
            items = notifications.list_all()
        return jsonify(to_jsonable(list(items)))

    @app.post("/admin/notifications/read")
    @admin_required
    def admin_mark_notifications_read():
        count = notifications.mark_read(id_list(json_body()))
        return jsonify({"marked": count})
