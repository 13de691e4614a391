from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.post("/admin/login")
    def admin_login():
        data = json_body()
        user = container.auth_service.authenticate(str(data.get("username") or ""), str(data.get("password") or ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["username"] = user.username
        session["role"] = user.role.value
        return jsonify({"username": user.username, "role": user.role.value})

    @app.post("/admin/logout")
    def admin_logout():
        session.clear()
        return "", 204
