from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .employees.controller import register as register_employees
from .identity.controller import register as register_identity
from .leave.controller import register as register_leave
from .notifications.controller import register as register_notifications
from .payroll.controller import register as register_payroll
from .settings.controller import register as register_settings

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str, *, debug: bool = False) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if not debug:
        # Request lines are noise on a kiosk that polls every few seconds.
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_settings() -> dict[str, Any]:
    module = importlib.import_module(get_settings_module())
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


def create_app(overrides: Optional[Mapping[str, Any]] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    settings = load_settings()
    settings.update(overrides or {})

    configure_logging(settings.get("LOG_LEVEL", "INFO"), debug=bool(settings.get("DEBUG", False)))

    app = Flask(__name__)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))

    if container is None:
        if settings.get("STORE_BACKEND") == "mysql" and settings.get("AUTO_INIT_DB"):
            db_config = settings["DB_CONFIG"]
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info(
                "Schema ready on %s@%s/%s (tables=%d)",
                db_config.get("user"),
                db_config.get("host"),
                db_config.get("database"),
                len(list_tables(db_config)),
            )
        container = build_container(settings)
    app.extensions["kiosk_container"] = container

    register_error_handlers(app)
    register_auth(app, container)
    register_identity(app, container)
    register_attendance(app, container)
    register_employees(app, container)
    register_leave(app, container)
    register_notifications(app, container)
    register_settings(app, container)
    register_payroll(app, container)

    if settings.get("RUN_DAILY_TASKS_ON_START"):
        report = container.reconciliation_service.run()
        if not report.skipped:
            logger.info(
                "Daily tasks: %d employee(s) auto clocked out, %d duplicate credential(s)",
                len(report.closed_employee_ids),
                len(report.duplicates),
            )

    return app
