from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .closing.controller import register as register_closing
from .common.http import configure_session, register_error_handlers
from .container import Container, build_container
from .contracts.controller import register as register_contracts
from .core.constants import SESSION_COOKIE_NAME
from .database.bootstrap import apply_schema, ensure_admin_account, list_tables
from .evaluations.controller import register as register_evaluations
from .invoices.controller import register as register_invoices
from .members.controller import register as register_members
from .notifications.controller import register as register_notifications
from .pl_records.controller import register as register_pl_records
from .projects.controller import register as register_projects
from .schedules.controller import register as register_schedules
from .self_reports.controller import register as register_self_reports
from .skills.controller import register as register_skills
from .system_configs.controller import register as register_system_configs
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

_REGISTRARS = (
    register_users,
    register_members,
    register_skills,
    register_attendance,
    register_projects,
    register_schedules,
    register_closing,
    register_invoices,
    register_evaluations,
    register_self_reports,
    register_pl_records,
    register_contracts,
    register_system_configs,
    register_notifications,
)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory; pass a prebuilt container to skip database startup."""
    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    debug = bool(getattr(settings, "DEBUG", False))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = debug
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_session(
        app, cookie_name=SESSION_COOKIE_NAME, secure=bool(getattr(settings, "SESSION_SECURE", False))
    )
    register_error_handlers(app)

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            admin = dict(getattr(settings, "SEED_ADMIN", {}) or {})
            ensure_admin_account(
                db_config,
                email=admin.get("email", "admin@example.com"),
                password=admin.get("password", "changeme123"),
                name=admin.get("name", "Admin"),
            )

        container = build_container(settings)
        container.db.open()
        atexit.register(container.db.close)
        atexit.register(container.dispatcher.shutdown)

    for register in _REGISTRARS:
        register(app, container)

    return app
