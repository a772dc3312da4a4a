from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from .absences.controller import register as register_absences
from .common.logger import configure_logging
from .container import build_container
from .daycare.controller import register as register_daycare
from .database.bootstrap import apply_schema, ensure_admin_employee, list_tables
from .employees.controller import register as register_employees
from .invoicing.controller import register as register_invoicing
from .koski.controller import register as register_koski
from .persons.controller import register as register_persons
from .reports.controller import register as register_reports
from .settings import get_settings_module

_LOGGER = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        json_out=bool(getattr(settings, "LOG_JSON", False)),
    )
    _LOGGER.info(
        "Starting with settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        _LOGGER.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        admin_username = getattr(settings, "ADMIN_USERNAME", None)
        admin_password = getattr(settings, "ADMIN_PASSWORD", None)
        if admin_username and admin_password:
            ensure_admin_employee(db_config, username=admin_username, password=admin_password)

    container = build_container(db_config=db_config)

    register_employees(app, container)
    register_daycare(app, container)
    register_absences(app, container)
    register_koski(app, container)
    register_persons(app, container)
    register_invoicing(app, container)
    register_reports(app, container)

    return app
