from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_employees, list_tables
from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .holidays.controller import register as register_holidays
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .storage.controller import register as register_storage

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["COMPANY_NAME"] = getattr(settings, "COMPANY_NAME", "VTC Attendance App")
    app.config["UPLOAD_ROOT"] = getattr(settings, "UPLOAD_ROOT")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config)
            ensure_demo_employees(db_config)

        container = build_container(
            db_config=db_config,
            upload_root=app.config["UPLOAD_ROOT"],
            company_name=app.config["COMPANY_NAME"],
        )

    register_employees(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_holidays(app, container)
    register_payroll(app, container)
    register_storage(app, container)

    return app
