from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from .cash.controller import register as register_cash
from .common.datetime_utils import now_local
from .common.responses import ok
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import StorageUnavailableError
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .doctors.controller import register as register_doctors
from .expenses.controller import register as register_expenses
from .http_errors import register_error_handlers
from .opd_services.controller import register as register_opd_services
from .patients.controller import register as register_patients
from .payments.controller import register as register_payments
from .receipts.controller import register as register_receipts
from .reports.controller import register as register_reports
from .shifts.controller import register as register_shifts

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parent / "database"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` lets callers (tests) supply already wired services; otherwise
    the MySQL-backed container is built from the settings' DB_CONFIG.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_PREFIX"] = getattr(settings, "API_PREFIX", "/api")
    app.config["PORT"] = int(getattr(settings, "PORT", 3001))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    CORS(app, resources={f"{app.config['API_PREFIX']}/*": {"origins": getattr(settings, "CORS_ORIGINS", [])}})

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config)
        if not app.config["TESTING"]:
            container.conn.ping()
            logger.info("Database connection OK")

    register_error_handlers(app)

    prefix = app.config["API_PREFIX"]

    @app.route(f"{prefix}/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"timestamp": now_local()}, message="HIMS OPD Backend is running")

    register_shifts(app, container)
    register_cash(app, container)
    register_receipts(app, container)
    register_expenses(app, container)
    register_payments(app, container)
    register_doctors(app, container)
    register_opd_services(app, container)
    register_patients(app, container)
    register_reports(app, container)

    return app


def run() -> None:
    try:
        app = create_app()
    except StorageUnavailableError as e:
        logger.error("Startup aborted: %s", e)
        sys.exit(1)

    app.run(host="0.0.0.0", port=app.config["PORT"], debug=app.config["DEBUG"])


if __name__ == "__main__":
    run()
