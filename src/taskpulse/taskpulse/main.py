from __future__ import annotations

import importlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from config import get_settings_module

from .common.http import ok, register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .otp.controller import register as register_otp
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger("taskpulse")

API_VERSION = "1.0.0"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_meta_routes(app: Flask) -> None:
    @app.route("/", methods=["GET"], endpoint="root")
    def root():
        return ok(
            message="Welcome to TaskPulse API",
            version=API_VERSION,
            endpoints={"auth": "/api/auth", "reports": "/api/reports", "health": "/api/health"},
        )

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return ok(
            message="TaskPulse API is running",
            timestamp=datetime.now().isoformat(),
            environment=app.config["APP_ENV"],
        )


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["APP_ENV"] = settings_module.rsplit(".", 1)[-1]
    app.config["FRONTEND_URL"] = getattr(settings, "FRONTEND_URL", "http://localhost:3000")

    CORS(
        app,
        resources={r"/api/*": {"origins": list(getattr(settings, "CORS_ORIGINS", ["*"]))}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )

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
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(db_config=db_config, settings=settings)

    container.google_login.init_app(app)
    app.extensions["taskpulse"] = container

    register_error_handlers(app)
    _register_meta_routes(app)
    register_users(app, container)
    register_otp(app, container)
    register_reports(app, container)

    return app
