from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from loguru import logger
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .batches.controller import register as register_batches
from .checkin.controller import register as register_checkin
from .common.log import configure_logging
from .container import Container, build_container
from .core.exceptions import DomainError
from .core.settings import FacilitySettings
from .database.bootstrap import initialize_database
from .members.controller import register as register_members
from .payments.controller import register as register_payments


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify({"success": False, "message": exc.message, "details": exc.details}), exc.http_status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"success": False, "message": exc.description}), exc.code
        logger.exception("unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            f"settings={settings_module} db={db_config.get('user')}@{db_config.get('host')}:"
            f"{db_config.get('port', 3306)}/{db_config.get('database')}"
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            initialize_database(db_config, schema_path=schema_path)

        container = build_container(db_config=db_config, settings=FacilitySettings.from_module(settings))

    app.extensions["container"] = container

    register_error_handlers(app)
    register_members(app, container)
    register_batches(app, container)
    register_payments(app, container)
    register_checkin(app, container)
    register_attendance(app, container)

    return app
