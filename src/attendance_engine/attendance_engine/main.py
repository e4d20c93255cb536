from __future__ import annotations

import importlib
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .leaves.controller import register as register_leaves
from .settings.controller import register as register_settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(app: Flask, *, level: str, log_dir: str = "") -> None:
    root = logging.getLogger("src.attendance_engine")
    root.setLevel(level)
    app.logger.setLevel(level)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(os.path.join(log_dir, "attendance_engine.log"), maxBytes=2_000_000, backupCount=5)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        root.addHandler(handler)
        app.logger.addHandler(handler)
    elif not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the JSON API. A prebuilt ``container`` skips database and clock wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        app,
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        log_dir=str(getattr(settings, "LOG_DIR", "") or ""),
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
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            timezone=getattr(settings, "TIMEZONE"),
            time_sources=tuple(getattr(settings, "TIME_SOURCES")),
            clock_timeout=float(getattr(settings, "CLOCK_TIMEOUT_SECONDS")),
            settings_cache_ttl=float(getattr(settings, "SETTINGS_CACHE_TTL_SECONDS")),
        )

    register_attendance(app, container)
    register_leaves(app, container)
    register_settings(app, container)
    register_error_handlers(app)

    return app
