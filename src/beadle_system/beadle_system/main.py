from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .announcements.controller import register as register_announcements
from .container import build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .roles.catalog import seed_roles
from .roles.controller import register as register_roles
from .settings import get_settings_module
from .slips.controller import register as register_slips
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SETTING_KEYS = (
    "DB_PATH",
    "SESSION_TTL_DAYS",
    "TOKEN_COOKIE_NAME",
    "SESSION_COOKIE_SECURE",
    "SCHOOL_EMAIL_DOMAIN",
    "LOG_LEVEL",
    "AUTO_INIT_DB",
    "AUTO_SEED_ROLES",
    "AUTO_SEED_DB",
    "TESTING",
)


def create_app(overrides: Optional[dict] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    for key in SETTING_KEYS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)
    app.config.update(overrides or {})
    if "SECRET_KEY" in (overrides or {}):
        app.secret_key = app.config["SECRET_KEY"]

    placeholder = getattr(settings, "PLACEHOLDER_SECRET_KEY", None)
    if placeholder and app.secret_key == placeholder:
        raise RuntimeError("SECRET_KEY must be set in production")

    logging.basicConfig(
        level=str(app.config.get("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    container = build_container(
        db_path=app.config["DB_PATH"],
        session_ttl_days=int(app.config.get("SESSION_TTL_DAYS", 7)),
        school_email_domain=app.config.get("SCHOOL_EMAIL_DOMAIN", "campioncollege.com"),
    )
    logger.info("settings=%s db=%s", settings_module, container.conn.path)

    if app.config.get("AUTO_INIT_DB"):
        apply_schema(container.conn)
        logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))
    if app.config.get("AUTO_SEED_ROLES"):
        seed_roles(container.roles_repo)
    if app.config.get("AUTO_SEED_DB"):
        ensure_demo_users(container.conn)

    app.extensions["beadle_container"] = container

    register_users(app, container)
    register_roles(app, container)
    register_slips(app, container)
    register_announcements(app, container)

    return app
