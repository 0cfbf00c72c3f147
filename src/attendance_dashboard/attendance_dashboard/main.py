from __future__ import annotations

import importlib
from datetime import date
from types import ModuleType
from typing import Callable, Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging import setup_logging
from .common.web import (
    CLOCK_EXTENSION,
    GATEWAY_FACTORY_EXTENSION,
    SESSIONS_EXTENSION,
    SETTINGS_EXTENSION,
    register_error_handlers,
)
from .container import GatewayFactory, SessionRegistry
from .users.controller import register as register_users


def load_settings(settings_module: Optional[str] = None) -> ModuleType:
    load_dotenv(override=False)
    return importlib.import_module(settings_module or get_settings_module())


def create_app(
    settings_module: Optional[str] = None,
    *,
    gateway_factory: Optional[GatewayFactory] = None,
    clock: Optional[Callable[[], date]] = None,
) -> Flask:
    settings = load_settings(settings_module)
    setup_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    app.extensions[SETTINGS_EXTENSION] = settings
    app.extensions[SESSIONS_EXTENSION] = SessionRegistry()
    if gateway_factory is not None:
        app.extensions[GATEWAY_FACTORY_EXTENSION] = gateway_factory
    if clock is not None:
        app.extensions[CLOCK_EXTENSION] = clock

    if app.config["DEBUG"]:
        structlog.get_logger(__name__).info(
            "app_started",
            settings=settings.__name__,
            api=getattr(settings, "API_BASE_URL", None),
        )

    register_error_handlers(app)
    register_users(app)
    register_attendance(app)

    return app
