# File: /interface_engine/main.py | Version: 2.0 | Title: FastAPI App (views, tables, interface pages/blocks)
from __future__ import annotations

import importlib
import importlib.util

from fastapi import FastAPI

from interface_engine.core.config import settings
from interface_engine.core.error_handlers import register_query_error_handlers
from interface_engine.core.logging import configure_logging
from interface_engine.observability.sentry import init_sentry_if_configured

# Initialize logging & observability
configure_logging()
init_sentry_if_configured()

# App
app = FastAPI(title="Interface Engine API")


def include_if_exists(module_path: str, attr_name: str = "router") -> bool:
    spec = importlib.util.find_spec(module_path)
    if not spec:
        return False
    mod = importlib.import_module(module_path)
    router = getattr(mod, attr_name, None)
    if router is not None:
        app.include_router(router)
        return True
    return False


include_if_exists("interface_engine.routers.health")
include_if_exists("interface_engine.routers.tables")
include_if_exists("interface_engine.routers.views")
include_if_exists("interface_engine.routers.interface")

# Optional standardized error responses
if getattr(settings, "ENABLE_STD_ERRORS", False):
    from interface_engine.core.error_handlers import register_exception_handlers

    register_exception_handlers(app)
else:
    register_query_error_handlers(app)
