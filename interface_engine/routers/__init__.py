# File: /interface_engine/routers/__init__.py | Version: 2.0 | Path: /interface_engine/routers/__init__.py
"""
Router package exports.

Keeping these explicit helps static analyzers and avoids surprises
when importing submodules like: `from interface_engine.routers import views as views_router`.
"""
from . import health, interface, tables, views

__all__ = ["health", "interface", "tables", "views"]
