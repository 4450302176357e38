# File: /interface_engine/schemas/__init__.py | Version: 2.0 | Path: /interface_engine/schemas/__init__.py
from . import blocks, fields, filters, pages, permissions, view

__all__ = ["blocks", "fields", "filters", "pages", "permissions", "view"]
