# File: /interface_engine/models/__init__.py | Version: 2.0 | Title: Models Package Exports
from .interface import InterfacePage, PageBlock
from .tables import Table, TableField, TableRow
from .view import View, ViewFilter, ViewFilterGroup, ViewSort

__all__ = [
    "Table",
    "TableField",
    "TableRow",
    "View",
    "ViewFilterGroup",
    "ViewFilter",
    "ViewSort",
    "InterfacePage",
    "PageBlock",
]
