# File: /interface_engine/core/page_config.py | Version: 1.0 | Title: Default page configs per page type
from __future__ import annotations

import copy
from typing import Any, Dict

_RECORD_PAGE_FIELDS: Dict[str, Any] = {
    "visible_fields": [],
    "editable_fields": [],
    "show_field_list": True,
    "show_blocks_section": True,
    "show_field_names": True,
}

_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "list": {"visualisation": "list", "allow_grid_toggle": True, "visible_columns": []},
    "gallery": {
        "visualisation": "gallery",
        "allow_grid_toggle": True,
        "cover_field": "",
        "title_field": "",
    },
    "kanban": {
        "visualisation": "kanban",
        "allow_grid_toggle": True,
        "group_by": "",
        "card_fields": [],
    },
    "calendar": {
        "visualisation": "calendar",
        "allow_grid_toggle": True,
        "start_date_field": "",
        "end_date_field": "",
    },
    "timeline": {
        "visualisation": "timeline",
        "allow_grid_toggle": True,
        "group_by_field": "",
        "start_date_field": "",
        "end_date_field": "",
    },
    "form": {"visualisation": "form", "form_fields": [], "submit_action": "create"},
    "dashboard": {"visualisation": "dashboard", "allow_grid_toggle": False, "aggregation_views": []},
    "overview": {"visualisation": "overview", "allow_grid_toggle": False},
    "record_review": {
        "visualisation": "record_review",
        "allow_grid_toggle": True,
        "record_panel": "side",
        "allow_editing": False,
        "detail_fields": [],
        "preview_fields": [],
        "group_by_field": "",
        **_RECORD_PAGE_FIELDS,
    },
    "record_view": {
        "visualisation": "record_view",
        "allow_grid_toggle": False,
        "record_panel": "none",
        "allow_editing": True,
        **_RECORD_PAGE_FIELDS,
    },
    "blank": {"visualisation": "blank", "allow_grid_toggle": False},
}


def get_default_page_config(page_type: str) -> Dict[str, Any]:
    """Fresh copy of the default config for a page type ({} when unknown)."""
    return copy.deepcopy(_DEFAULTS.get(page_type, {}))


def merge_page_config(page_type: str, config: Dict[str, Any] = None) -> Dict[str, Any]:
    """Stored config layered over the page type's defaults."""
    merged = get_default_page_config(page_type)
    merged.update(config or {})
    return merged
