# File: /interface_engine/core/block_config.py | Version: 1.0 | Title: Block config validation, defaults, normalisation, sizing
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from interface_engine.core.config import settings
from interface_engine.schemas.blocks import (
    BaseBlockConfig,
    BlockConfig,
    BlockSetupCheck,
    GenericBlockConfig,
    KNOWN_BLOCK_TYPES,
    Sizing,
)

log = logging.getLogger(__name__)

_block_adapter: TypeAdapter = TypeAdapter(BlockConfig)

# Block types allowed to stretch to fill their layout cell (none today)
LAYOUT_CONTAINER_TYPES: frozenset = frozenset()
# Never allowed to fill, whatever is requested
CONTENT_ONLY_TYPES = frozenset({"text", "field"})

VIEW_WRAPPER_TYPES = frozenset({"calendar", "kanban", "timeline", "list"})

_DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "grid": {"view_type": "grid", "visible_fields": []},
    "calendar": {"view_type": "calendar"},
    "kanban": {"view_type": "kanban"},
    "timeline": {"view_type": "timeline"},
    "list": {"view_type": "list"},
    "form": {"form_fields": [], "submit_action": "create"},
    "record": {"detail_fields": [], "allow_editing": False},
    "chart": {"chart_type": "bar"},
    "kpi": {"kpi_aggregate": "count"},
    "text": {"content_json": None},
    "image": {},
    "divider": {},
    "button": {"button_label": "Button"},
    "action": {"action_type": "navigate", "label": "Action", "route": "/"},
    "link_preview": {},
    "tabs": {"tabs": []},
    "filter": {"target_blocks": "all", "filters": []},
    "number": {},
    "field": {},
}


def _dev_warn(msg: str, *args: Any) -> None:
    if settings.DEV_MODE:
        log.warning(msg, *args)


def parse_block_config(block_type: str, config: Optional[Dict[str, Any]]) -> BaseBlockConfig:
    """Typed view of a raw config dict. Raises pydantic.ValidationError on bad shapes."""
    data = dict(config or {})
    data["block_type"] = block_type
    if block_type not in KNOWN_BLOCK_TYPES:
        return GenericBlockConfig.model_validate(data)
    return _block_adapter.validate_python(data)


def _required_field_errors(block_type: str, config: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    get = config.get

    if block_type == "grid":
        if not get("table_id") and not get("source_view"):
            errors.append("Grid block requires either table_id or source_view")
    elif block_type in ("form", "record"):
        if not get("table_id"):
            errors.append(f"{block_type.capitalize()} block requires table_id")
    elif block_type == "chart":
        if not get("table_id"):
            errors.append("Chart block requires table_id")
        if not get("chart_type"):
            errors.append("Chart block requires chart_type")
    elif block_type == "kpi":
        if not get("table_id"):
            errors.append("KPI block requires table_id")
        if not get("kpi_aggregate"):
            errors.append("KPI block requires kpi_aggregate")
    elif block_type == "image":
        if get("image_url") and not isinstance(get("image_url"), str):
            errors.append("Image block image_url must be a string")
    elif block_type == "action":
        action_type = get("action_type")
        if not action_type:
            errors.append("Action block requires action_type")
        if not get("label"):
            errors.append("Action block requires label")
        if action_type == "redirect" and not get("url"):
            errors.append("Redirect action requires url")
        if action_type == "navigate" and not get("route"):
            errors.append("Navigate action requires route")
        if action_type == "create_record" and not get("table_id"):
            errors.append("Create record action requires table_id")
    elif block_type == "tabs":
        tabs = get("tabs")
        if not isinstance(tabs, list) or not tabs:
            errors.append("Tabs block requires at least one tab")
    elif block_type in VIEW_WRAPPER_TYPES:
        if not get("table_id"):
            errors.append(f"{block_type} block requires table_id")
    elif block_type == "number":
        if not get("table_id"):
            errors.append("Number block requires table_id")
        if not get("field_id"):
            errors.append("Number block requires field_id")
    elif block_type == "field":
        if not get("field_id"):
            errors.append("Field block requires field_id")
    # text, filter, divider, button, link_preview: nothing required
    return errors


def validate_block_config(block_type: str, config: Any) -> Tuple[bool, List[str]]:
    """Required keys per block type, plus a shape check against the typed model."""
    if not isinstance(config, dict):
        return False, ["Block config is missing or invalid"]
    errors = _required_field_errors(block_type, config)
    if not errors:
        try:
            parse_block_config(block_type, config)
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in e['loc'][1:] or e['loc'])}: {e['msg']}"
                for e in exc.errors()
            ]
    return (not errors), errors


def get_default_block_config(block_type: str) -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULT_CONFIGS.get(block_type, {}))


def normalize_block_config(block_type: str, config: Any) -> Dict[str, Any]:
    """
    Valid configs come back unchanged; anything else is replaced by the type's
    default config. A text block's `content_json` is user content and is
    carried over even then.
    """
    valid, errors = validate_block_config(block_type, config)
    if valid:
        return config
    _dev_warn("Invalid %s block config, using defaults: %s", block_type, "; ".join(errors))
    out = get_default_block_config(block_type)
    if block_type == "text" and isinstance(config, dict) and "content_json" in config:
        out["content_json"] = config["content_json"]
    return out


def get_effective_block_sizing(block_type: str, requested: Optional[str] = None) -> Sizing:
    if block_type in CONTENT_ONLY_TYPES:
        if requested == "fill":
            if settings.DEV_MODE:
                log.error("%s blocks cannot use fill sizing; using content", block_type)
        return "content"
    if requested == "fill" and block_type in LAYOUT_CONTAINER_TYPES:
        return "fill"
    return "content"


def assert_block_config(
    block_type: str,
    config: Any,
    page_table_id: Optional[str] = None,
    page_record_id: Optional[str] = None,
    has_date_field: bool = False,
) -> BlockSetupCheck:
    """Whether a block can render as configured, or should show its setup UI instead."""
    if not isinstance(config, dict):
        _dev_warn("Block type %s has invalid config", block_type)
        return BlockSetupCheck(
            valid=False, reason="Block config is missing or invalid", show_setup_ui=True
        )

    def _missing(fields: List[str], reason: str) -> BlockSetupCheck:
        _dev_warn("%s block is missing required config: %s", block_type, reason)
        return BlockSetupCheck(valid=False, reason=reason, missing_fields=fields, show_setup_ui=True)

    get = config.get
    if block_type == "grid":
        if not get("table_id") and not get("source_view"):
            return _missing(["table_id or source_view"], "grid block requires table_id or source_view")
        has_date = has_date_field or any(
            get(k)
            for k in (
                "start_date_field",
                "from_date_field",
                "date_field",
                "calendar_date_field",
                "calendar_start_field",
            )
        )
        if get("view_type") == "calendar" and not has_date:
            return _missing(
                ["start_date_field or from_date_field"],
                "Calendar view (grid block) requires a date field",
            )
    elif block_type in ("chart", "kpi"):
        if not get("table_id") and not get("source_view"):
            return _missing(
                ["table_id or source_view"], f"{block_type} block requires table_id or source_view"
            )
    elif block_type == "record":
        if not get("table_id") and not page_table_id:
            return _missing(["table_id"], "Record block requires table_id")
        if not get("record_id") and not page_record_id:
            return _missing(["record_id"], "Record block requires record_id or pageRecordId")
    elif block_type == "form":
        if not get("table_id") and not page_table_id:
            return _missing(["table_id"], "Form block requires table_id")
    elif block_type == "text":
        if get("content_json") is None and not get("content") and not get("text_content"):
            return BlockSetupCheck(valid=True, show_setup_ui=True)
    elif block_type not in KNOWN_BLOCK_TYPES:
        _dev_warn("Unknown block type: %s", block_type)
    return BlockSetupCheck(valid=True)
