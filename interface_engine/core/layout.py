# File: /interface_engine/core/layout.py | Version: 1.0 | Title: Block layout <-> DB position mapping
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

LAYOUT_COLUMNS = ("position_x", "position_y", "width", "height")
MIN_W = 2
MIN_H = 2


class CorruptedLayoutError(ValueError):
    pass


def _get(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def db_block_to_layout(row: Any) -> Optional[Dict[str, int]]:
    """
    {x, y, w, h} from a stored block. None for a block that was never placed
    (every position column null); a partly-null position is a data error.
    """
    values = {k: _get(row, k) for k in LAYOUT_COLUMNS}
    missing = [k for k, v in values.items() if v is None]
    if len(missing) == len(LAYOUT_COLUMNS):
        return None
    if missing:
        raise CorruptedLayoutError(
            f"Corrupted layout state for block {_get(row, 'id')}: null {', '.join(missing)}"
        )
    return {
        "x": values["position_x"],
        "y": values["position_y"],
        "w": values["width"],
        "h": values["height"],
    }


def layout_item_to_db_update(item: Mapping[str, Any]) -> Dict[str, int]:
    return {
        "position_x": item["x"],
        "position_y": item["y"],
        "width": item["w"],
        "height": item["h"],
    }


def block_to_layout_item(block: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "i": block["id"],
        "x": block["x"],
        "y": block["y"],
        "w": block["w"],
        "h": block["h"],
        "minW": MIN_W,
        "minH": MIN_H,
    }


def resolve_block_table_id(block_config: Optional[Mapping[str, Any]], page_table_id: Optional[str]) -> Optional[str]:
    """Block table_id, then the page's base table, then the block's legacy base_table."""
    cfg = block_config or {}
    return cfg.get("table_id") or page_table_id or cfg.get("base_table") or None


def merge_block_config(existing: Optional[Mapping[str, Any]], update: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow merge; keys absent from the update are kept."""
    return {**(existing or {}), **(update or {})}
