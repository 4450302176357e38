# File: /interface_engine/core/filter_converters.py | Version: 1.0 | Title: Convert between flat configs, DB rows and FilterTree
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from interface_engine.core.filter_tree import (
    conditions_to_filter_tree,
    has_or_semantics,
    iter_conditions,
    normalize_filter_tree,
)
from interface_engine.schemas.filters import (
    ConditionType,
    FilterCondition,
    FilterConfig,
    FilterGroup,
    FilterTree,
)

log = logging.getLogger(__name__)


class LossyFilterConversionError(ValueError):
    """Raised in strict mode when OR grouping cannot be expressed as a flat list."""


class UnsupportedFilterNestingError(ValueError):
    """Raised when a tree nests groups deeper than view storage can hold."""


def _get(row: Any, key: str, default: Any = None) -> Any:
    # Rows arrive as ORM objects, pydantic models or plain dicts
    if isinstance(row, dict):
        return row.get(key, default)
    return getattr(row, key, default)


def coerce_filter_configs(configs: Optional[Sequence[Any]]) -> Tuple[FilterConfig, ...]:
    """Accept FilterConfig models or their dict form."""
    return tuple(
        c if isinstance(c, FilterConfig) else FilterConfig.model_validate(c) for c in configs or ()
    )


def filter_configs_to_filter_tree(
    configs: Sequence[Any], combine_as: str = "AND"
) -> FilterTree:
    configs = coerce_filter_configs(configs)
    if not configs:
        return None
    conditions = [
        FilterCondition(
            field=c.field, operator=c.operator, value=c.value, value2=c.value2
        )
        for c in configs
    ]
    return conditions_to_filter_tree(conditions, combine_as)


def filter_tree_to_filter_configs(
    tree: FilterTree, *, strict: bool = False
) -> List[FilterConfig]:
    """
    Degrade a tree to a flat (implicitly AND-ed) list. OR groups cannot be
    represented; in strict mode that raises, otherwise it is logged and the
    conditions are returned AND-ed (narrower than the tree).
    """
    if has_or_semantics(tree):
        if strict:
            raise LossyFilterConversionError(
                "Filter tree contains OR groups that a flat filter list cannot express"
            )
        log.warning("Flattening filter tree with OR groups; result is AND-only")
    return [
        FilterConfig(field=c.field, operator=c.operator, value=c.value, value2=c.value2)
        for c in iter_conditions(tree)
    ]


def _row_to_condition(f: Any) -> FilterCondition:
    value = _get(f, "value")
    if value == "":
        value = None
    return FilterCondition(
        field=_get(f, "field_name"),
        operator=_get(f, "operator"),
        value=value,
        value2=_get(f, "value2"),
    )


def _order(row: Any) -> int:
    return _get(row, "order_index") or 0


def db_filters_to_filter_tree(filters: Sequence[Any], groups: Sequence[Any]) -> FilterTree:
    """
    Rebuild the tree from persisted `view_filters` / `view_filter_groups` rows.
    Filters whose group row is missing are treated as ungrouped.
    """
    if not filters:
        return None

    group_ids = {_get(g, "id") for g in groups}
    by_group: Dict[str, List[Any]] = {}
    ungrouped: List[Any] = []
    for f in filters:
        gid = _get(f, "filter_group_id")
        if gid and gid in group_ids:
            by_group.setdefault(gid, []).append(f)
        else:
            ungrouped.append(f)

    nodes: List[FilterGroup] = []
    for g in sorted(groups, key=_order):
        members = by_group.get(_get(g, "id")) or []
        if not members:
            continue
        nodes.append(
            FilterGroup(
                condition_type=ConditionType(_get(g, "condition_type") or "AND"),
                children=tuple(_row_to_condition(f) for f in sorted(members, key=_order)),
            )
        )

    if ungrouped:
        nodes.append(
            FilterGroup(
                condition_type=ConditionType.AND,
                children=tuple(_row_to_condition(f) for f in sorted(ungrouped, key=_order)),
            )
        )

    if not nodes:
        return None
    if len(nodes) == 1:
        return nodes[0]
    return FilterGroup(condition_type=ConditionType.AND, children=tuple(nodes))


def check_storable_filter_tree(tree: FilterTree) -> FilterTree:
    """
    Normalised tree if it fits view storage: one level of groups under an
    AND root, or a single OR group at the root.
    """
    root = normalize_filter_tree(tree)
    if root is None:
        return None
    if root.condition_type == ConditionType.OR:
        top = [root]
    else:
        top = [c for c in root.children if isinstance(c, FilterGroup)]
    for g in top:
        if any(isinstance(c, FilterGroup) for c in g.children):
            raise UnsupportedFilterNestingError(
                f"{g.condition_type.value} group contains a nested group; views store one level of groups"
            )
    return root


def filter_tree_to_db_format(
    tree: FilterTree, view_id: str
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Flatten a tree into (group_rows, filter_rows). Storage holds one level of
    groups under an implicit AND root; deeper trees raise
    UnsupportedFilterNestingError. Filter rows reference groups through a `temp-N`
    placeholder that the caller swaps for the real id after inserting groups.
    """
    root = check_storable_filter_tree(tree)
    groups: List[Dict[str, Any]] = []
    filters: List[Dict[str, Any]] = []
    if root is None:
        return groups, filters

    def _filter_row(c: FilterCondition, group_ref: Optional[str], idx: int) -> Dict[str, Any]:
        return {
            "view_id": view_id,
            "field_name": c.field,
            "operator": c.operator,
            "value": c.value,
            "value2": c.value2,
            "filter_group_id": group_ref,
            "order_index": idx,
        }

    def _add_group(g: FilterGroup) -> None:
        ref = f"temp-{len(groups)}"
        groups.append(
            {
                "temp_id": ref,
                "view_id": view_id,
                "condition_type": g.condition_type.value,
                "order_index": len(groups),
            }
        )
        for i, c in enumerate(g.children):
            filters.append(_filter_row(c, ref, i))

    if root.condition_type == ConditionType.OR:
        _add_group(root)
        return groups, filters

    ungrouped_idx = 0
    for child in root.children:
        if isinstance(child, FilterGroup):
            _add_group(child)
        else:
            filters.append(_filter_row(child, None, ungrouped_idx))
            ungrouped_idx += 1
    return groups, filters
