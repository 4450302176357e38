# File: /interface_engine/core/filter_merge.py | Version: 1.0 | Title: Filter precedence, quick-filter override and form defaults
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from pydantic import ValidationError

from interface_engine.schemas.fields import COMPUTED_FIELD_TYPES, FieldMeta
from interface_engine.schemas.filters import (
    ConditionType,
    FilterCondition,
    FilterConfig,
    FilterGroup,
    FilterOperator,
    FilterTree,
)

DEFAULT_ELIGIBLE_OPERATORS = frozenset(
    {FilterOperator.equal.value, FilterOperator.contains.value, FilterOperator.has.value}
)
DEFAULT_ELIGIBLE_FIELD_TYPES = frozenset({"single_select", "multi_select", "link_to_table"})


def _as_config(f: Any) -> Optional[FilterConfig]:
    if isinstance(f, FilterConfig):
        cfg = f
    else:
        try:
            cfg = FilterConfig.model_validate(f)
        except ValidationError:
            return None
    if not cfg.field.strip():
        return None
    return cfg


def _configs(filters: Optional[Iterable[Any]]) -> List[FilterConfig]:
    out: List[FilterConfig] = []
    for f in filters or []:
        cfg = _as_config(f)
        if cfg is not None:
            out.append(cfg)
    return out


def normalize_filter(f: Any) -> Optional[FilterConfig]:
    """
    Bring a block/base filter into FilterConfig form. A date range split over
    value/value2 becomes the {start, end} object form; other operators keep
    only field, operator and value.
    """
    cfg = _as_config(f)
    if cfg is None:
        return None
    if cfg.operator == FilterOperator.date_range:
        v = cfg.value
        if isinstance(v, dict) and "start" in v and "end" in v:
            return cfg
        if cfg.value2 is not None:
            return cfg.model_copy(update={"value": {"start": v, "end": cfg.value2}})
        return cfg
    return FilterConfig(field=cfg.field, operator=cfg.operator, value=cfg.value)


def merge_filters(
    block_base_filters: Optional[Sequence[Any]] = None,
    filter_block_filters: Optional[Sequence[Any]] = None,
    temporary_filters: Optional[Sequence[Any]] = None,
) -> List[FilterConfig]:
    """
    Three-tier precedence, all AND-ed:
      1. block base filters, always kept;
      2. filter-block filters, only for fields no base filter targets
         (their source_block_* provenance is kept);
      3. temporary filters, only for fields neither earlier tier targets.
    """
    merged: List[FilterConfig] = []
    taken: Set[str] = set()

    for f in block_base_filters or []:
        cfg = normalize_filter(f)
        if cfg is not None:
            merged.append(cfg)
    taken.update(c.field for c in merged)

    block_tier: List[FilterConfig] = []
    for cfg in _configs(filter_block_filters):
        if cfg.field in taken:
            continue
        block_tier.append(cfg)
    merged.extend(block_tier)
    taken.update(c.field for c in block_tier)

    for cfg in _configs(temporary_filters):
        if cfg.field in taken:
            continue
        merged.append(cfg)
    return merged


def merge_view_default_filters_with_user_quick_filters(
    view_default_filters: Optional[Sequence[Any]] = None,
    user_quick_filters: Optional[Sequence[Any]] = None,
) -> List[FilterConfig]:
    """Any field the user filters on replaces every default condition on that field."""
    defaults = _configs(view_default_filters)
    user = _configs(user_quick_filters)
    user_fields = {f.field for f in user}
    return [f for f in defaults if f.field not in user_fields] + user


def serialize_filters_for_comparison(filters: Optional[Sequence[Any]] = None) -> str:
    """Order-insensitive stable serialization, e.g. for a "filters modified" badge."""
    items = [
        {"field": f.field, "operator": f.operator, "value": f.value, "value2": f.value2}
        for f in _configs(filters)
    ]
    items.sort(key=lambda d: (d["field"], d["operator"]))
    return json.dumps(items, sort_keys=True, default=str)


def apply_search_to_filters(
    search_query: Optional[str],
    text_fields: Sequence[str],
    existing_filters: Optional[Sequence[Any]] = None,
) -> List[FilterConfig]:
    existing = _configs(existing_filters)
    if not search_query or not text_fields:
        return existing
    return existing + [
        FilterConfig(field=name, operator=FilterOperator.contains.value, value=search_query)
        for name in text_fields
    ]


def search_to_filter_tree(search_query: Optional[str], text_fields: Sequence[str]) -> FilterTree:
    """A search term matches when any text field contains it."""
    if not search_query or not search_query.strip() or not text_fields:
        return None
    return FilterGroup(
        condition_type=ConditionType.OR,
        children=tuple(
            FilterCondition(field=name, operator=FilterOperator.contains.value, value=search_query.strip())
            for name in text_fields
        ),
    )


def strip_filter_block_filters(filters: Optional[Sequence[Any]] = None) -> List[FilterConfig]:
    """Drop filters emitted by filter blocks (they travel separately as trees)."""
    return [f for f in _configs(filters) if not f.source_block_id]


def _single_value(raw: Any) -> Any:
    v = raw
    if isinstance(v, (list, tuple)):
        if len(v) != 1:
            return None
        v = v[0]
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return v


def derive_default_values_from_filters(
    active_filters: Optional[Sequence[Any]] = None,
    table_fields: Optional[Sequence[Any]] = None,
) -> Dict[str, Any]:
    """
    Pre-fill values for a record created inside a filtered view.

    Only single-valued equal/contains/has filters on single_select,
    multi_select and link_to_table fields qualify. multi_select values are
    unioned; any other field that two filters pin to different values is
    dropped instead of guessed.
    """
    by_key: Dict[str, FieldMeta] = {}
    for raw in table_fields or []:
        meta = raw if isinstance(raw, FieldMeta) else FieldMeta.model_validate(raw)
        by_key[meta.name] = meta
        if meta.id:
            by_key[meta.id] = meta

    defaults: Dict[str, Any] = {}
    conflicted: Set[str] = set()

    for f in _configs(active_filters):
        if f.operator not in DEFAULT_ELIGIBLE_OPERATORS or f.field in conflicted:
            continue
        meta = by_key.get(f.field)
        ftype = meta.type if meta else None
        if ftype in COMPUTED_FIELD_TYPES or ftype not in DEFAULT_ELIGIBLE_FIELD_TYPES:
            continue
        value = _single_value(f.value)
        if value is None:
            continue
        value = str(value)

        if ftype == "multi_select":
            current = defaults.get(f.field) or []
            if value not in current:
                defaults[f.field] = [*current, value]
            continue

        if f.field in defaults:
            if defaults[f.field] != value:
                del defaults[f.field]
                conflicted.add(f.field)
            continue
        defaults[f.field] = value

    return defaults
