# File: /interface_engine/core/sorting.py | Version: 1.0 | Title: Field-type aware client-side sorting
from __future__ import annotations

import functools
import math
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from interface_engine.schemas.fields import FieldMeta
from interface_engine.schemas.filters import ViewSortSpec

CLIENT_SORT_FIELD_TYPES = frozenset(
    {"single_select", "multi_select", "formula", "lookup", "link_to_table"}
)
NUMERIC_SORT_TYPES = frozenset({"number", "percent", "currency"})


def requires_client_side_sorting(field_type: Optional[str]) -> bool:
    """Selects sort by choice order, computed/linked fields have no sortable column."""
    return field_type in CLIENT_SORT_FIELD_TYPES


def _as_meta(f: Any) -> FieldMeta:
    return f if isinstance(f, FieldMeta) else FieldMeta.model_validate(f)


def _as_sort(s: Any) -> ViewSortSpec:
    return s if isinstance(s, ViewSortSpec) else ViewSortSpec.model_validate(s)


def find_field(fields: Sequence[FieldMeta], name: str) -> Optional[FieldMeta]:
    if not name:
        return None
    for f in fields:
        if f.name == name:
            return f
    lower = name.lower()
    for f in fields:
        if f.name.lower() == lower:
            return f
    return None


def should_use_client_side_sorting(sorts: Sequence[Any], fields: Sequence[Any]) -> bool:
    metas = [_as_meta(f) for f in fields or []]
    for s in sorts or []:
        field = find_field(metas, _as_sort(s).field_name)
        if field is not None and requires_client_side_sorting(field.type):
            return True
    return False


def choice_order(field: FieldMeta) -> Dict[str, int]:
    """Label -> position, from `choices` (list order) or `selectOptions` (sort_index)."""
    opts = field.options or {}
    order: Dict[str, int] = {}
    for i, choice in enumerate(opts.get("choices") or []):
        label = choice.get("label") if isinstance(choice, dict) else choice
        if label is not None:
            order.setdefault(str(label), i)
    if order:
        return order
    for i, opt in enumerate(opts.get("selectOptions") or opts.get("select_options") or []):
        if isinstance(opt, dict) and opt.get("label") is not None:
            order.setdefault(str(opt["label"]), opt.get("sort_index", i))
    return order


def _is_null(v: Any) -> bool:
    return v is None


def _to_number(v: Any) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return math.nan


def _to_timestamp(v: Any) -> float:
    if isinstance(v, datetime):
        return v.timestamp()
    if isinstance(v, date):
        return datetime(v.year, v.month, v.day).timestamp()
    try:
        return datetime.fromisoformat(str(v).replace("Z", "+00:00")).replace(tzinfo=None).timestamp()
    except ValueError:
        return math.nan


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _cmp_nan_last(a: float, b: float, mult: int) -> int:
    # NaN ranks above every parsed value
    if math.isnan(a):
        return 0 if math.isnan(b) else mult
    if math.isnan(b):
        return -mult
    return _cmp(a, b) * mult


def _first_id(v: Any) -> str:
    if isinstance(v, list):
        v = v[0] if v else None
    if isinstance(v, dict):
        v = v.get("id")
    return "" if v is None else str(v)


def _comparator(
    field: FieldMeta, ascending: bool, label_map: Optional[Mapping[str, str]]
) -> Callable[[Any, Any], int]:
    mult = 1 if ascending else -1
    ftype = field.type
    order = choice_order(field) if ftype in ("single_select", "multi_select") else {}

    def compare(a: Any, b: Any) -> int:
        # nulls last in either direction
        if _is_null(a):
            return 0 if _is_null(b) else 1
        if _is_null(b):
            return -1

        if ftype == "link_to_table" and label_map is not None:
            la, lb = _first_id(a), _first_id(b)
            return _cmp(label_map.get(la, la).lower(), label_map.get(lb, lb).lower()) * mult
        if ftype == "single_select":
            return _cmp(order.get(str(a), math.inf), order.get(str(b), math.inf)) * mult
        if ftype == "multi_select":
            fa = str(a[0]) if isinstance(a, list) and a else ""
            fb = str(b[0]) if isinstance(b, list) and b else ""
            if not fa:
                return 0 if not fb else 1
            if not fb:
                return -1
            by_order = _cmp(order.get(fa, math.inf), order.get(fb, math.inf))
            return (by_order or _cmp(fa.lower(), fb.lower())) * mult
        if ftype == "date":
            return _cmp_nan_last(_to_timestamp(a), _to_timestamp(b), mult)
        if ftype in NUMERIC_SORT_TYPES:
            return _cmp_nan_last(_to_number(a), _to_number(b), mult)
        if ftype == "checkbox":
            return _cmp(bool(a), bool(b)) * mult
        return _cmp(str(a).lower(), str(b).lower()) * mult

    return compare


def sort_rows_by_field_type(
    rows: Sequence[Mapping[str, Any]],
    sorts: Sequence[Any],
    fields: Sequence[Any],
    label_map: Optional[Mapping[str, str]] = None,
) -> List[Mapping[str, Any]]:
    """
    Stable multi-key sort. Sorts are applied lowest order_index first as the
    primary key; sorts on unknown fields are skipped. `label_map` maps linked
    record ids to display labels.
    """
    out = list(rows)
    if not sorts:
        return out
    metas = [_as_meta(f) for f in fields or []]
    specs = sorted((_as_sort(s) for s in sorts), key=lambda s: s.order_index)

    # Apply secondary keys first; Python's sort is stable
    for spec in reversed(specs):
        field = find_field(metas, spec.field_name)
        if field is None:
            continue
        cmp = _comparator(field, spec.direction.value == "asc", label_map)

        def _key_for(row: Mapping[str, Any], spec=spec, field=field) -> Any:
            return row.get(spec.field_name) if spec.field_name in row else row.get(field.name)

        out.sort(key=functools.cmp_to_key(lambda a, b, k=_key_for, c=cmp: c(k(a), k(b))))
    return out
