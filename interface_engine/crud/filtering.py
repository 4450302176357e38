# File: /interface_engine/crud/filtering.py | Version: 2.0 | Title: FilterTree evaluation (query builder + in-memory)
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from interface_engine.core.filter_converters import filter_configs_to_filter_tree
from interface_engine.core.filter_tree import normalize_filter_tree
from interface_engine.db.query_builder import QueryBuilder, quote_token, render_literal
from interface_engine.schemas.fields import FieldMeta
from interface_engine.schemas.filters import (
    ConditionType,
    FilterCondition,
    FilterConfig,
    FilterGroup,
    FilterOperator,
    FilterTree,
)

log = logging.getLogger(__name__)

TODAY_TOKEN = "__TODAY__"
NUMERIC_FIELD_TYPES = frozenset({"number", "currency", "percent", "rating"})
ARRAY_FIELD_TYPES = frozenset({"multi_select"})

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Builder method per wire operator
_CHAIN = {
    "eq": "eq",
    "neq": "neq",
    "gt": "gt",
    "gte": "gte",
    "lt": "lt",
    "lte": "lte",
    "ilike": "ilike",
    "in": "in_",
    "cs": "contains",
    "is": "is_",
}


@dataclass(frozen=True)
class _Pred:
    field: str
    op: str
    value: Any = None
    negate: bool = False


@dataclass(frozen=True)
class _AnyOf:
    preds: Tuple[_Pred, ...]


Term = Union[_Pred, _AnyOf]


# ----------------------------
# Value helpers
# ----------------------------
def _index_fields(fields: Optional[Iterable[Any]]) -> Dict[str, FieldMeta]:
    out: Dict[str, FieldMeta] = {}
    for f in fields or []:
        meta = f if isinstance(f, FieldMeta) else FieldMeta.model_validate(f)
        out[meta.name] = meta
        if meta.id:
            out[meta.id] = meta
    return out


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def _coerce(value: Any, field_type: Optional[str]) -> Any:
    if field_type == "checkbox":
        return _as_bool(value)
    if field_type in NUMERIC_FIELD_TYPES and not isinstance(value, bool):
        try:
            return float(value)
        except (TypeError, ValueError):
            return value
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _date_only(value: Any, today: date) -> Optional[str]:
    if value == TODAY_TOKEN:
        return today.isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and _DATE_ONLY_RE.match(value):
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError:
            return None
    return None


def _next_day(day: str) -> str:
    return (date.fromisoformat(day) + timedelta(days=1)).isoformat()


def _day_bounds(field: str, day: str) -> List[Term]:
    return [_Pred(field, "gte", day), _Pred(field, "lt", _next_day(day))]


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


# ----------------------------
# Condition -> predicate terms (shared by every evaluation path)
# ----------------------------
def _condition_terms(
    cond: FilterCondition, fields: Mapping[str, FieldMeta], today: date
) -> Optional[List[Term]]:
    """
    Returns the AND-ed predicate terms for one condition, or None when the
    condition cannot narrow anything (unknown operator, missing value).
    """
    field = cond.field
    op = cond.operator
    meta = fields.get(field)
    ftype = meta.type if meta else None
    value = cond.value
    if value == TODAY_TOKEN:
        value = today.isoformat()

    if op in (FilterOperator.equal, FilterOperator.not_equal):
        neg = op == FilterOperator.not_equal
        if ftype == "checkbox":
            return [_Pred(field, "eq", _as_bool(value), neg)]
        if _is_blank(value) or value == []:
            return None
        if ftype in ARRAY_FIELD_TYPES:
            return [_Pred(field, "cs", [str(v) for v in _as_list(value)], neg)]
        return [_Pred(field, "eq", _coerce(value, ftype), neg)]

    if op in (FilterOperator.is_any_of, FilterOperator.is_not_any_of):
        values = [_coerce(v, ftype) for v in _as_list(value) if not _is_blank(v)]
        if not values:
            return None
        return [_Pred(field, "in", values, op == FilterOperator.is_not_any_of)]

    if op in (FilterOperator.contains, FilterOperator.not_contains):
        neg = op == FilterOperator.not_contains
        if _is_blank(value):
            return None
        if ftype in ARRAY_FIELD_TYPES:
            return [_Pred(field, "cs", [str(v) for v in _as_list(value)], neg)]
        return [_Pred(field, "ilike", f"%{value}%", neg)]

    if op in (
        FilterOperator.greater_than,
        FilterOperator.greater_than_or_equal,
        FilterOperator.less_than,
        FilterOperator.less_than_or_equal,
    ):
        if _is_blank(value):
            return None
        wire = {
            FilterOperator.greater_than: "gt",
            FilterOperator.greater_than_or_equal: "gte",
            FilterOperator.less_than: "lt",
            FilterOperator.less_than_or_equal: "lte",
        }[FilterOperator(op)]
        return [_Pred(field, wire, _coerce(value, ftype))]

    if op == FilterOperator.is_empty:
        blank: Any = [] if ftype in ARRAY_FIELD_TYPES else ""
        return [_AnyOf((_Pred(field, "is"), _Pred(field, "eq", blank)))]

    if op == FilterOperator.is_not_empty:
        blank = [] if ftype in ARRAY_FIELD_TYPES else ""
        return [_Pred(field, "is", None, True), _Pred(field, "eq", blank, True)]

    if op in (
        FilterOperator.date_equal,
        FilterOperator.date_before,
        FilterOperator.date_after,
        FilterOperator.date_on_or_before,
        FilterOperator.date_on_or_after,
    ):
        if _is_blank(value):
            return None
        day = _date_only(value, today)
        if day is None:
            fallback = {
                FilterOperator.date_equal: "eq",
                FilterOperator.date_before: "lt",
                FilterOperator.date_after: "gt",
                FilterOperator.date_on_or_before: "lte",
                FilterOperator.date_on_or_after: "gte",
            }[FilterOperator(op)]
            return [_Pred(field, fallback, value)]
        if op == FilterOperator.date_equal:
            return _day_bounds(field, day)
        if op == FilterOperator.date_before:
            return [_Pred(field, "lt", day)]
        if op == FilterOperator.date_after:
            return [_Pred(field, "gte", _next_day(day))]
        if op == FilterOperator.date_on_or_before:
            return [_Pred(field, "lt", _next_day(day))]
        return [_Pred(field, "gte", day)]

    if op == FilterOperator.date_range:
        if isinstance(value, Mapping) and ("start" in value or "end" in value):
            start, end = value.get("start"), value.get("end")
        elif cond.value2 is not None:
            start, end = value, cond.value2
        else:
            # single date: same day
            day = _date_only(value, today)
            if day is not None:
                return _day_bounds(field, day)
            return None if _is_blank(value) else [_Pred(field, "eq", value)]
        terms: List[Term] = []
        if not _is_blank(start):
            terms.append(_Pred(field, "gte", _date_only(start, today) or start))
        if not _is_blank(end):
            end_day = _date_only(end, today)
            terms.append(_Pred(field, "lt", _next_day(end_day)) if end_day else _Pred(field, "lte", end))
        return terms or None

    if op == FilterOperator.date_today:
        return _day_bounds(field, today.isoformat())

    if op == FilterOperator.date_next_days:
        try:
            n = int(float(value))
        except (TypeError, ValueError):
            return None
        if n < 0:
            return None
        end = (today + timedelta(days=n + 1)).isoformat()
        return [_Pred(field, "gte", today.isoformat()), _Pred(field, "lt", end)]

    if op in (FilterOperator.has, FilterOperator.does_not_have):
        ids = [str(v) for v in _as_list(value) if not _is_blank(v)]
        if not ids:
            return None
        if op == FilterOperator.has:
            return [
                _AnyOf((_Pred(field, "cs", [i]), _Pred(field, "eq", i)))
                for i in ids
            ]
        terms = []
        for i in ids:
            terms.extend([_Pred(field, "cs", [i], True), _Pred(field, "eq", i, True)])
        return terms

    log.debug("Ignoring filter on %s with unknown operator %r", field, op)
    return None


# ----------------------------
# Logic-string rendering (OR groups)
# ----------------------------
def _render_value(p: _Pred) -> str:
    if p.op == "in":
        return "(" + ",".join(render_literal(v) for v in p.value) + ")"
    if p.op == "cs" or isinstance(p.value, list):
        return "{" + ",".join(render_literal(v) for v in p.value) + "}"
    return render_literal(p.value)


def _render_term(t: Term) -> str:
    if isinstance(t, _AnyOf):
        return "or(" + ",".join(_render_term(p) for p in t.preds) + ")"
    neg = "not." if t.negate else ""
    return f"{quote_token(t.field)}.{neg}{t.op}.{_render_value(t)}"


def _render_terms(terms: List[Term]) -> str:
    if len(terms) == 1:
        return _render_term(terms[0])
    return "and(" + ",".join(_render_term(t) for t in terms) + ")"


def _render_node(node: Any, fields: Mapping[str, FieldMeta], today: date) -> Optional[str]:
    """None means the node is pass-through."""
    if isinstance(node, FilterCondition):
        terms = _condition_terms(node, fields, today)
        return _render_terms(terms) if terms else None

    parts: List[str] = []
    for child in node.children:
        rendered = _render_node(child, fields, today)
        if rendered is None:
            if node.condition_type == ConditionType.OR:
                # one pass-through alternative makes the whole OR pass-through
                return None
            continue
        parts.append(rendered)
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    keyword = "or" if node.condition_type == ConditionType.OR else "and"
    return f"{keyword}(" + ",".join(parts) + ")"


def _render_or(group: FilterGroup, fields: Mapping[str, FieldMeta], today: date) -> Optional[str]:
    parts: List[str] = []
    for child in group.children:
        rendered = _render_node(child, fields, today)
        if rendered is None:
            return None
        parts.append(rendered)
    return ",".join(parts) or None


def render_or_group(group: FilterGroup, fields=None, today: Optional[date] = None) -> Optional[str]:
    """Body of a `.or_()` call for an OR group, or None if it cannot narrow."""
    return _render_or(group, _index_fields(fields), today or date.today())


# ----------------------------
# Query-builder path
# ----------------------------
def _apply_terms(query: QueryBuilder, terms: List[Term]) -> QueryBuilder:
    for t in terms:
        if isinstance(t, _AnyOf):
            query = query.or_(",".join(_render_term(p) for p in t.preds))
        elif t.negate:
            query = query.not_(t.field, t.op, t.value)
        elif t.op == "is":
            query = query.is_(t.field, None)
        else:
            query = getattr(query, _CHAIN[t.op])(t.field, t.value)
    return query


def _apply_group(query, group: FilterGroup, fields: Mapping[str, FieldMeta], today: date):
    if group.condition_type == ConditionType.OR:
        expr = _render_or(group, fields, today)
        return query.or_(expr) if expr else query

    for child in group.children:
        if isinstance(child, FilterGroup):
            query = _apply_group(query, child, fields, today)
            continue
        terms = _condition_terms(child, fields, today)
        if terms:
            query = _apply_terms(query, terms)
    return query


def apply_filters_to_query(
    query: QueryBuilder,
    tree: FilterTree,
    fields: Optional[Sequence[Any]] = None,
    today: Optional[date] = None,
) -> QueryBuilder:
    """
    Apply a FilterTree to a query builder. AND groups chain predicate calls;
    OR groups, including groups nested inside them, become one `.or_()` call.
    Empty trees leave the query untouched.
    """
    root = normalize_filter_tree(tree)
    if root is None:
        return query
    return _apply_group(query, root, _index_fields(fields), today or date.today())


def apply_filter_configs_to_query(
    query: QueryBuilder,
    configs: Sequence[FilterConfig],
    fields: Optional[Sequence[Any]] = None,
    today: Optional[date] = None,
) -> QueryBuilder:
    return apply_filters_to_query(query, filter_configs_to_filter_tree(configs), fields, today)


# ----------------------------
# In-memory path
# ----------------------------
def _text(v: Any) -> str:
    if isinstance(v, (list, dict)):
        return json.dumps(v)
    return str(v)


def _like(pattern: str, v: Any) -> bool:
    rx = "".join(
        ".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern
    )
    return re.fullmatch(rx, _text(v), re.IGNORECASE | re.DOTALL) is not None


def _eq(v: Any, target: Any) -> bool:
    if isinstance(target, list):
        return v == target
    if isinstance(target, bool):
        return _as_bool(v) == target if isinstance(v, (bool, str)) else False
    if isinstance(target, (int, float)):
        try:
            return float(v) == float(target)
        except (TypeError, ValueError):
            return False
    return _text(v) == str(target)


def _compare(v: Any, op: str, target: Any) -> bool:
    if isinstance(target, (int, float)) and not isinstance(target, bool):
        try:
            left: Any = float(v)
        except (TypeError, ValueError):
            return False
    else:
        left, target = _text(v), str(target)
    if op == "gt":
        return left > target
    if op == "gte":
        return left >= target
    if op == "lt":
        return left < target
    return left <= target


def _match(row: Mapping[str, Any], p: _Pred) -> bool:
    v = row.get(p.field)
    if p.op == "is":
        hit = v is None
    elif v is None:
        hit = False
    elif p.op == "eq":
        hit = _eq(v, p.value)
    elif p.op in ("gt", "gte", "lt", "lte"):
        hit = _compare(v, p.op, p.value)
    elif p.op == "ilike":
        hit = _like(str(p.value), v)
    elif p.op == "in":
        hit = any(_eq(v, t) for t in p.value)
    elif p.op == "cs":
        have = {str(x) for x in v} if isinstance(v, list) else set()
        hit = all(str(x) in have for x in p.value)
    else:
        hit = False

    if not p.negate:
        return hit
    if p.op == "is":
        return not hit
    return v is None or not hit


def _match_term(row: Mapping[str, Any], t: Term) -> bool:
    if isinstance(t, _AnyOf):
        return any(_match(row, p) for p in t.preds)
    return _match(row, t)


def _eval_node(row, node, fields: Mapping[str, FieldMeta], today: date) -> Optional[bool]:
    """None means the node is pass-through."""
    if isinstance(node, FilterCondition):
        terms = _condition_terms(node, fields, today)
        if not terms:
            return None
        return all(_match_term(row, t) for t in terms)

    results = [_eval_node(row, c, fields, today) for c in node.children]
    if node.condition_type == ConditionType.OR:
        if any(r is None for r in results):
            return None
        return any(results) if results else None
    decided = [r for r in results if r is not None]
    return all(decided) if decided else None


def evaluate_filter_tree(
    row: Mapping[str, Any],
    tree: FilterTree,
    fields: Optional[Sequence[Any]] = None,
    today: Optional[date] = None,
) -> bool:
    """Evaluate a tree against one row dict with the same semantics as the query path."""
    root = normalize_filter_tree(tree)
    if root is None:
        return True
    result = _eval_node(row, root, _index_fields(fields), today or date.today())
    return True if result is None else result


def filter_rows(
    rows: Iterable[Mapping[str, Any]],
    tree: FilterTree,
    fields: Optional[Sequence[Any]] = None,
    today: Optional[date] = None,
) -> List[Mapping[str, Any]]:
    root = normalize_filter_tree(tree)
    if root is None:
        return list(rows)
    idx = _index_fields(fields)
    day = today or date.today()
    return [r for r in rows if _eval_node(r, root, idx, day) is not False]
