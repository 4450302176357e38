# File: /interface_engine/crud/rows.py | Version: 1.0 | Title: Row reads/writes through the query builder, running views
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from interface_engine.core.cancellation import CancelToken
from interface_engine.core.config import settings
from interface_engine.core.filter_converters import (
    filter_configs_to_filter_tree,
    filter_tree_to_filter_configs,
)
from interface_engine.core.filter_merge import (
    derive_default_values_from_filters,
    merge_view_default_filters_with_user_quick_filters,
    search_to_filter_tree,
)
from interface_engine.core.filter_tree import (
    and_filter_trees,
    drop_and_conditions_on_fields,
    has_or_semantics,
)
from interface_engine.core.sorting import should_use_client_side_sorting, sort_rows_by_field_type
from interface_engine.crud.filtering import apply_filters_to_query
from interface_engine.crud.tables import field_metas
from interface_engine.crud.view import load_filter_tree, load_sorts
from interface_engine.db.base_class import Base
from interface_engine.db.query_builder import (
    QueryFailedError,
    QueryResult,
    RowQuery,
    is_missing_relation,
)
from interface_engine.models.view import View
from interface_engine.schemas.fields import FieldMeta, RowPage
from interface_engine.schemas.filters import FilterConfig, FilterTree, RowQueryPayload

log = logging.getLogger(__name__)

TEXT_FIELD_TYPES = ("text", "long_text")


def execute_with_recovery(
    db: Session, build: Callable[[], RowQuery], token: Optional[CancelToken] = None
) -> QueryResult:
    """
    Run a freshly built query. A missing relation gets exactly one recovery
    attempt (create the schema, rebuild, rerun); other errors are raised.
    """
    result = build().execute(token)
    if settings.AUTO_CREATE_MISSING_TABLES and is_missing_relation(result.error):
        log.warning("Row storage does not exist, attempting to create it (%s)", result.error.message)
        Base.metadata.create_all(bind=db.get_bind())
        result = build().execute(token)
    if result.error is not None:
        raise QueryFailedError(result.error)
    return result


def create_row(
    db: Session, table_id: str, data: Dict[str, Any], token: Optional[CancelToken] = None
) -> Dict[str, Any]:
    result = execute_with_recovery(
        db, lambda: RowQuery(db, table_id).insert(data).select().single(), token
    )
    return result.data


def merge_quick_filters(tree: FilterTree, quick_filters: Sequence[FilterConfig]) -> FilterTree:
    """
    Session quick filters replace the view's conditions on the same fields.
    Flat trees go through the list merge; trees with OR groups drop only the
    AND-ed conditions on those fields.
    """
    if not quick_filters:
        return tree
    if not has_or_semantics(tree):
        merged = merge_view_default_filters_with_user_quick_filters(
            filter_tree_to_filter_configs(tree), quick_filters
        )
        return filter_configs_to_filter_tree(merged)
    user_fields = {f.field for f in quick_filters}
    return and_filter_trees(
        [drop_and_conditions_on_fields(tree, user_fields), filter_configs_to_filter_tree(quick_filters)]
    )


def effective_view_tree(
    view_tree: FilterTree, payload: RowQueryPayload, fields: Sequence[FieldMeta]
) -> FilterTree:
    tree = merge_quick_filters(view_tree, payload.quick_filters)
    text_fields = [f.name for f in fields if f.type in TEXT_FIELD_TYPES]
    return and_filter_trees([tree, search_to_filter_tree(payload.search, text_fields)])


def run_view(
    db: Session,
    view: View,
    payload: RowQueryPayload,
    token: Optional[CancelToken] = None,
) -> RowPage:
    fields = field_metas(db, view.table_id)
    tree = effective_view_tree(load_filter_tree(db, view.id), payload, fields)
    sorts = payload.sorts if payload.sorts is not None else load_sorts(db, view.id)
    client_sorted = should_use_client_side_sorting(sorts, fields)

    def _build() -> RowQuery:
        q = RowQuery(db, view.table_id).select("*", count="exact")
        q = apply_filters_to_query(q, tree, fields)
        if client_sorted:
            # Fetch a wider window and order it here
            return q.limit(settings.CLIENT_SORT_FETCH_LIMIT)
        for s in sorted(sorts, key=lambda s: s.order_index):
            q = q.order(s.field_name, ascending=s.direction.value == "asc")
        return q.range(payload.offset, payload.offset + payload.limit - 1)

    result = execute_with_recovery(db, _build, token)
    rows: List[Dict[str, Any]] = list(result.data or [])
    if client_sorted:
        rows = sort_rows_by_field_type(rows, sorts, fields)
        rows = rows[payload.offset : payload.offset + payload.limit]
    return RowPage(total=result.count or 0, items=rows, client_sorted=client_sorted)


def default_values_for_view(
    db: Session, view: View, quick_filters: Sequence[FilterConfig] = ()
) -> Dict[str, Any]:
    """Values a record created in this view starts with."""
    fields = field_metas(db, view.table_id)
    tree = merge_quick_filters(load_filter_tree(db, view.id), quick_filters)
    # OR alternatives cannot pin a value
    active = [] if has_or_semantics(tree) else filter_tree_to_filter_configs(tree)
    return derive_default_values_from_filters(active, fields)
