# File: /interface_engine/routers/views.py | Version: 2.0 | Title: Views CRUD, filter tree load/save, running a view
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from interface_engine.core.cancellation import CancelToken
from interface_engine.core.filter_converters import (
    UnsupportedFilterNestingError,
    check_storable_filter_tree,
    filter_configs_to_filter_tree,
    filter_tree_to_filter_configs,
)
from interface_engine.core.filter_tree import has_or_semantics
from interface_engine.crud import rows as crud_rows
from interface_engine.crud import tables as crud_tables
from interface_engine.crud.view import (
    create_view,
    delete_view as crud_delete_view,
    get_view,
    list_views as crud_list_views,
    load_filter_tree,
    load_sorts,
    save_filter_tree,
    update_view as crud_update_view,
)
from interface_engine.dependencies import get_cancel_token, get_db
from interface_engine.schemas.fields import RowPage
from interface_engine.schemas.filters import FilterConfig, RowQueryPayload
from interface_engine.schemas.view import (
    ViewCreate,
    ViewDetailOut,
    ViewFiltersIn,
    ViewFiltersOut,
    ViewOut,
    ViewUpdate,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/views", tags=["Views"])


# ----------------------------
# Helpers
# ----------------------------
def _get_or_404(db: Session, view_id: str):
    v = get_view(db, view_id)
    if not v:
        raise HTTPException(status_code=404, detail="View not found")
    return v


def _storable_or_422(tree) -> None:
    try:
        check_storable_filter_tree(tree)
    except UnsupportedFilterNestingError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def _detail(db: Session, v) -> ViewDetailOut:
    return ViewDetailOut(
        **ViewOut.model_validate(v).model_dump(),
        filter_tree=load_filter_tree(db, v.id),
        sorts=load_sorts(db, v.id),
    )


def _filters_out(view_id: str, tree) -> ViewFiltersOut:
    return ViewFiltersOut(
        view_id=view_id,
        filter_tree=tree,
        filters=filter_tree_to_filter_configs(tree),
        has_or_groups=has_or_semantics(tree),
    )


# ----------------------------
# CRUD endpoints
# ----------------------------
@router.get("", response_model=List[ViewOut], summary="List views (optionally for one table)")
def list_views(
    table_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    return crud_list_views(db, table_id=table_id)


@router.post("", response_model=ViewDetailOut, status_code=201, summary="Create a view")
def create_view_endpoint(data: ViewCreate, db: Session = Depends(get_db)):
    if not crud_tables.get_table(db, data.table_id):
        raise HTTPException(status_code=404, detail="Table not found")
    _storable_or_422(data.filter_tree)
    v = create_view(db, data)
    return _detail(db, v)


@router.get("/{view_id}", response_model=ViewDetailOut, summary="Get a view with its filters and sorts")
def get_view_endpoint(view_id: str, db: Session = Depends(get_db)):
    return _detail(db, _get_or_404(db, view_id))


@router.patch("/{view_id}", response_model=ViewDetailOut, summary="Update a view")
def update_view_endpoint(view_id: str, data: ViewUpdate, db: Session = Depends(get_db)):
    v = crud_update_view(db, _get_or_404(db, view_id), data)
    return _detail(db, v)


@router.delete("/{view_id}", summary="Delete a view")
def delete_view_endpoint(view_id: str, db: Session = Depends(get_db)):
    crud_delete_view(db, _get_or_404(db, view_id))
    return {"detail": "View deleted"}


# ----------------------------
# Filters: /views/{id}/filters
# ----------------------------
@router.get("/{view_id}/filters", response_model=ViewFiltersOut, summary="Load a view's filter tree")
def get_view_filters(view_id: str, db: Session = Depends(get_db)):
    v = _get_or_404(db, view_id)
    return _filters_out(v.id, load_filter_tree(db, v.id))


@router.put("/{view_id}/filters", response_model=ViewFiltersOut, summary="Replace a view's filters")
def put_view_filters(view_id: str, data: ViewFiltersIn, db: Session = Depends(get_db)):
    v = _get_or_404(db, view_id)
    tree = data.filter_tree
    if tree is None and data.filters:
        tree = filter_configs_to_filter_tree(data.filters)
    _storable_or_422(tree)
    saved = save_filter_tree(db, v.id, tree)
    return _filters_out(v.id, saved)


# ----------------------------
# Rows: /views/{id}/rows
# ----------------------------
@router.post("/{view_id}/rows", response_model=RowPage, summary="Rows of a view (filters, quick filters, search, sorts)")
def run_view_endpoint(
    view_id: str,
    payload: Optional[RowQueryPayload] = None,
    db: Session = Depends(get_db),
    token: CancelToken = Depends(get_cancel_token),
):
    v = _get_or_404(db, view_id)
    return crud_rows.run_view(db, v, payload or RowQueryPayload(), token)


@router.post("/{view_id}/defaults", summary="Field values for a record created in this view")
def view_defaults_endpoint(
    view_id: str,
    quick_filters: Optional[List[FilterConfig]] = None,
    db: Session = Depends(get_db),
):
    v = _get_or_404(db, view_id)
    return crud_rows.default_values_for_view(db, v, quick_filters or [])
