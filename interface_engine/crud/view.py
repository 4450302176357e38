# File: /interface_engine/crud/view.py | Version: 2.0 | Title: CRUD helpers for views, filter trees and sorts
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from interface_engine.core.filter_converters import (
    db_filters_to_filter_tree,
    filter_tree_to_db_format,
)
from interface_engine.models.view import View, ViewFilter, ViewFilterGroup, ViewSort
from interface_engine.schemas.filters import FilterTree, ViewSortSpec

log = logging.getLogger(__name__)


def create_view(db: Session, data) -> View:
    v = View(
        table_id=data.table_id,
        name=data.name,
        type=data.type,
        config=data.config,
    )
    db.add(v)
    db.flush()
    if getattr(data, "filter_tree", None) is not None:
        _write_filter_tree(db, v.id, data.filter_tree)
    if getattr(data, "sorts", None):
        _write_sorts(db, v.id, data.sorts)
    db.commit()
    db.refresh(v)
    return v


def get_view(db: Session, view_id: str) -> Optional[View]:
    return db.query(View).filter(View.id == view_id).first()


def list_views(db: Session, table_id: Optional[str] = None) -> List[View]:
    q = db.query(View)
    if table_id:
        q = q.filter(View.table_id == table_id)
    return q.order_by(View.created_at.asc(), View.id.asc()).all()


def update_view(db: Session, v: View, data) -> View:
    if getattr(data, "name", None) is not None:
        v.name = data.name
    if getattr(data, "type", None) is not None:
        v.type = data.type
    if getattr(data, "config", None) is not None:
        v.config = {**(v.config or {}), **data.config}
    if getattr(data, "sorts", None) is not None:
        _write_sorts(db, v.id, data.sorts)
    db.commit()
    db.refresh(v)
    return v


def delete_view(db: Session, v: View) -> bool:
    db.delete(v)
    db.commit()
    return True


# ----------------------------
# Filters: groups and filters always move together
# ----------------------------
def load_filter_tree(db: Session, view_id: str) -> FilterTree:
    groups = db.execute(
        select(ViewFilterGroup).where(ViewFilterGroup.view_id == view_id)
    ).scalars().all()
    filters = db.execute(
        select(ViewFilter).where(ViewFilter.view_id == view_id)
    ).scalars().all()
    return db_filters_to_filter_tree(filters, groups)


def _write_filter_tree(db: Session, view_id: str, tree: FilterTree) -> None:
    db.execute(delete(ViewFilter).where(ViewFilter.view_id == view_id))
    db.execute(delete(ViewFilterGroup).where(ViewFilterGroup.view_id == view_id))

    group_rows, filter_rows = filter_tree_to_db_format(tree, view_id)
    real_ids = {}
    for g in group_rows:
        row = ViewFilterGroup(
            view_id=view_id, condition_type=g["condition_type"], order_index=g["order_index"]
        )
        db.add(row)
        db.flush()
        real_ids[g["temp_id"]] = row.id

    for f in filter_rows:
        ref = f["filter_group_id"]
        db.add(
            ViewFilter(
                view_id=view_id,
                field_name=f["field_name"],
                operator=f["operator"],
                value=f["value"],
                value2=f["value2"],
                filter_group_id=real_ids.get(ref) if ref else None,
                order_index=f["order_index"],
            )
        )


def save_filter_tree(db: Session, view_id: str, tree: FilterTree) -> FilterTree:
    """Replace a view's groups and filters in one transaction; returns the reloaded tree."""
    try:
        _write_filter_tree(db, view_id, tree)
        db.commit()
    except Exception:
        db.rollback()
        log.exception("Saving filters for view %s failed", view_id, extra={"view_id": view_id})
        raise
    return load_filter_tree(db, view_id)


# ----------------------------
# Sorts
# ----------------------------
def _write_sorts(db: Session, view_id: str, sorts: Sequence[ViewSortSpec]) -> None:
    db.execute(delete(ViewSort).where(ViewSort.view_id == view_id))
    # order_index decides precedence; list position breaks ties. Stored densely from 0.
    ranked = sorted(enumerate(sorts), key=lambda p: (p[1].order_index, p[0]))
    for rank, (_, s) in enumerate(ranked):
        db.add(
            ViewSort(
                view_id=view_id,
                field_name=s.field_name,
                direction=s.direction.value,
                order_index=rank,
            )
        )


def load_sorts(db: Session, view_id: str) -> List[ViewSortSpec]:
    rows = db.execute(
        select(ViewSort).where(ViewSort.view_id == view_id).order_by(ViewSort.order_index)
    ).scalars().all()
    out: List[ViewSortSpec] = []
    for r in rows:
        direction = r.direction if r.direction in ("asc", "desc") else "asc"
        out.append(ViewSortSpec(field_name=r.field_name, direction=direction, order_index=r.order_index))
    return out
