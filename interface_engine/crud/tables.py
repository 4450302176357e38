# File: /interface_engine/crud/tables.py | Version: 1.0 | Title: CRUD helpers for tables and their fields
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from interface_engine.models.tables import Table, TableField
from interface_engine.schemas.fields import FieldMeta


def create_table(db: Session, data) -> Table:
    t = Table(name=data.name)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def get_table(db: Session, table_id: str) -> Optional[Table]:
    return db.query(Table).filter(Table.id == table_id).first()


def list_fields(db: Session, table_id: str) -> List[TableField]:
    return (
        db.query(TableField)
        .filter(TableField.table_id == table_id)
        .order_by(TableField.order_index.asc(), TableField.name.asc())
        .all()
    )


def get_field_by_name(db: Session, table_id: str, name: str) -> Optional[TableField]:
    return (
        db.query(TableField)
        .filter(TableField.table_id == table_id, TableField.name == name)
        .first()
    )


def create_field(db: Session, table_id: str, data) -> TableField:
    f = TableField(
        table_id=table_id,
        name=data.name,
        type=data.type,
        options=data.options,
        order_index=data.order_index,
    )
    db.add(f)
    db.commit()
    db.refresh(f)
    return f


def field_metas(db: Session, table_id: str) -> List[FieldMeta]:
    return [FieldMeta.model_validate(f) for f in list_fields(db, table_id)]
