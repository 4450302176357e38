# File: /interface_engine/routers/tables.py | Version: 1.0 | Title: Tables, fields and rows
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interface_engine.core.cancellation import CancelToken
from interface_engine.core.field_operators import OperatorOption, get_operators_for_field_type
from interface_engine.crud import rows as crud_rows
from interface_engine.crud import tables as crud_tables
from interface_engine.dependencies import get_cancel_token, get_db
from interface_engine.schemas import fields as field_schema

router = APIRouter(prefix="/tables", tags=["Tables"])


def _table_or_404(db: Session, table_id: str):
    t = crud_tables.get_table(db, table_id)
    if not t:
        raise HTTPException(status_code=404, detail="Table not found")
    return t


@router.post("", response_model=field_schema.TableOut, status_code=201)
def create_table(data: field_schema.TableCreate, db: Session = Depends(get_db)):
    return crud_tables.create_table(db, data)


@router.get("/{table_id}", response_model=field_schema.TableOut)
def get_table(table_id: str, db: Session = Depends(get_db)):
    return _table_or_404(db, table_id)


@router.get("/{table_id}/fields", response_model=List[field_schema.TableFieldOut])
def list_fields(table_id: str, db: Session = Depends(get_db)):
    _table_or_404(db, table_id)
    return crud_tables.list_fields(db, table_id)


@router.post("/{table_id}/fields", response_model=field_schema.TableFieldOut, status_code=201)
def create_field(table_id: str, data: field_schema.TableFieldCreate, db: Session = Depends(get_db)):
    _table_or_404(db, table_id)
    try:
        return crud_tables.create_field(db, table_id, data)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Field '{data.name}' already exists")


@router.get("/{table_id}/fields/{field_name}/operators", response_model=List[OperatorOption])
def field_operators(table_id: str, field_name: str, db: Session = Depends(get_db)):
    _table_or_404(db, table_id)
    f = crud_tables.get_field_by_name(db, table_id, field_name)
    if not f:
        raise HTTPException(status_code=404, detail="Field not found")
    return get_operators_for_field_type(f.type)


@router.post("/{table_id}/rows", status_code=201)
def create_row(
    table_id: str,
    data: field_schema.RowCreate,
    db: Session = Depends(get_db),
    token: CancelToken = Depends(get_cancel_token),
):
    _table_or_404(db, table_id)
    return crud_rows.create_row(db, table_id, data.data, token)
