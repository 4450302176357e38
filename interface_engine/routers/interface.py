# File: /interface_engine/routers/interface.py | Version: 1.0 | Title: Interface pages, blocks, config checks and permissions
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from interface_engine.core import permissions as perms
from interface_engine.core.block_config import (
    assert_block_config,
    get_effective_block_sizing,
    normalize_block_config,
    validate_block_config,
)
from interface_engine.core.cancellation import CancelToken
from interface_engine.core.filter_merge import derive_default_values_from_filters, merge_filters
from interface_engine.core.layout import resolve_block_table_id
from interface_engine.crud import interface as crud_interface
from interface_engine.crud import rows as crud_rows
from interface_engine.crud import tables as crud_tables
from interface_engine.dependencies import get_cancel_token, get_db, get_role
from interface_engine.schemas.blocks import (
    BlockConfigRequest,
    BlockNormalizeOut,
    BlockSetupCheck,
    BlockValidationOut,
)
from interface_engine.schemas.fields import RowCreate
from interface_engine.schemas.pages import PageBlockCreate, PageBlockOut, PageCreate, PageOut
from interface_engine.schemas.permissions import PermissionCheckOut, PermissionContext

router = APIRouter(prefix="/interface", tags=["Interface"])


def _page_or_404(db: Session, page_id: str):
    page = crud_interface.get_page(db, page_id)
    if not page:
        raise HTTPException(status_code=404, detail="Page not found")
    return page


# ---------- Block config checks ----------

@router.post("/blocks/validate", response_model=BlockValidationOut)
def validate_block(data: BlockConfigRequest):
    valid, errors = validate_block_config(data.block_type, data.config)
    return BlockValidationOut(valid=valid, errors=errors)


@router.post("/blocks/normalize", response_model=BlockNormalizeOut)
def normalize_block(data: BlockConfigRequest):
    valid, errors = validate_block_config(data.block_type, data.config)
    config = normalize_block_config(data.block_type, data.config)
    return BlockNormalizeOut(
        valid=valid,
        errors=errors,
        config=config,
        sizing=get_effective_block_sizing(data.block_type, (data.config or {}).get("sizing")),
    )


@router.post("/blocks/setup-check", response_model=BlockSetupCheck)
def block_setup_check(
    data: BlockConfigRequest,
    page_table_id: Optional[str] = None,
    page_record_id: Optional[str] = None,
):
    return assert_block_config(data.block_type, data.config, page_table_id, page_record_id)


# ---------- Permissions ----------

@router.post("/permissions", response_model=PermissionCheckOut)
def check_permissions(
    context: PermissionContext,
    role: Optional[perms.Role] = Depends(get_role),
):
    return PermissionCheckOut(
        role=role.value if role else None,
        can_create_record=perms.can_create_record(role, context.page_config, context),
        can_delete_record=perms.can_delete_record(role, context.page_config, context),
        can_edit_records=perms.can_edit_records(context),
        can_open_record=perms.can_open_record(context),
        block_permissions=perms.resolve_block_permissions(context.block_config or {}),
    )


# ---------- Pages & blocks ----------

@router.post("/pages", response_model=PageOut, status_code=201)
def create_page(data: PageCreate, db: Session = Depends(get_db)):
    if data.base_table and not crud_tables.get_table(db, data.base_table):
        raise HTTPException(status_code=404, detail="Table not found")
    return crud_interface.create_page(db, data)


@router.get("/pages/{page_id}", response_model=PageOut)
def get_page(page_id: str, db: Session = Depends(get_db)):
    return _page_or_404(db, page_id)


@router.post("/pages/{page_id}/blocks", response_model=PageBlockOut, status_code=201)
def create_block(page_id: str, data: PageBlockCreate, db: Session = Depends(get_db)):
    page = _page_or_404(db, page_id)
    return crud_interface.create_block(db, page, data)


@router.get("/pages/{page_id}/blocks", response_model=List[PageBlockOut])
def list_blocks(page_id: str, db: Session = Depends(get_db)):
    page = _page_or_404(db, page_id)
    return crud_interface.list_blocks(db, page)


@router.post("/blocks/{block_id}/records", status_code=201)
def create_block_record(
    block_id: str,
    data: RowCreate,
    db: Session = Depends(get_db),
    role: Optional[perms.Role] = Depends(get_role),
    token: CancelToken = Depends(get_cancel_token),
):
    """Create a record from inside a block; the block's filters pre-fill matching values."""
    block = crud_interface.get_block(db, block_id)
    if not block:
        raise HTTPException(status_code=404, detail="Block not found")
    page = block.page
    config = block.config or {}
    context = PermissionContext(page_config=page.config, block_config=config)
    if not perms.can_create_record(role, page.config, context):
        raise HTTPException(status_code=403, detail="Not allowed to create records here")

    table_id = resolve_block_table_id(config, page.base_table)
    if not table_id or not crud_tables.get_table(db, table_id):
        raise HTTPException(status_code=400, detail="Block has no table")

    defaults = derive_default_values_from_filters(
        merge_filters(config.get("filters")), crud_tables.field_metas(db, table_id)
    )
    return crud_rows.create_row(db, table_id, {**defaults, **data.data}, token)
