# File: /interface_engine/crud/interface.py | Version: 1.0 | Title: Interface pages and blocks (configs normalized on write)
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from interface_engine.core.block_config import (
    get_effective_block_sizing,
    normalize_block_config,
    validate_block_config,
)
from interface_engine.core.layout import (
    db_block_to_layout,
    layout_item_to_db_update,
    resolve_block_table_id,
)
from interface_engine.core.page_config import merge_page_config
from interface_engine.models.interface import InterfacePage, PageBlock
from interface_engine.schemas.pages import PageBlockOut

log = logging.getLogger(__name__)


def create_page(db: Session, data) -> InterfacePage:
    page = InterfacePage(
        name=data.name,
        page_type=data.page_type,
        base_table=data.base_table,
        config=merge_page_config(data.page_type, data.config),
    )
    db.add(page)
    db.commit()
    db.refresh(page)
    return page


def get_page(db: Session, page_id: str) -> Optional[InterfacePage]:
    return db.query(InterfacePage).filter(InterfacePage.id == page_id).first()


def get_block(db: Session, block_id: str) -> Optional[PageBlock]:
    return db.query(PageBlock).filter(PageBlock.id == block_id).first()


def block_out(block: PageBlock, page: Optional[InterfacePage] = None, errors=None) -> PageBlockOut:
    """Read model for a stored block. Raises CorruptedLayoutError on partial positions."""
    config = block.config or {}
    page = page or block.page
    return PageBlockOut(
        id=block.id,
        page_id=block.page_id,
        type=block.type,
        config=config,
        layout=db_block_to_layout(block),
        sizing=get_effective_block_sizing(block.type, config.get("sizing")),
        table_id=resolve_block_table_id(config, page.base_table if page else None),
        order_index=block.order_index or 0,
        config_errors=list(errors or []),
    )


def create_block(db: Session, page: InterfacePage, data) -> PageBlockOut:
    raw = dict(data.config or {})
    valid, errors = validate_block_config(data.type, raw)
    config = normalize_block_config(data.type, raw)
    if not valid:
        log.info(
            "Block %s on page %s saved with default config: %s",
            data.type,
            page.id,
            errors,
            extra={"page_id": page.id},
        )

    sizing = get_effective_block_sizing(data.type, data.sizing)
    if data.sizing is not None:
        config = {**config, "sizing": sizing}

    block = PageBlock(
        page_id=page.id,
        type=data.type,
        config=config,
        order_index=data.order_index,
    )
    if data.layout is not None:
        for k, v in layout_item_to_db_update(data.layout.model_dump()).items():
            setattr(block, k, v)
    db.add(block)
    db.commit()
    db.refresh(block)
    return block_out(block, page, errors)


def list_blocks(db: Session, page: InterfacePage) -> List[PageBlockOut]:
    rows = (
        db.query(PageBlock)
        .filter(PageBlock.page_id == page.id)
        .order_by(PageBlock.order_index.asc(), PageBlock.id.asc())
        .all()
    )
    return [block_out(b, page) for b in rows]
