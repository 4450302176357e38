# File: /interface_engine/schemas/pages.py | Version: 1.0 | Title: Interface page and page-block schemas
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from interface_engine.schemas.blocks import Sizing


class LayoutItem(BaseModel):
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    w: int = Field(ge=1)
    h: int = Field(ge=1)


class PageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    page_type: str = "blank"
    base_table: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


class PageOut(BaseModel):
    id: str
    name: str
    page_type: str
    base_table: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PageBlockCreate(BaseModel):
    type: str = Field(min_length=1, max_length=30)
    config: Optional[Dict[str, Any]] = None
    layout: Optional[LayoutItem] = None
    sizing: Optional[Sizing] = None
    order_index: int = 0


class PageBlockOut(BaseModel):
    id: str
    page_id: str
    type: str
    config: Dict[str, Any] = Field(default_factory=dict)
    layout: Optional[LayoutItem] = None  # None: never placed
    sizing: Sizing = "content"
    table_id: Optional[str] = None
    order_index: int = 0
    # Problems found (and replaced by defaults) when the block was saved
    config_errors: List[str] = Field(default_factory=list)
