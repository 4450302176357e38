# File: /interface_engine/schemas/fields.py | Version: 1.0 | Title: Table, field and row schemas
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Computed fields: never written by forms, never pre-filled from filters
COMPUTED_FIELD_TYPES = frozenset({"formula", "lookup"})


class FieldMeta(BaseModel):
    """Field metadata the filter and sort engines consult."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    type: str = "text"
    id: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class TableCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class TableOut(BaseModel):
    id: str
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TableFieldCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: str = "text"
    options: Optional[Dict[str, Any]] = None
    order_index: int = 0


class TableFieldOut(TableFieldCreate):
    id: str
    table_id: str

    model_config = ConfigDict(from_attributes=True)


class RowCreate(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)


class RowOut(BaseModel):
    id: str
    table_id: str
    data: Dict[str, Any]

    model_config = ConfigDict(from_attributes=True)


class RowPage(BaseModel):
    total: int
    items: List[Dict[str, Any]]
    client_sorted: bool = False
