# File: /interface_engine/schemas/view.py | Version: 2.0 | Title: Pydantic v2 schemas for views, their filters and sorts
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from interface_engine.schemas.filters import FilterConfig, FilterTree, ViewSortSpec

ViewType = Literal["grid", "kanban", "gallery", "calendar", "timeline", "form"]


class ViewBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: ViewType = "grid"
    config: Optional[Dict[str, Any]] = None


class ViewCreate(ViewBase):
    table_id: str
    filter_tree: FilterTree = None
    sorts: List[ViewSortSpec] = Field(default_factory=list)


class ViewUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[ViewType] = None
    config: Optional[Dict[str, Any]] = None
    sorts: Optional[List[ViewSortSpec]] = None


class ViewOut(ViewBase):
    id: str
    table_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ViewFiltersIn(BaseModel):
    """Either a tree or a flat (AND-ed) list; the tree wins when both are sent."""

    filter_tree: FilterTree = None
    filters: Optional[List[FilterConfig]] = None


class ViewFiltersOut(BaseModel):
    view_id: str
    filter_tree: FilterTree = None
    # Flat rendition for consumers without tree support; lossy for OR groups
    filters: List[FilterConfig] = Field(default_factory=list)
    has_or_groups: bool = False


class ViewDetailOut(ViewOut):
    filter_tree: FilterTree = None
    sorts: List[ViewSortSpec] = Field(default_factory=list)
