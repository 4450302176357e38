# File: /interface_engine/schemas/filters.py | Version: 2.0 | Title: Canonical filter model (conditions, groups, flat configs)
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

from interface_engine.core.config import settings


class FilterOperator(str, Enum):
    equal = "equal"
    not_equal = "not_equal"
    is_any_of = "is_any_of"
    is_not_any_of = "is_not_any_of"
    contains = "contains"
    not_contains = "not_contains"
    greater_than = "greater_than"
    greater_than_or_equal = "greater_than_or_equal"
    less_than = "less_than"
    less_than_or_equal = "less_than_or_equal"
    is_empty = "is_empty"
    is_not_empty = "is_not_empty"
    date_equal = "date_equal"
    date_before = "date_before"
    date_after = "date_after"
    date_on_or_before = "date_on_or_before"
    date_on_or_after = "date_on_or_after"
    date_range = "date_range"
    date_today = "date_today"
    date_next_days = "date_next_days"
    has = "has"
    does_not_have = "does_not_have"


class ConditionType(str, Enum):
    AND = "AND"
    OR = "OR"


class FilterCondition(BaseModel):
    """
    A single leaf predicate. `operator` is kept as a plain string so rows saved
    with operators we no longer know still load (they evaluate as no-ops).
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    value: Any = None
    value2: Any = None


class FilterGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    condition_type: ConditionType = ConditionType.AND
    children: Tuple["FilterNode", ...] = ()


def _node_kind(v: Any) -> str:
    if isinstance(v, dict):
        return "group" if "children" in v else "condition"
    return "group" if isinstance(v, FilterGroup) else "condition"


FilterNode = Annotated[
    Union[
        Annotated[FilterCondition, Tag("condition")],
        Annotated[FilterGroup, Tag("group")],
    ],
    Discriminator(_node_kind),
]

# None means "no filtering"
FilterTree = Optional[FilterNode]

FilterGroup.model_rebuild()


class FilterConfig(BaseModel):
    """Legacy flat filter; a list of these is AND-combined."""

    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    value: Any = None
    value2: Any = None
    # Set on filters emitted by filter blocks
    source_block_id: Optional[str] = None
    source_block_title: Optional[str] = None


class FilterBlockState(BaseModel):
    """What one filter block currently emits to the rest of its page."""

    model_config = ConfigDict(frozen=True)

    block_id: str
    filters: Tuple[FilterConfig, ...] = ()
    filter_tree: FilterTree = None
    target_blocks: Union[Literal["all"], Tuple[str, ...]] = "all"
    table_id: Optional[str] = None
    title: Optional[str] = None
    signature: str = ""


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class ViewSortSpec(BaseModel):
    field_name: str
    direction: SortDirection = SortDirection.asc
    order_index: int = 0


class RowQueryPayload(BaseModel):
    """Body for running a view: session quick filters, search and paging."""

    quick_filters: List[FilterConfig] = Field(default_factory=list)
    search: Optional[str] = None
    sorts: Optional[List[ViewSortSpec]] = None  # None -> view's saved sorts
    limit: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)
