# File: /interface_engine/schemas/blocks.py | Version: 1.0 | Title: Block config models (tagged by block type)
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Sizing = Literal["content", "fill"]


class BaseBlockConfig(BaseModel):
    # Configs carry many presentation keys we only pass through
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    appearance: Optional[Dict[str, Any]] = None
    visibility_rules: Optional[List[Dict[str, Any]]] = None
    permissions: Optional[Dict[str, Any]] = None
    record_actions: Optional[Dict[str, Any]] = None


class GridBlockConfig(BaseBlockConfig):
    block_type: Literal["grid"] = "grid"
    table_id: Optional[str] = None
    view_id: Optional[str] = None
    view_type: Optional[str] = None
    source_type: Optional[Literal["table", "sql_view"]] = None
    source_view: Optional[str] = None
    group_by: Optional[str] = None
    fields: Optional[List[str]] = None
    visible_fields: Optional[List[str]] = None
    filters: Optional[List[Dict[str, Any]]] = None
    filter_tree: Optional[Dict[str, Any]] = None
    sorts: Optional[List[Dict[str, Any]]] = None


class ViewBlockConfig(GridBlockConfig):
    """calendar / kanban / timeline / list blocks wrap a grid."""

    block_type: Literal["calendar", "kanban", "timeline", "list"] = "list"  # type: ignore[assignment]
    start_date_field: Optional[str] = None
    end_date_field: Optional[str] = None
    date_field: Optional[str] = None


class FormBlockConfig(BaseBlockConfig):
    block_type: Literal["form"] = "form"
    table_id: Optional[str] = None
    form_fields: Optional[List[Dict[str, Any]]] = None
    submit_action: Optional[Literal["create", "update", "custom"]] = None


class RecordBlockConfig(BaseBlockConfig):
    block_type: Literal["record"] = "record"
    table_id: Optional[str] = None
    record_id: Optional[str] = None
    detail_fields: Optional[List[str]] = None
    allow_editing: Optional[bool] = None


class ChartBlockConfig(BaseBlockConfig):
    block_type: Literal["chart"] = "chart"
    table_id: Optional[str] = None
    view_id: Optional[str] = None
    chart_type: Optional[str] = None
    chart_x_axis: Optional[str] = None
    chart_y_axis: Optional[str] = None
    group_by_field: Optional[str] = None
    metric_field: Optional[str] = None


class KPIBlockConfig(BaseBlockConfig):
    block_type: Literal["kpi"] = "kpi"
    table_id: Optional[str] = None
    view_id: Optional[str] = None
    kpi_field: Optional[str] = None
    kpi_aggregate: Optional[str] = None
    kpi_label: Optional[str] = None
    target_value: Optional[Union[float, str]] = None


class TextBlockConfig(BaseBlockConfig):
    block_type: Literal["text"] = "text"
    content_json: Any = None
    content: Optional[str] = None
    text_content: Optional[str] = None
    text: Optional[str] = None
    markdown: Optional[bool] = None


class ImageBlockConfig(BaseBlockConfig):
    block_type: Literal["image"] = "image"
    image_url: Optional[str] = None
    image_alt: Optional[str] = None


class DividerBlockConfig(BaseBlockConfig):
    block_type: Literal["divider"] = "divider"


class ButtonBlockConfig(BaseBlockConfig):
    block_type: Literal["button"] = "button"
    button_label: Optional[str] = None
    button_automation_id: Optional[str] = None


class ActionBlockConfig(BaseBlockConfig):
    block_type: Literal["action"] = "action"
    action_type: Optional[Literal["navigate", "create_record", "redirect"]] = None
    label: Optional[str] = None
    url: Optional[str] = None
    route: Optional[str] = None
    table_id: Optional[str] = None
    confirmation_message: Optional[str] = None
    icon: Optional[str] = None


class LinkPreviewBlockConfig(BaseBlockConfig):
    block_type: Literal["link_preview"] = "link_preview"
    link_url: Optional[str] = None
    link_title: Optional[str] = None
    link_description: Optional[str] = None


class TabSpec(BaseModel):
    id: str
    label: str
    block_ids: List[str] = Field(default_factory=list)


class TabsBlockConfig(BaseBlockConfig):
    block_type: Literal["tabs"] = "tabs"
    tabs: List[TabSpec] = Field(default_factory=list)
    default_tab_id: Optional[str] = None


class FilterBlockConfig(BaseBlockConfig):
    block_type: Literal["filter"] = "filter"
    table_id: Optional[str] = None
    target_blocks: Union[Literal["all"], List[str]] = "all"
    allowed_fields: Optional[List[str]] = None
    allowed_operators: Optional[List[str]] = None
    filters: Optional[List[Dict[str, Any]]] = None
    filter_tree: Optional[Dict[str, Any]] = None


class NumberBlockConfig(BaseBlockConfig):
    block_type: Literal["number"] = "number"
    table_id: Optional[str] = None
    field_id: Optional[str] = None


class FieldBlockConfig(BaseBlockConfig):
    block_type: Literal["field"] = "field"
    field_id: Optional[str] = None
    allow_inline_edit: Optional[bool] = None


class GenericBlockConfig(BaseBlockConfig):
    """Block types with no dedicated model."""

    block_type: str


BlockConfig = Annotated[
    Union[
        GridBlockConfig,
        ViewBlockConfig,
        FormBlockConfig,
        RecordBlockConfig,
        ChartBlockConfig,
        KPIBlockConfig,
        TextBlockConfig,
        ImageBlockConfig,
        DividerBlockConfig,
        ButtonBlockConfig,
        ActionBlockConfig,
        LinkPreviewBlockConfig,
        TabsBlockConfig,
        FilterBlockConfig,
        NumberBlockConfig,
        FieldBlockConfig,
    ],
    Field(discriminator="block_type"),
]

KNOWN_BLOCK_TYPES = frozenset(
    {
        "grid", "calendar", "kanban", "timeline", "list", "form", "record",
        "chart", "kpi", "text", "image", "divider", "button", "action",
        "link_preview", "tabs", "filter", "number", "field",
    }
)


# ----- API payloads -----

class BlockConfigRequest(BaseModel):
    block_type: str
    config: Optional[Dict[str, Any]] = None


class BlockValidationOut(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class BlockNormalizeOut(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    config: Dict[str, Any]
    sizing: Sizing = "content"


class BlockSetupCheck(BaseModel):
    valid: bool
    reason: Optional[str] = None
    missing_fields: List[str] = Field(default_factory=list)
    show_setup_ui: bool = False
