# File: /interface_engine/schemas/permissions.py | Version: 1.0 | Title: Block/page permission schemas
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

AccessLevel = Literal["admin", "both"]


class BlockPermissions(BaseModel):
    """`mode == 'view'` denies create/delete whatever the inline flags say."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mode: Literal["view", "edit"] = "edit"
    allow_inline_create: bool = Field(
        default=True, validation_alias=AliasChoices("allow_inline_create", "allowInlineCreate")
    )
    allow_inline_delete: bool = Field(
        default=True, validation_alias=AliasChoices("allow_inline_delete", "allowInlineDelete")
    )
    allow_open_record: bool = Field(
        default=True, validation_alias=AliasChoices("allow_open_record", "allowOpenRecord")
    )


class RecordActionPermissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    create: AccessLevel = "both"
    delete: AccessLevel = "admin"


class PermissionContext(BaseModel):
    """Optional block context for cascade checks (page settings still apply)."""

    page_config: Optional[Dict[str, Any]] = None
    block_config: Optional[Dict[str, Any]] = None


class PermissionCheckOut(BaseModel):
    role: Optional[str]
    can_create_record: bool
    can_delete_record: bool
    can_edit_records: bool
    can_open_record: bool
    block_permissions: BlockPermissions
