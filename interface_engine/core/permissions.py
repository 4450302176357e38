# File: /interface_engine/core/permissions.py | Version: 2.0 | Title: Page -> block permission cascade
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from interface_engine.schemas.permissions import (
    BlockPermissions,
    PermissionContext,
    RecordActionPermissions,
)

log = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


def _normalize_role(value: Union[str, Role, None]) -> Optional[Role]:
    if value is None:
        return None
    if isinstance(value, Role):
        return value
    try:
        normalized = value.strip().lower()
    except AttributeError:
        return None
    for r in Role:
        if r.value == normalized:
            return r
    return None


def _cfg(config: Any) -> Mapping[str, Any]:
    if config is None:
        return {}
    if isinstance(config, Mapping):
        return config
    return getattr(config, "model_dump", lambda: {})()


def _context(context: Union[PermissionContext, Mapping[str, Any], None]) -> Optional[PermissionContext]:
    if context is None or isinstance(context, PermissionContext):
        return context
    return PermissionContext.model_validate(context)


def resolve_record_actions(page_config: Any) -> RecordActionPermissions:
    """Page `record_actions` with defaults (create: both, delete: admin)."""
    raw = _cfg(page_config).get("record_actions") or {}
    try:
        return RecordActionPermissions.model_validate(raw)
    except ValidationError:
        log.warning("Invalid record_actions %r; using defaults", raw)
        return RecordActionPermissions()


_BLOCK_PERMISSION_KEYS = (
    "mode",
    "allow_inline_create",
    "allowInlineCreate",
    "allow_inline_delete",
    "allowInlineDelete",
    "allow_open_record",
    "allowOpenRecord",
)


def resolve_block_permissions(block_config: Any) -> BlockPermissions:
    """
    Block `permissions` with defaults (edit, everything allowed). Without a
    `permissions` object the same keys are read from the top of the config.
    """
    cfg = _cfg(block_config)
    raw = cfg.get("permissions")
    if raw is None:
        raw = {k: cfg[k] for k in _BLOCK_PERMISSION_KEYS if k in cfg}
    raw = raw or {}
    try:
        return BlockPermissions.model_validate(raw)
    except ValidationError:
        # An unreadable block setting must never grant more than view-only
        log.warning("Invalid block permissions %r; treating block as view-only", raw)
        return BlockPermissions(mode="view")


def _role_passes(role: Union[str, Role, None], level: str) -> bool:
    r = _normalize_role(role)
    if r is None:
        return False
    if r == Role.ADMIN:
        return True
    return level == "both"


# ----- Page level -----

def page_can_create_record(role: Union[str, Role, None], page_config: Any) -> bool:
    return _role_passes(role, resolve_record_actions(page_config).create)


def page_can_delete_record(role: Union[str, Role, None], page_config: Any) -> bool:
    return _role_passes(role, resolve_record_actions(page_config).delete)


# ----- Cascade (block settings can only restrict) -----

def can_create_record(
    role: Union[str, Role, None],
    page_config: Any,
    context: Union[PermissionContext, Mapping[str, Any], None] = None,
) -> bool:
    if not page_can_create_record(role, page_config):
        return False
    ctx = _context(context)
    if ctx is None or ctx.block_config is None:
        return True
    perms = resolve_block_permissions(ctx.block_config)
    return perms.mode == "edit" and perms.allow_inline_create


def can_delete_record(
    role: Union[str, Role, None],
    page_config: Any,
    context: Union[PermissionContext, Mapping[str, Any], None] = None,
) -> bool:
    if not page_can_delete_record(role, page_config):
        return False
    ctx = _context(context)
    if ctx is None or ctx.block_config is None:
        return True
    perms = resolve_block_permissions(ctx.block_config)
    return perms.mode == "edit" and perms.allow_inline_delete


def can_edit_records(context: Union[PermissionContext, Mapping[str, Any], None] = None) -> bool:
    ctx = _context(context)
    if ctx is None or ctx.block_config is None:
        return True
    return resolve_block_permissions(ctx.block_config).mode == "edit"


def can_open_record(context: Union[PermissionContext, Mapping[str, Any], None] = None) -> bool:
    ctx = _context(context)
    if ctx is None or ctx.block_config is None:
        return True
    return resolve_block_permissions(ctx.block_config).allow_open_record
