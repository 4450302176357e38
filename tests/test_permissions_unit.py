# File: tests/test_permissions_unit.py | Version: 2.0 | Path: /tests/test_permissions_unit.py
import pytest

from interface_engine.core.permissions import (
    Role,
    can_create_record,
    can_delete_record,
    can_edit_records,
    can_open_record,
    page_can_create_record,
    page_can_delete_record,
    resolve_block_permissions,
)

ROLES = [Role.ADMIN, Role.EDITOR, Role.VIEWER, "admin", "Editor", None, "owner"]
PAGE_CONFIGS = [
    None,
    {},
    {"record_actions": {"create": "admin", "delete": "admin"}},
    {"record_actions": {"create": "both", "delete": "both"}},
    {"record_actions": {"create": "everyone"}},
]


def test_defaults_create_for_everyone_delete_for_admins():
    assert page_can_create_record(Role.EDITOR, {}) is True
    assert page_can_create_record(Role.VIEWER, {}) is True
    assert page_can_delete_record(Role.EDITOR, {}) is False
    assert page_can_delete_record(Role.ADMIN, {}) is True


def test_missing_role_cannot_act():
    assert page_can_create_record(None, {}) is False
    assert page_can_delete_record("nobody", {"record_actions": {"delete": "both"}}) is False


def test_admin_only_create():
    cfg = {"record_actions": {"create": "admin"}}
    assert page_can_create_record("admin", cfg) is True
    assert page_can_create_record("editor", cfg) is False


@pytest.mark.parametrize("role", ROLES)
@pytest.mark.parametrize("page_config", PAGE_CONFIGS)
def test_view_mode_block_never_allows_create_or_delete(role, page_config):
    ctx = {"block_config": {"permissions": {"mode": "view"}}}
    assert can_create_record(role, page_config, ctx) is False
    assert can_delete_record(role, page_config, ctx) is False


@pytest.mark.parametrize("role", ROLES)
@pytest.mark.parametrize("page_config", PAGE_CONFIGS)
def test_without_block_context_page_decides(role, page_config):
    assert can_create_record(role, page_config) == page_can_create_record(role, page_config)
    assert can_delete_record(role, page_config) == page_can_delete_record(role, page_config)


def test_inline_flags_only_restrict():
    ctx = {"block_config": {"permissions": {"allowInlineCreate": False}}}
    assert can_create_record(Role.ADMIN, {}, ctx) is False
    assert can_delete_record(Role.ADMIN, {}, ctx) is True
    # block cannot grant delete the page withholds
    ctx = {"block_config": {"permissions": {"allow_inline_delete": True}}}
    assert can_delete_record(Role.EDITOR, {}, ctx) is False


def test_edit_and_open_record():
    assert can_edit_records() is True
    assert can_edit_records({"block_config": {"permissions": {"mode": "view"}}}) is False
    assert can_open_record({"block_config": {"permissions": {"allow_open_record": False}}}) is False
    assert can_open_record({"block_config": {}}) is True


def test_unreadable_block_permissions_fall_back_to_view_only():
    perms = resolve_block_permissions({"permissions": {"mode": "superuser"}})
    assert perms.mode == "view"
    assert can_create_record(Role.ADMIN, {}, {"block_config": {"permissions": {"mode": 3}}}) is False


def test_block_settings_given_at_the_top_of_the_config():
    assert can_create_record("admin", {}, {"block_config": {"mode": "view"}}) is False
    assert can_edit_records({"block_config": {"mode": "view"}}) is False
    assert can_delete_record("admin", {}, {"block_config": {"allowInlineDelete": False}}) is False
    assert can_open_record({"block_config": {"allow_open_record": False}}) is False
    # an explicit permissions object takes precedence over stray top-level keys
    nested = {"permissions": {"mode": "edit"}, "mode": "view"}
    assert resolve_block_permissions(nested).mode == "edit"
