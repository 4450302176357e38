# File: /tests/test_interface_api.py | Version: 1.0 | Title: Interface API (block checks, permissions, pages, blocks)
from __future__ import annotations

from interface_engine.models.interface import PageBlock

EDITOR = {"X-User-Role": "editor"}


def _table(client) -> str:
    tid = client.post("/tables", json={"name": "Deals"}).json()["id"]
    client.post(f"/tables/{tid}/fields", json={"name": "title", "type": "text"})
    client.post(
        f"/tables/{tid}/fields",
        json={"name": "stage", "type": "single_select", "options": {"choices": ["Lead", "Won"]}},
    )
    return tid


def test_validate_and_normalize(client):
    r = client.post("/interface/blocks/validate", json={"block_type": "grid", "config": {}})
    assert r.json() == {"valid": False, "errors": ["Grid block requires either table_id or source_view"]}

    doc = {"type": "doc", "content": []}
    r = client.post(
        "/interface/blocks/normalize",
        json={"block_type": "text", "config": {"content_json": doc, "content": 42, "sizing": "fill"}},
    )
    body = r.json()
    assert body["valid"] is False
    assert body["config"]["content_json"] == doc
    assert body["sizing"] == "content"


def test_setup_check_endpoint(client):
    r = client.post(
        "/interface/blocks/setup-check",
        params={"page_table_id": "t1"},
        json={"block_type": "record", "config": {}},
    )
    assert r.json()["missing_fields"] == ["record_id"]


def test_permission_cascade_endpoint(client):
    body = {
        "page_config": {"record_actions": {"create": "both", "delete": "both"}},
        "block_config": {"permissions": {"mode": "view"}},
    }
    r = client.post("/interface/permissions", json=body, headers=EDITOR)
    out = r.json()
    assert out["role"] == "editor"
    assert out["can_create_record"] is False
    assert out["can_delete_record"] is False
    assert out["can_edit_records"] is False
    assert out["can_open_record"] is True

    r = client.post("/interface/permissions", json={"page_config": body["page_config"]}, headers=EDITOR)
    assert r.json()["can_delete_record"] is True

    anonymous = client.post("/interface/permissions", json={}).json()
    assert anonymous["role"] is None
    assert anonymous["can_create_record"] is False


def test_pages_and_blocks(client):
    tid = _table(client)
    r = client.post("/interface/pages", json={"name": "Pipeline", "page_type": "kanban", "base_table": tid})
    assert r.status_code == 201, r.text
    page = r.json()
    assert page["config"]["visualisation"] == "kanban"

    grid = client.post(
        f"/interface/pages/{page['id']}/blocks",
        json={"type": "grid", "config": {"view_type": "grid"}, "layout": {"x": 0, "y": 0, "w": 6, "h": 4}},
    ).json()
    # no table_id in the block: falls back to the page's table
    assert grid["table_id"] == tid
    assert grid["layout"] == {"x": 0, "y": 0, "w": 6, "h": 4}
    assert grid["config_errors"] == ["Grid block requires either table_id or source_view"]
    assert grid["config"] == {"view_type": "grid", "visible_fields": []}

    text = client.post(
        f"/interface/pages/{page['id']}/blocks",
        json={"type": "text", "config": {"content_json": {"t": 1}}, "sizing": "fill", "order_index": 1},
    ).json()
    assert text["sizing"] == "content"
    assert text["layout"] is None

    listed = client.get(f"/interface/pages/{page['id']}/blocks").json()
    assert [b["type"] for b in listed] == ["grid", "text"]


def test_corrupted_layout_is_an_error(client, db_session):
    page = client.post("/interface/pages", json={"name": "P"}).json()
    block = client.post(
        f"/interface/pages/{page['id']}/blocks",
        json={"type": "divider", "layout": {"x": 1, "y": 1, "w": 2, "h": 2}},
    ).json()
    row = db_session.get(PageBlock, block["id"])
    row.height = None
    db_session.commit()

    r = client.get(f"/interface/pages/{page['id']}/blocks")
    assert r.status_code == 500
    assert r.json()["detail"].startswith("Corrupted layout state")


def test_block_record_creation_uses_filters_and_permissions(client):
    tid = _table(client)
    page = client.post("/interface/pages", json={"name": "P", "base_table": tid}).json()
    config = {"table_id": tid, "filters": [{"field": "stage", "operator": "equal", "value": "Lead"}]}
    block = client.post(f"/interface/pages/{page['id']}/blocks", json={"type": "grid", "config": config}).json()

    r = client.post(f"/interface/blocks/{block['id']}/records", json={"data": {"title": "New"}}, headers=EDITOR)
    assert r.status_code == 201, r.text
    assert r.json()["stage"] == "Lead"
    assert r.json()["title"] == "New"

    locked = client.post(
        f"/interface/pages/{page['id']}/blocks",
        json={"type": "grid", "config": {**config, "permissions": {"mode": "view"}}},
    ).json()
    r = client.post(f"/interface/blocks/{locked['id']}/records", json={"data": {}}, headers=EDITOR)
    assert r.status_code == 403

    assert client.post(f"/interface/blocks/{block['id']}/records", json={"data": {}}).status_code == 403
    assert client.post("/interface/blocks/nope/records", json={"data": {}}, headers=EDITOR).status_code == 404


def test_unknown_page(client):
    assert client.get("/interface/pages/nope").status_code == 404
    assert client.post("/interface/pages", json={"name": "P", "base_table": "nope"}).status_code == 404
