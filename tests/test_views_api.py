# File: /tests/test_views_api.py | Version: 1.0 | Title: Views API (filters, quick filters, search, sorting)
from __future__ import annotations

from typing import Any, Dict

import pytest

from interface_engine.core.cancellation import CancelToken
from interface_engine.db.query_builder import QueryError, QueryResult, RowQuery
from interface_engine.dependencies import get_cancel_token
from interface_engine.main import app

ROWS = [
    {"title": "Acme renewal", "stage": "Won", "amount": 100},
    {"title": "Beta pilot", "stage": "Lead", "amount": 30},
    {"title": "Gamma", "stage": "Lost", "amount": 50},
    {"title": "acme expansion", "stage": "Lead", "amount": 10},
]

WON_OR_SMALL: Dict[str, Any] = {
    "condition_type": "OR",
    "children": [
        {"field": "stage", "operator": "equal", "value": "Won"},
        {"field": "amount", "operator": "less_than", "value": 20},
    ],
}


def _bootstrap_table(client) -> str:
    r = client.post("/tables", json={"name": "Deals"})
    assert r.status_code == 201, r.text
    tid = r.json()["id"]
    fields = [
        {"name": "title", "type": "text"},
        {"name": "stage", "type": "single_select", "options": {"choices": ["Lead", "Won", "Lost"]}},
        {"name": "amount", "type": "number"},
    ]
    for i, f in enumerate(fields):
        r = client.post(f"/tables/{tid}/fields", json={**f, "order_index": i})
        assert r.status_code == 201, r.text
    for row in ROWS:
        assert client.post(f"/tables/{tid}/rows", json={"data": row}).status_code == 201
    return tid


@pytest.fixture()
def view_id(client):
    tid = _bootstrap_table(client)
    r = client.post(
        "/views",
        json={
            "table_id": tid,
            "name": "Won or small",
            "filter_tree": WON_OR_SMALL,
            "sorts": [{"field_name": "amount", "direction": "desc"}],
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def _titles(resp):
    return [r["title"] for r in resp.json()["items"]]


def test_view_detail_round_trips_the_tree(client, view_id):
    r = client.get(f"/views/{view_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["filter_tree"]["condition_type"] == "OR"
    assert [c["field"] for c in body["filter_tree"]["children"]] == ["stage", "amount"]
    assert body["sorts"][0] == {"field_name": "amount", "direction": "desc", "order_index": 0}


def test_run_view_applies_or_group_and_server_sort(client, view_id):
    r = client.post(f"/views/{view_id}/rows")
    assert r.status_code == 200, r.text
    assert r.json()["total"] == 2
    assert r.json()["client_sorted"] is False
    assert _titles(r) == ["Acme renewal", "acme expansion"]

    page = client.post(f"/views/{view_id}/rows", json={"limit": 1, "offset": 1})
    assert _titles(page) == ["acme expansion"]
    assert page.json()["total"] == 2


def test_quick_filters_and_search_narrow_the_view(client, view_id):
    r = client.post(
        f"/views/{view_id}/rows",
        json={"quick_filters": [{"field": "stage", "operator": "equal", "value": "Lead"}]},
    )
    assert _titles(r) == ["acme expansion"]

    r = client.post(f"/views/{view_id}/rows", json={"search": "RENEWAL"})
    assert _titles(r) == ["Acme renewal"]


def test_select_sort_happens_in_process(client, view_id):
    r = client.post(
        f"/views/{view_id}/rows", json={"sorts": [{"field_name": "stage", "direction": "asc"}]}
    )
    assert r.json()["client_sorted"] is True
    assert _titles(r) == ["acme expansion", "Acme renewal"]


def test_put_flat_filters_then_quick_filter_overrides(client, view_id):
    r = client.put(
        f"/views/{view_id}/filters",
        json={"filters": [{"field": "stage", "operator": "equal", "value": "Lead"}]},
    )
    assert r.status_code == 200, r.text
    assert r.json()["has_or_groups"] is False
    assert [f["value"] for f in r.json()["filters"]] == ["Lead"]

    r = client.post(f"/views/{view_id}/rows")
    assert sorted(_titles(r)) == ["Beta pilot", "acme expansion"]

    r = client.post(
        f"/views/{view_id}/rows",
        json={"quick_filters": [{"field": "stage", "operator": "equal", "value": "Won"}]},
    )
    assert _titles(r) == ["Acme renewal"]

    defaults = client.post(f"/views/{view_id}/defaults")
    assert defaults.json() == {"stage": "Lead"}


def test_get_filters_reports_or_groups(client, view_id):
    r = client.get(f"/views/{view_id}/filters")
    assert r.json()["has_or_groups"] is True
    # OR views pin no default values
    assert client.post(f"/views/{view_id}/defaults").json() == {}


def test_clearing_filters(client, view_id):
    r = client.put(f"/views/{view_id}/filters", json={})
    assert r.json()["filter_tree"] is None
    assert client.post(f"/views/{view_id}/rows").json()["total"] == 4


def test_update_list_and_delete(client, view_id):
    r = client.patch(f"/views/{view_id}", json={"name": "Renamed", "config": {"row_height": "tall"}})
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert r.json()["config"] == {"row_height": "tall"}

    table_id = r.json()["table_id"]
    listing = client.get("/views", params={"table_id": table_id}).json()
    assert [v["id"] for v in listing] == [view_id]

    assert client.delete(f"/views/{view_id}").status_code == 200
    assert client.get(f"/views/{view_id}").status_code == 404


def test_unknown_ids(client):
    assert client.get("/views/nope").status_code == 404
    assert client.post("/views", json={"table_id": "nope", "name": "x"}).status_code == 404
    assert client.post("/views/nope/rows").status_code == 404


def test_field_operators_endpoint(client):
    tid = _bootstrap_table(client)
    r = client.get(f"/tables/{tid}/fields/stage/operators")
    assert r.status_code == 200
    assert "is_any_of" in [o["value"] for o in r.json()]
    assert client.post(f"/tables/{tid}/fields", json={"name": "stage"}).status_code == 409


def test_store_failure_is_a_502(client, view_id, monkeypatch):
    monkeypatch.setattr(
        RowQuery, "execute", lambda self, token=None: QueryResult(None, QueryError("XX000", "backend down"))
    )
    r = client.post(f"/views/{view_id}/rows")
    assert r.status_code == 502
    assert "backend down" in r.json()["detail"]


def test_cancelled_request_is_a_504(client, view_id):
    def _cancelled():
        token = CancelToken()
        token.cancel("client went away")
        return token

    app.dependency_overrides[get_cancel_token] = _cancelled
    r = client.post(f"/views/{view_id}/rows")
    assert r.status_code == 504


def test_sort_order_index_decides_precedence(client):
    tid = _bootstrap_table(client)
    r = client.post(
        "/views",
        json={
            "table_id": tid,
            "name": "By stage then amount",
            "sorts": [
                {"field_name": "amount", "direction": "desc", "order_index": 1},
                {"field_name": "stage", "direction": "asc", "order_index": 0},
            ],
        },
    )
    assert r.status_code == 201, r.text
    assert [(s["field_name"], s["order_index"]) for s in r.json()["sorts"]] == [("stage", 0), ("amount", 1)]


def test_filters_nested_too_deep_are_rejected(client, view_id):
    too_deep = {
        "condition_type": "OR",
        "children": [
            {"field": "stage", "operator": "equal", "value": "Won"},
            {
                "condition_type": "AND",
                "children": [
                    {"field": "amount", "operator": "less_than", "value": 20},
                    {"field": "title", "operator": "contains", "value": "acme"},
                ],
            },
        ],
    }
    r = client.put(f"/views/{view_id}/filters", json={"filter_tree": too_deep})
    assert r.status_code == 422
    # stored filters are untouched
    assert client.post(f"/views/{view_id}/rows").json()["total"] == 2


def test_page_size_comes_from_settings(client, view_id, monkeypatch):
    from interface_engine.core.config import settings

    monkeypatch.setattr(settings, "DEFAULT_PAGE_SIZE", 1)
    r = client.post(f"/views/{view_id}/rows")
    assert _titles(r) == ["Acme renewal"]
    assert r.json()["total"] == 2
