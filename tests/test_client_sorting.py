# File: tests/test_client_sorting.py | Version: 1.0 | Path: /tests/test_client_sorting.py
from interface_engine.core.sorting import (
    choice_order,
    should_use_client_side_sorting,
    sort_rows_by_field_type,
)
from interface_engine.schemas.fields import FieldMeta

PRIORITY = {"name": "priority", "type": "single_select", "options": {"choices": ["Low", "Medium", "High"]}}


def test_single_select_sorts_by_choice_order():
    sorts = [{"field_name": "priority", "direction": "asc"}]
    assert should_use_client_side_sorting(sorts, [PRIORITY]) is True

    rows = [{"priority": "High"}, {"priority": "Low"}, {"priority": "Medium"}]
    out = sort_rows_by_field_type(rows, sorts, [PRIORITY])
    assert [r["priority"] for r in out] == ["Low", "Medium", "High"]


def test_plain_fields_sort_server_side():
    fields = [{"name": "amount", "type": "number"}, {"name": "title", "type": "text"}]
    assert should_use_client_side_sorting([{"field_name": "amount"}], fields) is False
    assert should_use_client_side_sorting([{"field_name": "missing"}], fields) is False
    assert should_use_client_side_sorting([], [PRIORITY]) is False


def test_field_lookup_is_case_insensitive():
    assert should_use_client_side_sorting([{"field_name": "PRIORITY"}], [PRIORITY]) is True


def test_nulls_last_in_both_directions():
    rows = [{"priority": None}, {"priority": "High"}, {}, {"priority": "Low"}]
    asc = sort_rows_by_field_type(rows, [{"field_name": "priority"}], [PRIORITY])
    desc = sort_rows_by_field_type(rows, [{"field_name": "priority", "direction": "desc"}], [PRIORITY])
    assert [r.get("priority") for r in asc] == ["Low", "High", None, None]
    assert [r.get("priority") for r in desc] == ["High", "Low", None, None]


def test_unknown_choice_sorts_after_known_ones():
    rows = [{"priority": "Someday"}, {"priority": "High"}]
    out = sort_rows_by_field_type(rows, [{"field_name": "priority"}], [PRIORITY])
    assert [r["priority"] for r in out] == ["High", "Someday"]


def test_select_options_use_sort_index():
    field = FieldMeta(
        name="stage",
        type="single_select",
        options={"selectOptions": [{"label": "Won", "sort_index": 2}, {"label": "Lead", "sort_index": 0}]},
    )
    assert choice_order(field) == {"Won": 2, "Lead": 0}


def test_multi_key_sort_is_stable_and_ordered_by_index():
    fields = [PRIORITY, {"name": "amount", "type": "number"}]
    rows = [
        {"id": 1, "priority": "High", "amount": 5},
        {"id": 2, "priority": "Low", "amount": 7},
        {"id": 3, "priority": "High", "amount": 1},
        {"id": 4, "priority": "Low", "amount": 7},
    ]
    sorts = [
        {"field_name": "amount", "direction": "desc", "order_index": 1},
        {"field_name": "priority", "direction": "asc", "order_index": 0},
    ]
    out = sort_rows_by_field_type(rows, sorts, fields)
    assert [r["id"] for r in out] == [2, 4, 1, 3]


def test_dates_numbers_and_links():
    dates = [{"d": "2024-03-01"}, {"d": "not a date"}, {"d": "2024-01-15T10:00:00Z"}]
    out = sort_rows_by_field_type(dates, [{"field_name": "d"}], [{"name": "d", "type": "date"}])
    assert [r["d"] for r in out] == ["2024-01-15T10:00:00Z", "2024-03-01", "not a date"]

    nums = [{"n": "10"}, {"n": 9}, {"n": "x"}]
    out = sort_rows_by_field_type(nums, [{"field_name": "n"}], [{"name": "n", "type": "number"}])
    assert [r["n"] for r in out] == [9, "10", "x"]

    links = [{"c": ["id-b"]}, {"c": ["id-a"]}]
    labels = {"id-a": "Zeta", "id-b": "Alpha"}
    out = sort_rows_by_field_type(
        links, [{"field_name": "c"}], [{"name": "c", "type": "link_to_table"}], label_map=labels
    )
    assert [r["c"] for r in out] == [["id-b"], ["id-a"]]


def test_text_sort_ignores_case():
    rows = [{"t": "banana"}, {"t": "Apple"}, {"t": "cherry"}]
    out = sort_rows_by_field_type(rows, [{"field_name": "t"}], [{"name": "t", "type": "text"}])
    assert [r["t"] for r in out] == ["Apple", "banana", "cherry"]
