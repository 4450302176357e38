# File: tests/test_filter_evaluation.py | Version: 1.0 | Path: /tests/test_filter_evaluation.py
from datetime import date

import pytest

from interface_engine.crud.filtering import (
    TODAY_TOKEN,
    evaluate_filter_tree,
    filter_rows,
    render_or_group,
)
from interface_engine.db.query_builder import LogicSyntaxError, parse_logic
from interface_engine.schemas.fields import FieldMeta
from interface_engine.schemas.filters import ConditionType, FilterCondition, FilterGroup

TODAY = date(2024, 5, 15)

FIELDS = [
    FieldMeta(name="title", type="text"),
    FieldMeta(name="amount", type="number"),
    FieldMeta(name="due", type="date"),
    FieldMeta(name="done", type="checkbox"),
    FieldMeta(name="tags", type="multi_select"),
    FieldMeta(name="stage", type="single_select"),
    FieldMeta(name="owner", type="link_to_table"),
]


def _c(field, op, value=None, value2=None):
    return FilterCondition(field=field, operator=op, value=value, value2=value2)


def _ok(row, cond):
    return evaluate_filter_tree(row, cond, FIELDS, today=TODAY)


def test_text_contains_is_case_insensitive():
    assert _ok({"title": "Quarterly Report"}, _c("title", "contains", "report"))
    assert not _ok({"title": "Notes"}, _c("title", "contains", "report"))


def test_not_equal_keeps_rows_without_a_value():
    cond = _c("stage", "not_equal", "Won")
    assert _ok({"stage": "Lead"}, cond)
    assert _ok({}, cond)
    assert not _ok({"stage": "Won"}, cond)


def test_blank_value_is_a_no_op():
    assert _ok({"title": "x"}, _c("title", "equal", ""))
    assert _ok({"title": "x"}, _c("title", "contains", None))


def test_unknown_operator_is_a_no_op():
    assert _ok({"title": "x"}, _c("title", "sounds_like", "y"))


def test_numeric_comparisons_coerce_strings():
    assert _ok({"amount": 15}, _c("amount", "greater_than", "10"))
    assert not _ok({"amount": 5}, _c("amount", "greater_than_or_equal", 10))
    assert _ok({"amount": 10}, _c("amount", "less_than_or_equal", 10))


def test_checkbox_equal_false_matches_false_only():
    cond = _c("done", "equal", "false")
    assert _ok({"done": False}, cond)
    assert not _ok({"done": True}, cond)


def test_multi_select_equal_means_contains_all():
    cond = _c("tags", "equal", ["a", "b"])
    assert _ok({"tags": ["b", "a", "c"]}, cond)
    assert not _ok({"tags": ["a"]}, cond)


def test_is_empty_and_is_not_empty():
    assert _ok({"title": ""}, _c("title", "is_empty"))
    assert _ok({}, _c("title", "is_empty"))
    assert not _ok({"title": "x"}, _c("title", "is_empty"))
    assert _ok({"tags": []}, _c("tags", "is_empty"))
    assert _ok({"title": "x"}, _c("title", "is_not_empty"))
    assert not _ok({"title": ""}, _c("title", "is_not_empty"))


def test_date_comparisons_are_whole_day():
    assert _ok({"due": "2024-05-15"}, _c("due", "date_equal", "2024-05-15"))
    assert _ok({"due": "2024-05-15T23:10:00"}, _c("due", "date_equal", "2024-05-15"))
    assert not _ok({"due": "2024-05-15T23:10:00"}, _c("due", "date_after", "2024-05-15"))
    assert _ok({"due": "2024-05-16"}, _c("due", "date_after", "2024-05-15"))
    assert _ok({"due": "2024-05-15T08:00:00"}, _c("due", "date_on_or_before", "2024-05-15"))
    assert not _ok({"due": "2024-05-15"}, _c("due", "date_before", "2024-05-15"))


def test_date_range_accepts_object_or_value2():
    obj = _c("due", "date_range", {"start": "2024-05-01", "end": "2024-05-31"})
    split = _c("due", "date_range", "2024-05-01", "2024-05-31")
    for cond in (obj, split):
        assert _ok({"due": "2024-05-31T12:00:00"}, cond)
        assert not _ok({"due": "2024-06-01"}, cond)


def test_relative_dates_use_today():
    assert _ok({"due": "2024-05-15"}, _c("due", "date_today"))
    assert _ok({"due": "2024-05-15"}, _c("due", "date_equal", TODAY_TOKEN))
    nxt = _c("due", "date_next_days", 3)
    assert _ok({"due": "2024-05-18"}, nxt)
    assert not _ok({"due": "2024-05-19"}, nxt)
    assert not _ok({"due": "2024-05-14"}, nxt)


def test_has_matches_linked_record_id():
    assert _ok({"owner": ["u1", "u2"]}, _c("owner", "has", "u1"))
    assert _ok({"owner": "u1"}, _c("owner", "has", "u1"))
    assert not _ok({"owner": ["u2"]}, _c("owner", "has", "u1"))
    assert _ok({"owner": ["u2"]}, _c("owner", "does_not_have", "u1"))
    assert not _ok({"owner": ["u1"]}, _c("owner", "does_not_have", "u1"))


def test_or_group_with_pass_through_child_filters_nothing():
    tree = FilterGroup(
        condition_type=ConditionType.OR,
        children=(_c("stage", "equal", "Won"), _c("title", "equal", "")),
    )
    assert _ok({"stage": "Lead"}, tree)


def test_nested_groups():
    tree = FilterGroup(
        children=(
            _c("amount", "greater_than", 0),
            FilterGroup(
                condition_type=ConditionType.OR,
                children=(_c("stage", "equal", "Won"), _c("tags", "contains", "vip")),
            ),
        )
    )
    rows = [
        {"id": 1, "amount": 5, "stage": "Won"},
        {"id": 2, "amount": 5, "stage": "Lead", "tags": ["vip"]},
        {"id": 3, "amount": 5, "stage": "Lead"},
        {"id": 4, "amount": 0, "stage": "Won"},
    ]
    assert [r["id"] for r in filter_rows(rows, tree, FIELDS, today=TODAY)] == [1, 2]


def test_render_or_group_produces_parseable_logic():
    group = FilterGroup(
        condition_type=ConditionType.OR,
        children=(
            _c("stage", "equal", "Won"),
            FilterGroup(children=(_c("amount", "greater_than", 10), _c("title", "is_empty"))),
            _c("tags", "contains", "a,b"),
        ),
    )
    expr = render_or_group(group, FIELDS, today=TODAY)
    assert expr == (
        'stage.eq.Won,and(amount.gt.10.0,or(title.is.null,title.eq."")),tags.cs.{"a,b"}'
    )
    nodes = parse_logic(expr)
    assert nodes[0] == ("pred", "stage", "eq", False, "Won")
    assert nodes[1][0] == "and"
    assert nodes[2] == ("pred", "tags", "cs", False, ["a,b"])


def test_render_or_group_is_none_when_an_alternative_is_blank():
    group = FilterGroup(
        condition_type=ConditionType.OR,
        children=(_c("stage", "equal", "Won"), _c("title", "contains", "")),
    )
    assert render_or_group(group, FIELDS, today=TODAY) is None


def test_parse_logic_handles_negation_and_lists():
    nodes = parse_logic('stage.not.in.(Lead,"Won, maybe"),amount.gte.3')
    assert nodes[0] == ("pred", "stage", "in", True, ["Lead", "Won, maybe"])
    assert nodes[1] == ("pred", "amount", "gte", False, 3)


def test_parse_logic_rejects_garbage():
    with pytest.raises(LogicSyntaxError):
        parse_logic("stage.eq")
    with pytest.raises(LogicSyntaxError):
        parse_logic('title.eq."unterminated')
