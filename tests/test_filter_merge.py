# File: tests/test_filter_merge.py | Version: 1.0 | Path: /tests/test_filter_merge.py
from interface_engine.core.filter_merge import (
    apply_search_to_filters,
    derive_default_values_from_filters,
    merge_filters,
    merge_view_default_filters_with_user_quick_filters,
    normalize_filter,
    search_to_filter_tree,
    serialize_filters_for_comparison,
    strip_filter_block_filters,
)
from interface_engine.schemas.filters import ConditionType, FilterConfig


def _f(field, value, op="equal", **kw):
    return FilterConfig(field=field, operator=op, value=value, **kw)


def test_base_filters_win_over_block_and_temporary():
    base = [_f("status", "open")]
    block = [_f("status", "closed", source_block_id="b1"), _f("owner", "ann", source_block_id="b1")]
    temp = [_f("status", "any"), _f("owner", "bob"), _f("region", "eu")]

    merged = merge_filters(base, block, temp)
    by_field = {}
    for f in merged:
        by_field.setdefault(f.field, []).append(f)

    assert [f.value for f in by_field["status"]] == ["open"]
    assert [f.value for f in by_field["owner"]] == ["ann"]
    assert by_field["owner"][0].source_block_id == "b1"
    assert [f.value for f in by_field["region"]] == ["eu"]


def test_base_filters_are_all_kept_even_on_the_same_field():
    base = [_f("amount", 1, op="greater_than"), _f("amount", 9, op="less_than")]
    assert len(merge_filters(base, [_f("amount", 5)], None)) == 2


def test_merge_skips_entries_without_a_field():
    merged = merge_filters([{"field": " ", "operator": "equal"}], [{"bogus": True}], [_f("a", 1)])
    assert [f.field for f in merged] == ["a"]


def test_normalize_filter_moves_value2_into_range_object():
    f = normalize_filter({"field": "due", "operator": "date_range", "value": "2024-01-01", "value2": "2024-01-31"})
    assert f.value == {"start": "2024-01-01", "end": "2024-01-31"}
    g = normalize_filter({"field": "a", "operator": "equal", "value": 1, "value2": 2})
    assert g.value2 is None


def test_quick_filters_replace_every_default_on_that_field():
    defaults = [_f("stage", "Lead"), _f("stage", "Won", op="not_equal"), _f("owner", "ann")]
    user = [_f("stage", "Lost")]
    merged = merge_view_default_filters_with_user_quick_filters(defaults, user)
    assert [f for f in merged if f.field == "stage"] == user
    assert [f.field for f in merged] == ["owner", "stage"]


def test_serialization_ignores_order():
    a = [_f("x", 1), _f("y", 2)]
    assert serialize_filters_for_comparison(a) == serialize_filters_for_comparison(list(reversed(a)))
    assert serialize_filters_for_comparison(a) != serialize_filters_for_comparison([_f("x", 1)])


def test_search_helpers():
    flat = apply_search_to_filters("acme", ["name", "notes"], [_f("stage", "Lead")])
    assert [(f.field, f.operator) for f in flat] == [("stage", "equal"), ("name", "contains"), ("notes", "contains")]
    assert apply_search_to_filters("", ["name"]) == []

    tree = search_to_filter_tree("  acme ", ["name", "notes"])
    assert tree.condition_type == ConditionType.OR
    assert {c.value for c in tree.children} == {"acme"}
    assert search_to_filter_tree("   ", ["name"]) is None


def test_strip_filter_block_filters():
    kept = strip_filter_block_filters([_f("a", 1), _f("b", 2, source_block_id="blk")])
    assert [f.field for f in kept] == ["a"]


FIELDS = [
    {"name": "stage", "type": "single_select"},
    {"name": "tags", "type": "multi_select"},
    {"name": "company", "type": "link_to_table"},
    {"name": "title", "type": "text"},
    {"name": "score", "type": "formula"},
]


def test_conflicting_values_are_dropped():
    active = [_f("stage", "Lead"), _f("stage", "Won")]
    assert derive_default_values_from_filters(active, FIELDS) == {}


def test_conflict_detection_does_not_need_field_metadata():
    active = [_f("stage", "Lead"), _f("stage", "Won")]
    assert derive_default_values_from_filters(active, []) == {}


def test_defaults_from_eligible_filters():
    active = [
        _f("stage", "Lead"),
        _f("stage", "Lead"),
        _f("tags", "vip", op="contains"),
        _f("tags", ["eu"]),
        _f("company", "c1", op="has"),
        _f("title", "hello"),
        _f("score", "10"),
        _f("stage", "Won", op="not_equal"),
    ]
    assert derive_default_values_from_filters(active, FIELDS) == {
        "stage": "Lead",
        "tags": ["vip", "eu"],
        "company": "c1",
    }


def test_multi_valued_filters_do_not_produce_defaults():
    assert derive_default_values_from_filters([_f("stage", ["Lead", "Won"])], FIELDS) == {}
