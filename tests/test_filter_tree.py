# File: tests/test_filter_tree.py | Version: 1.0 | Path: /tests/test_filter_tree.py
from interface_engine.core.filter_tree import (
    and_filter_trees,
    drop_and_conditions_on_fields,
    has_or_semantics,
    is_empty_filter_tree,
    normalize_filter_tree,
)
from interface_engine.schemas.filters import ConditionType, FilterCondition, FilterGroup

A = FilterCondition(field="a", operator="equal", value=1)
B = FilterCondition(field="b", operator="equal", value=2)
C = FilterCondition(field="c", operator="equal", value=3)


def test_and_of_nothing_is_pass_through():
    assert and_filter_trees([]) is None
    assert and_filter_trees([None, FilterGroup()]) is None


def test_and_of_one_tree_is_that_tree():
    t = FilterGroup(condition_type=ConditionType.OR, children=(A, B))
    assert and_filter_trees([t]) is t
    assert and_filter_trees([None, t]) is t


def test_and_of_several_trees_wraps_once():
    combined = and_filter_trees([A, B])
    assert combined.condition_type == ConditionType.AND
    assert combined.children == (A, B)


def test_normalize_flattens_and_unwraps():
    nested = FilterGroup(children=(FilterGroup(children=(A, FilterGroup(children=(B,)))), FilterGroup()))
    assert normalize_filter_tree(nested) == FilterGroup(children=(A, B))
    assert normalize_filter_tree(A) == FilterGroup(children=(A,))
    assert is_empty_filter_tree(FilterGroup(children=(FilterGroup(),)))


def test_single_child_or_has_no_or_semantics():
    assert not has_or_semantics(FilterGroup(condition_type=ConditionType.OR, children=(A,)))
    assert has_or_semantics(FilterGroup(children=(C, FilterGroup(condition_type=ConditionType.OR, children=(A, B)))))


def test_drop_and_conditions_keeps_or_alternatives():
    tree = FilterGroup(
        children=(A, C, FilterGroup(condition_type=ConditionType.OR, children=(A, B)))
    )
    pruned = drop_and_conditions_on_fields(tree, {"a"})
    assert pruned.children[0] == C
    assert pruned.children[1].condition_type == ConditionType.OR
    assert pruned.children[1].children == (A, B)
