# File: /interface_engine/core/filter_tree.py | Version: 1.0 | Title: FilterTree helpers (normalize, AND-combine, walk)
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Set, Union

from interface_engine.schemas.filters import (
    ConditionType,
    FilterCondition,
    FilterGroup,
    FilterTree,
)

Node = Union[FilterCondition, FilterGroup]


def _normalize_node(node: Optional[Node]) -> Optional[Node]:
    if node is None:
        return None
    if isinstance(node, FilterCondition):
        return node

    children: List[Node] = []
    for child in node.children:
        n = _normalize_node(child)
        if n is None:
            continue
        # AND(a, AND(b, c)) == AND(a, b, c)
        if isinstance(n, FilterGroup) and n.condition_type == node.condition_type:
            children.extend(n.children)
        else:
            children.append(n)

    if not children:
        return None
    if len(children) == 1:
        return children[0]
    return FilterGroup(condition_type=node.condition_type, children=tuple(children))


def normalize_filter_tree(tree: FilterTree) -> Optional[FilterGroup]:
    """
    Canonical form used for evaluation: empty groups pruned, single-child
    groups unwrapped, same-operator nesting flattened. Always returns a group
    (a bare condition becomes a one-child AND group) or None for "no filter".
    """
    n = _normalize_node(tree)
    if n is None:
        return None
    if isinstance(n, FilterCondition):
        return FilterGroup(condition_type=ConditionType.AND, children=(n,))
    return n


def is_empty_filter_tree(tree: FilterTree) -> bool:
    return _normalize_node(tree) is None


def conditions_to_filter_tree(
    conditions: Sequence[FilterCondition], condition_type: str = "AND"
) -> FilterTree:
    if not conditions:
        return None
    return FilterGroup(
        condition_type=ConditionType(condition_type), children=tuple(conditions)
    )


def and_filter_trees(trees: Sequence[FilterTree]) -> FilterTree:
    """
    AND-combine several trees. Empty inputs are dropped; a single remaining
    tree is returned as-is so callers never see a needless wrapper group.
    """
    non_empty = [t for t in (trees or []) if not is_empty_filter_tree(t)]
    if not non_empty:
        return None
    if len(non_empty) == 1:
        return non_empty[0]
    return FilterGroup(condition_type=ConditionType.AND, children=tuple(non_empty))


def iter_conditions(tree: FilterTree) -> Iterator[FilterCondition]:
    if tree is None:
        return
    if isinstance(tree, FilterCondition):
        yield tree
        return
    for child in tree.children:
        yield from iter_conditions(child)


def drop_and_conditions_on_fields(tree: FilterTree, fields: Set[str]) -> FilterTree:
    """
    Remove conditions on `fields` wherever they are AND-ed with the rest of
    the tree. Conditions inside OR groups stay: removing an OR alternative
    would narrow the result.
    """
    if tree is None or not fields:
        return tree
    if isinstance(tree, FilterCondition):
        return None if tree.field in fields else tree
    if tree.condition_type == ConditionType.OR:
        return tree
    kept = []
    for child in tree.children:
        n = drop_and_conditions_on_fields(child, fields)
        if n is not None:
            kept.append(n)
    return FilterGroup(condition_type=ConditionType.AND, children=tuple(kept))


def has_or_semantics(tree: FilterTree) -> bool:
    """True when some OR group actually combines more than one predicate."""
    n = _normalize_node(tree)
    if n is None or isinstance(n, FilterCondition):
        return False

    def _walk(g: FilterGroup) -> bool:
        if g.condition_type == ConditionType.OR and len(g.children) > 1:
            return True
        return any(isinstance(c, FilterGroup) and _walk(c) for c in g.children)

    return _walk(n)
