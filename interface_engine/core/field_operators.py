# File: /interface_engine/core/field_operators.py | Version: 1.0 | Title: Filter operators available per field type
from __future__ import annotations

from typing import Dict, List, Tuple

from pydantic import BaseModel

from interface_engine.schemas.filters import FilterOperator as Op


class OperatorOption(BaseModel):
    value: Op
    label: str
    requires_value: bool = True
    supports_multi_value: bool = False


_EMPTY = [("is_empty", "Is empty", False), ("is_not_empty", "Is not empty", False)]

_TEXT = [
    ("contains", "Contains", True),
    ("not_contains", "Does not contain", True),
    ("equal", "Is exactly", True),
    ("not_equal", "Is not exactly", True),
    *_EMPTY,
]
_NUMBER = [
    ("equal", "Equals", True),
    ("not_equal", "Does not equal", True),
    ("greater_than", "Greater than", True),
    ("greater_than_or_equal", "Greater than or equal", True),
    ("less_than", "Less than", True),
    ("less_than_or_equal", "Less than or equal", True),
    *_EMPTY,
]
_DATE = [
    ("date_equal", "Is", True),
    ("date_before", "Before", True),
    ("date_after", "After", True),
    ("date_today", "Today", False),
    ("date_next_days", "Next X days", True),
    ("date_on_or_before", "On or before", True),
    ("date_on_or_after", "On or after", True),
    ("date_range", "Is within", True),
    *_EMPTY,
]
_SINGLE_SELECT = [
    ("equal", "Is", True),
    ("not_equal", "Is not", True),
    ("is_any_of", "Is any of", True),
    ("is_not_any_of", "Is none of", True),
    *_EMPTY,
]
_MULTI_SELECT = [("equal", "Contains", True), ("not_equal", "Does not contain", True), *_EMPTY]
_CHECKBOX = [("equal", "Is checked", True), ("not_equal", "Is unchecked", True)]
_LINK = [
    ("is_empty", "Has no linked records", False),
    ("is_not_empty", "Has linked records", False),
    ("has", "Has record matching...", True),
    ("does_not_have", "Does not have record matching...", True),
]
_LOOKUP = [
    ("equal", "Is", True),
    ("not_equal", "Is not", True),
    ("contains", "Contains", True),
    ("not_contains", "Does not contain", True),
    *_EMPTY,
]
_FALLBACK = [("equal", "Equals", True), ("not_equal", "Does not equal", True), *_EMPTY]

_BY_TYPE: Dict[str, List[Tuple[str, str, bool]]] = {
    "text": _TEXT,
    "long_text": _TEXT,
    "number": _NUMBER,
    "currency": _NUMBER,
    "percent": _NUMBER,
    "date": _DATE,
    "single_select": _SINGLE_SELECT,
    "multi_select": _MULTI_SELECT,
    "checkbox": _CHECKBOX,
    "link_to_table": _LINK,
    "lookup": _LOOKUP,
    "formula": [("equal", "Is", True), ("not_equal", "Is not", True), *_EMPTY],
}


def get_operators_for_field_type(field_type: str) -> List[OperatorOption]:
    return [
        OperatorOption(
            value=Op(value),
            label=label,
            requires_value=needs,
            supports_multi_value=value in ("is_any_of", "is_not_any_of"),
        )
        for value, label, needs in _BY_TYPE.get(field_type, _FALLBACK)
    ]


def is_operator_valid_for_field(field_type: str, operator: str) -> bool:
    return any(o.value == operator for o in get_operators_for_field_type(field_type))


def get_default_operator_for_field_type(field_type: str) -> Op:
    ops = get_operators_for_field_type(field_type)
    return ops[0].value if ops else Op.equal
