"""
Condition evaluation over a flag snapshot.

Pure functions: they never mutate their inputs and never raise. The
runner calls them while building the choice list, so they must stay
cheap and side-effect free.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from forge.graph.nodes import Condition, ConditionOperator
from forge.runtime.numeric import parse_float


def resolve_flag(
    flag: str,
    variables: Mapping[str, Any],
    memory_flags: Iterable[str] | None = None,
) -> Any:
    """Variable value, else True for a memory flag, else None."""
    if flag in variables:
        return variables[flag]
    if memory_flags is not None and flag in memory_flags:
        return True
    return None


def is_truthy_flag(value: Any) -> bool:
    """A flag counts as set unless it is missing, False, 0 or an empty string."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
        return False
    return True


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion (True never equals 1)."""
    left_is_number = isinstance(left, (int, float)) and not isinstance(left, bool)
    right_is_number = isinstance(right, (int, float)) and not isinstance(right, bool)
    if left_is_number and right_is_number:
        return left == right
    return type(left) is type(right) and left == right


def _operand(value: Any) -> float:
    if value is None:
        return 0
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return parse_float(value)
    return 0


def _threshold(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if value is None or isinstance(value, bool):
        return math.nan
    return parse_float(str(value))


def evaluate_condition(
    condition: Condition,
    variables: Mapping[str, Any],
    memory_flags: Iterable[str] | None = None,
) -> bool:
    """
    Evaluate a single condition.

    Numeric operators read a missing flag as 0. Anything that does not
    parse as a number makes the comparison false.
    """
    value = resolve_flag(condition.flag, variables, memory_flags)
    operator = condition.operator

    if operator is ConditionOperator.IS_SET:
        return is_truthy_flag(value)
    if operator is ConditionOperator.IS_NOT_SET:
        return not is_truthy_flag(value)
    if operator is ConditionOperator.EQUALS:
        return strict_equals(value, condition.value)
    if operator is ConditionOperator.NOT_EQUALS:
        return not strict_equals(value, condition.value)

    operand = _operand(value)
    threshold = _threshold(condition.value)
    # NaN compares false both ways
    if operator is ConditionOperator.GREATER_THAN:
        return operand > threshold
    if operator is ConditionOperator.LESS_THAN:
        return operand < threshold
    if operator is ConditionOperator.GREATER_EQUAL:
        return operand >= threshold
    if operator is ConditionOperator.LESS_EQUAL:
        return operand <= threshold

    return True


def evaluate_conditions(
    conditions: Iterable[Condition] | None,
    variables: Mapping[str, Any],
    memory_flags: Iterable[str] | None = None,
) -> bool:
    """AND over ``conditions``; an empty or missing list is True."""
    if not conditions:
        return True
    return all(evaluate_condition(c, variables, memory_flags) for c in conditions)
