"""
Condition strings <-> Condition models.

Yarn writes conditions as expressions such as ``$met_guard and $gold >= 10``.
Only conjunctions are representable; ``or`` / ``xor`` are reported by
``validate_condition`` and otherwise ignored.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from forge.graph.flags import FlagSchema
from forge.graph.nodes import Condition, ConditionOperator
from forge.runtime.commands import parse_literal
from forge.runtime.numeric import parse_float
from forge.yarn.syntax import format_value

_SEPARATOR = re.compile(r'\s*&&\s*|\s+and\s+', re.IGNORECASE)
_UNSUPPORTED = re.compile(r'\s*\|\|\s*|\s+or\s+|\s+xor\s+|\s*\^\s*', re.IGNORECASE)

_NOT_FLAG = re.compile(r'^(?:not\s+|!\s*)\$(\w+)$')
_FLAG = re.compile(r'^\$(\w+)$')

# Checked in order; two-character operators come before their prefixes
_COMPARISONS: list[tuple[re.Pattern, ConditionOperator]] = [
    (re.compile(r'^\$(\w+)\s*(?:==|\beq\b|\bis\b)\s*(.+)$'), ConditionOperator.EQUALS),
    (re.compile(r'^\$(\w+)\s*(?:!=|\bneq\b)\s*(.+)$'), ConditionOperator.NOT_EQUALS),
    (re.compile(r'^\$(\w+)\s*(?:>=|\bgte\b)\s*(.+)$'), ConditionOperator.GREATER_EQUAL),
    (re.compile(r'^\$(\w+)\s*(?:<=|\blte\b)\s*(.+)$'), ConditionOperator.LESS_EQUAL),
    (re.compile(r'^\$(\w+)\s*(?:>|\bgt\b)\s*(.+)$'), ConditionOperator.GREATER_THAN),
    (re.compile(r'^\$(\w+)\s*(?:<|\blt\b)\s*(.+)$'), ConditionOperator.LESS_THAN),
]

_OPERATOR_SYMBOLS = {
    ConditionOperator.EQUALS: "==",
    ConditionOperator.NOT_EQUALS: "!=",
    ConditionOperator.GREATER_THAN: ">",
    ConditionOperator.LESS_THAN: "<",
    ConditionOperator.GREATER_EQUAL: ">=",
    ConditionOperator.LESS_EQUAL: "<=",
}


def _numeric_value(value: Any) -> Any:
    if isinstance(value, str):
        parsed = parse_float(value)
        if not math.isnan(parsed):
            return int(parsed) if parsed.is_integer() else parsed
    return value


def _parse_part(part: str) -> Condition | None:
    match = _NOT_FLAG.match(part)
    if match:
        return Condition(flag=match.group(1), operator=ConditionOperator.IS_NOT_SET)

    for pattern, operator in _COMPARISONS:
        match = pattern.match(part)
        if match:
            value = parse_literal(match.group(2))
            if operator.is_numeric:
                value = _numeric_value(value)
            return Condition(flag=match.group(1), operator=operator, value=value)

    match = _FLAG.match(part)
    if match:
        return Condition(flag=match.group(1), operator=ConditionOperator.IS_SET)

    return None


def parse_condition(text: str) -> list[Condition]:
    """Parse a condition expression. Unrecognised parts are dropped."""
    conditions = []
    for part in _SEPARATOR.split(text.strip()):
        part = part.strip()
        if not part:
            continue
        condition = _parse_part(part)
        if condition is not None:
            conditions.append(condition)
    return conditions


def format_condition(condition: Condition) -> str:
    if condition.operator is ConditionOperator.IS_SET:
        return f"${condition.flag}"
    if condition.operator is ConditionOperator.IS_NOT_SET:
        return f"not ${condition.flag}"
    value = format_value(condition.value if condition.value is not None else True)
    return f"${condition.flag} {_OPERATOR_SYMBOLS[condition.operator]} {value}"


def format_conditions(conditions: Iterable[Condition] | None) -> str:
    """Join conditions with ``and``."""
    return " and ".join(format_condition(c) for c in conditions or [])


@dataclass
class ConditionValidation:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_condition(text: str, schema: FlagSchema | None = None) -> ConditionValidation:
    """Report parts that will not parse, unsupported operators and unknown flags."""
    result = ConditionValidation()
    if not text.strip():
        return result

    if _UNSUPPORTED.search(text):
        result.warnings.append("Only 'and' / '&&' combine conditions; 'or' and 'xor' are ignored")

    for part in _SEPARATOR.split(text.strip()):
        part = part.strip()
        if not part:
            continue
        condition = _parse_part(part)
        if condition is None:
            result.errors.append(f"Cannot parse condition: {part}")
        elif schema is not None and condition.flag not in schema:
            result.warnings.append(f"Unknown flag: {condition.flag}")

    return result
