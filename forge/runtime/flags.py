"""
Flag-state helpers driven by the optional flag schema.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from forge.graph.flags import FlagDefinition, FlagSchema, FlagType, FlagValueType, QuestState
from forge.graph.nodes import FlagValue

logger = logging.getLogger(__name__)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _type_name(value: object) -> str:
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def initialize_flags(schema: FlagSchema) -> dict[str, FlagValue]:
    """Starting flag state: each flag's default, else 0 / "" / False by value type."""
    flags: dict[str, FlagValue] = {}
    for definition in schema.flags:
        if definition.default_value is not None:
            flags[definition.id] = definition.default_value
        elif definition.value_type is FlagValueType.NUMBER:
            flags[definition.id] = 0
        elif definition.value_type is FlagValueType.STRING:
            flags[definition.id] = ""
        else:
            flags[definition.id] = False
    return flags


def _updated_value(definition: FlagDefinition | None, current: FlagValue | None) -> FlagValue:
    if definition is None:
        return True

    if definition.value_type is FlagValueType.NUMBER and _is_number(current):
        return current + 1

    if definition.value_type is FlagValueType.STRING:
        if definition.type is FlagType.QUEST:
            return current or QuestState.STARTED.value
        return definition.default_value if definition.default_value is not None else ""

    if definition.default_value is not None:
        return definition.default_value
    return True


def merge_flag_updates(
    current: Mapping[str, FlagValue],
    updated_flag_ids: Iterable[str],
    schema: FlagSchema | None = None,
) -> dict[str, FlagValue]:
    """
    Return a new flag state with ``updated_flag_ids`` set.

    - number flags holding a number count up by one
    - string quest flags become "started" unless they already hold a value
    - other string flags take their default, else ""
    - anything else takes its schema default, else True
    - flags missing from the schema become True

    Existing flags are never removed.
    """
    flags = dict(current)
    for flag_id in updated_flag_ids:
        definition = schema.get(flag_id) if schema is not None else None
        flags[flag_id] = _updated_value(definition, flags.get(flag_id))
    return flags


def validate_flags(flags: Mapping[str, FlagValue], schema: FlagSchema) -> tuple[bool, list[str]]:
    """Check ``flags`` against the schema. Returns (valid, errors)."""
    errors = []
    for flag_id, value in flags.items():
        definition = schema.get(flag_id)
        if definition is None:
            errors.append(f"Unknown flag: {flag_id}")
            continue

        expected = definition.value_type
        if expected is FlagValueType.NUMBER and not _is_number(value):
            errors.append(f"Flag {flag_id} should be a number, got {_type_name(value)}")
        elif expected is FlagValueType.STRING and not isinstance(value, str):
            errors.append(f"Flag {flag_id} should be a string, got {_type_name(value)}")
        elif expected is FlagValueType.BOOLEAN and not isinstance(value, bool):
            errors.append(f"Flag {flag_id} should be a boolean, got {_type_name(value)}")

    if errors:
        logger.debug(f"Flag validation found {len(errors)} problem(s)")
    return not errors, errors


def is_dialogue_flag(flag_id: str, schema: FlagSchema | None) -> bool:
    """Dialogue-scoped flags are also tracked as memory flags."""
    if schema is None:
        return False
    definition = schema.get(flag_id)
    return definition is not None and definition.type is FlagType.DIALOGUE


def dialogue_flag_ids(schema: FlagSchema | None) -> set[str]:
    if schema is None:
        return set()
    return {flag.id for flag in schema.of_type(FlagType.DIALOGUE)}
