"""
Two-tier flag store.

Persistent variables hold explicit values. Memory flags are a set of
names that read back as ``True`` and live only for one dialogue context.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping

from forge.graph.nodes import FlagValue
from forge.runtime.numeric import coerce_number, normalize_number


class Operation(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class VariableManager:
    """
    Flat key/value store for dialogue flags.

    Every operation is total: unknown names read as None and arithmetic on
    missing or non-numeric values starts from 0.
    """

    def __init__(
        self,
        variables: Mapping[str, FlagValue] | None = None,
        memory_flags: Iterable[str] | None = None,
    ):
        self._variables: dict[str, FlagValue] = dict(variables or {})
        self._memory_flags: set[str] = set(memory_flags or ())

    def get(self, name: str) -> FlagValue | None:
        """Variable value, else True for a memory flag, else None."""
        if name in self._variables:
            return self._variables[name]
        if name in self._memory_flags:
            return True
        return None

    def set(self, name: str, value: FlagValue) -> None:
        self._variables[name] = value

    def apply_operation(self, name: str, operation: Operation | str, value: float) -> None:
        """
        Apply ``current <op> value`` and store the numeric result.

        Division by zero leaves the stored value untouched.
        """
        operation = Operation(operation)
        current = coerce_number(self.get(name))

        if operation is Operation.ADD:
            result = current + value
        elif operation is Operation.SUBTRACT:
            result = current - value
        elif operation is Operation.MULTIPLY:
            result = current * value
        else:
            if value == 0:
                return
            result = current / value

        self._variables[name] = normalize_number(result)

    def add_memory_flag(self, name: str) -> None:
        self._memory_flags.add(name)

    def remove_memory_flag(self, name: str) -> None:
        self._memory_flags.discard(name)

    def has_memory_flag(self, name: str) -> bool:
        return name in self._memory_flags

    def get_all_variables(self) -> dict[str, FlagValue]:
        return dict(self._variables)

    def get_all_memory_flags(self) -> set[str]:
        return set(self._memory_flags)

    def clear_memory_flags(self) -> None:
        self._memory_flags.clear()

    def reset(
        self,
        variables: Mapping[str, FlagValue] | None = None,
        memory_flags: Iterable[str] | None = None,
    ) -> None:
        """Replace both tiers."""
        self._variables = dict(variables or {})
        self._memory_flags = set(memory_flags or ())

    def __contains__(self, name: str) -> bool:
        return name in self._variables or name in self._memory_flags
