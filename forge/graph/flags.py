"""
Flag schema models.

The schema is optional metadata describing the flags a project uses. The
runtime consults it to decide how setting a flag changes its value.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, PrivateAttr, field_validator

from forge.core.model import ForgeModel


class FlagType(str, Enum):
    """Category of a flag."""
    DIALOGUE = "dialogue"
    QUEST = "quest"
    ACHIEVEMENT = "achievement"
    ITEM = "item"
    STAT = "stat"
    TITLE = "title"
    GLOBAL = "global"


class FlagValueType(str, Enum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


class QuestState(str, Enum):
    """Common values for string-typed quest flags."""
    NOT_STARTED = "not_started"
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class FlagDefinition(ForgeModel):
    id: str
    name: str | None = None
    type: FlagType = FlagType.GLOBAL
    value_type: FlagValueType | None = None
    default_value: bool | int | float | str | None = None
    description: str | None = None

    @field_validator('default_value', mode='plain')
    @classmethod
    def _keep_default_type(cls, value: Any) -> Any:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        raise ValueError(f"Unsupported default value: {value!r}")


class FlagSchema(ForgeModel):
    flags: list[FlagDefinition] = Field(default_factory=list)

    _index: dict[str, FlagDefinition] | None = PrivateAttr(default=None)

    def get(self, flag_id: str) -> FlagDefinition | None:
        if self._index is None:
            self._index = {flag.id: flag for flag in self.flags}
        return self._index.get(flag_id)

    def __contains__(self, flag_id: str) -> bool:
        return self.get(flag_id) is not None

    def of_type(self, flag_type: FlagType) -> list[FlagDefinition]:
        return [flag for flag in self.flags if flag.type == flag_type]
