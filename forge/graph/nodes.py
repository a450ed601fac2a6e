"""
Dialogue node models - nodes, choices, conditions and conditional blocks.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Union

from pydantic import AliasChoices, Field, field_validator

from forge.core.model import ForgeModel

# Embedded "<<set $flag op value>>" command inside content or choice text
SET_COMMAND_PATTERN = re.compile(
    r"<<set\s+\$(?P<flag>\w+)\s*(?P<op>[+\-*/]?=)\s*(?P<value>[^>]*?)\s*>>"
)

FlagValue = Union[bool, int, float, str]


class NodeType(str, Enum):
    """Kinds of dialogue node."""
    CHARACTER = "CHARACTER"
    PLAYER = "PLAYER"
    CONDITIONAL = "CONDITIONAL"
    STORYLET = "STORYLET"
    RANDOMIZER = "RANDOMIZER"
    DETOUR = "DETOUR"

    @classmethod
    def _missing_(cls, value: object) -> NodeType | None:
        if isinstance(value, str):
            normalized = value.upper()
            # Older graphs call character nodes "npc"
            if normalized == "NPC":
                return cls.CHARACTER
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def is_runtime_only(self) -> bool:
        """Runtime-only kinds have no script representation."""
        return self is NodeType.RANDOMIZER


class ConditionOperator(str, Enum):
    IS_SET = "is_set"
    IS_NOT_SET = "is_not_set"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"

    @property
    def is_numeric(self) -> bool:
        return self in (
            ConditionOperator.GREATER_THAN,
            ConditionOperator.LESS_THAN,
            ConditionOperator.GREATER_EQUAL,
            ConditionOperator.LESS_EQUAL,
        )


class ConditionalBlockType(str, Enum):
    IF = "if"
    ELSEIF = "elseif"
    ELSE = "else"


class StoryletCallMode(str, Enum):
    DETOUR_RETURN = "DETOUR_RETURN"
    JUMP = "JUMP"


class Condition(ForgeModel):
    """A single flag test. ``value`` is unused by is_set / is_not_set."""
    flag: str
    operator: ConditionOperator
    value: FlagValue | None = None

    @field_validator('value', mode='plain')
    @classmethod
    def _keep_value_type(cls, value: Any) -> Any:
        # No coercion: 1 and True must stay distinct for strict equality
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        raise ValueError(f"Unsupported condition value: {value!r}")


class Choice(ForgeModel):
    """
    One option offered by a player node.

    ``text`` may embed ``<<set>>`` commands; ``display_text`` is the text
    with those commands removed.
    """
    id: str
    text: str = ""
    next_node_id: str | None = None
    conditions: list[Condition] | None = None
    set_flags: list[str] | None = None

    @property
    def display_text(self) -> str:
        return SET_COMMAND_PATTERN.sub('', self.text).strip()


class ConditionalBlock(ForgeModel):
    """An if / elseif / else branch. ``condition`` is None for else."""
    id: str
    type: ConditionalBlockType
    condition: list[Condition] | None = None
    content: str | None = None
    speaker: str | None = None
    next_node_id: str | None = None
    set_flags: list[str] | None = None


class StoryletCall(ForgeModel):
    mode: StoryletCallMode = StoryletCallMode.JUMP
    target_graph_id: str
    target_start_node_id: str | None = None
    return_node_id: str | None = None
    return_graph_id: str | None = None


class StoryletPoolItem(ForgeModel):
    """Weighted randomizer entry."""
    storylet_id: str
    weight: float = Field(default=1, gt=0)
    conditions: list[Condition] | None = None


class DialogueNode(ForgeModel):
    """
    A node in a dialogue graph.

    Which optional fields are meaningful depends on ``type``:

    - CHARACTER: content, speaker, set_flags, optional conditional_blocks
    - PLAYER: choices
    - CONDITIONAL: conditional_blocks
    - STORYLET / DETOUR: storylet_id and/or storylet_call
    - RANDOMIZER: storylet_pool

    ``next_node_id`` is the default successor for every kind.
    """
    id: str
    type: NodeType
    label: str | None = None
    speaker: str | None = None
    content: str | None = None
    next_node_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices('nextNodeId', 'defaultNextNodeId', 'next_node_id'),
        serialization_alias='nextNodeId',
    )
    set_flags: list[str] | None = None
    choices: list[Choice] | None = None
    conditional_blocks: list[ConditionalBlock] | None = None
    storylet_id: str | None = None
    storylet_call: StoryletCall | None = None
    storylet_pool: list[StoryletPoolItem] | None = None
