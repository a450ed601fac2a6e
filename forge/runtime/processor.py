"""
Per-node transition function.

``process_node`` maps a node and the current flag state to what should
be shown next. It reads flags but never writes them; applying
``set_flags`` is the runner's job.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from forge.graph.nodes import Choice, ConditionalBlock, ConditionalBlockType, DialogueNode, NodeType
from forge.runtime.conditions import evaluate_conditions
from forge.runtime.numeric import to_string
from forge.runtime.variables import VariableManager

_PLACEHOLDER_PATTERN = re.compile(r'\{\$(\w+)\}')


@dataclass
class ProcessedNode:
    """
    Result of processing one node.

    Attributes:
        content: Text to display (placeholders already substituted)
        speaker: Who says it, if anyone
        next_node_id: Where to go next
        is_end: True when there is nowhere to go
        is_player_choice: True for player nodes
        choices: Choices that passed their conditions (player nodes)
        set_flags: Flags to set on leaving the node
        block: The conditional block that was selected, if any
    """
    content: str = ""
    speaker: str | None = None
    next_node_id: str | None = None
    is_end: bool = False
    is_player_choice: bool = False
    choices: list[Choice] | None = None
    set_flags: list[str] = field(default_factory=list)
    block: ConditionalBlock | None = None


def find_matching_block(
    blocks: Iterable[ConditionalBlock] | None,
    variable_manager: VariableManager,
) -> ConditionalBlock | None:
    """
    First block whose conditions hold, in declaration order.

    An else block matches only when reached. Non-else blocks without
    conditions never match.
    """
    if not blocks:
        return None

    variables = variable_manager.get_all_variables()
    memory_flags = variable_manager.get_all_memory_flags()

    for block in blocks:
        if block.type is ConditionalBlockType.ELSE:
            return block
        if not block.condition:
            continue
        if evaluate_conditions(block.condition, variables, memory_flags):
            return block
    return None


def interpolate_variables(text: str, variable_manager: VariableManager) -> str:
    """Replace ``{$name}`` with the flag value; unknown names stay as written."""
    def replace(match: re.Match) -> str:
        value = variable_manager.get(match.group(1))
        return match.group(0) if value is None else to_string(value)

    return _PLACEHOLDER_PATTERN.sub(replace, text)


def is_valid_next_node(node_id: str | None, available_nodes: Mapping[str, DialogueNode]) -> bool:
    if not node_id or not node_id.strip():
        return False
    return node_id in available_nodes


def process_node(node: DialogueNode, variable_manager: VariableManager) -> ProcessedNode:
    """Compute what ``node`` shows and where it leads under the current flags."""
    if node.type is NodeType.PLAYER:
        return _process_player(node, variable_manager)
    if node.type is NodeType.CONDITIONAL:
        return _process_conditional(node, variable_manager)
    if node.type is NodeType.CHARACTER:
        return _process_character(node, variable_manager)
    return ProcessedNode(is_end=True)


def _process_player(node: DialogueNode, variable_manager: VariableManager) -> ProcessedNode:
    variables = variable_manager.get_all_variables()
    memory_flags = variable_manager.get_all_memory_flags()
    choices = [
        choice for choice in node.choices or []
        if evaluate_conditions(choice.conditions, variables, memory_flags)
    ]
    return ProcessedNode(
        content=node.content or "",
        speaker=node.speaker,
        is_player_choice=True,
        choices=choices,
    )


def _process_conditional(node: DialogueNode, variable_manager: VariableManager) -> ProcessedNode:
    block = find_matching_block(node.conditional_blocks, variable_manager)
    if block is None:
        return ProcessedNode(is_end=True)

    next_node_id = block.next_node_id or node.next_node_id
    return ProcessedNode(
        content=interpolate_variables(block.content or "", variable_manager),
        speaker=block.speaker,
        next_node_id=next_node_id,
        is_end=not next_node_id,
        set_flags=list(block.set_flags or []),
        block=block,
    )


def _process_character(node: DialogueNode, variable_manager: VariableManager) -> ProcessedNode:
    content = node.content or ""
    speaker = node.speaker
    next_node_id = node.next_node_id
    set_flags = list(node.set_flags or [])

    block = find_matching_block(node.conditional_blocks, variable_manager)
    if block is not None:
        content = block.content or ""
        speaker = block.speaker or node.speaker
        if block.next_node_id:
            next_node_id = block.next_node_id
        set_flags.extend(block.set_flags or [])

    return ProcessedNode(
        content=interpolate_variables(content, variable_manager),
        speaker=speaker,
        next_node_id=next_node_id,
        is_end=not next_node_id,
        set_flags=set_flags,
        block=block,
    )
