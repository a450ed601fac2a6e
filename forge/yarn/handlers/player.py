"""
Player choice handler.
"""

from __future__ import annotations

from forge.graph.nodes import Choice, DialogueNode, NodeType
from forge.runtime.commands import parse_literal
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.conditions import parse_condition
from forge.yarn.content import extract_set_commands, remove_set_commands
from forge.yarn.context import YarnConverterContext
from forge.yarn.handlers.base import NodeHandler
from forge.yarn.syntax import YarnPatterns


class PlayerHandler(NodeHandler):
    """
    One ``->`` option per choice.

    On import, an ``<<if>>`` line applies to the next option, and set or
    jump lines after an option belong to it.
    """

    node_type = NodeType.PLAYER

    async def export_node(
        self,
        node: DialogueNode,
        builder: YarnTextBuilder,
        context: YarnConverterContext | None = None,
    ) -> str:
        block = self.create_block(node, builder)
        block.start_node()

        if node.content:
            block.add_content(node.content, node.speaker)
        if node.choices:
            block.add_choices(node.choices)

        return block.end_node()

    async def import_node(
        self,
        block: YarnNodeBlock,
        context: YarnConverterContext | None = None,
    ) -> DialogueNode:
        choices: list[dict] = []
        current: dict | None = None
        pending_conditions = None
        prompt: list[str] = []
        speaker = None

        for line in block.lines:
            match = YarnPatterns.OPTION.match(line)
            if match:
                text = match.group(1).strip()
                current = {
                    "id": f"{block.node_id}_choice_{len(choices)}",
                    "text": remove_set_commands(text),
                    "next_node_id": None,
                    "conditions": pending_conditions or None,
                    "set_flags": [],
                }
                # Commands written inline on the option line stay with the choice
                for command in extract_set_commands(text):
                    self._apply_set(current, command)
                choices.append(current)
                pending_conditions = None
                continue

            match = YarnPatterns.IF.match(line)
            if match:
                pending_conditions = parse_condition(match.group(1))
                current = None
                continue

            if YarnPatterns.ENDIF.match(line):
                pending_conditions = None
                current = None
                continue

            match = YarnPatterns.JUMP.match(line)
            if match:
                if current is not None:
                    current["next_node_id"] = match.group(1)
                continue

            if YarnPatterns.SET.match(line):
                if current is not None:
                    self._apply_set(current, line)
                continue

            if not choices:
                speaker_match = YarnPatterns.SPEAKER_LINE.match(line)
                if speaker_match and speaker is None:
                    speaker = speaker_match.group(1).strip()
                    prompt.append(speaker_match.group(2))
                else:
                    prompt.append(line)

        return DialogueNode(
            id=block.node_id,
            type=NodeType.PLAYER,
            speaker=speaker,
            content="\n".join(prompt).strip() or None,
            choices=[
                Choice(**{**choice, "set_flags": choice["set_flags"] or None})
                for choice in choices
            ] or None,
        )

    @staticmethod
    def _apply_set(choice: dict, command: str) -> None:
        match = YarnPatterns.SET.match(command)
        if not match:
            return
        flag, operator, value = match.groups()
        if operator == "=" and parse_literal(value) is True:
            choice["set_flags"].append(flag)
        else:
            choice["text"] = f"{choice['text']} {command}".strip()
