"""
Node block builder - composes one complete Yarn node.

A block is always written in this order: title and separator, content
(or conditional blocks, or choices), set commands, jump, end marker.
"""

from __future__ import annotations

from typing import Iterable

from forge.graph.nodes import Choice, ConditionalBlock, ConditionalBlockType
from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.conditions import format_conditions
from forge.yarn.content import extract_set_commands, remove_set_commands
from forge.yarn.syntax import YarnSyntax


class NodeBlockBuilder:
    """
    Builds a single ``title: ... ===`` block.

    Usage:
        block = NodeBlockBuilder("guard_intro")
        block.start_node()
        block.add_content("Halt!", speaker="Guard")
        block.add_flags(["met_guard"])
        block.add_next_node("gate")
        text = block.end_node()
    """

    def __init__(self, node_id: str, builder: YarnTextBuilder | None = None):
        self.node_id = node_id or "unknown"
        self.builder = builder or YarnTextBuilder()

    def start_node(self) -> NodeBlockBuilder:
        self.builder.add_node_title(self.node_id)
        self.builder.add_node_separator()
        return self

    def add_content(self, content: str | None, speaker: str | None = None, indent: int = 0) -> NodeBlockBuilder:
        """
        Dialogue text. Embedded set commands are lifted out of the line and
        written after it, one per line.
        """
        commands = extract_set_commands(content)
        clean = remove_set_commands(content)

        if clean:
            if indent:
                prefix = YarnSyntax.INDENT * indent
                for line in clean.split("\n"):
                    self.builder.add_raw(prefix)
                    self.builder.add_line(line, speaker)
            else:
                self.builder.add_line(clean, speaker)

        for command in commands:
            self.builder.add_raw(f"{YarnSyntax.INDENT * indent}{command}{YarnSyntax.NEWLINE}")
        return self

    def add_conditional_blocks(self, blocks: Iterable[ConditionalBlock]) -> NodeBlockBuilder:
        """if / elseif / else branches with their content and jumps, closed by endif."""
        for block in blocks:
            if block.type is ConditionalBlockType.ELSE:
                self.builder.add_conditional_block(ConditionalBlockType.ELSE)
            else:
                self.builder.add_conditional_block(block.type, format_conditions(block.condition))

            if block.content:
                self.add_content(block.content, block.speaker, indent=1)
            for flag in block.set_flags or []:
                self.builder.add_set_command(flag, True, indent=1)
            if block.next_node_id:
                self.builder.add_jump(block.next_node_id, indent=1)

        self.builder.add_end_conditional()
        return self

    def add_choices(self, choices: Iterable[Choice]) -> NodeBlockBuilder:
        """
        One option per choice. Conditioned choices are wrapped in if/endif;
        embedded set commands, flags and the jump are indented under the option.
        """
        for choice in choices:
            conditioned = bool(choice.conditions)
            if conditioned:
                self.builder.add_conditional_block(ConditionalBlockType.IF, format_conditions(choice.conditions))

            self.builder.add_option(remove_set_commands(choice.text))

            for command in extract_set_commands(choice.text):
                self.builder.add_raw(f"{YarnSyntax.INDENT}{command}{YarnSyntax.NEWLINE}")
            for flag in choice.set_flags or []:
                self.builder.add_set_command(flag, True, indent=1)
            if choice.next_node_id:
                self.builder.add_jump(choice.next_node_id, indent=1)

            if conditioned:
                self.builder.add_end_conditional()
        return self

    def add_flags(self, flags: Iterable[str]) -> NodeBlockBuilder:
        for flag in flags:
            self.builder.add_set_command(flag, True)
        return self

    def add_next_node(self, next_node_id: str) -> NodeBlockBuilder:
        self.builder.add_jump(next_node_id)
        return self

    def end_node(self) -> str:
        self.builder.add_node_end()
        return self.builder.build()
