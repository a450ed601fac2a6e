"""
Line-level Yarn text emitter.

Each method appends exactly the syntax its name says and returns the
builder, so calls chain:

    text = (YarnTextBuilder()
            .add_node_title("start")
            .add_node_separator()
            .add_line("Hello", speaker="Guard")
            .add_node_end()
            .build())
"""

from __future__ import annotations

from typing import Any

from forge.graph.nodes import ConditionalBlockType
from forge.yarn.syntax import YarnSyntax, format_value


class YarnTextBuilder:
    """Accumulates Yarn text one line at a time."""

    def __init__(self):
        self._lines: list[str] = []

    @staticmethod
    def _indent(level: int) -> str:
        return YarnSyntax.INDENT * level if level > 0 else ""

    def add_node_title(self, node_id: str) -> YarnTextBuilder:
        self._lines.append(f"{YarnSyntax.NODE_TITLE_PREFIX}{node_id}{YarnSyntax.NEWLINE}")
        return self

    def add_node_separator(self) -> YarnTextBuilder:
        self._lines.append(f"{YarnSyntax.NODE_SEPARATOR}{YarnSyntax.NEWLINE}")
        return self

    def add_line(self, content: str, speaker: str | None = None) -> YarnTextBuilder:
        """Dialogue line. With a speaker, every line of ``content`` gets the prefix."""
        if speaker:
            formatted = content.replace("\n", f"\n{speaker}: ")
            self._lines.append(f"{speaker}: {formatted}{YarnSyntax.NEWLINE}")
        else:
            self._lines.append(f"{content}{YarnSyntax.NEWLINE}")
        return self

    def add_option(self, text: str, indent: int = 0) -> YarnTextBuilder:
        self._lines.append(f"{self._indent(indent)}{YarnSyntax.OPTION_PREFIX}{text}{YarnSyntax.NEWLINE}")
        return self

    def add_command(self, command: str, args: str | None = None) -> YarnTextBuilder:
        args_str = f" {args}" if args else ""
        self._lines.append(f"<<{command}{args_str}>>{YarnSyntax.NEWLINE}")
        return self

    def add_conditional_block(
        self,
        block_type: ConditionalBlockType | str,
        condition: str | None = None,
    ) -> YarnTextBuilder:
        block_type = ConditionalBlockType(block_type)
        if block_type is ConditionalBlockType.ELSE:
            self._lines.append(f"{YarnSyntax.ELSE_COMMAND}{YarnSyntax.NEWLINE}")
        else:
            command = YarnSyntax.IF_COMMAND if block_type is ConditionalBlockType.IF else YarnSyntax.ELSEIF_COMMAND
            self._lines.append(f"{command}{condition or ''}>>{YarnSyntax.NEWLINE}")
        return self

    def add_end_conditional(self) -> YarnTextBuilder:
        self._lines.append(f"{YarnSyntax.ENDIF_COMMAND}{YarnSyntax.NEWLINE}")
        return self

    def add_jump(self, target_node_id: str, indent: int = 0) -> YarnTextBuilder:
        self._lines.append(
            f"{self._indent(indent)}{YarnSyntax.JUMP_COMMAND}{target_node_id}>>{YarnSyntax.NEWLINE}"
        )
        return self

    def add_set_command(self, flag: str, value: Any = True, indent: int = 0) -> YarnTextBuilder:
        self._lines.append(
            f"{self._indent(indent)}{YarnSyntax.SET_COMMAND}${flag} = {format_value(value)}>>"
            f"{YarnSyntax.NEWLINE}"
        )
        return self

    def add_node_end(self) -> YarnTextBuilder:
        self._lines.append(f"{YarnSyntax.NODE_END}{YarnSyntax.NEWLINE}{YarnSyntax.NEWLINE}")
        return self

    def add_raw(self, text: str) -> YarnTextBuilder:
        """Append text verbatim (no newline added)."""
        self._lines.append(text)
        return self

    def build(self) -> str:
        return "".join(self._lines)

    def clear(self) -> None:
        self._lines = []

    @property
    def line_count(self) -> int:
        return len(self._lines)
