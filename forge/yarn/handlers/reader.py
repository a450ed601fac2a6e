"""
Reader for dialogue-style block bodies.

Character, conditional and storylet blocks share one body grammar:
speaker lines, plain lines, set commands, jumps and if/elseif/else/endif
sections. A jump inside a section belongs to that section; a jump
outside belongs to the node.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from forge.graph.nodes import ConditionalBlock, ConditionalBlockType
from forge.runtime.commands import parse_literal
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.conditions import parse_condition
from forge.yarn.syntax import YarnPatterns


@dataclass
class _Section:
    """Content accumulated for the node itself or for one conditional block."""
    lines: list[str] = field(default_factory=list)
    speaker: str | None = None
    set_flags: list[str] = field(default_factory=list)
    next_node_id: str | None = None

    @property
    def content(self) -> str | None:
        text = "\n".join(self.lines).strip()
        return text or None

    def add_text(self, line: str) -> None:
        match = YarnPatterns.SPEAKER_LINE.match(line)
        if match:
            speaker, text = match.group(1).strip(), match.group(2)
            if self.speaker is None:
                self.speaker = speaker
            if speaker == self.speaker:
                self.lines.append(text)
                return
        self.lines.append(line)


@dataclass
class DialogueBody:
    """Everything read from a dialogue-style block."""
    content: str | None = None
    speaker: str | None = None
    set_flags: list[str] = field(default_factory=list)
    next_node_id: str | None = None
    conditional_blocks: list[ConditionalBlock] = field(default_factory=list)


def apply_set_line(section: _Section, line: str) -> bool:
    """
    Record a set command. ``<<set $f = true>>`` becomes a flag; any other
    assignment stays in the text so it survives as an embedded command.
    """
    match = YarnPatterns.SET.match(line)
    if not match:
        return False
    flag, operator, value = match.groups()
    if operator == "=" and parse_literal(value) is True:
        section.set_flags.append(flag)
    else:
        section.lines.append(line)
    return True


def read_dialogue_body(block: YarnNodeBlock) -> DialogueBody:
    node = _Section()
    sections: list[tuple[ConditionalBlockType, list, _Section]] = []
    current: _Section | None = None

    for line in block.lines:
        target = current if current is not None else node

        match = YarnPatterns.JUMP.match(line)
        if match:
            target.next_node_id = match.group(1)
            continue

        if apply_set_line(target, line):
            continue

        match = YarnPatterns.IF.match(line)
        if match:
            current = _Section()
            sections.append((ConditionalBlockType.IF, parse_condition(match.group(1)), current))
            continue

        match = YarnPatterns.ELSEIF.match(line)
        if match:
            current = _Section()
            sections.append((ConditionalBlockType.ELSEIF, parse_condition(match.group(1)), current))
            continue

        if YarnPatterns.ELSE.match(line):
            current = _Section()
            sections.append((ConditionalBlockType.ELSE, None, current))
            continue

        if YarnPatterns.ENDIF.match(line):
            current = None
            continue

        target.add_text(line)

    conditional_blocks = [
        ConditionalBlock(
            id=f"{block.node_id}_block_{index}",
            type=block_type,
            condition=condition if block_type is not ConditionalBlockType.ELSE else None,
            content=section.content,
            speaker=section.speaker,
            next_node_id=section.next_node_id,
            set_flags=section.set_flags or None,
        )
        for index, (block_type, condition, section) in enumerate(sections)
    ]

    return DialogueBody(
        content=node.content,
        speaker=node.speaker,
        set_flags=node.set_flags,
        next_node_id=node.next_node_id,
        conditional_blocks=conditional_blocks,
    )
