"""
Parsed Yarn node block.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class YarnNodeBlock:
    """
    One ``title: ... ===`` section of a script.

    Attributes:
        node_id: The title
        lines: Non-blank body lines, stripped
        raw_content: Body text between ``---`` and ``===``
    """
    node_id: str
    lines: list[str] = field(default_factory=list)
    raw_content: str = ""
