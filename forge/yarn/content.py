"""
Helpers for content text that carries embedded set commands.
"""

from __future__ import annotations

from forge.graph.nodes import SET_COMMAND_PATTERN
from forge.runtime.commands import strip_set_commands


def extract_set_commands(content: str | None) -> list[str]:
    """Raw ``<<set ...>>`` commands in ``content``, in order."""
    if not content:
        return []
    return [match.group(0) for match in SET_COMMAND_PATTERN.finditer(content)]


def remove_set_commands(content: str | None) -> str:
    return strip_set_commands(content)


def format_content(content: str, speaker: str | None = None) -> str:
    """Prefix every line of ``content`` with ``speaker``."""
    if not content or not speaker:
        return content or ""
    return "\n".join(f"{speaker}: {line}" for line in content.split("\n"))
