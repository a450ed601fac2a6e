"""
Yarn script syntax.

The subset of the Yarn language the converter reads and writes:

```
title: node_id
---
Speaker: A line of dialogue
-> A choice
    <<set $flag = true>>
    <<jump next_node>>
<<if $flag and $count >= 2>>
    ...
<<elseif not $other>>
<<else>>
<<endif>>
===
```
"""

from __future__ import annotations

import re
from typing import Any

from forge.runtime.numeric import to_string


class YarnSyntax:
    """Literal tokens emitted by the builders."""
    NODE_TITLE_PREFIX = "title: "
    NODE_SEPARATOR = "---"
    NODE_END = "==="
    OPTION_PREFIX = "-> "
    JUMP_COMMAND = "<<jump "
    SET_COMMAND = "<<set "
    IF_COMMAND = "<<if "
    ELSEIF_COMMAND = "<<elseif "
    ELSE_COMMAND = "<<else>>"
    ENDIF_COMMAND = "<<endif>>"
    COMMAND_OPEN = "<<"
    COMMAND_CLOSE = ">>"
    INDENT = "    "
    NEWLINE = "\n"


class YarnPatterns:
    """Regexes used when reading scripts. All match a stripped line."""
    TITLE = re.compile(r'title:\s*(\S+)')
    JUMP = re.compile(r'^<<jump\s+(\S+?)\s*>>$')
    SET = re.compile(r'^<<set\s+\$(\w+)\s*([+\-*/]?=)\s*(.+?)\s*>>$')
    IF = re.compile(r'^<<if\s+(.*?)\s*>>$')
    ELSEIF = re.compile(r'^<<elseif\s+(.*?)\s*>>$')
    ELSE = re.compile(r'^<<else\s*>>$')
    ENDIF = re.compile(r'^<<endif\s*>>$')
    OPTION = re.compile(r'^->\s?(.*)$')
    SPEAKER_LINE = re.compile(r'^([^:<>]+?):\s?(.*)$')

    CONDITIONAL_PREFIXES = ("<<if", "<<elseif", "<<else", "<<endif")


def format_value(value: Any) -> str:
    """Script literal for a value. Strings are double-quoted."""
    if isinstance(value, str):
        return f'"{value}"'
    return to_string(value)


def is_conditional_line(line: str) -> bool:
    """True for if / elseif / else / endif control lines."""
    return line.strip().startswith(YarnPatterns.CONDITIONAL_PREFIXES)
