"""
Embedded set commands.

Content and choice text may carry ``<<set $flag = value>>`` or compound
assignments (``+=``, ``-=``, ``*=``, ``/=``). The runner executes them when
the text is shown or the choice is taken and strips them from what the
player sees.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from forge.graph.nodes import SET_COMMAND_PATTERN, FlagValue
from forge.runtime.numeric import coerce_number, normalize_number
from forge.runtime.variables import Operation, VariableManager

_NUMBER_PATTERN = re.compile(r'^-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
_EXTRA_SPACES = re.compile(r'[ \t]{2,}')


@dataclass(frozen=True)
class SetCommand:
    flag: str
    operator: str
    value: FlagValue
    raw: str


def parse_literal(text: str) -> FlagValue:
    """
    Parse a script literal.

    ``true``/``false`` become booleans, quoted text a string, numerals a
    number. Any other word is kept as a bare string.
    """
    text = text.strip()
    if text == 'true':
        return True
    if text == 'false':
        return False
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        return text[1:-1]
    if _NUMBER_PATTERN.match(text):
        return normalize_number(float(text))
    return text


def parse_set_command(text: str) -> SetCommand | None:
    match = SET_COMMAND_PATTERN.search(text)
    if not match:
        return None
    return SetCommand(
        flag=match.group('flag'),
        operator=match.group('op'),
        value=parse_literal(match.group('value')),
        raw=match.group(0),
    )


def find_set_commands(text: str | None) -> list[SetCommand]:
    if not text:
        return []
    return [parse_set_command(m.group(0)) for m in SET_COMMAND_PATTERN.finditer(text)]


def strip_set_commands(text: str | None) -> str:
    if not text:
        return ""
    stripped = SET_COMMAND_PATTERN.sub('', text)
    lines = [_EXTRA_SPACES.sub(' ', line).strip() for line in stripped.split('\n')]
    return '\n'.join(line for line in lines if line)


def execute_set_command(command: SetCommand, variable_manager: VariableManager) -> None:
    if command.operator == '=':
        variable_manager.set(command.flag, command.value)
        return
    variable_manager.apply_operation(
        command.flag, Operation(command.operator[0]), coerce_number(command.value)
    )


def apply_set_commands(text: str | None, variable_manager: VariableManager) -> tuple[str, list[str]]:
    """
    Execute every set command embedded in ``text``.

    Returns the text with the commands removed and the names of the flags
    that were written, in order.
    """
    commands = find_set_commands(text)
    for command in commands:
        execute_set_command(command, variable_manager)
    return strip_set_commands(text), [command.flag for command in commands]
