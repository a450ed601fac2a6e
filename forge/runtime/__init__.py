"""
Dialogue runtime.

Exports:
- VariableManager, Operation: Two-tier flag store
- evaluate_condition, evaluate_conditions: Condition evaluation
- process_node, ProcessedNode: Per-node transition function
- merge_flag_updates, initialize_flags, validate_flags: Flag schema rules
- select_weighted, eligible_pool_items: Weighted randomizer
- apply_set_commands, parse_set_command: Embedded set commands
- DialogueRunner, RunnerConfig, RunnerState: Stateful traversal
"""

from forge.runtime.variables import VariableManager, Operation
from forge.runtime.conditions import evaluate_condition, evaluate_conditions, resolve_flag
from forge.runtime.processor import (
    ProcessedNode,
    process_node,
    find_matching_block,
    interpolate_variables,
    is_valid_next_node,
)
from forge.runtime.flags import (
    merge_flag_updates,
    initialize_flags,
    validate_flags,
    is_dialogue_flag,
)
from forge.runtime.randomizer import select_weighted, eligible_pool_items
from forge.runtime.commands import (
    SetCommand,
    apply_set_commands,
    parse_set_command,
    parse_literal,
    find_set_commands,
    strip_set_commands,
)
from forge.runtime.runner import (
    DialogueRunner,
    RunnerConfig,
    RunnerState,
    HistoryEntry,
    StoryletCallFrame,
    DialogueResult,
)

__all__ = [
    # Flags
    "VariableManager",
    "Operation",
    "merge_flag_updates",
    "initialize_flags",
    "validate_flags",
    "is_dialogue_flag",
    # Conditions
    "evaluate_condition",
    "evaluate_conditions",
    "resolve_flag",
    # Nodes
    "ProcessedNode",
    "process_node",
    "find_matching_block",
    "interpolate_variables",
    "is_valid_next_node",
    # Randomizer
    "select_weighted",
    "eligible_pool_items",
    # Commands
    "SetCommand",
    "apply_set_commands",
    "parse_set_command",
    "parse_literal",
    "find_set_commands",
    "strip_set_commands",
    # Runner
    "DialogueRunner",
    "RunnerConfig",
    "RunnerState",
    "HistoryEntry",
    "StoryletCallFrame",
    "DialogueResult",
]
