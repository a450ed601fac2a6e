"""
Graph data model.

Exports:
- DialogueGraph, GraphKind, Storylet: Graphs and callable sub-dialogues
- DialogueNode, NodeType: Nodes
- Choice, Condition, ConditionOperator: Player options and flag tests
- ConditionalBlock, ConditionalBlockType: if/elseif/else branches
- StoryletCall, StoryletCallMode, StoryletPoolItem: Storylet references
- FlagSchema, FlagDefinition, FlagType, FlagValueType, QuestState: Flag schema
"""

from forge.graph.nodes import (
    FlagValue,
    NodeType,
    ConditionOperator,
    ConditionalBlockType,
    StoryletCallMode,
    Condition,
    Choice,
    ConditionalBlock,
    StoryletCall,
    StoryletPoolItem,
    DialogueNode,
)
from forge.graph.graph import DialogueGraph, GraphKind, Storylet
from forge.graph.flags import FlagSchema, FlagDefinition, FlagType, FlagValueType, QuestState

__all__ = [
    # Graphs
    "DialogueGraph",
    "GraphKind",
    "Storylet",
    # Nodes
    "DialogueNode",
    "NodeType",
    "Choice",
    "Condition",
    "ConditionOperator",
    "ConditionalBlock",
    "ConditionalBlockType",
    "StoryletCall",
    "StoryletCallMode",
    "StoryletPoolItem",
    "FlagValue",
    # Flags
    "FlagSchema",
    "FlagDefinition",
    "FlagType",
    "FlagValueType",
    "QuestState",
]
