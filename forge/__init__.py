"""
Dialogue Forge

Branching dialogue graphs: a runtime that plays them and a converter to
and from Yarn scripts.

Quick Start:
    from forge import DialogueGraph, DialogueRunner

    graph = DialogueGraph.model_validate(data)
    runner = DialogueRunner(graph, config=RunnerConfig(typing_delay=0))
    runner.start()
    while not runner.is_complete:
        if runner.available_choices:
            runner.select_choice(0)
        else:
            runner.advance()
"""

__version__ = "0.1.0"

from forge.core import EventBus, Event, DialogueEvent, Scheduler
from forge.graph import (
    DialogueGraph,
    DialogueNode,
    NodeType,
    Storylet,
    FlagSchema,
)
from forge.runtime import (
    DialogueRunner,
    RunnerConfig,
    RunnerState,
    DialogueResult,
    VariableManager,
)
from forge.yarn import export_to_yarn, import_from_yarn, YarnConverterContext
from forge.resources import GraphLibrary

__all__ = [
    # Core
    "EventBus",
    "Event",
    "DialogueEvent",
    "Scheduler",
    # Graph
    "DialogueGraph",
    "DialogueNode",
    "NodeType",
    "Storylet",
    "FlagSchema",
    # Runtime
    "DialogueRunner",
    "RunnerConfig",
    "RunnerState",
    "DialogueResult",
    "VariableManager",
    # Yarn
    "export_to_yarn",
    "import_from_yarn",
    "YarnConverterContext",
    # Resources
    "GraphLibrary",
]
