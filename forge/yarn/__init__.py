"""
Yarn script conversion.

Exports:
- export_to_yarn, import_from_yarn: Whole-graph conversion
- parse_yarn_content, determine_node_type: Script reading
- YarnConverterContext: Per-call state (registry, graph resolution, logging)
- HandlerRegistry, create_default_registry: Node type -> handler lookup
- NodeHandler and the built-in handlers
- YarnTextBuilder, NodeBlockBuilder: Text emitters
- parse_condition, format_conditions, validate_condition: Condition strings
- prepare_graph_for_export: Runtime-only node filtering
"""

from forge.yarn.syntax import YarnSyntax, YarnPatterns
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.errors import HandlerNotFoundError, GraphResolutionError
from forge.yarn.builders import YarnTextBuilder, NodeBlockBuilder
from forge.yarn.conditions import (
    parse_condition,
    format_condition,
    format_conditions,
    validate_condition,
    ConditionValidation,
)
from forge.yarn.content import extract_set_commands, remove_set_commands, format_content
from forge.yarn.context import YarnConverterContext
from forge.yarn.registry import HandlerRegistry, create_default_registry
from forge.yarn.handlers import (
    NodeHandler,
    CharacterHandler,
    PlayerHandler,
    ConditionalHandler,
    StoryletHandler,
    DetourHandler,
)
from forge.yarn.export import prepare_graph_for_export, log_export_diagnostics, PreparedExport
from forge.yarn.converter import (
    export_to_yarn,
    import_from_yarn,
    parse_yarn_content,
    determine_node_type,
)
from forge.yarn.files import export_graph_file, import_yarn_file, load_graph_file, save_graph_file

__all__ = [
    # Conversion
    "export_to_yarn",
    "import_from_yarn",
    "parse_yarn_content",
    "determine_node_type",
    "YarnConverterContext",
    "YarnNodeBlock",
    # Files
    "export_graph_file",
    "import_yarn_file",
    "load_graph_file",
    "save_graph_file",
    # Handlers
    "HandlerRegistry",
    "create_default_registry",
    "NodeHandler",
    "CharacterHandler",
    "PlayerHandler",
    "ConditionalHandler",
    "StoryletHandler",
    "DetourHandler",
    # Builders
    "YarnTextBuilder",
    "NodeBlockBuilder",
    "YarnSyntax",
    "YarnPatterns",
    # Conditions and content
    "parse_condition",
    "format_condition",
    "format_conditions",
    "validate_condition",
    "ConditionValidation",
    "extract_set_commands",
    "remove_set_commands",
    "format_content",
    # Export preparation
    "prepare_graph_for_export",
    "log_export_diagnostics",
    "PreparedExport",
    # Errors
    "HandlerNotFoundError",
    "GraphResolutionError",
]
