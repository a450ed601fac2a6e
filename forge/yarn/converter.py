"""
Graph <-> Yarn script conversion.

Usage:
    text = asyncio.run(export_to_yarn(graph))
    graph = asyncio.run(import_from_yarn(text, title="Guard"))

Both directions are best effort per node: a node that fails to convert is
logged and left out, and the rest of the graph is still converted.
"""

from __future__ import annotations

import logging

from forge.graph.graph import DialogueGraph, GraphKind
from forge.graph.nodes import NodeType
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.context import YarnConverterContext
from forge.yarn.export import log_export_diagnostics, prepare_graph_for_export
from forge.yarn.registry import create_default_registry
from forge.yarn.syntax import YarnPatterns, YarnSyntax, is_conditional_line

logger = logging.getLogger(__name__)


def _prepare_context(context: YarnConverterContext | None) -> YarnConverterContext:
    context = context or YarnConverterContext(logger=logger)
    if context.registry is None:
        context.registry = create_default_registry()
    return context


async def export_to_yarn(graph: DialogueGraph, context: YarnConverterContext | None = None) -> str:
    """
    Serialize ``graph`` to Yarn text.

    Storylet and detour nodes inline the graphs they call, resolved through
    ``context``. The graph being exported counts as visited, so a node that
    calls its own graph gets a placeholder jump.
    """
    context = _prepare_context(context)
    log = context.logger

    prepared = prepare_graph_for_export(graph)
    log_export_diagnostics(graph, prepared.diagnostics, log)

    own_id = graph.id
    added_own_id = own_id is not None and own_id not in context.visited_graphs
    if added_own_id:
        context.visited_graphs.add(own_id)

    parts = []
    try:
        for node in prepared.nodes:
            try:
                handler = context.registry.get_handler(node.type)
                parts.append(await handler.export_node(node, YarnTextBuilder(), context))
            except Exception:
                log.exception(f"Failed to export node {node.id} ({node.type.value})")
    finally:
        if added_own_id:
            context.visited_graphs.discard(own_id)

    return "".join(parts)


def parse_yarn_content(text: str) -> list[YarnNodeBlock]:
    """Split a script into node blocks. Sections without a title or a --- are skipped."""
    blocks = []
    for section in text.split(YarnSyntax.NODE_END):
        if not section.strip():
            continue

        title = YarnPatterns.TITLE.search(section)
        if not title:
            continue

        separator = section.find(YarnSyntax.NODE_SEPARATOR, title.end())
        if separator < 0:
            continue
        body = section[separator + len(YarnSyntax.NODE_SEPARATOR):]
        raw_content = body.strip()

        blocks.append(YarnNodeBlock(
            node_id=title.group(1),
            lines=[line.strip() for line in raw_content.split("\n") if line.strip()],
            raw_content=raw_content,
        ))
    return blocks


def determine_node_type(block: YarnNodeBlock) -> NodeType:
    """
    Guess a node type from the shape of its lines.

    Any option line makes a player node. Otherwise a body that is more
    than half if/elseif/else/endif lines is a conditional node, and
    anything else is a character node.
    """
    if any(line.startswith(YarnSyntax.OPTION_PREFIX.strip()) for line in block.lines):
        return NodeType.PLAYER

    conditional_lines = sum(1 for line in block.lines if is_conditional_line(line))
    if block.lines and conditional_lines > len(block.lines) / 2:
        return NodeType.CONDITIONAL

    return NodeType.CHARACTER


async def import_from_yarn(
    text: str,
    title: str = "Imported Dialogue",
    context: YarnConverterContext | None = None,
) -> DialogueGraph:
    """
    Parse Yarn text into a storylet graph.

    The start node is the first block that imported successfully. End
    nodes are left empty for the caller to assign.
    """
    context = _prepare_context(context)
    log = context.logger

    nodes = []
    for block in parse_yarn_content(text):
        node_type = determine_node_type(block)
        try:
            handler = context.registry.get_handler(node_type)
            nodes.append(await handler.import_node(block, context))
        except Exception:
            log.exception(f"Failed to import node {block.node_id}")

    return DialogueGraph(
        title=title,
        kind=GraphKind.STORYLET,
        start_node_id=nodes[0].id if nodes else "start",
        end_node_ids=[],
        nodes=nodes,
    )
