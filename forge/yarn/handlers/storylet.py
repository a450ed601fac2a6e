"""
Storylet and detour handlers.

A node that calls another graph is exported as a jump into that graph,
followed by the referenced graph's own blocks inlined after it. A graph
already being inlined further up the chain is not expanded again; the
node gets a placeholder jump instead, so self and mutual references
terminate.
"""

from __future__ import annotations

from forge.graph.graph import DialogueGraph
from forge.graph.nodes import DialogueNode, NodeType, StoryletCall
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.context import YarnConverterContext
from forge.yarn.errors import HandlerNotFoundError
from forge.yarn.export import log_export_diagnostics, prepare_graph_for_export
from forge.yarn.handlers.base import NodeHandler
from forge.yarn.syntax import YarnPatterns, YarnSyntax


class StoryletHandler(NodeHandler):
    """Inlines the graph named by ``storylet_call``."""

    node_type = NodeType.STORYLET
    label = "Storylet"
    placeholder_prefix = "storylet"

    async def export_node(
        self,
        node: DialogueNode,
        builder: YarnTextBuilder,
        context: YarnConverterContext | None = None,
    ) -> str:
        call = node.storylet_call
        if call is None:
            return self._export_plain(node, builder)

        context = context or YarnConverterContext()
        logger = context.logger
        target = call.target_graph_id

        if target in context.visited_graphs:
            logger.warning(f"Circular reference detected: graph {target} already visited")
            block = self.create_block(node, builder)
            block.start_node()
            block.add_content(f"[{self.label}: {target}]", node.speaker)
            block.add_next_node(call.target_start_node_id or f"{self.placeholder_prefix}_{target}_start")
            return block.end_node()

        context.visited_graphs.add(target)
        try:
            graph = await context.load_graph(target)

            block = self.create_block(node, builder)
            block.start_node()
            if node.content:
                block.add_content(node.content, node.speaker)
            block.add_next_node(call.target_start_node_id or graph.start_node_id)
            own_text = block.end_node()

            return own_text + await self._export_referenced_graph(graph, call, context)
        except Exception:
            logger.exception(f"Failed to export {self.label.lower()} node {node.id}")
            block = self.create_block(node, YarnTextBuilder())
            block.start_node()
            block.add_content(f"[{self.label}: {target} - Error loading]", node.speaker)
            return block.end_node()
        finally:
            context.visited_graphs.discard(target)

    def _export_plain(self, node: DialogueNode, builder: YarnTextBuilder) -> str:
        block = self.create_block(node, builder)
        block.start_node()
        if node.content:
            block.add_content(node.content, node.speaker)
        if node.next_node_id:
            block.add_next_node(node.next_node_id)
        return block.end_node()

    async def _export_referenced_graph(
        self,
        graph: DialogueGraph,
        call: StoryletCall,
        context: YarnConverterContext,
    ) -> str:
        # Deferred: registry imports the handler package
        from forge.yarn.registry import create_default_registry

        registry = context.registry or create_default_registry()
        prepared = prepare_graph_for_export(graph)
        log_export_diagnostics(graph, prepared.diagnostics, context.logger)

        parts = []
        for node in prepared.nodes:
            try:
                handler = registry.get_handler(node.type)
                text = await handler.export_node(node, YarnTextBuilder(), context)
            except HandlerNotFoundError as e:
                context.logger.warning(f"Skipping node {node.id} of graph {graph.id}: {e}")
                continue
            parts.append(self.rewrite_end_node(graph, node, text, call))
        return "".join(parts)

    def rewrite_end_node(
        self,
        graph: DialogueGraph,
        node: DialogueNode,
        text: str,
        call: StoryletCall,
    ) -> str:
        """Hook for inlined blocks; storylets leave them unchanged."""
        return text

    async def import_node(
        self,
        block: YarnNodeBlock,
        context: YarnConverterContext | None = None,
    ) -> DialogueNode:
        content_lines = []
        next_node_id = None
        for line in block.lines:
            match = YarnPatterns.JUMP.match(line)
            if match:
                next_node_id = match.group(1)
            else:
                content_lines.append(line)

        return DialogueNode(
            id=block.node_id,
            type=self.node_type,
            content="\n".join(content_lines).strip() or None,
            next_node_id=next_node_id,
        )


class DetourHandler(StoryletHandler):
    """
    Like a storylet, but the inlined graph's end nodes jump back to the
    call's ``return_node_id``.
    """

    node_type = NodeType.DETOUR
    label = "Detour"
    placeholder_prefix = "detour"

    def rewrite_end_node(
        self,
        graph: DialogueGraph,
        node: DialogueNode,
        text: str,
        call: StoryletCall,
    ) -> str:
        if not call.return_node_id or not graph.is_end_node(node.id):
            return text

        return_jump = f"{YarnSyntax.INDENT}{YarnSyntax.JUMP_COMMAND}{call.return_node_id}>>"
        lines = text.split(YarnSyntax.NEWLINE)
        for index in range(len(lines) - 1, -1, -1):
            if YarnSyntax.JUMP_COMMAND in lines[index]:
                lines[index] = return_jump
                return YarnSyntax.NEWLINE.join(lines)

        # No jump yet: add one just before the end marker
        return text.replace(
            f"{YarnSyntax.NODE_END}{YarnSyntax.NEWLINE}",
            f"{return_jump}{YarnSyntax.NEWLINE}{YarnSyntax.NODE_END}{YarnSyntax.NEWLINE}",
            1,
        )
