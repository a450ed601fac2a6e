"""
Conditional branch handler.
"""

from __future__ import annotations

from forge.graph.nodes import DialogueNode, NodeType
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.context import YarnConverterContext
from forge.yarn.handlers.base import NodeHandler
from forge.yarn.handlers.reader import read_dialogue_body


class ConditionalHandler(NodeHandler):
    """if/elseif/else blocks; the node's own jump follows the endif."""

    node_type = NodeType.CONDITIONAL

    async def export_node(
        self,
        node: DialogueNode,
        builder: YarnTextBuilder,
        context: YarnConverterContext | None = None,
    ) -> str:
        block = self.create_block(node, builder)
        block.start_node()

        if node.conditional_blocks:
            block.add_conditional_blocks(node.conditional_blocks)
        if node.set_flags:
            block.add_flags(node.set_flags)
        if node.next_node_id:
            block.add_next_node(node.next_node_id)

        return block.end_node()

    async def import_node(
        self,
        block: YarnNodeBlock,
        context: YarnConverterContext | None = None,
    ) -> DialogueNode:
        body = read_dialogue_body(block)
        return DialogueNode(
            id=block.node_id,
            type=NodeType.CONDITIONAL,
            speaker=body.speaker,
            content=body.content,
            next_node_id=body.next_node_id,
            set_flags=body.set_flags or None,
            conditional_blocks=body.conditional_blocks or None,
        )
