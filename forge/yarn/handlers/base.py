"""
Node handler base class.

A handler converts one node type to a Yarn block and back. Handlers are
stateless; everything a conversion needs travels in the context.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from forge.graph.nodes import DialogueNode, NodeType
from forge.yarn.blocks import YarnNodeBlock
from forge.yarn.builders.node_block import NodeBlockBuilder
from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.context import YarnConverterContext


class NodeHandler(ABC):
    """
    Base class for per-node-type converters.

    Subclasses set ``node_type`` and implement ``export_node`` and
    ``import_node``. Both are coroutines so a handler may await graph
    resolution.
    """

    node_type: ClassVar[NodeType]

    def can_handle(self, node_type: NodeType | str) -> bool:
        try:
            return NodeType(node_type) is self.node_type
        except ValueError:
            return False

    @abstractmethod
    async def export_node(
        self,
        node: DialogueNode,
        builder: YarnTextBuilder,
        context: YarnConverterContext | None = None,
    ) -> str:
        """Yarn text for ``node`` (one or more complete blocks)."""

    @abstractmethod
    async def import_node(
        self,
        block: YarnNodeBlock,
        context: YarnConverterContext | None = None,
    ) -> DialogueNode:
        """Node described by ``block``."""

    def create_block(self, node: DialogueNode, builder: YarnTextBuilder | None = None) -> NodeBlockBuilder:
        return NodeBlockBuilder(node.id, builder)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.node_type.value})"
