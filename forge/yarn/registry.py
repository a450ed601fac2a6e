"""
Node type -> handler lookup.

A registry is an ordinary value: build one with
``create_default_registry()``, register extra handlers on it, and pass it
to the converter through the context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from forge.graph.nodes import NodeType
from forge.yarn.errors import HandlerNotFoundError

if TYPE_CHECKING:
    from forge.yarn.handlers.base import NodeHandler


class HandlerRegistry:
    """Maps node types to the handler that converts them."""

    def __init__(self):
        self._handlers: dict[NodeType, NodeHandler] = {}

    def register_handler(self, node_type: NodeType | str, handler: NodeHandler) -> None:
        """Register ``handler`` for ``node_type``, replacing any earlier one."""
        self._handlers[NodeType(node_type)] = handler

    def get_handler(self, node_type: NodeType | str) -> NodeHandler:
        try:
            handler = self._handlers.get(NodeType(node_type))
        except ValueError:
            handler = None
        if handler is None:
            raise HandlerNotFoundError(node_type)
        return handler

    def has_handler(self, node_type: NodeType | str) -> bool:
        try:
            return NodeType(node_type) in self._handlers
        except ValueError:
            return False

    @property
    def registered_types(self) -> list[NodeType]:
        return list(self._handlers)


def create_default_registry() -> HandlerRegistry:
    """Registry with the built-in handler for every script-representable node type."""
    from forge.yarn.handlers import (
        CharacterHandler,
        ConditionalHandler,
        DetourHandler,
        PlayerHandler,
        StoryletHandler,
    )

    registry = HandlerRegistry()
    for handler in (
        CharacterHandler(),
        PlayerHandler(),
        ConditionalHandler(),
        StoryletHandler(),
        DetourHandler(),
    ):
        registry.register_handler(handler.node_type, handler)
    return registry
