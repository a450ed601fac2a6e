"""
Converter exceptions.

Both are raised at internal seams and caught by the converter, which
logs them and carries on with the rest of the graph.
"""

from __future__ import annotations


class HandlerNotFoundError(LookupError):
    """No handler is registered for a node type."""

    def __init__(self, node_type):
        super().__init__(f"No handler registered for node type {node_type}")
        self.node_type = node_type


class GraphResolutionError(RuntimeError):
    """A referenced graph could not be loaded."""

    def __init__(self, graph_id: str, reason: str = ""):
        message = f"Could not load referenced graph {graph_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.graph_id = graph_id
