"""
Per-call state shared by the converter and its handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from forge.graph.graph import DialogueGraph
from forge.yarn.errors import GraphResolutionError

if TYPE_CHECKING:
    from forge.yarn.registry import HandlerRegistry

GraphCacheLookup = Callable[[str], "DialogueGraph | None"]
GraphResolver = Callable[[str], Awaitable["DialogueGraph | None"]]


@dataclass
class YarnConverterContext:
    """
    Attributes:
        registry: Handlers used for this conversion (default registry if None)
        visited_graphs: Graph ids currently being inlined (cycle guard)
        get_graph_from_cache: Synchronous lookup tried first
        resolve_graph: Async loader tried when the cache misses
        logger: Where converter problems are reported
    """
    registry: HandlerRegistry | None = None
    visited_graphs: set[str] = field(default_factory=set)
    get_graph_from_cache: GraphCacheLookup | None = None
    resolve_graph: GraphResolver | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("forge.yarn"))

    async def load_graph(self, graph_id: str) -> DialogueGraph:
        """Cache first, then the resolver. Raises GraphResolutionError."""
        graph = None
        if self.get_graph_from_cache is not None:
            graph = self.get_graph_from_cache(graph_id)

        if graph is None and self.resolve_graph is not None:
            try:
                graph = await self.resolve_graph(graph_id)
            except Exception as e:
                raise GraphResolutionError(graph_id, str(e)) from e

        if graph is None:
            raise GraphResolutionError(graph_id)
        return graph
