"""
Export preparation.

Some node kinds only exist at runtime (the weighted randomizer) and have
no Yarn form. Before export they are dropped, links pointing at them are
cleared, and any place where they sat between two exportable nodes is
reported so authors know that path will not survive in the script.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field

from forge.graph.graph import DialogueGraph
from forge.graph.nodes import DialogueNode, NodeType

logger = logging.getLogger(__name__)


@dataclass
class RuntimeChain:
    """Exportable node -> runtime-only node(s) -> exportable node."""
    source: str
    target: str
    via: list[str]


@dataclass
class ExportDiagnostics:
    ignored_nodes: list[tuple[str, NodeType]] = field(default_factory=list)
    runtime_chains: list[RuntimeChain] = field(default_factory=list)


@dataclass
class PreparedExport:
    nodes: list[DialogueNode]
    diagnostics: ExportDiagnostics
    runtime_node_ids: set[str] = field(default_factory=set)


def node_links(node: DialogueNode) -> list[str]:
    """Every node id ``node`` can lead to, in field order."""
    links = []
    if node.next_node_id:
        links.append(node.next_node_id)
    for choice in node.choices or []:
        if choice.next_node_id:
            links.append(choice.next_node_id)
    for block in node.conditional_blocks or []:
        if block.next_node_id:
            links.append(block.next_node_id)
    return links


def _sanitize(node: DialogueNode, runtime_ids: set[str]) -> DialogueNode:
    if not any(link in runtime_ids for link in node_links(node)):
        return node

    node = node.clone()
    if node.next_node_id in runtime_ids:
        node.next_node_id = None
    for choice in node.choices or []:
        if choice.next_node_id in runtime_ids:
            choice.next_node_id = None
    for block in node.conditional_blocks or []:
        if block.next_node_id in runtime_ids:
            block.next_node_id = None
    return node


def _find_runtime_chains(
    graph: DialogueGraph,
    runtime_ids: set[str],
    exportable_ids: set[str],
) -> list[RuntimeChain]:
    links = {node.id: node_links(node) for node in graph.nodes}
    chains = []
    seen = set()

    for node in graph.nodes:
        if node.id not in exportable_ids:
            continue
        for first in links[node.id]:
            if first not in runtime_ids:
                continue

            queue = deque([(first, [first])])
            visited = {first}
            while queue:
                current, path = queue.popleft()
                for target in links.get(current, []):
                    if target in runtime_ids:
                        if target not in visited:
                            visited.add(target)
                            queue.append((target, path + [target]))
                    elif target in exportable_ids:
                        key = (node.id, target, tuple(path))
                        if key not in seen:
                            seen.add(key)
                            chains.append(RuntimeChain(source=node.id, target=target, via=path))
    return chains


def prepare_graph_for_export(graph: DialogueGraph) -> PreparedExport:
    """Exportable nodes in authoring order, plus diagnostics."""
    diagnostics = ExportDiagnostics()
    runtime_ids = set()
    exportable_ids = set()

    for node in graph.nodes:
        if node.type.is_runtime_only:
            runtime_ids.add(node.id)
            diagnostics.ignored_nodes.append((node.id, node.type))
        else:
            exportable_ids.add(node.id)

    nodes = [
        _sanitize(node, runtime_ids)
        for node in graph.nodes
        if node.id in exportable_ids
    ]
    diagnostics.runtime_chains = _find_runtime_chains(graph, runtime_ids, exportable_ids)

    return PreparedExport(nodes=nodes, diagnostics=diagnostics, runtime_node_ids=runtime_ids)


def log_export_diagnostics(
    graph: DialogueGraph,
    diagnostics: ExportDiagnostics,
    log: logging.Logger | None = None,
) -> None:
    log = log or logger

    if diagnostics.ignored_nodes:
        ignored = ", ".join(f"{node_id}:{node_type.value}" for node_id, node_type in diagnostics.ignored_nodes)
        log.debug(f"Ignored runtime-only nodes in graph {graph.id} ({graph.title}): {ignored}")

    if diagnostics.runtime_chains:
        chains = "; ".join(
            f"{chain.source} -> {' -> '.join(chain.via)} -> {chain.target}"
            for chain in diagnostics.runtime_chains
        )
        log.warning(
            f"Runtime-only nodes chained between exported nodes in graph {graph.id} ({graph.title}): {chains}"
        )
