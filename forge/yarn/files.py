"""
File helpers around the converter.

Graphs are stored as JSON documents, scripts as ``.yarn`` text.
"""

from __future__ import annotations

import json
from pathlib import Path

from forge.graph.graph import DialogueGraph
from forge.yarn.context import YarnConverterContext
from forge.yarn.converter import export_to_yarn, import_from_yarn


def load_graph_file(path: str | Path) -> DialogueGraph:
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        return DialogueGraph.model_validate(json.load(f))


def save_graph_file(graph: DialogueGraph, path: str | Path) -> None:
    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(graph.to_dict(), f, indent=2)


async def export_graph_file(
    graph_path: str | Path,
    output_path: str | Path | None = None,
    context: YarnConverterContext | None = None,
) -> Path:
    """Export a JSON graph to a ``.yarn`` file next to it (or at ``output_path``)."""
    graph_path = Path(graph_path)
    output = Path(output_path) if output_path else graph_path.with_suffix('.yarn')

    text = await export_to_yarn(load_graph_file(graph_path), context)
    with open(output, 'w', encoding='utf-8') as f:
        f.write(text)
    return output


async def import_yarn_file(
    yarn_path: str | Path,
    output_path: str | Path | None = None,
    title: str | None = None,
    context: YarnConverterContext | None = None,
) -> DialogueGraph:
    """
    Import a ``.yarn`` file. The graph is titled after the file unless
    ``title`` is given, and written as JSON when ``output_path`` is set.
    """
    yarn_path = Path(yarn_path)
    with open(yarn_path, 'r', encoding='utf-8') as f:
        text = f.read()

    graph = await import_from_yarn(text, title or yarn_path.stem, context)
    graph.id = yarn_path.stem

    if output_path:
        save_graph_file(graph, output_path)
    return graph
