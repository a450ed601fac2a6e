"""
Graph Library.

Loads dialogue graphs (and an optional flag schema) from a directory of
JSON documents and serves them to the runner and the Yarn converter.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
from pydantic import ValidationError

from forge.graph.flags import FlagSchema
from forge.graph.graph import DialogueGraph, Storylet

SCHEMA_DIR = Path(__file__).parent / "schemas"
FLAGS_FILE = "flags.json"


class GraphLoadError(RuntimeError):
    """A requested graph is not in the library."""

    def __init__(self, graph_id: str):
        super().__init__(f"Graph not found: {graph_id}")
        self.graph_id = graph_id


class GraphLibrary:
    """
    File-backed store of dialogue graphs.

    Every ``*.json`` file in ``data_path`` (except ``flags.json``) is a
    graph document. A document without an ``id`` takes its file name.
    Invalid files are logged and skipped.

    Usage:
        library = GraphLibrary("content/dialogue")
        library.load_all()
        context = YarnConverterContext(
            get_graph_from_cache=library.get_graph,
            resolve_graph=library.resolve_graph,
        )
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}

        self.graphs: dict[str, DialogueGraph] = {}
        self.flag_schema: FlagSchema | None = None

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> None:
        """Load all graphs and the flag schema from disk."""
        self._load_schemas()

        self.graphs = self._load_graphs()
        self.flag_schema = self._load_flag_schema()

        flag_count = len(self.flag_schema.flags) if self.flag_schema else 0
        self.logger.info(f"Loaded {len(self.graphs)} graphs, {flag_count} flags.")

    def _load_schemas(self) -> None:
        for schema_file in SCHEMA_DIR.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except Exception as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _validate(self, data: Any, schema_name: str, file_path: Path) -> bool:
        schema = self._schemas.get(schema_name)
        if schema is None:
            self.logger.warning(f"No schema found for {file_path.name} ({schema_name})")
            return True
        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as e:
            self.logger.error(f"Validation error in {file_path}: {e.message}")
            return False
        return True

    def _load_graphs(self) -> dict[str, DialogueGraph]:
        graphs: dict[str, DialogueGraph] = {}

        if not self._data_path.exists():
            self.logger.warning(f"Data directory not found: {self._data_path}")
            return graphs

        for file_path in sorted(self._data_path.glob("*.json")):
            if file_path.name == FLAGS_FILE:
                continue
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)

                if not self._validate(data, "graph.schema.json", file_path):
                    continue

                graph = DialogueGraph.model_validate(data)
                if graph.id is None:
                    graph.id = file_path.stem

                if graph.id in graphs:
                    self.logger.warning(f"Duplicate graph id {graph.id} in {file_path}, replacing")
                graphs[graph.id] = graph
            except ValidationError as e:
                self.logger.error(f"Invalid graph in {file_path}: {e}")
            except Exception as e:
                self.logger.error(f"Failed to load {file_path}: {e}")

        return graphs

    def _load_flag_schema(self) -> FlagSchema | None:
        file_path = self._data_path / FLAGS_FILE
        if not file_path.exists():
            return None

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not self._validate(data, "flags.schema.json", file_path):
                return None
            return FlagSchema.model_validate(data)
        except Exception as e:
            self.logger.error(f"Failed to load {file_path}: {e}")
            return None

    def get_graph(self, graph_id: str) -> DialogueGraph | None:
        return self.graphs.get(graph_id)

    async def resolve_graph(self, graph_id: str) -> DialogueGraph:
        graph = self.graphs.get(graph_id)
        if graph is None:
            raise GraphLoadError(graph_id)
        return graph

    def storylets(self) -> dict[str, Storylet]:
        """Every graph wrapped as a storylet, keyed by graph id."""
        return {
            graph_id: Storylet(id=graph_id, title=graph.title, dialogue=graph)
            for graph_id, graph in self.graphs.items()
        }

    def __contains__(self, graph_id: str) -> bool:
        return graph_id in self.graphs

    def __len__(self) -> int:
        return len(self.graphs)
