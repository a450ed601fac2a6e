"""
Dialogue graph and storylet models.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, PrivateAttr, field_validator

from forge.core.model import ForgeModel
from forge.graph.nodes import DialogueNode


class GraphKind(str, Enum):
    NARRATIVE = "NARRATIVE"
    STORYLET = "STORYLET"


class DialogueGraph(ForgeModel):
    """
    An ordered collection of nodes with a start node.

    Node order is the authoring order and is preserved by export.
    """
    id: str | None = None
    title: str = ""
    kind: GraphKind = GraphKind.NARRATIVE
    start_node_id: str = "start"
    end_node_ids: list[str] = Field(default_factory=list)
    nodes: list[DialogueNode] = Field(default_factory=list)

    _node_map: dict[str, DialogueNode] | None = PrivateAttr(default=None)

    @field_validator('end_node_ids', mode='before')
    @classmethod
    def _flatten_end_nodes(cls, value: Any) -> Any:
        # Editor documents store end nodes as {"nodeId": ..., "exitKey": ...}
        if isinstance(value, list):
            return [
                item.get('nodeId', item.get('node_id')) if isinstance(item, dict) else item
                for item in value
            ]
        return value

    @property
    def node_map(self) -> dict[str, DialogueNode]:
        """Node id -> node. Built lazily; graphs are treated as read-only."""
        if self._node_map is None:
            self._node_map = {node.id: node for node in self.nodes}
        return self._node_map

    def get_node(self, node_id: str | None) -> DialogueNode | None:
        if not node_id:
            return None
        return self.node_map.get(node_id)

    def has_node(self, node_id: str | None) -> bool:
        return self.get_node(node_id) is not None

    def is_end_node(self, node_id: str) -> bool:
        return node_id in self.end_node_ids


class Storylet(ForgeModel):
    """
    A reusable sub-dialogue callable from storylet and randomizer nodes.

    ``start_node_id`` overrides the dialogue's own start node.
    """
    id: str
    title: str = ""
    dialogue: DialogueGraph | None = None
    start_node_id: str | None = None

    @property
    def entry_node_id(self) -> str | None:
        if self.dialogue is None:
            return None
        return self.start_node_id or self.dialogue.start_node_id
