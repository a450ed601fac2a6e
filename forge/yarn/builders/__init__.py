"""
Yarn text builders.

Exports:
- YarnTextBuilder: Line-level emitter
- NodeBlockBuilder: Complete node block composer
"""

from forge.yarn.builders.text_builder import YarnTextBuilder
from forge.yarn.builders.node_block import NodeBlockBuilder

__all__ = [
    "YarnTextBuilder",
    "NodeBlockBuilder",
]
