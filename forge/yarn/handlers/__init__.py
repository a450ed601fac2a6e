"""
Node handlers.

Exports:
- NodeHandler: Base class
- CharacterHandler, PlayerHandler, ConditionalHandler: Dialogue nodes
- StoryletHandler, DetourHandler: Nodes that call other graphs
"""

from forge.yarn.handlers.base import NodeHandler
from forge.yarn.handlers.character import CharacterHandler
from forge.yarn.handlers.player import PlayerHandler
from forge.yarn.handlers.conditional import ConditionalHandler
from forge.yarn.handlers.storylet import StoryletHandler, DetourHandler

__all__ = [
    "NodeHandler",
    "CharacterHandler",
    "PlayerHandler",
    "ConditionalHandler",
    "StoryletHandler",
    "DetourHandler",
]
