"""
Resources module - file-backed dialogue content.

Exports:
- GraphLibrary: Loads and validates graph documents from disk
- GraphLoadError: Raised when a requested graph is unknown
"""

from forge.resources.library import GraphLibrary, GraphLoadError

__all__ = [
    "GraphLibrary",
    "GraphLoadError",
]
