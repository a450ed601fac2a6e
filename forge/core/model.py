"""
Base class for authored graph data.

Graph documents arrive as JSON written by an editor that uses camelCase
keys. Every model accepts both the camelCase alias and the Python
field name, and dumps back to camelCase by default.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ForgeModel(BaseModel):
    """
    Base class for graph data models.

    Models are read-only input from the runtime's point of view; the
    runner and converter never mutate a model they were handed.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        # Editor documents carry layout and bookkeeping keys we do not use
        extra='ignore',
        coerce_numbers_to_str=True,
    )

    def clone(self) -> ForgeModel:
        """Create a deep copy of this model."""
        return self.model_copy(deep=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase document form, dropping unset values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode='json')
