"""
Weighted storylet selection for randomizer nodes.
"""

from __future__ import annotations

import random
from typing import Sequence

from forge.graph.nodes import StoryletPoolItem
from forge.runtime.conditions import evaluate_conditions
from forge.runtime.variables import VariableManager


def eligible_pool_items(
    pool: Sequence[StoryletPoolItem] | None,
    variable_manager: VariableManager,
) -> list[StoryletPoolItem]:
    """Pool entries whose conditions hold, in pool order."""
    if not pool:
        return []
    variables = variable_manager.get_all_variables()
    memory_flags = variable_manager.get_all_memory_flags()
    return [item for item in pool if evaluate_conditions(item.conditions, variables, memory_flags)]


def select_weighted(
    items: Sequence[StoryletPoolItem],
    rng: random.Random | None = None,
) -> StoryletPoolItem | None:
    """
    Pick one item with probability proportional to its weight.

    Draws uniformly over the total weight and walks the list subtracting
    weights; the first item that exhausts the draw wins. The last item is
    the fallback when float rounding leaves a remainder.
    """
    if not items:
        return None

    rng = rng or random.Random()
    total = sum(item.weight for item in items)
    remaining = rng.uniform(0, total)

    for item in items:
        remaining -= item.weight
        if remaining <= 0:
            return item

    return items[-1]
