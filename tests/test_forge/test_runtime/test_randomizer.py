import random

from forge.graph.nodes import StoryletPoolItem
from forge.runtime.randomizer import eligible_pool_items, select_weighted
from forge.runtime.variables import VariableManager


def item(storylet_id, weight=1, conditions=None):
    return StoryletPoolItem(storylet_id=storylet_id, weight=weight, conditions=conditions)


def test_weights_are_respected():
    rng = random.Random(1234)
    pool = [item("common", 3), item("rare", 1)]

    counts = {"common": 0, "rare": 0}
    for _ in range(10_000):
        counts[select_weighted(pool, rng).storylet_id] += 1

    ratio = counts["common"] / counts["rare"]
    assert 2.6 < ratio < 3.4


def test_ineligible_items_are_never_selected():
    vm = VariableManager({"night": False})
    pool = [
        item("day_talk"),
        item("night_talk", 100, [{"flag": "night", "operator": "is_set"}]),
    ]

    eligible = eligible_pool_items(pool, vm)
    rng = random.Random(7)

    assert [i.storylet_id for i in eligible] == ["day_talk"]
    assert all(select_weighted(eligible, rng).storylet_id == "day_talk" for _ in range(200))


def test_empty_pool_selects_nothing():
    assert select_weighted([]) is None
    assert eligible_pool_items(None, VariableManager()) == []


def test_draw_at_total_selects_last_item():
    class MaxRandom(random.Random):
        def uniform(self, a, b):
            return b

    pool = [item("a", 1), item("b", 2)]
    assert select_weighted(pool, MaxRandom()).storylet_id == "b"


def test_seeded_selection_is_reproducible():
    pool = [item("a"), item("b"), item("c")]

    first = [select_weighted(pool, random.Random(42)).storylet_id for _ in range(5)]
    second = [select_weighted(pool, random.Random(42)).storylet_id for _ in range(5)]

    assert first == second
