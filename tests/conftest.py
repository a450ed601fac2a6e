import pytest


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from forge.core.events import EventBus
    return EventBus()


@pytest.fixture
def scheduler():
    from forge.core.scheduler import Scheduler
    return Scheduler()


@pytest.fixture
def variable_manager():
    from forge.runtime.variables import VariableManager
    return VariableManager()


@pytest.fixture
def guard_graph():
    """
    Small gate-guard conversation:

    start (Guard line, sets met_guard) -> ask (3 choices)
      friend  : needs met_guard
      nobody  : bumps suspicion, goes to a conditional
      pass    : needs has_pass
    """
    from forge.graph.graph import DialogueGraph

    return DialogueGraph.model_validate({
        "id": "gate_guard",
        "title": "Gate Guard",
        "startNodeId": "start",
        "endNodeIds": [{"nodeId": "friend"}, {"nodeId": "gate"}],
        "nodes": [
            {
                "id": "start",
                "type": "npc",
                "speaker": "Guard",
                "content": "Halt! Who goes there?",
                "setFlags": ["met_guard"],
                "nextNodeId": "ask",
            },
            {
                "id": "ask",
                "type": "PLAYER",
                "choices": [
                    {
                        "id": "c_friend",
                        "text": "A friend.",
                        "nextNodeId": "friend",
                        "conditions": [{"flag": "met_guard", "operator": "is_set"}],
                    },
                    {
                        "id": "c_nobody",
                        "text": "Nobody. <<set $suspicion += 1>>",
                        "nextNodeId": "suspicious",
                    },
                    {
                        "id": "c_pass",
                        "text": "I have a pass.",
                        "nextNodeId": "gate",
                        "conditions": [{"flag": "has_pass", "operator": "is_set"}],
                    },
                ],
            },
            {
                "id": "friend",
                "type": "CHARACTER",
                "speaker": "Guard",
                "content": "Welcome, friend.",
            },
            {
                "id": "suspicious",
                "type": "CONDITIONAL",
                "conditionalBlocks": [
                    {
                        "id": "b_alarm",
                        "type": "if",
                        "condition": [{"flag": "suspicion", "operator": "greater_equal", "value": 2}],
                        "content": "Guards! Seize them!",
                        "speaker": "Guard",
                    },
                    {
                        "id": "b_calm",
                        "type": "else",
                        "content": "Suspicion is {$suspicion}. Move along.",
                        "speaker": "Guard",
                    },
                ],
            },
            {
                "id": "gate",
                "type": "CHARACTER",
                "speaker": "Guard",
                "content": "Go ahead.",
            },
        ],
    })
