import random

import pytest

from forge.core.events import DialogueEvent
from forge.graph.flags import FlagSchema
from forge.graph.graph import DialogueGraph, Storylet
from forge.graph.nodes import NodeType
from forge.runtime.runner import DialogueRunner, RunnerConfig, RunnerState


INSTANT = RunnerConfig(typing_delay=0)


def line(node_id, content, next_node_id=None, **fields):
    return {"id": node_id, "type": "CHARACTER", "content": content, "nextNodeId": next_node_id, **fields}


def graph(graph_id, *nodes, start="start"):
    return DialogueGraph.model_validate({"id": graph_id, "startNodeId": start, "nodes": list(nodes)})


@pytest.fixture
def recorder(event_bus):
    """Records (event type, data) for every DialogueEvent."""
    events = []

    def record(event):
        events.append((event.type, dict(event.data)))

    for event_type in DialogueEvent:
        event_bus.subscribe(event_type, record, weak=False)
    return events


def types_of(events):
    return [event_type for event_type, _ in events]


def test_character_flags_apply_before_choices_are_filtered(guard_graph):
    runner = DialogueRunner(guard_graph, config=INSTANT)
    runner.start()

    assert runner.state is RunnerState.DISPLAYING
    assert runner.flags == {"met_guard": True}
    assert runner.history[0].content == "Halt! Who goes there?"
    assert runner.history[0].speaker == "Guard"

    assert runner.advance()
    assert runner.state is RunnerState.AWAITING_CHOICE
    assert [c.id for c in runner.available_choices] == ["c_friend", "c_nobody"]


def test_choice_runs_commands_and_reaches_conditional(guard_graph):
    runner = DialogueRunner(guard_graph, config=INSTANT)
    runner.start()
    runner.advance()

    assert runner.select_choice(1)

    assert runner.flags["suspicion"] == 1
    assert [entry.content for entry in runner.history] == [
        "Halt! Who goes there?",
        "Nobody.",
        "Suspicion is 1. Move along.",
    ]
    assert runner.history[1].node_type is NodeType.PLAYER
    assert runner.history[2].node_type is NodeType.CHARACTER
    assert runner.is_complete
    assert runner.get_result().completed
    assert runner.get_result().visited_node_ids == ["start", "ask", "suspicious"]


def test_initial_flags_unlock_choices(guard_graph):
    runner = DialogueRunner(guard_graph, config=INSTANT, initial_flags={"has_pass": True})
    runner.start()
    runner.advance()

    assert [c.id for c in runner.available_choices] == ["c_friend", "c_nobody", "c_pass"]

    runner.select_choice(2)
    assert runner.history[-1].content == "Go ahead."
    assert runner.is_complete


def test_invalid_choice_index_is_ignored(guard_graph):
    runner = DialogueRunner(guard_graph, config=INSTANT)
    runner.start()

    assert not runner.select_choice(0)

    runner.advance()
    assert not runner.select_choice(5)
    assert not runner.select_choice(-1)
    assert runner.state is RunnerState.AWAITING_CHOICE
    assert runner.current_node_id == "ask"


def test_typing_delay_runs_on_the_scheduler(guard_graph, scheduler):
    runner = DialogueRunner(guard_graph, scheduler=scheduler, config=RunnerConfig(typing_delay=0.5))
    runner.start()

    assert runner.is_typing
    assert runner.history == []
    assert runner.current_step.content == "Halt! Who goes there?"

    runner.update(0.25)
    assert runner.is_typing

    runner.update(0.3)
    assert runner.state is RunnerState.DISPLAYING
    assert runner.flags == {"met_guard": True}
    assert len(runner.history) == 1


def test_skip_typing(guard_graph):
    runner = DialogueRunner(guard_graph, config=RunnerConfig(typing_delay=1.0))
    runner.start()

    assert runner.skip_typing()
    assert runner.state is RunnerState.DISPLAYING
    assert runner.scheduler.pending_count == 0
    assert not runner.skip_typing()


def test_advance_is_ignored_while_typing(guard_graph):
    runner = DialogueRunner(guard_graph, config=RunnerConfig(typing_delay=1.0))
    runner.start()

    assert not runner.advance()
    assert runner.current_node_id == "start"


def test_autoplay_continues_to_choices(guard_graph):
    runner = DialogueRunner(guard_graph, config=RunnerConfig(typing_delay=0.2, autoplay=True))
    runner.start()
    runner.update(0.2)

    assert runner.state is RunnerState.AWAITING_CHOICE


def test_close_cancels_pending_typing(guard_graph, event_bus, recorder):
    runner = DialogueRunner(guard_graph, events=event_bus, config=RunnerConfig(typing_delay=0.5))
    runner.start()

    runner.close()
    runner.update(1.0)

    assert runner.is_complete
    assert runner.history == []
    assert runner.flags == {}
    assert runner.scheduler.pending_count == 0
    assert DialogueEvent.DIALOGUE_END not in types_of(recorder)


def test_reset_restores_flags_and_announces_start_again(guard_graph, event_bus, recorder):
    runner = DialogueRunner(guard_graph, events=event_bus, config=INSTANT, initial_flags={"gold": 3})
    runner.start()
    runner.start()
    runner.advance()
    runner.select_choice(1)

    runner.reset()

    assert types_of(recorder).count(DialogueEvent.DIALOGUE_START) == 2
    assert runner.flags == {"gold": 3, "met_guard": True}
    assert [entry.node_id for entry in runner.history] == ["start"]
    assert not runner.is_complete


def test_events_for_a_line(guard_graph, event_bus, recorder):
    runner = DialogueRunner(guard_graph, events=event_bus, config=INSTANT)
    runner.start()

    assert types_of(recorder) == [
        DialogueEvent.DIALOGUE_START,
        DialogueEvent.NODE_ENTER,
        DialogueEvent.FLAGS_CHANGED,
        DialogueEvent.NODE_EXIT,
    ]
    assert recorder[1][1]["node_id"] == "start"
    assert recorder[2][1]["changed"] == ["met_guard"]


def test_dialogue_end_carries_result(guard_graph, event_bus, recorder):
    runner = DialogueRunner(guard_graph, events=event_bus, config=INSTANT)
    runner.start()
    runner.advance()
    runner.select_choice(0)

    end_events = [data for event_type, data in recorder if event_type is DialogueEvent.DIALOGUE_END]
    assert len(end_events) == 1
    assert end_events[0]["result"].flags == {"met_guard": True}


def test_missing_next_node_completes():
    runner = DialogueRunner(graph("g", line("start", "Hi", "nowhere")), config=INSTANT)
    runner.start()

    assert runner.advance()
    assert runner.is_complete


def test_player_node_without_available_choices_completes():
    dialogue = graph("g", {
        "id": "start",
        "type": "PLAYER",
        "choices": [{"id": "c", "text": "Secret", "conditions": [{"flag": "x", "operator": "is_set"}]}],
    })
    runner = DialogueRunner(dialogue, config=INSTANT)
    runner.start()

    assert runner.is_complete


def test_dialogue_flags_become_memory_flags():
    schema = FlagSchema.model_validate({"flags": [
        {"id": "greeted", "type": "dialogue"},
        {"id": "asked", "type": "dialogue"},
    ]})
    dialogue = graph("g", line("start", "Hello", setFlags=["greeted"]))
    runner = DialogueRunner(dialogue, config=INSTANT, flag_schema=schema, initial_flags={"asked": True})
    runner.start()

    assert runner.memory_flags == {"asked", "greeted"}


# Storylets

@pytest.fixture
def side_quest():
    return Storylet(
        id="side",
        dialogue=graph("side", line("s1", "Side line one", "s2"), line("s2", "Side line two"), start="s1"),
    )


def caller(**call_fields):
    return graph(
        "main",
        line("start", "Before", "call"),
        {"id": "call", "type": "STORYLET", "storyletId": "side", **call_fields},
        line("after", "After"),
    )


def test_storylet_push_and_pop(side_quest, event_bus, recorder):
    runner = DialogueRunner(
        caller(nextNodeId="after"), storylets=[side_quest], events=event_bus, config=INSTANT
    )
    runner.start()
    runner.advance()

    assert runner.call_stack_depth == 1
    assert runner.dialogue.id == "side"
    assert runner.current_node_id == "s1"
    assert [entry.content for entry in runner.history] == ["Side line one"]

    runner.advance()

    assert runner.call_stack_depth == 0
    assert runner.dialogue.id == "main"
    assert [entry.content for entry in runner.history] == ["Before", "After"]
    assert DialogueEvent.STORYLET_ENTER in types_of(recorder)
    assert DialogueEvent.STORYLET_EXIT in types_of(recorder)
    assert runner.is_complete


def test_storylet_without_return_completes_session(side_quest):
    runner = DialogueRunner(caller(), storylets={"side": side_quest}, config=INSTANT)
    runner.start()
    runner.advance()
    runner.advance()

    assert runner.is_complete
    assert runner.call_stack_depth == 0
    assert runner.dialogue.id == "main"


def test_reset_inside_storylet_cancels_pending_typing(side_quest):
    runner = DialogueRunner(
        caller(nextNodeId="after"), storylets=[side_quest], config=RunnerConfig(typing_delay=0.5)
    )
    runner.start()
    runner.update(1.0)
    runner.advance()

    assert runner.call_stack_depth == 1
    assert runner.current_node_id == "s1"
    assert runner.is_typing

    runner.reset()
    runner.update(1.0)

    assert runner.call_stack_depth == 0
    assert runner.dialogue.id == "main"
    assert runner.current_node_id == "start"
    assert runner.can_advance
    assert [entry.content for entry in runner.history] == ["Before"]


def test_unresolved_storylet_continues_with_next():
    runner = DialogueRunner(caller(nextNodeId="after"), config=INSTANT)
    runner.start()
    runner.advance()

    assert runner.call_stack_depth == 0
    assert runner.history[-1].content == "After"


def test_storylet_call_target_and_start_node(side_quest):
    dialogue = graph(
        "main",
        {
            "id": "start",
            "type": "DETOUR",
            "storyletCall": {"mode": "DETOUR_RETURN", "targetGraphId": "side", "returnNodeId": "after"},
        },
        line("after", "After"),
    )
    side = Storylet(id="side", dialogue=side_quest.dialogue, start_node_id="s2")
    runner = DialogueRunner(dialogue, storylets=[side], config=INSTANT)
    runner.start()

    assert [entry.content for entry in runner.history] == ["After"]
    assert runner.is_complete
    assert runner.get_result().visited_node_ids == ["start", "s2", "after"]


def test_recursive_storylet_is_bounded():
    looping = graph("loop", {"id": "start", "type": "STORYLET", "storyletId": "loop", "nextNodeId": "end"},
                    line("end", "Done"))
    storylet = Storylet(id="loop", dialogue=looping)
    runner = DialogueRunner(looping, storylets=[storylet], config=RunnerConfig(typing_delay=0, max_call_stack_depth=3))
    entered = []
    runner.events.subscribe(DialogueEvent.STORYLET_ENTER, lambda e: entered.append(e["depth"]), weak=False)
    runner.start()

    assert entered == [1, 2, 3]
    assert runner.is_complete
    assert runner.call_stack_depth == 0
    assert [entry.content for entry in runner.history] == ["Done"]


def test_randomizer_picks_eligible_storylet():
    storylets = [
        Storylet(id="a", dialogue=graph("a", line("start", "From A"))),
        Storylet(id="b", dialogue=graph("b", line("start", "From B"))),
    ]
    dialogue = graph(
        "main",
        {
            "id": "start",
            "type": "RANDOMIZER",
            "nextNodeId": "after",
            "storyletPool": [
                {"storyletId": "a", "weight": 5, "conditions": [{"flag": "never", "operator": "is_set"}]},
                {"storyletId": "b"},
            ],
        },
        line("after", "After"),
    )
    recorded = []

    runner = DialogueRunner(dialogue, storylets=storylets, config=INSTANT, rng=random.Random(3))
    runner.events.subscribe(DialogueEvent.NODE_ENTER, lambda e: recorded.append(e["node_id"]), weak=False)
    runner.start()

    assert runner.get_result().visited_node_ids == ["start", "after"]
    assert recorded == ["start", "start", "after"]
    assert runner.history[-1].content == "After"
    assert runner.is_complete


def test_runaway_loop_is_stopped():
    dialogue = graph("g", {
        "id": "start",
        "type": "CONDITIONAL",
        "conditionalBlocks": [{"id": "b", "type": "else", "content": "again", "nextNodeId": "start"}],
    })
    runner = DialogueRunner(dialogue, config=RunnerConfig(typing_delay=0, max_auto_steps=20))
    runner.start()

    assert runner.is_complete
    assert len(runner.history) == 20
