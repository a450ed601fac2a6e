"""
Dialogue runner - walks a dialogue graph under mutable flag state.

The runner is driven by its host: ``start()`` once, then ``update(dt)``
every frame, ``advance()`` when the player continues and
``select_choice(i)`` when they pick an option. Everything the host needs
to display is exposed as properties; notifications go out on the
EventBus as DialogueEvent publications.

Storylets (and detours and randomizer picks) run on a private call
stack. Finishing a storylet pops back to the caller and resumes at the
node recorded when it was entered.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Mapping

from forge.core.events import DialogueEvent, EventBus
from forge.core.scheduler import ScheduledCall, Scheduler
from forge.graph.flags import FlagSchema
from forge.graph.graph import DialogueGraph, Storylet
from forge.graph.nodes import Choice, DialogueNode, FlagValue, NodeType
from forge.runtime.commands import SetCommand, execute_set_command, find_set_commands, strip_set_commands
from forge.runtime.flags import dialogue_flag_ids, is_dialogue_flag, merge_flag_updates
from forge.runtime.processor import ProcessedNode, is_valid_next_node, process_node
from forge.runtime.randomizer import eligible_pool_items, select_weighted
from forge.runtime.variables import VariableManager

logger = logging.getLogger(__name__)


class RunnerConfig:
    """Configuration for a dialogue runner."""

    def __init__(
        self,
        typing_delay: float = 0.5,
        autoplay: bool = False,
        max_call_stack_depth: int = 16,
        max_auto_steps: int = 500,
    ):
        # Seconds a character line "types" before it completes. 0 completes at once.
        self.typing_delay = typing_delay
        # Continue past character lines without waiting for advance()
        self.autoplay = autoplay
        self.max_call_stack_depth = max_call_stack_depth
        # Bound on consecutive transitions that need no player input
        self.max_auto_steps = max_auto_steps


class RunnerState(Enum):
    """State of a dialogue session."""
    IDLE = auto()
    RUNNING = auto()
    TYPING = auto()
    DISPLAYING = auto()
    AWAITING_CHOICE = auto()
    COMPLETE = auto()


@dataclass
class HistoryEntry:
    """One line of the visible transcript."""
    node_id: str
    node_type: NodeType
    content: str
    speaker: str | None = None


@dataclass
class StoryletCallFrame:
    """Suspended caller context while a storylet runs."""
    dialogue: DialogueGraph
    current_node_id: str | None
    history: list[HistoryEntry]
    return_node_id: str | None = None
    storylet_id: str | None = None


@dataclass
class DialogueResult:
    """Snapshot of a session's outcome."""
    flags: dict[str, FlagValue]
    memory_flags: set[str]
    dialogue: DialogueGraph
    visited_node_ids: list[str]
    completed: bool = False
    history: list[HistoryEntry] = field(default_factory=list)


class DialogueRunner:
    """
    Stateful traversal of a dialogue graph.

    Handles:
    - Character lines with a cancellable typing delay
    - Player choices filtered by their conditions
    - Conditional branching
    - Storylet, detour and weighted randomizer calls on a call stack
    - Flag updates through the schema-aware merge rule
    """

    def __init__(
        self,
        dialogue: DialogueGraph,
        *,
        storylets: Mapping[str, Storylet] | Iterable[Storylet] | None = None,
        start_node_id: str | None = None,
        initial_flags: Mapping[str, FlagValue] | None = None,
        initial_memory_flags: Iterable[str] | None = None,
        flag_schema: FlagSchema | None = None,
        events: EventBus | None = None,
        scheduler: Scheduler | None = None,
        config: RunnerConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.events = events or EventBus()
        self.scheduler = scheduler or Scheduler()
        self.config = config or RunnerConfig()
        self.flag_schema = flag_schema
        self._rng = rng or random.Random()

        if storylets is None:
            storylets = {}
        elif not isinstance(storylets, Mapping):
            storylets = {storylet.id: storylet for storylet in storylets}
        self._storylets: dict[str, Storylet] = dict(storylets)

        self._root_dialogue = dialogue
        self._start_node_id = start_node_id or dialogue.start_node_id
        self._initial_flags = dict(initial_flags or {})
        self._initial_memory_flags = set(initial_memory_flags or ())

        self.variables = VariableManager()
        self._dialogue = dialogue
        self._current_node_id: str | None = None
        self._current_step: ProcessedNode | None = None
        self._pending_commands: list[SetCommand] = []
        self._history: list[HistoryEntry] = []
        self._call_stack: list[StoryletCallFrame] = []
        # dict keeps first-visit order
        self._visited: dict[str, None] = {}
        self._typing_call: ScheduledCall | None = None
        self._state = RunnerState.IDLE
        self._start_announced = False
        self._completed = False

        self._reset_state()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._state is RunnerState.COMPLETE

    @property
    def is_typing(self) -> bool:
        return self._state is RunnerState.TYPING

    @property
    def dialogue(self) -> DialogueGraph:
        """The graph currently being walked (a storylet's while one runs)."""
        return self._dialogue

    @property
    def current_node_id(self) -> str | None:
        return self._current_node_id

    @property
    def current_node(self) -> DialogueNode | None:
        return self._dialogue.get_node(self._current_node_id)

    @property
    def current_step(self) -> ProcessedNode | None:
        return self._current_step

    @property
    def available_choices(self) -> list[Choice]:
        if self._state is not RunnerState.AWAITING_CHOICE or self._current_step is None:
            return []
        return list(self._current_step.choices or [])

    @property
    def can_advance(self) -> bool:
        step = self._current_step
        return (
            self._state is RunnerState.DISPLAYING
            and step is not None
            and bool(step.next_node_id)
            and not step.choices
        )

    @property
    def history(self) -> list[HistoryEntry]:
        return list(self._history)

    @property
    def flags(self) -> dict[str, FlagValue]:
        return self.variables.get_all_variables()

    @property
    def memory_flags(self) -> set[str]:
        return self.variables.get_all_memory_flags()

    @property
    def call_stack_depth(self) -> int:
        return len(self._call_stack)

    @property
    def visited_node_ids(self) -> list[str]:
        return list(self._visited)

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin at the configured start node. Ignored once started."""
        if self._state is not RunnerState.IDLE:
            return

        self._state = RunnerState.RUNNING
        if not self._start_announced:
            self._start_announced = True
            self.events.publish(
                DialogueEvent.DIALOGUE_START,
                dialogue_id=self._root_dialogue.id,
                start_node_id=self._start_node_id,
            )

        self._transition(self._start_node_id)

    def update(self, dt: float) -> None:
        """
        Advance time for the typing delay.

        When the scheduler is shared with other systems, update the
        scheduler once per frame instead of calling this.
        """
        self.scheduler.update(dt)

    def advance(self) -> bool:
        """Continue past a finished character line. Returns False when ignored."""
        if not self.can_advance:
            return False
        self._transition(self._current_step.next_node_id)
        return True

    def skip_typing(self) -> bool:
        """Finish the current typing delay immediately."""
        if self._state is not RunnerState.TYPING:
            return False
        self._cancel_typing()
        self._on_typing_complete()
        return True

    def select_choice(self, index: int) -> bool:
        """
        Take the choice at ``index`` in ``available_choices``.

        Returns False (and changes nothing) for an out-of-range index or
        when no choice is being offered.
        """
        choices = self.available_choices
        if not choices:
            logger.warning(f"select_choice({index}) ignored: no choices are being offered")
            return False
        if not 0 <= index < len(choices):
            logger.warning(f"select_choice({index}) ignored: {len(choices)} choice(s) offered")
            return False

        choice = choices[index]
        node_id = self._current_node_id
        self._state = RunnerState.RUNNING

        self.events.publish(
            DialogueEvent.CHOICE_SELECT,
            node_id=node_id,
            choice=choice,
            index=index,
        )
        self.events.publish(DialogueEvent.NODE_EXIT, node_id=node_id, node_type=NodeType.PLAYER)

        changed = self._run_commands(find_set_commands(choice.text))
        changed += self._apply_flag_updates(choice.set_flags or [])
        self._publish_flags(changed)

        self._history.append(HistoryEntry(
            node_id=choice.id,
            node_type=NodeType.PLAYER,
            content=choice.display_text,
        ))

        if choice.next_node_id:
            self._transition(choice.next_node_id)
        else:
            self._transition(self._end_of_branch())
        return True

    def reset(self) -> None:
        """Restart from the beginning with the initial flags."""
        self._cancel_typing()
        self._reset_state()
        self._start_announced = False
        self.start()

    def close(self) -> None:
        """Abort the session. Pending timers are cancelled and nothing resumes."""
        self._cancel_typing()
        self._call_stack.clear()
        self._state = RunnerState.COMPLETE

    def get_result(self) -> DialogueResult:
        return DialogueResult(
            flags=self.variables.get_all_variables(),
            memory_flags=self.variables.get_all_memory_flags(),
            dialogue=self._root_dialogue,
            visited_node_ids=list(self._visited),
            completed=self._completed,
            history=list(self._history),
        )

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _reset_state(self) -> None:
        memory_flags = set(self._initial_memory_flags)
        memory_flags.update(
            flag_id for flag_id in self._initial_flags
            if is_dialogue_flag(flag_id, self.flag_schema)
        )
        self.variables.reset(self._initial_flags, memory_flags)

        self._dialogue = self._root_dialogue
        self._current_node_id = None
        self._current_step = None
        self._pending_commands = []
        self._history = []
        self._call_stack = []
        self._visited = {}
        self._state = RunnerState.IDLE
        self._completed = False

    def _transition(self, node_id: str | None) -> None:
        """Enter ``node_id`` and keep going while no input is needed."""
        steps = 0
        while node_id is not None and self._state is not RunnerState.COMPLETE:
            steps += 1
            if steps > self.config.max_auto_steps:
                logger.warning(
                    f"Stopped after {self.config.max_auto_steps} steps without player input "
                    f"at node '{node_id}'"
                )
                self._complete()
                return
            node_id = self._enter(node_id)

    def _enter(self, node_id: str) -> str | None:
        """Enter a node. Returns the next node to enter, or None to wait."""
        if not is_valid_next_node(node_id, self._dialogue.node_map):
            logger.debug(f"Node '{node_id}' not found in dialogue {self._dialogue.id}")
            return self._end_of_branch()

        node = self._dialogue.get_node(node_id)
        self._current_node_id = node_id
        self._current_step = None
        self._visited[node_id] = None
        self._state = RunnerState.RUNNING

        self.events.publish(
            DialogueEvent.NODE_ENTER,
            node_id=node_id,
            node_type=node.type,
            dialogue_id=self._dialogue.id,
            depth=len(self._call_stack),
        )

        if node.type is NodeType.CHARACTER:
            return self._enter_character(node)
        if node.type is NodeType.PLAYER:
            return self._enter_player(node)
        if node.type is NodeType.CONDITIONAL:
            return self._enter_conditional(node)
        if node.type is NodeType.STORYLET:
            storylet_id = node.storylet_id or (
                node.storylet_call.target_graph_id if node.storylet_call else None
            )
            return self._enter_call(node, storylet_id, node.next_node_id)
        if node.type is NodeType.DETOUR:
            call = node.storylet_call
            storylet_id = call.target_graph_id if call else node.storylet_id
            return_node_id = (call.return_node_id if call else None) or node.next_node_id
            return self._enter_call(node, storylet_id, return_node_id)
        if node.type is NodeType.RANDOMIZER:
            return self._enter_randomizer(node)

        self._exit_node(node)
        return self._end_of_branch()

    def _enter_character(self, node: DialogueNode) -> str | None:
        step = process_node(node, self.variables)
        self._pending_commands = find_set_commands(step.content)
        step.content = strip_set_commands(step.content)
        self._current_step = step

        if self.config.typing_delay > 0:
            self._state = RunnerState.TYPING
            self._typing_call = self.scheduler.call_later(
                self.config.typing_delay, self._on_typing_complete
            )
            return None

        return self._finish_character()

    def _on_typing_complete(self) -> None:
        self._typing_call = None
        if self._state is not RunnerState.TYPING:
            return
        self._transition(self._finish_character())

    def _finish_character(self) -> str | None:
        step = self._current_step
        node = self.current_node

        changed = self._run_commands(self._pending_commands)
        self._pending_commands = []
        changed += self._apply_flag_updates(step.set_flags)
        self._publish_flags(changed)

        self._history.append(HistoryEntry(
            node_id=node.id,
            node_type=node.type,
            content=step.content,
            speaker=step.speaker,
        ))
        self._exit_node(node)

        if not step.next_node_id:
            return self._end_of_branch()

        self._state = RunnerState.DISPLAYING
        if self.config.autoplay:
            return step.next_node_id
        return None

    def _enter_player(self, node: DialogueNode) -> str | None:
        step = process_node(node, self.variables)
        self._current_step = step

        if not step.choices:
            logger.debug(f"Player node '{node.id}' has no available choices")
            self._exit_node(node)
            return self._end_of_branch()

        self._state = RunnerState.AWAITING_CHOICE
        return None

    def _enter_conditional(self, node: DialogueNode) -> str | None:
        step = process_node(node, self.variables)
        self._current_step = step

        if step.block is None:
            self._exit_node(node)
            return self._end_of_branch()

        commands = find_set_commands(step.content)
        step.content = strip_set_commands(step.content)
        changed = self._run_commands(commands)
        changed += self._apply_flag_updates(step.set_flags)
        self._publish_flags(changed)

        self._history.append(HistoryEntry(
            node_id=node.id,
            node_type=NodeType.CHARACTER,
            content=step.content,
            speaker=step.speaker,
        ))
        self._exit_node(node)

        if step.next_node_id:
            return step.next_node_id
        return self._end_of_branch()

    def _enter_call(
        self,
        node: DialogueNode,
        storylet_id: str | None,
        return_node_id: str | None,
    ) -> str | None:
        self._exit_node(node)
        storylet = self._resolve_storylet(storylet_id)
        if storylet is None:
            return node.next_node_id or self._end_of_branch()
        return self._push_storylet(storylet, return_node_id)

    def _enter_randomizer(self, node: DialogueNode) -> str | None:
        self._exit_node(node)
        eligible = eligible_pool_items(node.storylet_pool, self.variables)
        selected = select_weighted(eligible, self._rng)

        storylet = self._resolve_storylet(selected.storylet_id) if selected else None
        if storylet is None:
            return node.next_node_id or self._end_of_branch()

        logger.debug(f"Randomizer '{node.id}' picked storylet '{storylet.id}'")
        return self._push_storylet(storylet, node.next_node_id)

    def _resolve_storylet(self, storylet_id: str | None) -> Storylet | None:
        if not storylet_id:
            return None

        storylet = self._storylets.get(storylet_id)
        if storylet is None or storylet.dialogue is None:
            logger.warning(f"Storylet '{storylet_id}' could not be resolved")
            return None

        if len(self._call_stack) >= self.config.max_call_stack_depth:
            logger.warning(
                f"Storylet '{storylet_id}' skipped: call stack depth "
                f"{self.config.max_call_stack_depth} reached"
            )
            return None

        return storylet

    def _push_storylet(self, storylet: Storylet, return_node_id: str | None) -> str | None:
        self._call_stack.append(StoryletCallFrame(
            dialogue=self._dialogue,
            current_node_id=self._current_node_id,
            history=self._history,
            return_node_id=return_node_id,
            storylet_id=storylet.id,
        ))
        self._dialogue = storylet.dialogue
        self._history = []

        self.events.publish(
            DialogueEvent.STORYLET_ENTER,
            storylet_id=storylet.id,
            return_node_id=return_node_id,
            depth=len(self._call_stack),
        )
        return storylet.entry_node_id

    def _end_of_branch(self) -> str | None:
        """Pop back to the caller, or complete when nothing is suspended."""
        if not self._call_stack:
            self._complete()
            return None

        frame = self._call_stack.pop()
        self._dialogue = frame.dialogue
        self._history = frame.history
        self._current_node_id = frame.current_node_id

        self.events.publish(
            DialogueEvent.STORYLET_EXIT,
            storylet_id=frame.storylet_id,
            return_node_id=frame.return_node_id,
            depth=len(self._call_stack),
        )

        if not frame.return_node_id:
            self._call_stack.clear()
            self._complete()
            return None
        return frame.return_node_id

    def _exit_node(self, node: DialogueNode) -> None:
        self.events.publish(DialogueEvent.NODE_EXIT, node_id=node.id, node_type=node.type)

    def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        self._cancel_typing()
        self._state = RunnerState.COMPLETE
        self.events.publish(DialogueEvent.DIALOGUE_END, result=self.get_result())

    def _cancel_typing(self) -> None:
        if self._typing_call is not None:
            self._typing_call.cancel()
            self._typing_call = None

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    def _run_commands(self, commands: list[SetCommand]) -> list[str]:
        for command in commands:
            execute_set_command(command, self.variables)
        return [command.flag for command in commands]

    def _apply_flag_updates(self, flag_ids: list[str]) -> list[str]:
        if not flag_ids:
            return []

        merged = merge_flag_updates(self.variables.get_all_variables(), flag_ids, self.flag_schema)
        dialogue_flags = dialogue_flag_ids(self.flag_schema)
        for flag_id in flag_ids:
            self.variables.set(flag_id, merged[flag_id])
            if flag_id in dialogue_flags:
                self.variables.add_memory_flag(flag_id)
        return list(flag_ids)

    def _publish_flags(self, changed: list[str]) -> None:
        if changed:
            self.events.publish(
                DialogueEvent.FLAGS_CHANGED,
                changed=changed,
                flags=self.variables.get_all_variables(),
            )
