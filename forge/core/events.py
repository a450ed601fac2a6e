"""
Typed event bus for dialogue notifications.

Uses Enums for event types so hosts subscribe without magic strings.
Handlers are fire-and-forget: the runner never waits on them and a
failing handler never interrupts a dialogue.

Usage:
    bus = EventBus()
    bus.subscribe(DialogueEvent.NODE_ENTER, on_node_enter)
    bus.publish(DialogueEvent.NODE_ENTER, node_id="start")
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class DialogueEvent(Enum):
    """Notifications published by a running dialogue."""
    # Session
    DIALOGUE_START = auto()
    DIALOGUE_END = auto()

    # Traversal
    NODE_ENTER = auto()
    NODE_EXIT = auto()
    CHOICE_SELECT = auto()

    # State
    FLAGS_CHANGED = auto()

    # Call stack
    STORYLET_ENTER = auto()
    STORYLET_EXIT = auto()


@dataclass
class Event:
    """A published notification: its type, keyword payload and consumed mark."""
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Stop lower-priority handlers from seeing this event."""
        self.consumed = True

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class _Subscription:
    priority: int
    target: Any
    once: bool

    def resolve(self) -> EventHandler | None:
        """The live handler, or None once a weakly held owner is gone."""
        if isinstance(self.target, (ref, WeakMethod)):
            return self.target()
        return self.target


class EventBus:
    """
    Publish/subscribe hub for dialogue notifications.

    Handlers run highest priority first, in subscription order within a
    priority. They may be held weakly, removed after one call, or stop
    delivery by consuming the event. Events published from inside a
    handler are delivered after the current dispatch finishes.
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._pending: deque[Event] = deque()
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        if weak:
            target = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            target = handler

        subscriptions = self._subscriptions.setdefault(event_type, [])
        position = next(
            (i for i, sub in enumerate(subscriptions) if priority > sub.priority),
            len(subscriptions),
        )
        subscriptions.insert(position, _Subscription(priority, target, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._subscriptions.get(event_type)
        if subscriptions is not None:
            subscriptions[:] = [sub for sub in subscriptions if sub.resolve() != handler]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """Deliver ``event_type`` with ``data`` as its payload and return the event."""
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._pending.append(event)
        else:
            self._deliver(event)
            while self._pending:
                self._deliver(self._pending.popleft())
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop all handlers, or only those for ``event_type``."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def handler_count(self, event_type: Enum) -> int:
        return len(self._subscriptions.get(event_type, []))

    def _deliver(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if not subscriptions:
            return

        spent = []
        self._dispatching = True
        try:
            for sub in list(subscriptions):
                handler = sub.resolve()
                if handler is None:
                    spent.append(sub)
                    continue

                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Handler for {event.type.name} failed")

                if sub.once:
                    spent.append(sub)
                if event.consumed:
                    break
        finally:
            self._dispatching = False

        subscriptions[:] = [sub for sub in subscriptions if sub not in spent]
