"""
Frame-driven scheduler for delayed callbacks.

The host calls ``update(dt)`` once per frame (or tick). Callbacks whose
delay has elapsed run in the order they became due. Every scheduled call
returns a handle that can be cancelled until it fires.
"""

from __future__ import annotations

from typing import Any, Callable


class ScheduledCall:
    """Handle for a pending callback."""

    def __init__(self, due: float, callback: Callable[..., Any], args: tuple, order: int):
        self.due = due
        self.callback = callback
        self.args = args
        self.order = order
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """
    Runs callbacks after a delay measured in accumulated ``dt`` seconds.

    Usage:
        scheduler = Scheduler()
        call = scheduler.call_later(0.5, finish_typing)
        ...
        scheduler.update(dt)   # each frame
        call.cancel()          # on teardown
    """

    def __init__(self):
        self._time = 0.0
        self._calls: list[ScheduledCall] = []
        self._counter = 0

    @property
    def time(self) -> float:
        return self._time

    @property
    def pending_count(self) -> int:
        return sum(1 for call in self._calls if call.pending)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledCall:
        """Schedule ``callback(*args)`` to run ``delay`` seconds from now."""
        call = ScheduledCall(self._time + max(delay, 0.0), callback, args, self._counter)
        self._counter += 1
        self._calls.append(call)
        return call

    def update(self, dt: float) -> None:
        """Advance the clock and run every callback that became due."""
        self._time += dt

        due = sorted(
            (call for call in self._calls if call.pending and call.due <= self._time),
            key=lambda call: (call.due, call.order),
        )
        for call in due:
            # An earlier callback may have cancelled this one
            if not call.pending:
                continue
            call.fired = True
            call.callback(*call.args)

        self._calls = [call for call in self._calls if call.pending]

    def cancel_all(self) -> None:
        for call in self._calls:
            call.cancel()
        self._calls.clear()
