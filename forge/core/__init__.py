"""
Core module.

Exports:
- EventBus, Event, DialogueEvent: Event system
- ForgeModel: Base class for graph data models
- Scheduler, ScheduledCall: Frame-driven delayed callbacks
"""

from forge.core.events import EventBus, Event, DialogueEvent
from forge.core.model import ForgeModel
from forge.core.scheduler import Scheduler, ScheduledCall

__all__ = [
    # Events
    "EventBus",
    "Event",
    "DialogueEvent",
    # Data
    "ForgeModel",
    # Timing
    "Scheduler",
    "ScheduledCall",
]
