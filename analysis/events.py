"""
Event Model for the OS Resource Simulator.

Defines event types for tracking scheduling and deadlock-scenario actions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(Enum):
    """Types of events in the simulation."""
    DISPATCH = "dispatch"
    PREEMPT = "preempt"
    COMPLETE = "complete"
    IDLE = "idle"
    STARVATION = "starvation"
    ALLOCATION = "allocation"
    WAIT = "wait"
    DEADLOCK = "deadlock"
    SAFE = "safe"
    UNSAFE = "unsafe"


@dataclass
class SimulationEvent:
    """
    Represents a single event in the simulation.

    Attributes:
        step: Time unit (scheduling) or step number (deadlock scenario)
        event_type: Type of event
        process_id: PID involved in event (-1 for system-wide events)
        resource_type: Resource involved (if applicable)
        amount: Resource amount involved (if applicable)
        message: Human-readable description
    """
    step: int
    event_type: EventType
    process_id: int = -1
    resource_type: Optional[int] = None
    amount: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"Step {self.step}: P{self.process_id}"

        if self.event_type == EventType.DISPATCH:
            return f"{base} dispatched"
        elif self.event_type == EventType.PREEMPT:
            return f"{base} preempted"
        elif self.event_type == EventType.COMPLETE:
            return f"{base} - COMPLETED ({self.message})"
        elif self.event_type == EventType.IDLE:
            return f"Step {self.step}: CPU idle"
        elif self.event_type == EventType.ALLOCATION:
            return f"{base} acquired R{self.resource_type}[{self.amount}]"
        elif self.event_type == EventType.WAIT:
            return f"{base} waiting for R{self.resource_type}[{self.amount}]"
        elif self.event_type == EventType.DEADLOCK:
            return f"Step {self.step}: DEADLOCK DETECTED ({self.message})"
        else:
            return f"Step {self.step}: {self.event_type.value.upper()} - {self.message}"


@dataclass
class EventLog:
    """Collection of simulation events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: SimulationEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_step(self, step: int) -> list:
        """Get all events from a specific step."""
        return [e for e in self.events if e.step == step]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
