"""
Process model for the OS Resource Simulator.

Represents a process competing for the CPU and, in deadlock scenarios,
for counted resources.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum


class ProcessState(Enum):
    """Process states in the simulation."""
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    WAITING = "WAITING"
    FINISHED = "FINISHED"


@dataclass
class Process:
    """
    Represents a process in the operating system simulation.

    Attributes:
        pid: Process identifier (unique within a process set)
        name: Display name
        arrival_time: Time unit at which the process becomes ready
        burst_time: Total CPU time the process needs
        priority: Optional priority (lower value = higher priority)
        remaining_time: CPU time still needed (burst_time .. 0)
        waiting_time: Turnaround minus burst, set on completion
        turnaround_time: Completion minus arrival, set on completion
        completion_time: Time unit after the last executed unit
        response_time: First dispatch minus arrival, -1 until first run
        state: Current process state
        max_need: Declared maximum units per resource id
        allocation: Units currently held per resource id
        waiting: Resource ids the process is blocked on
    """
    pid: int
    name: str = ""
    arrival_time: int = 0
    burst_time: int = 1
    priority: Optional[int] = None
    remaining_time: Optional[int] = None
    waiting_time: int = 0
    turnaround_time: int = 0
    completion_time: int = 0
    response_time: int = -1
    state: ProcessState = ProcessState.NEW
    max_need: Dict[int, int] = field(default_factory=dict)
    allocation: Dict[int, int] = field(default_factory=dict)
    waiting: List[int] = field(default_factory=list)

    def __post_init__(self):
        """Default the display name and remaining time."""
        if not self.name:
            self.name = f"P{self.pid}"
        if self.remaining_time is None:
            self.remaining_time = self.burst_time

    @property
    def priority_level(self) -> int:
        """Priority used for ordering; an unset priority counts as 0."""
        return self.priority if self.priority is not None else 0

    def reset(self) -> None:
        """Restore the simulation fields to their pre-run values."""
        self.remaining_time = self.burst_time
        self.waiting_time = 0
        self.turnaround_time = 0
        self.completion_time = 0
        self.response_time = -1
        self.state = ProcessState.NEW

    def complete(self, completion_time: int) -> None:
        """
        Stamp completion and derive turnaround and waiting time.

        Args:
            completion_time: Time unit right after the final executed unit
        """
        self.completion_time = completion_time
        self.turnaround_time = self.completion_time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time
        self.state = ProcessState.FINISHED

    def is_finished(self) -> bool:
        """True once all CPU work is done."""
        return self.remaining_time == 0

    def held(self, type_id: int) -> int:
        """Units of a resource currently held."""
        return self.allocation.get(type_id, 0)

    def need_for(self, type_id: int) -> int:
        """Remaining declared need for a resource (max_need - allocation)."""
        return self.max_need.get(type_id, 0) - self.held(type_id)

    def hold(self, type_id: int, amount: int) -> None:
        """
        Record an acquisition and clear any wait on that resource.

        Implements Hold and Wait: earlier allocations are kept.
        """
        self.allocation[type_id] = self.held(type_id) + amount
        if type_id in self.waiting:
            self.waiting.remove(type_id)
        if not self.waiting and self.state == ProcessState.WAITING:
            self.state = ProcessState.RUNNING

    def wait_for(self, type_id: int) -> None:
        """Block on a resource."""
        if type_id not in self.waiting:
            self.waiting.append(type_id)
        self.state = ProcessState.WAITING

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Process(pid={self.pid}, name={self.name}, "
            f"arrival={self.arrival_time}, burst={self.burst_time}, "
            f"remaining={self.remaining_time}, state={self.state.value})"
        )
