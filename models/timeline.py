"""
Gantt timeline model for the OS Resource Simulator.
"""

from dataclasses import dataclass
from typing import List


@dataclass
class GanttSegment:
    """
    A contiguous stretch of execution by one process.

    Attributes:
        process_id: PID of the running process
        name: Display name of the process
        start: First time unit of the segment (inclusive)
        duration: Number of consecutive units executed
    """
    process_id: int
    name: str
    start: int
    duration: int

    @property
    def end(self) -> int:
        """Time unit right after the segment (exclusive)."""
        return self.start + self.duration


def extend_trace(trace: List[GanttSegment], process_id: int, name: str, time: int) -> None:
    """
    Record one executed unit, merging with the previous segment when the same
    process ran the unit immediately before.
    """
    if trace:
        last = trace[-1]
        if last.process_id == process_id and last.end == time:
            last.duration += 1
            return
    trace.append(GanttSegment(process_id=process_id, name=name, start=time, duration=1))


def format_trace(trace: List[GanttSegment]) -> str:
    """Render a trace as a one-line text Gantt chart."""
    if not trace:
        return "(empty)"
    return " | ".join(f"{seg.name} [{seg.start}-{seg.end})" for seg in trace)
