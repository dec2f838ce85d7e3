"""
Metrics for the OS Resource Simulator.

Averages per-process timing fields of a scheduling run.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import statistics

from models.process import Process
from models.timeline import GanttSegment


@dataclass
class ScheduleMetrics:
    """
    Averaged metrics for a scheduling run.

    Averages cover finished processes only; response time additionally
    skips processes that never ran (response_time < 0). A run that was
    stopped early has complete=False and its averages must not be read as
    final.
    """
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0
    total_time: int = 0
    busy_time: int = 0
    idle_time: int = 0
    context_switches: int = 0
    completed: int = 0
    total_processes: int = 0
    complete: bool = False
    completion_order: List[int] = field(default_factory=list)

    @property
    def cpu_utilization(self) -> float:
        """Busy units / elapsed units × 100."""
        if self.total_time == 0:
            return 0.0
        return (self.busy_time / self.total_time) * 100

    @property
    def throughput(self) -> float:
        """Completed processes per time unit."""
        if self.total_time == 0:
            return 0.0
        return self.completed / self.total_time

    @property
    def status(self) -> str:
        return "complete" if self.complete else "incomplete"


def compute_metrics(
    processes: List[Process],
    trace: List[GanttSegment],
    total_time: int,
    idle_time: int = 0,
    context_switches: int = 0,
    complete: Optional[bool] = None
) -> ScheduleMetrics:
    """
    Compute averaged metrics from final (or partial) process snapshots.

    Args:
        processes: Process snapshots from the scheduler
        trace: Gantt trace of the run
        total_time: Elapsed time units
        idle_time: Units with no process running
        context_switches: Switches between different processes
        complete: Override for the completion flag (defaults to all finished)

    Returns:
        ScheduleMetrics
    """
    finished = [p for p in processes if p.is_finished()]
    responded = [p for p in processes if p.response_time >= 0]

    if complete is None:
        complete = len(finished) == len(processes)

    order = [p.pid for p in sorted(finished, key=lambda p: p.completion_time)]

    return ScheduleMetrics(
        avg_waiting=statistics.mean([p.waiting_time for p in finished]) if finished else 0.0,
        avg_turnaround=statistics.mean([p.turnaround_time for p in finished]) if finished else 0.0,
        avg_response=statistics.mean([p.response_time for p in responded]) if responded else 0.0,
        total_time=total_time,
        busy_time=sum(seg.duration for seg in trace),
        idle_time=idle_time,
        context_switches=context_switches,
        completed=len(finished),
        total_processes=len(processes),
        complete=complete,
        completion_order=order
    )


def format_metrics_report(
    metrics: ScheduleMetrics,
    processes: List[Process],
    algorithm: str = None,
    verbose: bool = False
) -> str:
    """
    Format metrics for display at end of a scheduling run.

    Args:
        metrics: Computed metrics
        processes: Final process snapshots
        algorithm: Algorithm name for the header
        verbose: If True, include metric formulas

    Returns:
        Formatted metrics report string
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append("SCHEDULING METRICS")
    lines.append("="*60)

    if algorithm:
        lines.append(f"Algorithm: {algorithm}")
    lines.append(f"Status: {metrics.status.upper()}")
    if not metrics.complete:
        lines.append("  (run stopped early - averages cover finished processes only)")
    lines.append("")

    lines.append(f"Total Time: {metrics.total_time}")
    lines.append(f"Completed Processes: {metrics.completed}/{metrics.total_processes}")
    lines.append("")

    lines.append("KEY PERFORMANCE METRICS:")
    lines.append("-" * 60)
    lines.append(f"1. Average Waiting Time: {metrics.avg_waiting:.2f}")
    lines.append(f"2. Average Turnaround Time: {metrics.avg_turnaround:.2f}")
    lines.append(f"3. Average Response Time: {metrics.avg_response:.2f}")
    lines.append(f"4. CPU Utilization: {metrics.cpu_utilization:.2f}%")
    lines.append(f"5. Throughput: {metrics.throughput:.4f} processes/unit")
    lines.append(f"6. Context Switches: {metrics.context_switches}")

    lines.append("")
    lines.append("PER-PROCESS SUMMARY:")
    lines.append("-" * 60)
    for p in processes:
        lines.append(
            f"  {p.name:6} | arrival={p.arrival_time:3} burst={p.burst_time:3} | "
            f"completion={p.completion_time:3} turnaround={p.turnaround_time:3} "
            f"waiting={p.waiting_time:3} response={p.response_time:3}"
        )

    if verbose:
        lines.append("")
        lines.append("METRIC FORMULAS:")
        lines.append("-" * 60)
        lines.append("Turnaround = Completion - Arrival")
        lines.append("Waiting = Turnaround - Burst")
        lines.append("Response = First dispatch - Arrival (processes that ran)")
        lines.append("CPU Utilization = Busy units / Total units x 100")

    lines.append("="*60)
    return "\n".join(lines)
