"""
Algorithm Comparison Library for the OS Resource Simulator.

Runs the same process set under several scheduling algorithms and reports
which one does best on each metric.
This is a library module, not a standalone CLI tool.
"""

from typing import List, Optional
from dataclasses import dataclass

from algorithms.scheduling import Algorithm, Scheduler
from analysis.metrics import ScheduleMetrics, compute_metrics
from models.process import Process


@dataclass
class AlgorithmComparisonResult:
    """Metrics of one algorithm on a shared process set."""
    algorithm: Algorithm
    metrics: ScheduleMetrics
    segments: int

    def display(self) -> str:
        """Format results for display."""
        m = self.metrics
        result = f"\nAlgorithm: {self.algorithm.value}\n"
        result += f"  Avg Waiting: {m.avg_waiting:.2f}  Avg Turnaround: {m.avg_turnaround:.2f}  "
        result += f"Avg Response: {m.avg_response:.2f}\n"
        result += f"  Total Time: {m.total_time}  Context Switches: {m.context_switches}  "
        result += f"Gantt Segments: {self.segments}"
        return result


def compare_algorithms(
    processes: List[Process],
    algorithms: Optional[List[Algorithm]] = None,
    quantum: int = 4
) -> List[AlgorithmComparisonResult]:
    """
    Run every algorithm on independent copies of the same process set.

    Args:
        processes: Process set (not modified)
        algorithms: Algorithms to compare (all by default)
        quantum: Round Robin time slice

    Returns:
        One result per algorithm, in the order given
    """
    results = []
    for algorithm in algorithms or list(Algorithm):
        scheduler = Scheduler(processes, algorithm, quantum)
        trace, final = scheduler.run()
        metrics = compute_metrics(
            final,
            trace,
            scheduler.current_time,
            idle_time=scheduler.idle_time,
            context_switches=scheduler.context_switches
        )
        results.append(AlgorithmComparisonResult(
            algorithm=scheduler.algorithm,
            metrics=metrics,
            segments=len(trace)
        ))
    return results


def generate_comparison_report(results: List[AlgorithmComparisonResult], quantum: int) -> str:
    """
    Generate formatted comparison report.

    Args:
        results: Comparison results
        quantum: Round Robin quantum used

    Returns:
        Formatted string report
    """
    report = "\n" + "="*70 + "\n"
    report += "ALGORITHM COMPARISON REPORT\n"
    report += "="*70 + "\n"
    report += f"Round Robin quantum: {quantum}\n"
    report += "="*70 + "\n"

    for result in results:
        report += result.display()
        report += "\n" + "-"*70

    report += "\n\nKEY INSIGHTS:\n"
    report += "-"*70 + "\n"

    def format_best(metric_name: str, key_func, format_func) -> str:
        """Format the lowest value of a metric, handling ties. Empty if all tied."""
        target_value = min(key_func(r) for r in results)
        winners = [r for r in results if key_func(r) == target_value]

        if len(winners) == len(results):
            return ""

        names = ", ".join(w.algorithm.value for w in winners)
        if len(winners) == 1:
            return f"  {metric_name}: {names} ({format_func(target_value)})\n"
        return f"  {metric_name}: {names} (tie at {format_func(target_value)})\n"

    if len(results) > 1:
        insights = [
            format_best("Lowest Average Waiting Time", lambda r: r.metrics.avg_waiting,
                        lambda v: f"{v:.2f}"),
            format_best("Lowest Average Turnaround Time", lambda r: r.metrics.avg_turnaround,
                        lambda v: f"{v:.2f}"),
            format_best("Lowest Average Response Time", lambda r: r.metrics.avg_response,
                        lambda v: f"{v:.2f}"),
            format_best("Fewest Context Switches", lambda r: r.metrics.context_switches,
                        lambda v: f"{v}"),
        ]
        insights = [i for i in insights if i]

        if insights:
            for insight in insights:
                report += insight
        else:
            report += "  All algorithms showed identical performance.\n"

    report += "\n" + "="*70 + "\n"
    return report
