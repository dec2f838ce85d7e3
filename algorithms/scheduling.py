"""
CPU Scheduling Engine for the OS Resource Simulator.

Advances a process set one discrete time unit at a time under FCFS, SJF,
SRTF, Round Robin, Priority or simplified MLFQ scheduling and records a
merged Gantt trace.
"""

import copy
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from models.errors import InvalidInput
from models.process import Process, ProcessState
from models.timeline import GanttSegment, extend_trace


# Starvation advisory thresholds for Priority scheduling
HIGH_PRIORITY_CUTOFF = 2
LOW_PRIORITY_FLOOR = 4
STARVATION_BURST_THRESHOLD = 20


class Algorithm(Enum):
    """Supported scheduling disciplines."""
    FCFS = "FCFS"
    SJF = "SJF"
    SRTF = "SRTF"
    RR = "RR"
    PRIORITY = "Priority"
    MLFQ = "MLFQ"

    @classmethod
    def parse(cls, value: Union["Algorithm", str]) -> "Algorithm":
        """
        Resolve an algorithm from an enum member or a case-insensitive name.

        Raises:
            InvalidInput: If the name is not a known algorithm
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        for algorithm in cls:
            if text in (algorithm.name, algorithm.value.upper()):
                return algorithm
        raise InvalidInput(f"Unknown scheduling algorithm: {value}")

    @property
    def preemptive(self) -> bool:
        """True when a running process can lose the CPU before finishing."""
        return self in (Algorithm.SRTF, Algorithm.RR)


ALGORITHM_INFO: Dict[Algorithm, Tuple[str, str]] = {
    Algorithm.FCFS: (
        "First Come First Serve",
        "Processes are executed in order of arrival. Simple but can cause convoy effect.",
    ),
    Algorithm.SJF: (
        "Shortest Job First",
        "Shortest burst time process is selected first and runs to completion.",
    ),
    Algorithm.SRTF: (
        "Shortest Remaining Time First",
        "Preemptive version of SJF. Process with shortest remaining time runs first.",
    ),
    Algorithm.RR: (
        "Round Robin",
        "Each process gets an equal time slice. Good for interactive systems.",
    ),
    Algorithm.PRIORITY: (
        "Priority Scheduling",
        "Lowest priority value runs first, without preemption.",
    ),
    Algorithm.MLFQ: (
        "Multilevel Feedback Queue (simplified)",
        "Priority is read as a fixed queue level; no promotion or demotion.",
    ),
}


@dataclass
class TickResult:
    """Outcome of a single time unit."""
    time: int
    process_id: Optional[int]
    completed: bool = False
    dispatched: bool = False
    preempted_id: Optional[int] = None

    @property
    def idle(self) -> bool:
        return self.process_id is None


def validate_process_set(
    processes: List[Process],
    algorithm: Algorithm,
    quantum: Optional[int]
) -> None:
    """
    Reject malformed input before any simulation work.

    Raises:
        InvalidInput: Empty set, duplicate pid, non-integer or negative
            arrival, non-integer or non-positive burst, non-integer quantum,
            or Round Robin without a positive quantum
    """
    if not processes:
        raise InvalidInput("Process set is empty")

    seen = set()
    for process in processes:
        if process.pid in seen:
            raise InvalidInput(f"Duplicate process id: {process.pid}")
        seen.add(process.pid)
        for name in ('arrival_time', 'burst_time'):
            value = getattr(process, name)
            if not _is_whole(value):
                raise InvalidInput(f"{process.name}: {name} must be an integer (got {value!r})")
        if process.priority is not None and not _is_whole(process.priority):
            raise InvalidInput(f"{process.name}: priority must be an integer (got {process.priority!r})")
        if process.arrival_time < 0:
            raise InvalidInput(f"{process.name}: arrival_time must be >= 0 (got {process.arrival_time})")
        if process.burst_time <= 0:
            raise InvalidInput(f"{process.name}: burst_time must be > 0 (got {process.burst_time})")

    if quantum is not None and not _is_whole(quantum):
        raise InvalidInput(f"quantum must be an integer (got {quantum!r})")
    if algorithm == Algorithm.RR and (quantum is None or quantum <= 0):
        raise InvalidInput(f"Round Robin requires a positive quantum (got {quantum})")


def _is_whole(value) -> bool:
    # bool is an int subclass but never a valid time unit
    return isinstance(value, int) and not isinstance(value, bool)


class Scheduler:
    """
    One scheduling run over private copies of a process set.

    Each call to tick() executes exactly one time unit:
    1. Admit processes whose arrival_time <= current time
    2. Select the process to run (or idle)
    3. Decrement its remaining time, stamp response on first run
    4. Stamp completion, turnaround and waiting time on finish
    5. Extend the Gantt trace
    """

    def __init__(
        self,
        processes: List[Process],
        algorithm: Union[Algorithm, str],
        quantum: Optional[int] = None
    ):
        self.algorithm = Algorithm.parse(algorithm)
        validate_process_set(processes, self.algorithm, quantum)
        self.quantum = quantum

        self.processes: List[Process] = [copy.deepcopy(p) for p in processes]
        for process in self.processes:
            process.reset()

        self.current_time = 0
        self.trace: List[GanttSegment] = []
        self.idle_time = 0
        self.context_switches = 0

        # Indices into self.processes, ordered by (arrival, input order)
        self._arrivals = deque(sorted(
            range(len(self.processes)),
            key=lambda i: (self.processes[i].arrival_time, i)
        ))
        self._ready: List[int] = []
        self._queue: deque = deque()
        self._running: Optional[int] = None
        self._last_run: Optional[int] = None
        self._slice_used = 0

    @property
    def is_finished(self) -> bool:
        return all(p.is_finished() for p in self.processes)

    @property
    def running(self) -> Optional[Process]:
        """Process holding the CPU going into the next tick, if any."""
        if self._running is None:
            return None
        return self.processes[self._running]

    def ready_processes(self) -> List[Process]:
        """Arrived, unfinished processes in admission order."""
        return [self.processes[i] for i in self._ready]

    def tick(self) -> Optional[TickResult]:
        """
        Advance one time unit.

        Returns:
            TickResult for the executed unit, or None if the run is finished
        """
        if self.is_finished:
            return None

        time = self.current_time
        self._admit(time)

        previous = self._running
        index = self._select()

        if index is None:
            self.idle_time += 1
            self.current_time += 1
            return TickResult(time=time, process_id=None)

        process = self.processes[index]
        dispatched = index != previous
        preempted_id = None
        if dispatched and previous is not None and not self.processes[previous].is_finished():
            self.processes[previous].state = ProcessState.READY
            preempted_id = self.processes[previous].pid
        if self._last_run is not None and self._last_run != index:
            self.context_switches += 1
        self._last_run = index

        if process.response_time == -1:
            process.response_time = time - process.arrival_time
        process.state = ProcessState.RUNNING
        process.remaining_time -= 1
        extend_trace(self.trace, process.pid, process.name, time)

        completed = process.remaining_time == 0
        if completed:
            process.complete(time + 1)
            self._ready.remove(index)

        if self._after_unit(index, completed):
            preempted_id = process.pid
        self.current_time += 1

        return TickResult(
            time=time,
            process_id=process.pid,
            completed=completed,
            dispatched=dispatched,
            preempted_id=preempted_id
        )

    def run(self) -> Tuple[List[GanttSegment], List[Process]]:
        """Tick until every process has finished."""
        while self.tick() is not None:
            pass
        return self.trace, self.processes

    def _admit(self, time: int) -> None:
        while self._arrivals and self.processes[self._arrivals[0]].arrival_time <= time:
            index = self._arrivals.popleft()
            self.processes[index].state = ProcessState.READY
            self._ready.append(index)
            if self.algorithm == Algorithm.RR:
                self._queue.append(index)

    def _select(self) -> Optional[int]:
        if self.algorithm == Algorithm.RR:
            return self._select_round_robin()

        if self.algorithm == Algorithm.SRTF:
            self._running = self._pick_min(lambda i, p: (p.remaining_time, p.arrival_time, i))
            return self._running

        # Non-preemptive disciplines keep the CPU until completion
        if self._running is not None:
            return self._running

        self._running = self._pick_min(_SELECTION_KEYS[self.algorithm])
        return self._running

    def _select_round_robin(self) -> Optional[int]:
        if self._running is None and self._queue:
            self._running = self._queue.popleft()
            self._slice_used = 0
        return self._running

    def _pick_min(self, key: Callable[[int, Process], tuple]) -> Optional[int]:
        if not self._ready:
            return None
        return min(self._ready, key=lambda i: key(i, self.processes[i]))

    def _after_unit(self, index: int, completed: bool) -> bool:
        """Returns True when a Round Robin quantum expired on this unit."""
        if completed:
            self._running = None
            self._slice_used = 0
            return False

        if self.algorithm == Algorithm.RR:
            self._slice_used += 1
            if self._slice_used >= self.quantum:
                # Quantum expired: go behind everything admitted so far
                self._queue.append(index)
                self.processes[index].state = ProcessState.READY
                self._running = None
                self._slice_used = 0
                return True
        return False


_SELECTION_KEYS: Dict[Algorithm, Callable[[int, Process], tuple]] = {
    Algorithm.FCFS: lambda i, p: (p.arrival_time, i),
    Algorithm.SJF: lambda i, p: (p.burst_time, p.arrival_time, i),
    Algorithm.PRIORITY: lambda i, p: (p.priority_level, p.arrival_time, i),
    # MLFQ: priority is a fixed queue level, no promotion or demotion
    Algorithm.MLFQ: lambda i, p: (p.priority_level, p.arrival_time, i),
}


def run_schedule(
    processes: List[Process],
    algorithm: Union[Algorithm, str],
    quantum: Optional[int] = None
) -> Tuple[List[GanttSegment], List[Process]]:
    """
    Run a complete schedule.

    Args:
        processes: Process set (not modified)
        algorithm: Scheduling discipline
        quantum: Time slice, required for Round Robin

    Returns:
        Tuple of (Gantt trace, final process snapshots)

    Raises:
        InvalidInput: If the process set or quantum is malformed
    """
    scheduler = Scheduler(processes, algorithm, quantum)
    return scheduler.run()


def check_starvation(processes: List[Process]) -> List[str]:
    """
    Advisory starvation check for Priority scheduling.

    Warns when high-priority work (priority <= 2) totals more than 20 time
    units while low-priority processes (priority >= 4) are present. Does not
    affect scheduling.
    """
    high = [p for p in processes if p.priority_level <= HIGH_PRIORITY_CUTOFF]
    low = [p for p in processes if p.priority_level >= LOW_PRIORITY_FLOOR]

    warnings = []
    if high and low:
        total_high_burst = sum(p.burst_time for p in high)
        if total_high_burst > STARVATION_BURST_THRESHOLD:
            names = ", ".join(p.name for p in low)
            warnings.append(
                f"STARVATION RISK: Low priority processes ({names}) may experience "
                f"indefinite waiting (high priority burst total {total_high_burst} > "
                f"{STARVATION_BURST_THRESHOLD})"
            )
    return warnings
