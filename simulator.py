#!/usr/bin/env python3
"""
OS Resource Simulator
Main entry point for the simulation system.

Drives CPU scheduling runs, staged deadlock scenarios and Banker's
Algorithm requests, one discrete step at a time.
"""

import argparse
import copy
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from models.bankers_state import BankersState
from models.errors import InvalidInput
from models.process import Process, ProcessState
from models.scenario import DeadlockScenario, DeadlockStep, StepAction, Strategy
from models.timeline import GanttSegment, format_trace
from algorithms.scheduling import (
    ALGORITHM_INFO,
    Algorithm,
    Scheduler,
    TickResult,
    check_starvation,
)
from algorithms.detection import detect_deadlock
from algorithms.avoidance import RequestResult, is_safe_state, request_resources
from analysis.events import EventLog, EventType, SimulationEvent
from analysis.metrics import ScheduleMetrics, compute_metrics, format_metrics_report
from analysis.analyzer import compare_algorithms, generate_comparison_report
from utils.logger import SimulatorLogger
from utils.presets import circular_wait_scenario, classic_bankers_state, default_process_set
from utils.scenario_loader import (
    ScenarioLoadError,
    load_bankers_state,
    load_deadlock_scenario,
    load_process_set,
)


DEFAULT_QUANTUM = 4


@dataclass
class ScheduleReport:
    """Everything a consumer needs to render a scheduling run."""
    algorithm: Algorithm
    quantum: Optional[int]
    trace: List[GanttSegment]
    processes: List[Process]
    metrics: ScheduleMetrics
    warnings: List[str] = field(default_factory=list)
    event_log: EventLog = field(default_factory=EventLog)


class SchedulingSimulation:
    """
    Step-wise scheduling run.

    Each step() advances the engine by one time unit, so a host can drive it
    from a timer, a test loop or a batch job. stop() cancels cooperatively;
    a stopped run reports metrics marked incomplete.
    """

    def __init__(
        self,
        processes: List[Process],
        algorithm: Union[Algorithm, str],
        quantum: Optional[int] = None,
        logger: Optional[SimulatorLogger] = None
    ):
        self.scheduler = Scheduler(processes, algorithm, quantum)
        self.algorithm = self.scheduler.algorithm
        self.quantum = quantum
        self.logger = logger or SimulatorLogger(quiet=True)
        self.event_log = EventLog()
        self.stopped = False

        self.warnings: List[str] = []
        if self.algorithm == Algorithm.PRIORITY:
            self.warnings = check_starvation(self.scheduler.processes)
        for warning in self.warnings:
            self.logger.log(warning, "warning")
            self.event_log.add(SimulationEvent(step=0, event_type=EventType.STARVATION, message=warning))

    @property
    def is_finished(self) -> bool:
        return self.scheduler.is_finished

    @property
    def current_time(self) -> int:
        return self.scheduler.current_time

    def step(self) -> Optional[TickResult]:
        """
        Advance one time unit.

        Returns:
            TickResult, or None once finished or stopped
        """
        if self.stopped:
            return None

        result = self.scheduler.tick()
        if result is None:
            return None

        if result.idle:
            self.logger.log_tick(result.time, None)
            self.event_log.add(SimulationEvent(step=result.time, event_type=EventType.IDLE))
            return result

        process = self._process(result.process_id)
        notes = []

        if result.dispatched:
            notes.append("dispatch")
            self.event_log.add(SimulationEvent(
                step=result.time, event_type=EventType.DISPATCH, process_id=result.process_id
            ))
        if result.preempted_id is not None:
            notes.append(f"{self._process(result.preempted_id).name} preempted")
            self.event_log.add(SimulationEvent(
                step=result.time, event_type=EventType.PREEMPT, process_id=result.preempted_id
            ))
        if result.completed:
            notes.append("completed")
            self.event_log.add(SimulationEvent(
                step=result.time,
                event_type=EventType.COMPLETE,
                process_id=result.process_id,
                message=f"turnaround={process.turnaround_time}, waiting={process.waiting_time}"
            ))

        ready = [p.name for p in self.scheduler.ready_processes() if p.pid != process.pid]
        if ready:
            notes.append("ready: " + " ".join(ready))
        self.logger.log_tick(result.time, process.name, ", ".join(notes))
        return result

    def run(self) -> ScheduleReport:
        """Step until finished (or stopped) and return the report."""
        while self.step() is not None:
            pass
        return self.report()

    def stop(self) -> None:
        """Cancel the run at the current step boundary."""
        self.stopped = True
        running = self.scheduler.running
        holder = running.name if running is not None else "none"
        self.logger.log(f"Simulation stopped at t={self.current_time} (CPU held by {holder})", "debug")

    def metrics(self) -> ScheduleMetrics:
        """Metrics so far; complete=False until every process has finished."""
        return compute_metrics(
            self.scheduler.processes,
            self.scheduler.trace,
            self.scheduler.current_time,
            idle_time=self.scheduler.idle_time,
            context_switches=self.scheduler.context_switches,
            complete=self.is_finished
        )

    def report(self) -> ScheduleReport:
        """Independent snapshot of the run's trace, processes and metrics."""
        return ScheduleReport(
            algorithm=self.algorithm,
            quantum=self.quantum,
            trace=copy.deepcopy(self.scheduler.trace),
            processes=copy.deepcopy(self.scheduler.processes),
            metrics=self.metrics(),
            warnings=list(self.warnings),
            event_log=EventLog(events=list(self.event_log.events))
        )

    def _process(self, pid: int) -> Process:
        return next(p for p in self.scheduler.processes if p.pid == pid)


def run_scheduling(
    processes: List[Process],
    algorithm: Union[Algorithm, str],
    quantum: Optional[int] = None
) -> Tuple[List[GanttSegment], ScheduleMetrics, List[Process]]:
    """
    Run a scheduling simulation to completion.

    Returns:
        Tuple of (Gantt trace, averaged metrics, final process snapshots)

    Raises:
        InvalidInput: If the process set or quantum is malformed
    """
    report = SchedulingSimulation(processes, algorithm, quantum).run()
    return report.trace, report.metrics, report.processes


@dataclass
class DeadlockVerdict:
    """
    Result of a staged deadlock scenario.

    Attributes:
        strategy: DETECTION or AVOIDANCE
        complete: False when the scenario was stopped before its final step
        alert: Deadlock found (DETECTION) or unsafe state (AVOIDANCE)
        cycle: PIDs on the circular wait (DETECTION)
        safe: Banker's verdict (AVOIDANCE only)
        safe_sequence: Safe completion order as PIDs (AVOIDANCE only)
        message: Human-readable summary
        steps_applied: Scenario steps replayed before the verdict
        explanation: Banker's explanation lines (AVOIDANCE only)
    """
    strategy: Strategy
    complete: bool
    alert: bool = False
    cycle: List[int] = field(default_factory=list)
    safe: Optional[bool] = None
    safe_sequence: List[int] = field(default_factory=list)
    message: str = ""
    steps_applied: int = 0
    explanation: List[str] = field(default_factory=list)


def _parse_strategy(strategy: Union[Strategy, str]) -> Strategy:
    if isinstance(strategy, Strategy):
        return strategy
    try:
        return Strategy(str(strategy).lower())
    except ValueError:
        raise InvalidInput(f"Unknown deadlock strategy: {strategy}")


class DeadlockSimulation:
    """
    Replays a staged deadlock scenario one step at a time.

    Each CHECK step records an intermediate verdict in `checks` and the replay
    continues. After the final step the verdict is evaluated with the cycle
    detector (DETECTION) or the Banker's safety check (AVOIDANCE).
    """

    def __init__(
        self,
        scenario: DeadlockScenario,
        strategy: Union[Strategy, str] = Strategy.DETECTION,
        logger: Optional[SimulatorLogger] = None
    ):
        self.strategy = _parse_strategy(strategy)
        self.scenario_name = scenario.name
        self.processes: List[Process] = copy.deepcopy(scenario.processes)
        self.resources = copy.deepcopy(scenario.resources)
        self.steps: List[DeadlockStep] = list(scenario.steps)
        self.logger = logger or SimulatorLogger(quiet=True)
        self.event_log = EventLog()
        self.current_step = 0
        self.stopped = False
        self.verdict: Optional[DeadlockVerdict] = None
        self.checks: List[DeadlockVerdict] = []

        for process in self.processes:
            process.state = ProcessState.RUNNING

    @property
    def is_finished(self) -> bool:
        return self.verdict is not None or self.stopped

    def step(self) -> Optional[DeadlockStep]:
        """
        Apply the next scenario step.

        Returns:
            The applied step, or None once finished or stopped
        """
        if self.is_finished:
            return None

        if self.current_step >= len(self.steps):
            self.verdict = self._evaluate()
            return None

        scenario_step = self.steps[self.current_step]
        self.current_step += 1

        if scenario_step.action in (StepAction.REQUEST, StepAction.ALLOCATE):
            self._acquire(scenario_step)
        elif scenario_step.action == StepAction.WAIT:
            self._block(scenario_step)

        self.logger.log_step(scenario_step.step, scenario_step.description, "debug")

        if self.current_step == len(self.steps):
            self.verdict = self._evaluate()
        elif scenario_step.action == StepAction.CHECK:
            self.checks.append(self._evaluate())

        return scenario_step

    def run(self) -> DeadlockVerdict:
        """Replay every remaining step and return the verdict."""
        while not self.is_finished:
            self.step()
        return self.result()

    def stop(self) -> None:
        """Cancel the replay at the current step boundary."""
        self.stopped = True

    def result(self) -> DeadlockVerdict:
        """The verdict, or an incomplete placeholder if stopped early."""
        if self.verdict is not None:
            return self.verdict
        return DeadlockVerdict(
            strategy=self.strategy,
            complete=False,
            message="Scenario incomplete - no verdict",
            steps_applied=self.current_step
        )

    def _acquire(self, scenario_step: DeadlockStep) -> None:
        process = self._process(scenario_step.process_id)
        resource = self._resource(scenario_step.resource_id)
        amount = scenario_step.instances

        granted = resource.allocate(process.pid, amount)
        if granted:
            process.hold(resource.type_id, amount)
            event_type = EventType.ALLOCATION
        else:
            process.wait_for(resource.type_id)
            event_type = EventType.WAIT

        self.logger.log_request(scenario_step.step, process.name, resource.name, amount, granted)
        self.event_log.add(SimulationEvent(
            step=scenario_step.step,
            event_type=event_type,
            process_id=process.pid,
            resource_type=resource.type_id,
            amount=amount,
            message=scenario_step.description
        ))

    def _block(self, scenario_step: DeadlockStep) -> None:
        process = self._process(scenario_step.process_id)
        resource = self._resource(scenario_step.resource_id)

        process.wait_for(resource.type_id)
        self.logger.log_request(scenario_step.step, process.name, resource.name,
                                scenario_step.instances, False)
        self.event_log.add(SimulationEvent(
            step=scenario_step.step,
            event_type=EventType.WAIT,
            process_id=process.pid,
            resource_type=resource.type_id,
            amount=scenario_step.instances,
            message=scenario_step.description
        ))

    def _evaluate(self) -> DeadlockVerdict:
        step_no = self.steps[self.current_step - 1].step if self.current_step else 0

        if self.strategy == Strategy.DETECTION:
            deadlocked, cycle = detect_deadlock(self.processes, self.resources)
            names = [self._process(pid).name for pid in cycle]
            if deadlocked:
                self.logger.log_deadlock(step_no, names)
                message = "DEADLOCK DETECTED - CIRCULAR WAIT: " + " -> ".join(names)
            else:
                message = "No circular wait - system is deadlock free"
                self.logger.log_step(step_no, message)
            self.event_log.add(SimulationEvent(
                step=step_no,
                event_type=EventType.DEADLOCK if deadlocked else EventType.SAFE,
                message=message
            ))
            return DeadlockVerdict(
                strategy=self.strategy,
                complete=True,
                alert=deadlocked,
                cycle=cycle,
                message=message,
                steps_applied=self.current_step
            )

        state = BankersState.from_processes(self.processes, self.resources)
        explanation: List[str] = []
        safe, order = is_safe_state(state, explanation)
        sequence = [self.processes[i].pid for i in order]
        self.logger.log_safety(step_no, safe, [self.processes[i].name for i in order])
        for line in explanation:
            self.logger.log(line, "debug")

        if safe:
            message = "SAFE SEQUENCE FOUND: " + " -> ".join(str(pid) for pid in sequence)
        else:
            message = "UNSAFE STATE - no safe sequence"
        self.event_log.add(SimulationEvent(
            step=step_no,
            event_type=EventType.SAFE if safe else EventType.UNSAFE,
            message=message
        ))
        return DeadlockVerdict(
            strategy=self.strategy,
            complete=True,
            alert=not safe,
            safe=safe,
            safe_sequence=sequence if safe else [],
            message=message,
            steps_applied=self.current_step,
            explanation=explanation
        )

    def _process(self, pid: int) -> Process:
        process = next((p for p in self.processes if p.pid == pid), None)
        if process is None:
            raise InvalidInput(f"Scenario references unknown process {pid}")
        return process

    def _resource(self, type_id: int):
        resource = next((r for r in self.resources if r.type_id == type_id), None)
        if resource is None:
            raise InvalidInput(f"Scenario references unknown resource {type_id}")
        return resource


def run_deadlock_scenario(
    scenario: DeadlockScenario,
    strategy: Union[Strategy, str] = Strategy.DETECTION,
    logger: Optional[SimulatorLogger] = None
) -> DeadlockVerdict:
    """Replay a staged scenario to the end and return its verdict."""
    return DeadlockSimulation(scenario, strategy, logger).run()


def run_bankers(
    state: BankersState,
    requests: Sequence[Tuple[int, Sequence[int]]],
    logger: Optional[SimulatorLogger] = None
) -> Tuple[BankersState, List[RequestResult]]:
    """
    Replay Banker's requests in order, committing each granted one.

    Returns:
        Tuple of (final state, result per request)
    """
    logger = logger or SimulatorLogger(quiet=True)
    results = []
    for step, (process_index, request) in enumerate(requests, start=1):
        result = request_resources(process_index, request, state)
        status = "GRANTED" if result.granted else f"DENIED ({result.error})"
        logger.log_step(step, f"{state.label(process_index)} requests {list(request)} - {status}")
        for line in result.steps:
            logger.log(f"  {line}", "debug")
        state = result.state
        results.append(result)
    return state, results


def _parse_request(text: str) -> Tuple[int, List[int]]:
    """Parse 'INDEX:a,b,c' into (index, [a, b, c])."""
    try:
        index, values = text.split(":", 1)
        return int(index), [int(v) for v in values.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Request must look like 1:1,0,2 (got '{text}')")


def _run_schedule_mode(args, logger: SimulatorLogger) -> int:
    if args.scenario:
        processes, quantum = load_process_set(args.scenario)
    else:
        processes, quantum = default_process_set(), None
    quantum = args.quantum if args.quantum is not None else (quantum or DEFAULT_QUANTUM)

    if args.compare:
        results = compare_algorithms(processes, quantum=quantum)
        logger.log(generate_comparison_report(results, quantum))
        return 0

    algorithm = Algorithm.parse(args.algorithm)
    title, description = ALGORITHM_INFO[algorithm]
    logger.log(f"\n{'='*60}")
    logger.log(f"SCHEDULING: {title}")
    logger.log(description)
    logger.log(f"{'='*60}")

    report = SchedulingSimulation(processes, algorithm, quantum, logger).run()
    logger.log(f"\nGantt: {format_trace(report.trace)}")
    logger.log(format_metrics_report(report.metrics, report.processes, algorithm.value, args.verbose))
    return 0


def _run_deadlock_mode(args, logger: SimulatorLogger) -> int:
    scenario = load_deadlock_scenario(args.scenario) if args.scenario else circular_wait_scenario()
    logger.log(f"\n{'='*60}")
    logger.log(f"DEADLOCK SCENARIO: {scenario.name} ({args.strategy.upper()})")
    logger.log(f"{'='*60}")

    verdict = run_deadlock_scenario(scenario, args.strategy, logger)
    logger.log(f"\nVerdict: {verdict.message}")
    return 0


def _run_banker_mode(args, logger: SimulatorLogger) -> int:
    if args.scenario:
        state, requests = load_bankers_state(args.scenario)
    else:
        state, requests = classic_bankers_state(), []
    requests = list(requests) + list(args.request or [])

    logger.log(state.display())
    explanation: List[str] = []
    safe, sequence = is_safe_state(state, explanation)
    for line in explanation:
        logger.log(line, "debug")
    logger.log_safety(0, safe, [state.label(i) for i in sequence])

    if requests:
        state, _ = run_bankers(state, requests, logger)
        logger.log(state.display())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description='OS Resource Simulator: CPU scheduling, deadlock detection and Banker\'s Algorithm'
    )
    parser.add_argument(
        '--mode',
        choices=['schedule', 'deadlock', 'banker'],
        required=True,
        help='Engine to run'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        help='Path to scenario JSON file (built-in preset when omitted)'
    )
    parser.add_argument(
        '--algorithm',
        choices=[a.value for a in Algorithm] + [a.name for a in Algorithm if a.name != a.value],
        default='FCFS',
        help='Scheduling algorithm (default: FCFS)'
    )
    parser.add_argument(
        '--quantum',
        type=int,
        default=None,
        help=f'Round Robin time quantum (default: scenario value or {DEFAULT_QUANTUM})'
    )
    parser.add_argument(
        '--compare',
        action='store_true',
        help='Compare all scheduling algorithms on the process set'
    )
    parser.add_argument(
        '--strategy',
        choices=[s.value for s in Strategy],
        default='detection',
        help='Deadlock scenario strategy (default: detection)'
    )
    parser.add_argument(
        '--request',
        type=_parse_request,
        action='append',
        help="Banker's request as INDEX:a,b,c (repeatable)"
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write the log to this file'
    )

    args = parser.parse_args(argv)
    logger = SimulatorLogger(verbose=args.verbose, log_file=args.log_file)

    handlers = {
        'schedule': _run_schedule_mode,
        'deadlock': _run_deadlock_mode,
        'banker': _run_banker_mode,
    }
    try:
        return handlers[args.mode](args, logger)
    except (ScenarioLoadError, InvalidInput) as e:
        logger.log(str(e), "error")
        return 1
    finally:
        logger.close()


if __name__ == '__main__':
    sys.exit(main())
