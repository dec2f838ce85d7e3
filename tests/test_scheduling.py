"""
Scheduling Engine Tests

Checks each discipline against hand-computed schedules of the default
four-process set (arrivals 0..3, bursts 8, 4, 9, 5).
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.scheduling import Algorithm, Scheduler, check_starvation, run_schedule
from models.errors import InvalidInput
from models.process import Process, ProcessState
from utils.presets import default_process_set


def _segments(trace):
    return [(seg.name, seg.start, seg.end) for seg in trace]


def _avg_waiting(processes):
    return sum(p.waiting_time for p in processes) / len(processes)


def test_fcfs_schedule():
    """FCFS runs in arrival order."""
    print("\n" + "="*60)
    print("TEST 1: FCFS")
    print("="*60)

    trace, final = run_schedule(default_process_set(), Algorithm.FCFS)
    print(f"  Trace: {_segments(trace)}")

    assert _segments(trace) == [("P1", 0, 8), ("P2", 8, 12), ("P3", 12, 21), ("P4", 21, 26)]
    assert [p.completion_time for p in final] == [8, 12, 21, 26]
    assert [p.waiting_time for p in final] == [0, 7, 10, 18]
    assert _avg_waiting(final) == pytest.approx(8.75)
    assert all(p.state == ProcessState.FINISHED for p in final)

    print("\n✅ FCFS Tests PASSED")


def test_sjf_schedule():
    """SJF is non-preemptive and picks the shortest burst at each dispatch."""
    trace, final = run_schedule(default_process_set(), "sjf")

    assert _segments(trace) == [("P1", 0, 8), ("P2", 8, 12), ("P4", 12, 17), ("P3", 17, 26)]
    assert _avg_waiting(final) == pytest.approx(7.75)


def test_srtf_schedule():
    """SRTF preempts whenever a shorter remaining time arrives."""
    trace, final = run_schedule(default_process_set(), Algorithm.SRTF)

    assert _segments(trace) == [
        ("P1", 0, 1), ("P2", 1, 5), ("P4", 5, 10), ("P1", 10, 17), ("P3", 17, 26)
    ]
    assert _avg_waiting(final) == pytest.approx(6.5)
    assert final[1].response_time == 0


def test_round_robin_schedule():
    """RR with quantum 4 rotates through the ready queue."""
    print("\n" + "="*60)
    print("TEST 2: Round Robin (q=4)")
    print("="*60)

    scheduler = Scheduler(default_process_set(), Algorithm.RR, quantum=4)
    trace, final = scheduler.run()
    print(f"  Trace: {_segments(trace)}")

    assert _segments(trace) == [
        ("P1", 0, 4), ("P2", 4, 8), ("P3", 8, 12), ("P4", 12, 16),
        ("P1", 16, 20), ("P3", 20, 24), ("P4", 24, 25), ("P3", 25, 26),
    ]
    assert scheduler.current_time == 26
    assert scheduler.context_switches == 7
    assert [p.completion_time for p in final] == [20, 8, 26, 25]

    print("\n✅ Round Robin Tests PASSED")


def test_round_robin_large_quantum_matches_fcfs():
    """A quantum longer than every burst degenerates to FCFS."""
    rr_trace, _ = run_schedule(default_process_set(), Algorithm.RR, quantum=100)
    fcfs_trace, _ = run_schedule(default_process_set(), Algorithm.FCFS)
    assert _segments(rr_trace) == _segments(fcfs_trace)


def test_priority_schedule():
    """Priority is non-preemptive: P1 keeps the CPU despite P2's higher priority."""
    trace, final = run_schedule(default_process_set(), "Priority")

    assert _segments(trace) == [("P1", 0, 8), ("P2", 8, 12), ("P3", 12, 21), ("P4", 21, 26)]
    assert _avg_waiting(final) == pytest.approx(8.75)


def test_mlfq_uses_fixed_levels():
    """MLFQ reads priority as a fixed queue level."""
    mlfq_trace, _ = run_schedule(default_process_set(), Algorithm.MLFQ)
    priority_trace, _ = run_schedule(default_process_set(), Algorithm.PRIORITY)
    assert _segments(mlfq_trace) == _segments(priority_trace)


def test_schedule_properties():
    """Total executed time equals total burst, segments never overlap."""
    print("\n" + "="*60)
    print("TEST 3: Schedule Properties (all algorithms)")
    print("="*60)

    processes = default_process_set()
    total_burst = sum(p.burst_time for p in processes)

    for algorithm in Algorithm:
        trace, final = run_schedule(processes, algorithm, quantum=3)
        assert sum(seg.duration for seg in trace) == total_burst

        for earlier, later in zip(trace, trace[1:]):
            assert earlier.end <= later.start
            assert earlier.process_id != later.process_id or earlier.end < later.start

        for p in final:
            assert p.remaining_time == 0
            assert p.turnaround_time == p.completion_time - p.arrival_time
            assert p.waiting_time == p.turnaround_time - p.burst_time
            assert p.waiting_time >= 0
            first = min(seg.start for seg in trace if seg.process_id == p.pid)
            assert p.response_time == first - p.arrival_time
        print(f"  ✓ {algorithm.value}")

    assert all(p.remaining_time == p.burst_time for p in processes), "Input must not be mutated"

    print("\n✅ Schedule Property Tests PASSED")


def test_idle_gap():
    """Units with nothing ready are idle and produce no segment."""
    processes = [
        Process(pid=1, arrival_time=2, burst_time=3),
        Process(pid=2, arrival_time=8, burst_time=1),
    ]
    scheduler = Scheduler(processes, Algorithm.FCFS)
    trace, final = scheduler.run()

    assert _segments(trace) == [("P1", 2, 5), ("P2", 8, 9)]
    assert scheduler.idle_time == 5
    assert scheduler.current_time == 9
    assert final[0].response_time == 0


def test_tie_breaks_use_input_order():
    """Equal keys fall back to arrival then input order."""
    processes = [
        Process(pid=5, burst_time=3, priority=1),
        Process(pid=3, burst_time=3, priority=1),
    ]
    for algorithm in (Algorithm.FCFS, Algorithm.SJF, Algorithm.SRTF, Algorithm.PRIORITY):
        trace, _ = run_schedule(processes, algorithm)
        assert [seg.process_id for seg in trace] == [5, 3]


def test_tick_by_tick():
    """tick() advances exactly one unit and reports dispatch and completion."""
    scheduler = Scheduler([Process(pid=1, burst_time=2), Process(pid=2, burst_time=1)], "FCFS")

    first = scheduler.tick()
    assert first.time == 0 and first.process_id == 1 and first.dispatched
    second = scheduler.tick()
    assert second.completed and not second.dispatched
    third = scheduler.tick()
    assert third.process_id == 2 and third.dispatched and third.completed
    assert scheduler.is_finished
    assert scheduler.tick() is None


def test_invalid_process_sets():
    """Malformed input is rejected before any work."""
    with pytest.raises(InvalidInput):
        run_schedule([], Algorithm.FCFS)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1), Process(pid=1)], Algorithm.FCFS)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1, burst_time=0)], Algorithm.FCFS)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1, arrival_time=-1)], Algorithm.FCFS)
    with pytest.raises(InvalidInput):
        run_schedule(default_process_set(), Algorithm.RR)
    with pytest.raises(InvalidInput):
        run_schedule(default_process_set(), Algorithm.RR, quantum=0)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1, burst_time=1.5)], Algorithm.FCFS)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1, arrival_time=0.5)], Algorithm.SRTF)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1, burst_time=True)], Algorithm.FCFS)
    with pytest.raises(InvalidInput):
        run_schedule([Process(pid=1, priority=1.5)], Algorithm.PRIORITY)
    with pytest.raises(InvalidInput):
        run_schedule(default_process_set(), Algorithm.RR, quantum=2.5)
    with pytest.raises(InvalidInput):
        Algorithm.parse("lottery")


def test_queue_accessors():
    """running and ready_processes expose the scheduler between ticks."""
    scheduler = Scheduler(default_process_set(), Algorithm.FCFS)
    assert scheduler.running is None
    scheduler.tick()
    scheduler.tick()
    assert scheduler.running.pid == 1
    assert [p.name for p in scheduler.ready_processes()] == ["P1", "P2"]


def test_algorithm_parse():
    assert Algorithm.parse("rr") == Algorithm.RR
    assert Algorithm.parse("PRIORITY") == Algorithm.PRIORITY
    assert Algorithm.parse(Algorithm.MLFQ) == Algorithm.MLFQ
    assert Algorithm.SRTF.preemptive
    assert not Algorithm.SJF.preemptive


def test_starvation_advisory():
    """Warns only when heavy high-priority work shares the set with low-priority work."""
    assert check_starvation(default_process_set()) == []

    processes = [
        Process(pid=1, burst_time=12, priority=1),
        Process(pid=2, burst_time=10, priority=2),
        Process(pid=3, burst_time=3, priority=5),
    ]
    warnings = check_starvation(processes)
    assert len(warnings) == 1
    assert "P3" in warnings[0]
    assert "STARVATION RISK" in warnings[0]


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, "-v", "-s"]))
