"""
Core Data Model Tests

Tests Process, Resource, BankersState, the Gantt timeline helpers and the
scenario loader.
"""

import json
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.bankers_state import BankersState
from models.errors import InvalidInput, SimulationError
from models.process import Process, ProcessState
from models.resource import Resource
from models.scenario import StepAction
from models.timeline import GanttSegment, extend_trace, format_trace
from utils.presets import classic_bankers_state
from utils.scenario_loader import (
    ScenarioLoadError,
    get_scenario_description,
    load_bankers_state,
    load_deadlock_scenario,
    load_process_set,
)

SCENARIOS = project_root / "scenarios"


def test_process_model():
    """Test Process defaults, completion bookkeeping and resource fields."""
    print("\n" + "="*60)
    print("TEST 1: Process Model")
    print("="*60)

    process = Process(pid=7, arrival_time=2, burst_time=5)
    print(f"\nCreated: {process}")
    assert process.name == "P7"
    assert process.remaining_time == 5
    assert process.response_time == -1
    assert process.priority_level == 0, "Unset priority orders as 0"
    assert process.state == ProcessState.NEW

    process.remaining_time = 0
    process.complete(12)
    assert process.is_finished()
    assert process.turnaround_time == 10
    assert process.waiting_time == 5
    assert process.state == ProcessState.FINISHED
    print("  ✓ turnaround = completion - arrival, waiting = turnaround - burst")

    process.reset()
    assert process.remaining_time == 5
    assert process.completion_time == 0
    assert process.response_time == -1
    print("  ✓ reset() restores simulation fields")

    process = Process(pid=1, max_need={1: 2, 2: 1})
    process.wait_for(1)
    assert process.state == ProcessState.WAITING
    process.hold(1, 1)
    assert process.held(1) == 1
    assert process.need_for(1) == 1
    assert process.waiting == []
    assert process.state == ProcessState.RUNNING
    print("  ✓ hold() clears the matching wait")

    print("\n✅ Process Model Tests PASSED")


def test_resource_model():
    """Test Resource allocation and validation."""
    print("\n" + "="*60)
    print("TEST 2: Resource Model")
    print("="*60)

    resource = Resource(type_id=3, total_instances=2)
    assert resource.name == "R3"
    assert resource.available_instances == 2
    assert not resource.is_mutex

    assert resource.allocate(10)
    assert resource.allocate(11)
    assert not resource.allocate(12), "No instances left"
    assert resource.available_instances == 0
    assert sorted(resource.holder_ids()) == [10, 11]
    print("  ✓ Counted allocation")

    resource.deallocate(10)
    assert resource.available_instances == 1
    assert resource.holder_ids() == [11]
    print("  ✓ Release returns instances")

    with pytest.raises(InvalidInput):
        resource.deallocate(10)
    with pytest.raises(InvalidInput):
        resource.allocate(11, 0)
    with pytest.raises(InvalidInput):
        Resource(type_id=1, total_instances=0)
    with pytest.raises(InvalidInput):
        Resource(type_id=1, total_instances=2, available_instances=3)
    assert Resource(type_id=1).is_mutex
    print("  ✓ Out-of-range instance counts rejected")

    print("\n✅ Resource Model Tests PASSED")


def test_error_taxonomy():
    """InvalidInput is both a SimulationError and a ValueError."""
    error = InvalidInput("bad")
    assert isinstance(error, SimulationError)
    assert isinstance(error, ValueError)


def test_gantt_trace_merging():
    """Consecutive units of one process merge into a single segment."""
    print("\n" + "="*60)
    print("TEST 3: Gantt Trace")
    print("="*60)

    trace = []
    extend_trace(trace, 1, "P1", 0)
    extend_trace(trace, 1, "P1", 1)
    extend_trace(trace, 2, "P2", 2)
    extend_trace(trace, 2, "P2", 4)  # gap (idle unit at 3)
    print(f"  Trace: {format_trace(trace)}")

    assert trace == [
        GanttSegment(1, "P1", 0, 2),
        GanttSegment(2, "P2", 2, 1),
        GanttSegment(2, "P2", 4, 1),
    ]
    assert trace[0].end == 2

    print("\n✅ Gantt Trace Tests PASSED")


def test_bankers_state():
    """Test BankersState construction, validation and copying."""
    print("\n" + "="*60)
    print("TEST 4: Banker's State")
    print("="*60)

    state = classic_bankers_state()
    print(state.display())
    assert state.num_processes == 5
    assert state.num_resources == 3
    assert state.need.tolist() == [[7, 4, 3], [1, 2, 2], [6, 0, 0], [0, 1, 1], [4, 3, 1]]
    assert state.label(2) == "P2"

    clone = state.copy()
    clone.available[0] = 99
    assert state.available[0] == 3, "copy() must not alias matrices"
    assert not state.equals(clone)
    assert state.equals(classic_bankers_state())
    print("  ✓ Need derived, copies independent")

    with pytest.raises(InvalidInput, match="allocated more than maximum"):
        BankersState.from_matrices([[2, 0]], [[1, 0]], [0, 0])
    with pytest.raises(InvalidInput):
        BankersState.from_matrices([[1, 0]], [[1, 0, 0]], [0, 0])
    with pytest.raises(InvalidInput):
        BankersState.from_matrices([[1, 0]], [[1, 0]], [0])
    with pytest.raises(InvalidInput):
        BankersState.from_matrices([[-1, 0]], [[1, 0]], [0, 0])
    with pytest.raises(InvalidInput, match="integers only"):
        BankersState.from_matrices([[0.9]], [[1]], [0])
    with pytest.raises(InvalidInput, match="integers only"):
        BankersState.from_matrices([[0]], [["3"]], [0])
    with pytest.raises(InvalidInput, match="integers only"):
        BankersState.from_matrices([[0]], [[1]], [0.5])
    print("  ✓ Integrity errors raised, never clamped")

    assert isinstance(state.to_dict()['need'], list)
    assert np.array_equal(state.need, state.max_demand - state.allocation)

    print("\n✅ Banker's State Tests PASSED")


def test_scenario_loader():
    """Test loading the bundled scenario files."""
    print("\n" + "="*60)
    print("TEST 5: Scenario Loader")
    print("="*60)

    processes, quantum = load_process_set(str(SCENARIOS / "cpu_classic.json"))
    assert quantum == 4
    assert [p.burst_time for p in processes] == [8, 4, 9, 5]
    print(f"  ✓ Loaded {len(processes)} processes")

    state, requests = load_bankers_state(str(SCENARIOS / "banker_classic.json"))
    assert state.equals(classic_bankers_state())
    assert requests[0] == (1, [1, 0, 2])
    print(f"  ✓ Loaded Banker's state with {len(requests)} requests")

    scenario = load_deadlock_scenario(str(SCENARIOS / "deadlock_circular.json"))
    assert scenario.name == "circular_wait"
    assert [s.step for s in scenario.steps] == list(range(1, 10))
    assert scenario.steps[4].action == StepAction.WAIT
    assert scenario.processes[0].max_need == {1: 2, 2: 1, 3: 1, 4: 0}
    print(f"  ✓ Loaded {len(scenario.steps)} scenario steps")

    assert "Classic" in get_scenario_description(str(SCENARIOS / "banker_classic.json"))
    assert get_scenario_description(str(SCENARIOS / "missing.json")) == ""

    print("\n✅ Scenario Loader Tests PASSED")


def test_scenario_loader_errors(tmp_path):
    """Malformed files raise ScenarioLoadError."""
    with pytest.raises(ScenarioLoadError):
        load_process_set(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ScenarioLoadError):
        load_process_set(str(broken))

    no_burst = tmp_path / "no_burst.json"
    no_burst.write_text(json.dumps({"processes": [{"pid": 1, "arrival_time": 0}]}))
    with pytest.raises(ScenarioLoadError, match="burst_time"):
        load_process_set(str(no_burst))

    over_max = tmp_path / "over_max.json"
    over_max.write_text(json.dumps({"allocation": [[2]], "max": [[1]], "available": [0]}))
    with pytest.raises(ScenarioLoadError, match="allocated more than maximum"):
        load_bankers_state(str(over_max))

    bad_step = tmp_path / "bad_step.json"
    bad_step.write_text(json.dumps({
        "resources": [{"type_id": 1, "total_instances": 1}],
        "processes": [{"pid": 1}],
        "steps": [{"action": "REQUEST", "process_id": 1, "resource_id": 9}]
    }))
    with pytest.raises(ScenarioLoadError, match="unknown resource_id"):
        load_deadlock_scenario(str(bad_step))

    bad_key = tmp_path / "bad_key.json"
    bad_key.write_text(json.dumps({
        "resources": [{"type_id": 1, "total_instances": 1}],
        "processes": [{"pid": 1, "max_need": {"cpu": 1}}],
        "steps": []
    }))
    with pytest.raises(ScenarioLoadError, match="max_need keys"):
        load_deadlock_scenario(str(bad_key))

    fractional = tmp_path / "fractional.json"
    fractional.write_text(json.dumps({"allocation": [[0.5]], "max": [[1]], "available": [1]}))
    with pytest.raises(ScenarioLoadError, match="integers only"):
        load_bankers_state(str(fractional))


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, "-v", "-s"]))
