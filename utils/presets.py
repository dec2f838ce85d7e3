"""
Built-in scenarios for the OS Resource Simulator.

Each function returns fresh objects so callers can mutate them freely.
"""

from typing import List

from models.bankers_state import BankersState
from models.process import Process
from models.resource import Resource
from models.scenario import DeadlockScenario, DeadlockStep, StepAction


def default_process_set() -> List[Process]:
    """Four processes arriving at 0..3 with bursts 8, 4, 9, 5."""
    return [
        Process(pid=1, name="P1", arrival_time=0, burst_time=8, priority=3),
        Process(pid=2, name="P2", arrival_time=1, burst_time=4, priority=1),
        Process(pid=3, name="P3", arrival_time=2, burst_time=9, priority=2),
        Process(pid=4, name="P4", arrival_time=3, burst_time=5, priority=4),
    ]


def classic_bankers_state() -> BankersState:
    """Classic 5-process, 3-resource example (safe)."""
    allocation = [
        [0, 1, 0],  # P0
        [2, 0, 0],  # P1
        [3, 0, 2],  # P2
        [2, 1, 1],  # P3
        [0, 0, 2],  # P4
    ]
    max_demand = [
        [7, 5, 3],
        [3, 2, 2],
        [9, 0, 2],
        [2, 2, 2],
        [4, 3, 3],
    ]
    return BankersState.from_matrices(allocation, max_demand, [3, 3, 2])


def unsafe_bankers_state() -> BankersState:
    """3-process, 2-resource state with nothing available (unsafe)."""
    allocation = [[1, 0], [0, 1], [1, 1]]
    max_demand = [[2, 1], [1, 2], [2, 2]]
    return BankersState.from_matrices(allocation, max_demand, [0, 0])


def circular_wait_scenario() -> DeadlockScenario:
    """
    Four processes each grab one resource, then wait on the resource held by
    the next one, closing a circular wait.
    """
    resources = [
        Resource(type_id=1, name="CPU_CORE_1", total_instances=2),
        Resource(type_id=2, name="MEMORY_BANK_A", total_instances=3),
        Resource(type_id=3, name="DISK_DRIVE_1", total_instances=1),
        Resource(type_id=4, name="PRINTER_LASER", total_instances=1),
    ]
    processes = [
        Process(pid=101, name="PROC_ALPHA", max_need={1: 2, 2: 1, 3: 1, 4: 0}),
        Process(pid=102, name="PROC_BETA", max_need={1: 1, 2: 2, 3: 0, 4: 1}),
        Process(pid=103, name="PROC_GAMMA", max_need={1: 1, 2: 1, 3: 1, 4: 0}),
        Process(pid=104, name="PROC_DELTA", max_need={1: 0, 2: 1, 3: 0, 4: 1}),
    ]
    steps = [
        DeadlockStep(1, "ALPHA requests CPU_CORE_1", StepAction.REQUEST, 101, 1),
        DeadlockStep(2, "BETA requests MEMORY_BANK_A", StepAction.REQUEST, 102, 2),
        DeadlockStep(3, "GAMMA requests DISK_DRIVE_1", StepAction.REQUEST, 103, 3),
        DeadlockStep(4, "DELTA requests PRINTER_LASER", StepAction.REQUEST, 104, 4),
        DeadlockStep(5, "ALPHA requests MEMORY_BANK_A (held by BETA)", StepAction.WAIT, 101, 2),
        DeadlockStep(6, "BETA requests DISK_DRIVE_1 (held by GAMMA)", StepAction.WAIT, 102, 3),
        DeadlockStep(7, "GAMMA requests PRINTER_LASER (held by DELTA)", StepAction.WAIT, 103, 4),
        DeadlockStep(8, "DELTA requests CPU_CORE_1 (held by ALPHA)", StepAction.WAIT, 104, 1),
        DeadlockStep(9, "Evaluate system state", StepAction.CHECK),
    ]
    return DeadlockScenario(
        name="circular_wait",
        processes=processes,
        resources=resources,
        steps=steps,
        description="Four-process circular wait over CPU, memory, disk and printer"
    )
