"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the OS Resource Simulator.

Implements the safety check and bounded resource requests.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from models.bankers_state import BankersState, as_int_array
from models.errors import (
    ExceedsAvailable,
    ExceedsNeed,
    InvalidInput,
    RequestDenied,
    UnsafeState,
)


@dataclass
class RequestResult:
    """
    Outcome of a Banker's resource request.

    Attributes:
        granted: Whether the request was committed
        state: Resulting state (the untouched input state on denial)
        safe_sequence: Safe order on grant, partial diagnostic order on denial
        error: The denial reason, None when granted
        steps: Explanation lines
    """
    granted: bool
    state: BankersState
    safe_sequence: List[int] = field(default_factory=list)
    error: Optional[RequestDenied] = None
    steps: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        if self.error is None:
            return "granted"
        return self.error.reason


def is_safe_state(
    state: BankersState,
    trace: Optional[List[str]] = None
) -> Tuple[bool, List[int]]:
    """
    Check if a state is safe using the Banker's safety algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Find the first process i (index order) with Finish[i] == False and
       Need[i] <= Work
    3. If found: Work += Allocation[i], Finish[i] = True, append i, and
       restart the search from index 0
    4. Stop when all processes finish (SAFE) or none qualifies (UNSAFE)

    Time Complexity: O(P²×R)

    Args:
        state: Matrices to check (not modified)
        trace: Optional list that receives explanation lines

    Returns:
        Tuple of (is_safe, sequence). On UNSAFE the sequence is partial and
        only diagnostic.
    """
    def note(line: str) -> None:
        if trace is not None:
            trace.append(line)

    # Work = copy of Available (prevents modification of original)
    work = state.available.copy()
    finish = np.zeros(state.num_processes, dtype=bool)
    safe_sequence: List[int] = []

    note(f"Initial available resources: {work.tolist()}")
    iteration = 0

    found = True
    while found and len(safe_sequence) < state.num_processes:
        found = False
        iteration += 1
        note(f"--- Iteration {iteration} --- work={work.tolist()}")

        for i in range(state.num_processes):
            if finish[i]:
                continue

            if np.all(state.need[i] <= work):
                work += state.allocation[i]
                finish[i] = True
                safe_sequence.append(i)
                found = True
                note(
                    f"{state.label(i)} can be satisfied (need {state.need[i].tolist()}), "
                    f"releases {state.allocation[i].tolist()} -> work={work.tolist()}"
                )
                break  # Restart search from beginning for determinism
            note(f"{state.label(i)} cannot be satisfied (need {state.need[i].tolist()})")

    is_safe = bool(finish.all())
    if is_safe:
        note("System is in SAFE state, sequence: " +
             " -> ".join(state.label(i) for i in safe_sequence))
    else:
        note(f"System is in UNSAFE state: only {len(safe_sequence)}/"
             f"{state.num_processes} processes can complete")

    return is_safe, safe_sequence


def check_safety(
    allocation: Sequence[Sequence[int]],
    max_demand: Sequence[Sequence[int]],
    available: Sequence[int]
) -> Tuple[bool, List[int]]:
    """
    Safety check over plain matrices.

    Raises:
        InvalidInput: On malformed matrices or negative need
    """
    state = BankersState.from_matrices(allocation, max_demand, available)
    return is_safe_state(state)


def request_resources(
    process_index: int,
    request: Sequence[int],
    state: BankersState
) -> RequestResult:
    """
    Handle a resource request using the Banker's Algorithm.

    Steps:
    1. Validate: request <= need (otherwise ExceedsNeed)
    2. Validate: request <= available (otherwise ExceedsAvailable)
    3. Apply the request to a copy of the state
    4. Run the safety algorithm on the copy
    5. If safe: the copy becomes the new state
       If unsafe: the copy is discarded (UnsafeState)

    The input state is never modified.

    Args:
        process_index: Row of the requesting process
        request: Units requested per resource type
        state: Current state

    Returns:
        RequestResult

    Raises:
        InvalidInput: On bad index, wrong length, non-integer or negative
            request entries
    """
    if not isinstance(process_index, (int, np.integer)) or isinstance(process_index, bool):
        raise InvalidInput(f"Process index must be an integer (got {process_index!r})")
    if process_index < 0 or process_index >= state.num_processes:
        raise InvalidInput(f"Process index {process_index} out of range")

    req = as_int_array(request, "request")
    if req.ndim != 1 or req.shape[0] != state.num_resources:
        raise InvalidInput(
            f"Request has {req.size} entries, expected {state.num_resources}"
        )
    if (req < 0).any():
        raise InvalidInput("Request contains negative values")

    label = state.label(process_index)
    steps = [f"{label} requests: {req.tolist()}"]

    need = state.need[process_index]
    if (req > need).any():
        j = int(np.argmax(req > need))
        error = ExceedsNeed(
            f"Request exceeds maximum need for resource {j} "
            f"(requested: {int(req[j])}, need: {int(need[j])})"
        )
        steps.append(str(error))
        return RequestResult(granted=False, state=state, error=error, steps=steps)

    if (req > state.available).any():
        j = int(np.argmax(req > state.available))
        error = ExceedsAvailable(
            f"Request exceeds available resources for resource {j} "
            f"(requested: {int(req[j])}, available: {int(state.available[j])})"
        )
        steps.append(str(error))
        return RequestResult(granted=False, state=state, error=error, steps=steps)

    steps.append("Request is within bounds, simulating allocation...")

    # Copy-on-attempt: only the tentative copy is mutated
    tentative = state.copy()
    tentative.available -= req
    tentative.allocation[process_index] += req
    tentative.need[process_index] -= req

    steps.append(f"  Available: {tentative.available.tolist()}")
    steps.append(f"  {label} allocation: {tentative.allocation[process_index].tolist()}")
    steps.append(f"  {label} need: {tentative.need[process_index].tolist()}")

    is_safe, sequence = is_safe_state(tentative, steps)

    if not is_safe:
        error = UnsafeState(f"Request by {label} would lead to an unsafe state")
        steps.append("Request denied - state left unchanged")
        return RequestResult(granted=False, state=state, safe_sequence=sequence,
                             error=error, steps=steps)

    steps.append("Request granted - system remains safe")
    return RequestResult(granted=True, state=tentative, safe_sequence=sequence, steps=steps)
