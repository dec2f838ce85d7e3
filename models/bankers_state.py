"""
Banker's state model for the OS Resource Simulator.

Holds the allocation, maximum-demand, need and available matrices used by
the Banker's safety algorithm.
"""

import numpy as np
from typing import List, Optional, Sequence
from dataclasses import dataclass

from models.errors import InvalidInput
from models.process import Process
from models.resource import Resource


@dataclass
class BankersState:
    """
    Matrix view of a resource system for the Banker's Algorithm.

    Attributes:
        allocation: [P][R] Units of each resource held by each process
        max_demand: [P][R] Declared maximum need of each process
        available: [R] Free units of each resource
        need: [P][R] max_demand - allocation
        labels: Optional display label per process (defaults to P<i>)
    """
    allocation: np.ndarray
    max_demand: np.ndarray
    available: np.ndarray
    need: np.ndarray
    labels: Optional[List[str]] = None

    @classmethod
    def from_matrices(
        cls,
        allocation: Sequence[Sequence[int]],
        max_demand: Sequence[Sequence[int]],
        available: Sequence[int],
        labels: Optional[List[str]] = None
    ) -> "BankersState":
        """
        Build a validated state from plain nested lists.

        Raises:
            InvalidInput: On shape mismatch, non-integer or negative entries,
                or negative need
        """
        alloc = _as_matrix(allocation, "allocation")
        max_d = _as_matrix(max_demand, "max")
        avail = as_int_array(available, "available")

        if alloc.shape != max_d.shape:
            raise InvalidInput(
                f"allocation shape {alloc.shape} does not match max shape {max_d.shape}"
            )
        if avail.ndim != 1 or avail.shape[0] != alloc.shape[1]:
            raise InvalidInput(
                f"available has {avail.size} entries, expected {alloc.shape[1]}"
            )
        if (avail < 0).any():
            raise InvalidInput("available contains negative values")

        need = max_d - alloc
        if (need < 0).any():
            i, j = [int(x) for x in np.argwhere(need < 0)[0]]
            raise InvalidInput(
                f"Invalid state: process {i} allocated more than maximum for resource {j}"
            )

        if labels is not None and len(labels) != alloc.shape[0]:
            raise InvalidInput("labels length does not match process count")

        return cls(allocation=alloc, max_demand=max_d, available=avail, need=need,
                   labels=list(labels) if labels is not None else None)

    @classmethod
    def from_processes(cls, processes: List[Process], resources: List[Resource]) -> "BankersState":
        """Build a state from live process allocations and resource availability."""
        allocation = [[p.held(r.type_id) for r in resources] for p in processes]
        max_demand = [[p.max_need.get(r.type_id, 0) for r in resources] for p in processes]
        available = [r.available_instances for r in resources]
        return cls.from_matrices(allocation, max_demand, available,
                                 labels=[p.name for p in processes])

    @property
    def num_processes(self) -> int:
        """Number of processes (rows)."""
        return self.allocation.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types (columns)."""
        return self.allocation.shape[1]

    def label(self, index: int) -> str:
        if self.labels:
            return self.labels[index]
        return f"P{index}"

    def copy(self) -> "BankersState":
        """Deep copy of all matrices."""
        return BankersState(
            allocation=self.allocation.copy(),
            max_demand=self.max_demand.copy(),
            available=self.available.copy(),
            need=self.need.copy(),
            labels=list(self.labels) if self.labels is not None else None
        )

    def equals(self, other: "BankersState") -> bool:
        """Element-wise equality of all four matrices."""
        return (
            np.array_equal(self.allocation, other.allocation)
            and np.array_equal(self.max_demand, other.max_demand)
            and np.array_equal(self.available, other.available)
            and np.array_equal(self.need, other.need)
        )

    def to_dict(self) -> dict:
        """Plain-list representation."""
        return {
            'allocation': self.allocation.tolist(),
            'max': self.max_demand.tolist(),
            'available': self.available.tolist(),
            'need': self.need.tolist(),
        }

    def display(self) -> str:
        """
        Generate readable string representation of the state.

        Returns:
            Formatted string showing all matrices and the available vector
        """
        output = []
        output.append("\n" + "="*60)
        output.append("BANKER'S ALGORITHM STATE")
        output.append("="*60)

        header = "       " + " ".join([f"R{j:<3}" for j in range(self.num_resources)])
        for title, matrix in (
            ("Allocation Matrix:", self.allocation),
            ("Max Matrix:", self.max_demand),
            ("Need Matrix (Max - Allocation):", self.need),
        ):
            output.append("\n" + title)
            output.append(header)
            for i in range(self.num_processes):
                row = f"  {self.label(i):<5}"
                row += " ".join([f"{matrix[i][j]:3} " for j in range(self.num_resources)])
                output.append(row)

        output.append(f"\nAvailable: {self.available.tolist()}")
        output.append("="*60)
        return "\n".join(output)


def as_int_array(values, name: str) -> np.ndarray:
    """
    Convert to an integer array without coercion.

    Raises:
        InvalidInput: If any entry is not an integer (floats, strings and
            booleans are rejected, never truncated)
    """
    array = np.array(values)
    if array.size == 0:
        return array.astype(int)
    if not np.issubdtype(array.dtype, np.integer):
        raise InvalidInput(f"{name} must contain integers only (got {array.tolist()!r})")
    return array.astype(int)


def _as_matrix(rows: Sequence[Sequence[int]], name: str) -> np.ndarray:
    """Convert nested lists to a 2-D int matrix, rejecting ragged, non-integer or negative input."""
    if len(rows) == 0:
        raise InvalidInput(f"{name} matrix is empty")
    widths = {len(row) for row in rows}
    if len(widths) != 1:
        raise InvalidInput(f"{name} matrix rows have different lengths")
    matrix = as_int_array(rows, f"{name} matrix")
    if (matrix < 0).any():
        raise InvalidInput(f"{name} matrix contains negative values")
    return matrix
