"""
Resource model for the OS Resource Simulator.

Represents a resource type with one or more interchangeable instances.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.errors import InvalidInput


@dataclass
class Resource:
    """
    Represents a resource type in the operating system simulation.

    A single-instance resource behaves as a mutex, more instances make it a
    counted semaphore.

    Attributes:
        type_id: Resource identifier
        name: Display name
        total_instances: Total number of instances
        available_instances: Currently unallocated instances
        holders: Units held per process id

    Invariant:
        0 <= available_instances <= total_instances
    """
    type_id: int
    name: str = ""
    total_instances: int = 1
    available_instances: Optional[int] = None
    holders: Dict[int, int] = field(default_factory=dict)

    def __post_init__(self):
        """Validate resource state."""
        if not self.name:
            self.name = f"R{self.type_id}"
        if self.available_instances is None:
            self.available_instances = self.total_instances - sum(self.holders.values())
        if self.total_instances < 1:
            raise InvalidInput(f"Resource {self.type_id}: total_instances must be at least 1")
        if self.available_instances < 0:
            raise InvalidInput(f"Resource {self.type_id}: available_instances cannot be negative")
        if self.available_instances > self.total_instances:
            raise InvalidInput(
                f"Resource {self.type_id}: available ({self.available_instances}) "
                f"exceeds total ({self.total_instances})"
            )

    @property
    def is_mutex(self) -> bool:
        return self.total_instances == 1

    def holder_ids(self) -> List[int]:
        """Process ids currently holding at least one instance."""
        return [pid for pid, units in self.holders.items() if units > 0]

    def allocate(self, pid: int, amount: int = 1) -> bool:
        """
        Allocate instances to a process if available.

        Args:
            pid: Process receiving the instances
            amount: Number of instances to allocate

        Returns:
            True if allocation successful, False if insufficient instances
        """
        if amount <= 0:
            raise InvalidInput(f"Resource {self.type_id}: allocation amount must be positive")
        if amount > self.available_instances:
            return False
        self.available_instances -= amount
        self.holders[pid] = self.holders.get(pid, 0) + amount
        return True

    def deallocate(self, pid: int, amount: int = 1) -> None:
        """
        Release instances held by a process.

        Raises:
            InvalidInput: If the process holds fewer instances than released
        """
        held = self.holders.get(pid, 0)
        if amount <= 0 or amount > held:
            raise InvalidInput(
                f"Resource {self.type_id}: P{pid} cannot release {amount} "
                f"(holding {held})"
            )
        self.holders[pid] = held - amount
        if self.holders[pid] == 0:
            del self.holders[pid]
        self.available_instances += amount
