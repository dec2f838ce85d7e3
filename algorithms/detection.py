"""
Deadlock Detection Algorithm for the OS Resource Simulator.

Builds a wait-for graph from live process/resource state and searches it for
a circular wait.
"""

from typing import Dict, List, Tuple

from models.errors import InvalidInput
from models.process import Process
from models.resource import Resource


def build_wait_for_graph(
    processes: List[Process],
    resources: List[Resource]
) -> Dict[int, List[int]]:
    """
    Build the wait-for graph.

    Edge A -> B exists when process A waits on a resource that process B
    currently holds. Self edges are skipped. A multi-instance resource
    contributes one edge per holder.

    Args:
        processes: Processes with their waiting-resource sets
        resources: Resources with their current holders

    Returns:
        Adjacency list keyed by PID, in process order

    Raises:
        InvalidInput: If a process waits on an unknown resource
    """
    by_id = {r.type_id: r for r in resources}
    graph: Dict[int, List[int]] = {p.pid: [] for p in processes}

    for process in processes:
        edges = graph[process.pid]
        for type_id in process.waiting:
            resource = by_id.get(type_id)
            if resource is None:
                raise InvalidInput(f"{process.name} waits on unknown resource {type_id}")
            for owner in resource.holder_ids():
                if owner != process.pid and owner not in edges:
                    edges.append(owner)

    return graph


def find_cycle(processes: List[Process], resources: List[Resource]) -> List[int]:
    """
    Find one circular wait using iterative depth-first search.

    Every process is tried as a root so disconnected graphs are covered.
    Fully explored nodes are never revisited, giving O(P + E).

    Returns:
        PIDs forming the cycle in wait order, or an empty list
    """
    graph = build_wait_for_graph(processes, resources)
    visited = set()
    on_stack = set()

    for root in graph:
        if root in visited:
            continue

        visited.add(root)
        on_stack.add(root)
        path = [root]
        stack = [iter(graph[root])]

        while stack:
            advanced = False
            for neighbor in stack[-1]:
                if neighbor in on_stack:
                    # Back edge: the cycle is the path suffix starting at neighbor
                    return path[path.index(neighbor):]
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_stack.add(neighbor)
                    path.append(neighbor)
                    stack.append(iter(graph.get(neighbor, [])))
                    advanced = True
                    break

            if not advanced:
                stack.pop()
                on_stack.discard(path.pop())

    return []


def detect_cycle(processes: List[Process], resources: List[Resource]) -> bool:
    """True if the wait-for graph contains a cycle (deadlock)."""
    return bool(find_cycle(processes, resources))


def detect_deadlock(
    processes: List[Process],
    resources: List[Resource]
) -> Tuple[bool, List[int]]:
    """
    Detect deadlock and report the processes on the circular wait.

    Returns:
        Tuple of (deadlock_exists, PIDs in the cycle)
    """
    cycle = find_cycle(processes, resources)
    return len(cycle) > 0, cycle
