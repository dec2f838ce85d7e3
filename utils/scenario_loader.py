"""
Scenario Loader for the OS Resource Simulator.

Loads and validates JSON scenario files for scheduling runs, Banker's
matrices and staged deadlock scenarios.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from models.bankers_state import BankersState
from models.errors import InvalidInput
from models.process import Process
from models.resource import Resource
from models.scenario import DeadlockScenario, DeadlockStep, StepAction


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


def _read_json(file_path: str) -> Dict[str, Any]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario root must be a JSON object")
    return data


def load_process_set(file_path: str) -> Tuple[List[Process], Optional[int]]:
    """
    Load a scheduling process set.

    Format:
        {"quantum": 4,
         "processes": [{"pid": 1, "name": "P1", "arrival_time": 0,
                        "burst_time": 8, "priority": 3}, ...]}

    Returns:
        Tuple of (processes, quantum or None)

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    data = _read_json(file_path)

    if 'processes' not in data:
        raise ScenarioLoadError("Scenario missing 'processes' field")

    processes = [_load_process(proc) for proc in data['processes']]
    quantum = data.get('quantum')
    if quantum is not None and not isinstance(quantum, int):
        raise ScenarioLoadError(f"'quantum' must be an integer (got {quantum!r})")

    return processes, quantum


def _load_process(proc_data: Dict) -> Process:
    """Build one scheduling process, checking required fields."""
    required_fields = ['pid', 'arrival_time', 'burst_time']
    for name in required_fields:
        if name not in proc_data:
            raise ScenarioLoadError(f"Process missing required field: {name}")

    for name in required_fields + ['priority']:
        value = proc_data.get(name)
        if value is not None and not isinstance(value, int):
            raise ScenarioLoadError(
                f"Process {proc_data['pid']}: '{name}' must be an integer (got {value!r})"
            )

    return Process(
        pid=proc_data['pid'],
        name=proc_data.get('name', ''),
        arrival_time=proc_data['arrival_time'],
        burst_time=proc_data['burst_time'],
        priority=proc_data.get('priority')
    )


def load_bankers_state(file_path: str) -> Tuple[BankersState, List[Tuple[int, List[int]]]]:
    """
    Load Banker's matrices and an optional list of requests to replay.

    Format:
        {"allocation": [[...]], "max": [[...]], "available": [...],
         "requests": [{"process": 1, "request": [1, 0, 2]}]}

    Returns:
        Tuple of (state, [(process_index, request), ...])
    """
    data = _read_json(file_path)

    for name in ('allocation', 'max', 'available'):
        if name not in data:
            raise ScenarioLoadError(f"Scenario missing '{name}' field")

    try:
        state = BankersState.from_matrices(
            data['allocation'], data['max'], data['available'], labels=data.get('labels')
        )
    except InvalidInput as e:
        raise ScenarioLoadError(f"Invalid Banker's matrices: {e}")

    requests = []
    for req in data.get('requests', []):
        if 'process' not in req or 'request' not in req:
            raise ScenarioLoadError("Request entry needs 'process' and 'request' fields")
        requests.append((req['process'], list(req['request'])))

    return state, requests


def load_deadlock_scenario(file_path: str) -> DeadlockScenario:
    """
    Load a staged deadlock scenario.

    Format:
        {"name": "...",
         "resources": [{"type_id": 1, "name": "CPU", "total_instances": 2}],
         "processes": [{"pid": 101, "name": "A", "max_need": {"1": 2}}],
         "steps": [{"description": "...", "action": "REQUEST",
                    "process_id": 101, "resource_id": 1, "instances": 1}]}
    """
    data = _read_json(file_path)

    for name in ('resources', 'processes', 'steps'):
        if name not in data:
            raise ScenarioLoadError(f"Scenario missing '{name}' field")

    resources = _load_resources(data['resources'])
    resource_ids = {r.type_id for r in resources}

    processes = []
    for proc in data['processes']:
        if 'pid' not in proc:
            raise ScenarioLoadError("Process missing required field: pid")
        try:
            max_need = {int(k): v for k, v in proc.get('max_need', {}).items()}
        except (TypeError, ValueError):
            raise ScenarioLoadError(f"Process {proc['pid']}: max_need keys must be resource ids")
        bad = [v for v in max_need.values() if not isinstance(v, int) or isinstance(v, bool) or v < 0]
        if bad:
            raise ScenarioLoadError(f"Process {proc['pid']}: max_need values must be non-negative integers")
        unknown = set(max_need) - resource_ids
        if unknown:
            raise ScenarioLoadError(f"Process {proc['pid']}: max_need names unknown resources {sorted(unknown)}")
        processes.append(Process(pid=proc['pid'], name=proc.get('name', ''), max_need=max_need))

    pids = {p.pid for p in processes}
    steps = [_load_step(i, step, pids, resource_ids) for i, step in enumerate(data['steps'], start=1)]

    return DeadlockScenario(
        name=data.get('name', file_path),
        processes=processes,
        resources=resources,
        steps=steps,
        description=data.get('description', '')
    )


def _load_resources(resource_data: List[Dict]) -> List[Resource]:
    """
    Load resource definitions from scenario data.

    Args:
        resource_data: List of resource dictionaries

    Returns:
        List of Resource objects sorted by type_id
    """
    resources = []

    for res in resource_data:
        if 'type_id' not in res:
            raise ScenarioLoadError("Resource missing 'type_id' field")
        if 'total_instances' not in res:
            raise ScenarioLoadError(f"Resource {res['type_id']} missing 'total_instances'")

        try:
            resource = Resource(
                type_id=res['type_id'],
                name=res.get('name', ''),
                total_instances=res['total_instances']
            )
        except InvalidInput as e:
            raise ScenarioLoadError(str(e))
        resources.append(resource)

    return sorted(resources, key=lambda r: r.type_id)


def _load_step(index: int, step: Dict, pids: set, resource_ids: set) -> DeadlockStep:
    """
    Validate and build one scenario step.

    Raises:
        ScenarioLoadError: If the step is invalid
    """
    if 'action' not in step:
        raise ScenarioLoadError(f"Step {index}: missing 'action' field")

    try:
        action = StepAction(str(step['action']).upper())
    except ValueError:
        raise ScenarioLoadError(f"Step {index}: unknown action '{step['action']}'")

    process_id = step.get('process_id')
    resource_id = step.get('resource_id')
    instances = step.get('instances', 1)

    if action != StepAction.CHECK:
        if process_id not in pids:
            raise ScenarioLoadError(f"Step {index}: unknown process_id {process_id}")
        if resource_id not in resource_ids:
            raise ScenarioLoadError(f"Step {index}: unknown resource_id {resource_id}")
        if not isinstance(instances, int) or instances <= 0:
            raise ScenarioLoadError(f"Step {index}: instances must be a positive integer")

    return DeadlockStep(
        step=step.get('step', index),
        description=step.get('description', action.value),
        action=action,
        process_id=process_id,
        resource_id=resource_id,
        instances=instances
    )


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Returns:
        Description string, or empty string if not present
    """
    try:
        return _read_json(file_path).get('description', '')
    except ScenarioLoadError:
        return ''
