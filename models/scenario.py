"""
Staged deadlock scenario model for the OS Resource Simulator.

A scenario is a fixed, ordered list of request / allocation / wait steps
replayed one at a time against a set of processes and resources.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from models.process import Process
from models.resource import Resource


class StepAction(Enum):
    """Actions a scenario step can perform."""
    REQUEST = "REQUEST"
    ALLOCATE = "ALLOCATE"
    WAIT = "WAIT"
    CHECK = "CHECK"


class Strategy(Enum):
    """How the final verdict of a scenario is reached."""
    DETECTION = "detection"
    AVOIDANCE = "avoidance"


@dataclass
class DeadlockStep:
    """
    One step of a staged scenario.

    Attributes:
        step: 1-based step number
        description: Human-readable description
        action: What the step does
        process_id: Acting process (not used by CHECK)
        resource_id: Target resource (not used by CHECK)
        instances: Units requested
    """
    step: int
    description: str
    action: StepAction
    process_id: Optional[int] = None
    resource_id: Optional[int] = None
    instances: int = 1


@dataclass
class DeadlockScenario:
    """Processes, resources and the ordered steps to replay."""
    name: str
    processes: List[Process] = field(default_factory=list)
    resources: List[Resource] = field(default_factory=list)
    steps: List[DeadlockStep] = field(default_factory=list)
    description: str = ""
