"""
Error taxonomy for the OS Resource Simulator.

InvalidInput is fatal to a run and is raised. The RequestDenied family
describes recoverable Banker's decisions and is returned inside results.
"""


class SimulationError(Exception):
    """Base class for all simulator errors."""
    pass


class InvalidInput(SimulationError, ValueError):
    """Malformed process, resource or matrix definition."""
    pass


class RequestDenied(SimulationError):
    """A resource request the engine refused; state is left unchanged."""
    reason = "denied"


class ExceedsNeed(RequestDenied):
    """Request is larger than the process's remaining declared need."""
    reason = "exceeds_need"


class ExceedsAvailable(RequestDenied):
    """Request is larger than the currently available instances."""
    reason = "exceeds_available"


class UnsafeState(RequestDenied):
    """Granting the request would leave no safe completion order."""
    reason = "unsafe_state"
