"""Error taxonomy for the orchestration engine.

Dispatch failures are reported as data (an ``error_code`` on the result and
a FAILED task record). The exceptions below are reserved for requests the
engine refuses outright.
"""

# Dispatch error codes
DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"
DEVICE_OFFLINE = "DEVICE_OFFLINE"
NETWORK_UNREACHABLE = "NETWORK_UNREACHABLE"
REMOTE_APPLICATION_ERROR = "REMOTE_APPLICATION_ERROR"


class InvalidSchedule(ValueError):
    """Raised when a recurrence expression is not ``*/N * * * *``."""
    pass


class PlanNotReady(Exception):
    """Raised when a plan with ``ready=False`` is submitted for execution."""
    pass


class JobNotFound(Exception):
    """Raised when a scheduled job id is unknown."""
    pass


class PlanRunNotFound(Exception):
    """Raised when a plan run id is unknown."""
    pass
