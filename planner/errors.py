"""Planner error types"""


class PlannerError(Exception):
    """Base class for errors raised by the planner core"""


class PlannerValidationError(PlannerError, ValueError):
    """Input rejected before any collection was mutated"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class InvalidDurationError(PlannerValidationError):
    """End timestamp earlier than start timestamp"""

    def __init__(self, start, end):
        super().__init__(
            f"End time {end.isoformat()} is earlier than start time {start.isoformat()}",
            field="end_time",
        )
        self.start = start
        self.end = end
