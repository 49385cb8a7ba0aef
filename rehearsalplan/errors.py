"""Exceptions raised by rehearsalplan."""


class SchedulerError(Exception):
    """Base class for all scheduling errors."""


class InvalidInput(SchedulerError, ValueError):
    """The event snapshot or the optimizer options are malformed."""


class NoFeasibleAssignment(SchedulerError):
    """Some performance has no candidate date at all."""
