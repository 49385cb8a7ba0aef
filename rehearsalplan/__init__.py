"""Rehearsal date planning for performances with overlapping members."""

from rehearsalplan.config import OptimizerOptions
from rehearsalplan.errors import InvalidInput, NoFeasibleAssignment, SchedulerError
from rehearsalplan.optimizer import optimize

__all__ = [
    "InvalidInput",
    "NoFeasibleAssignment",
    "OptimizerOptions",
    "SchedulerError",
    "optimize",
]
