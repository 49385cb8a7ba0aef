"""Option scoring for rehearsalplan."""

from dataclasses import dataclass

import numpy as np

from rehearsalplan.models import AVAILABILITY_WEIGHTS, Availability, Context, ScoredOption


@dataclass
class ScoreTable:
    """Per-(performance, date) counts, indexed [p, d]."""

    available: np.ndarray
    maybe: np.ndarray
    unavailable: np.ndarray
    weighted: np.ndarray
    # Provisional conflicts: multi-performance members who can attend.
    # Upper bound on the real conflicts, only used to rank options.
    provisional_conflicts: list[list[list[int]]]

    def option(self, context: Context, p: int, d: int) -> ScoredOption:
        """Build the ScoredOption for indices (p, d)."""
        users = self.provisional_conflicts[p][d]
        return ScoredOption(
            performance_id=context.perf_ids[p],
            date_id=context.date_ids[d],
            performance_name=context.perf_titles[p],
            date_value=context.date_values[d],
            available_count=int(self.available[p, d]),
            maybe_count=int(self.maybe[p, d]),
            unavailable_count=int(self.unavailable[p, d]),
            total_count=int(self.available[p, d] + self.maybe[p, d] + self.unavailable[p, d]),
            conflict_count=len(users),
            weighted_score=float(self.weighted[p, d]),
            conflicting_users=sorted(context.user_names[u] for u in users),
        )

    def options(self, context: Context) -> list[ScoredOption]:
        """Flatten the table into one ScoredOption per (p, d)."""
        num_perfs, num_dates = self.weighted.shape
        return [self.option(context, p, d) for p in range(num_perfs) for d in range(num_dates)]


def score_options(context: Context) -> ScoreTable:
    """
    Count available, maybe and unavailable members for every (performance, date).

    Walks each (participant, membership) pair once and only visits the dates
    the participant answered. Dates without an answer contribute nothing.
    """
    shape = (context.num_performances, context.num_dates)
    available = np.zeros(shape, dtype=np.int64)
    maybe = np.zeros(shape, dtype=np.int64)
    unavailable = np.zeros(shape, dtype=np.int64)
    weighted = np.zeros(shape, dtype=np.float64)
    provisional: list[list[list[int]]] = [
        [[] for _ in range(context.num_dates)] for _ in range(context.num_performances)
    ]

    for p, members in enumerate(context.perf_members):
        for u in members:
            has_multiple = len(context.members_of[u]) > 1
            for d, status in context.avail[u].items():
                if status is Availability.AVAILABLE:
                    available[p, d] += 1
                elif status is Availability.MAYBE:
                    maybe[p, d] += 1
                else:
                    unavailable[p, d] += 1
                weighted[p, d] += AVAILABILITY_WEIGHTS[status]

                if has_multiple and status.attends:
                    provisional[p][d].append(u)

    return ScoreTable(
        available=available,
        maybe=maybe,
        unavailable=unavailable,
        weighted=weighted,
        provisional_conflicts=provisional,
    )


def option_sort_key(option: ScoredOption) -> tuple:
    """Best options first; ties fall back to (performance id, date id)."""
    return (
        -option.weighted_score,
        option.conflict_count,
        -option.available_count,
        -option.maybe_count,
        option.performance_id,
        option.date_id,
    )


def sort_options(options: list[ScoredOption]) -> list[ScoredOption]:
    """Return the options sorted best first."""
    return sorted(options, key=option_sort_key)
