"""Data models for rehearsalplan."""

from dataclasses import dataclass, field
from enum import Enum


class Availability(Enum):
    """A participant's answer for one date."""

    AVAILABLE = "available"
    MAYBE = "maybe"
    UNAVAILABLE = "unavailable"

    @property
    def attends(self) -> bool:
        """True for answers that count towards a conflict."""
        return self is not Availability.UNAVAILABLE


AVAILABILITY_WEIGHTS: dict[Availability, float] = {
    Availability.AVAILABLE: 1.0,
    Availability.MAYBE: 0.5,
    Availability.UNAVAILABLE: 0.0,
}


@dataclass(frozen=True)
class Performance:
    """A group of participants that rehearses together."""

    id: int
    title: str
    description: str = ""


@dataclass(frozen=True)
class Date:
    """A candidate date slot."""

    id: int
    value: str  # label, e.g. "2025-04-15 15:00-17:00"


@dataclass(frozen=True)
class Response:
    """One participant's answers."""

    name: str
    performances: tuple[int, ...] = ()
    answers: dict[int, str] = field(default_factory=dict, hash=False)
    # answers maps date id -> "available" | "maybe" | "unavailable"


@dataclass(frozen=True)
class Event:
    """Snapshot of an event handed to the optimizer."""

    id: str
    title: str
    dates: tuple[Date, ...] = ()
    performances: tuple[Performance, ...] = ()
    responses: tuple[Response, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class SessionKey:
    """Identity of one rehearsal session of an original performance."""

    original_id: int
    session_index: int


@dataclass
class Context:
    """Dense integer-indexed view of an event."""

    perf_ids: list[int]
    perf_index: dict[int, int]
    perf_titles: list[str]
    date_ids: list[int]
    date_index: dict[int, int]
    date_values: list[str]
    user_names: list[str]
    members_of: list[frozenset[int]]  # u -> performance indices
    avail: list[dict[int, Availability]]  # u -> date index -> answer
    perf_members: list[list[int]]  # p -> participant indices

    @property
    def num_performances(self) -> int:
        return len(self.perf_ids)

    @property
    def num_dates(self) -> int:
        return len(self.date_ids)


@dataclass
class ScoredOption:
    """A (performance, date) pair with its attendance counts."""

    performance_id: int
    date_id: int
    performance_name: str
    date_value: str
    available_count: int = 0
    maybe_count: int = 0
    unavailable_count: int = 0
    total_count: int = 0
    conflict_count: int = 0
    weighted_score: float = 0.0
    conflicting_users: list[str] = field(default_factory=list)


@dataclass
class Metrics:
    """Totals over the assigned options."""

    total_weighted_score: float = 0.0
    total_conflicts: int = 0
    total_available: int = 0
    total_maybe: int = 0
    total_unavailable: int = 0
    performance_count: int = 0
    scheduled_performances: int = 0
    computation_time_ms: float = 0.0


@dataclass
class OptimizationResult:
    """Result of the optimization."""

    assignment: list[ScoredOption]
    options: list[ScoredOption]  # every scored (p, d), sorted best first
    metrics: Metrics
    energy: float = 0.0
    session_count: int = 1


@dataclass
class ConflictReport:
    """Participants with more than one performance who can attend a date."""

    date: Date
    performances: list[Performance]
    conflicting_users: list[str]
