"""Greedy seeding and simulated annealing for rehearsal schedules."""

import logging
import math
import time
from collections.abc import Callable

import numpy as np

from rehearsalplan.config import OptimizerOptions
from rehearsalplan.conflicts import group_by_date, recalculate_conflicts
from rehearsalplan.errors import NoFeasibleAssignment
from rehearsalplan.models import Context, Event, Metrics, OptimizationResult, ScoredOption
from rehearsalplan.normalize import build_context
from rehearsalplan.scoring import ScoreTable, score_options, sort_options
from rehearsalplan.sessions import expand_sessions

logger = logging.getLogger(__name__)

# Assignment: performance index -> date index
Assignment = dict[int, int]
IterationCallback = Callable[[int, float, float, float], None]


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Per-call random generator; unseeded runs draw their seed from the monotonic clock."""
    if seed is None:
        seed = time.monotonic_ns()
    return np.random.default_rng(seed)


def candidate_dates(context: Context, options: list[ScoredOption]) -> list[list[int]]:
    """Date indices that have a scored option, per performance index."""
    candidates: list[set[int]] = [set() for _ in range(context.num_performances)]
    for opt in options:
        candidates[context.perf_index[opt.performance_id]].add(context.date_index[opt.date_id])
    return [sorted(dates) for dates in candidates]


def build_initial_assignment(context: Context, options: list[ScoredOption]) -> Assignment:
    """
    Greedy starting point from options sorted best first.

    The first pass gives each performance its best date that no other
    performance holds yet. The second pass places whatever is left on its best
    date, sharing dates if needed. Raises NoFeasibleAssignment if a
    performance has no option at all.
    """
    num_perfs = context.num_performances
    assignment: Assignment = {}
    taken_dates: set[int] = set()

    for opt in options:
        p = context.perf_index[opt.performance_id]
        d = context.date_index[opt.date_id]
        if p in assignment or d in taken_dates:
            continue
        assignment[p] = d
        taken_dates.add(d)
        if len(assignment) == num_perfs:
            break

    if len(assignment) < num_perfs:
        logger.debug(
            "Not enough distinct dates for %d performances, sharing dates for %d",
            num_perfs,
            num_perfs - len(assignment),
        )
        for opt in options:
            p = context.perf_index[opt.performance_id]
            if p in assignment:
                continue
            assignment[p] = context.date_index[opt.date_id]
            if len(assignment) == num_perfs:
                break

    missing = [context.perf_ids[p] for p in range(num_perfs) if p not in assignment]
    if missing:
        raise NoFeasibleAssignment(f"No candidate date for performances {missing}")

    return assignment


def date_energy(
    context: Context,
    scores: ScoreTable,
    d: int,
    perfs: list[int],
    options: OptimizerOptions,
) -> float:
    """
    Energy contributed by the performances placed on date index d.

    Conflicts are counted once per participant on this date, however many of
    their performances share it.
    """
    if not perfs:
        return 0.0

    attendance = math.fsum(float(scores.weighted[p, d]) for p in perfs)

    conflicts = 0
    overlap = 0.0
    if len(perfs) > 1:
        on_date = set(perfs)
        seen: set[int] = set()
        for p in perfs:
            for u in context.perf_members[p]:
                if u in seen:
                    continue
                status = context.avail[u].get(d)
                if status is None or not status.attends:
                    continue
                if len(context.members_of[u] & on_date) > 1:
                    seen.add(u)
        conflicts = len(seen)
        overlap = (len(perfs) - 1) ** options.overlap_exp * options.w_overlap

    return options.w_conflict * conflicts - attendance + overlap


def compute_energy(
    assignment: Assignment,
    context: Context,
    scores: ScoreTable,
    options: OptimizerOptions,
) -> float:
    """Total energy of an assignment; lower is better."""
    by_date = group_by_date(assignment)
    return math.fsum(
        date_energy(context, scores, d, by_date[d], options) for d in sorted(by_date)
    )


def simulated_annealing(
    initial: Assignment,
    context: Context,
    scores: ScoreTable,
    candidates: list[list[int]],
    options: OptimizerOptions,
    rng: np.random.Generator,
    on_iteration: IterationCallback | None = None,
) -> tuple[Assignment, float]:
    """
    Search for a lower-energy assignment by moving one performance at a time.

    Each iteration draws, in this order: a performance, a candidate date for
    it, and (only when the move is uphill) the acceptance roll. Moving a
    performance to its current date is a no-op sample. Returns the best
    assignment seen and its energy.
    """
    current = dict(initial)
    by_date = dict(group_by_date(current))
    energies = {d: date_energy(context, scores, d, perfs, options) for d, perfs in by_date.items()}
    current_energy = math.fsum(energies[d] for d in sorted(energies))

    best = dict(current)
    best_energy = current_energy

    perf_order = sorted(current)
    if not perf_order:
        return best, best_energy

    deadline = None
    if options.time_limit_ms is not None:
        deadline = time.monotonic() + options.time_limit_ms / 1000.0

    temperature = options.t0
    iteration = 0
    accepted = 0
    while iteration < options.max_iter and temperature > options.t_min:
        if deadline is not None and time.monotonic() >= deadline:
            logger.debug("Time limit reached after %d iterations", iteration)
            break

        p = perf_order[int(rng.integers(len(perf_order)))]
        dates = candidates[p]
        if dates:
            new_d = dates[int(rng.integers(len(dates)))]
            old_d = current[p]
            if new_d != old_d:
                old_perfs = [q for q in by_date[old_d] if q != p]
                new_perfs = sorted(by_date.get(new_d, []) + [p])
                old_e = date_energy(context, scores, old_d, old_perfs, options)
                new_e = date_energy(context, scores, new_d, new_perfs, options)
                delta = (old_e + new_e) - (energies[old_d] + energies.get(new_d, 0.0))

                if delta <= 0 or rng.random() < math.exp(-delta / temperature):
                    current[p] = new_d
                    by_date[old_d] = old_perfs
                    by_date[new_d] = new_perfs
                    energies[old_d] = old_e
                    energies[new_d] = new_e
                    current_energy = math.fsum(energies[d] for d in sorted(energies))
                    accepted += 1

                    if current_energy < best_energy:
                        best = dict(current)
                        best_energy = current_energy

        if on_iteration is not None:
            on_iteration(iteration, temperature, current_energy, best_energy)

        temperature *= options.cooling
        iteration += 1

    logger.debug(
        "Annealing finished: %d iterations, %d accepted moves, best energy %.3f",
        iteration,
        accepted,
        best_energy,
    )
    return best, best_energy


def compute_metrics(rows: list[ScoredOption], performance_count: int, elapsed_ns: int) -> Metrics:
    """Sum the assigned rows into the reported metrics."""
    return Metrics(
        total_weighted_score=math.fsum(row.weighted_score for row in rows),
        total_conflicts=sum(row.conflict_count for row in rows),
        total_available=sum(row.available_count for row in rows),
        total_maybe=sum(row.maybe_count for row in rows),
        total_unavailable=sum(row.unavailable_count for row in rows),
        performance_count=performance_count,
        scheduled_performances=len(rows),
        computation_time_ms=elapsed_ns / 1_000_000,
    )


def optimize(event: Event, options: OptimizerOptions | None = None) -> OptimizationResult:
    """
    Assign every performance (or every session of it) to one date.

    Returns an OptimizationResult whose assignment rows are ordered by
    performance id and carry the exact conflicts of the final schedule.
    Raises InvalidInput for malformed events or options and
    NoFeasibleAssignment when there are performances but no dates.
    """
    options = (options or OptimizerOptions()).validate()
    start_ns = time.monotonic_ns()

    context = build_context(expand_sessions(event, options.sessions))
    num_perfs = context.num_performances

    if num_perfs == 0:
        return OptimizationResult(
            assignment=[],
            options=[],
            metrics=compute_metrics([], 0, time.monotonic_ns() - start_ns),
            session_count=options.sessions,
        )
    if context.num_dates == 0:
        raise NoFeasibleAssignment(f"Event {event.id!r} has no candidate dates")

    scores = score_options(context)
    all_options = sort_options(scores.options(context))

    initial = build_initial_assignment(context, all_options)
    best, best_energy = simulated_annealing(
        initial,
        context,
        scores,
        candidate_dates(context, all_options),
        options,
        make_rng(options.seed),
    )

    rows = [scores.option(context, p, best[p]) for p in sorted(best)]
    recalculate_conflicts(context, best, rows)

    metrics = compute_metrics(rows, num_perfs, time.monotonic_ns() - start_ns)
    logger.info(
        "Scheduled %d performances on %d dates (energy %.3f, %d conflicts)",
        metrics.scheduled_performances,
        len(set(best.values())),
        best_energy,
        metrics.total_conflicts,
    )

    return OptimizationResult(
        assignment=rows,
        options=all_options,
        metrics=metrics,
        energy=best_energy,
        session_count=options.sessions,
    )
