"""Conflict detection for rehearsalplan."""

from collections import defaultdict

from rehearsalplan.errors import InvalidInput
from rehearsalplan.models import ConflictReport, Context, Event, ScoredOption
from rehearsalplan.normalize import build_context


def group_by_date(assignment: dict[int, int]) -> dict[int, list[int]]:
    """Map date index -> performance indices assigned to it, in index order."""
    by_date: dict[int, list[int]] = defaultdict(list)
    for p in sorted(assignment):
        by_date[assignment[p]].append(p)
    return by_date


def conflicting_users(context: Context, assignment: dict[int, int], p: int) -> list[int]:
    """
    Members of performance p who also have another performance on p's date.

    Only members who answered available or maybe for that date count.
    """
    d = assignment[p]
    others = [q for q, dq in assignment.items() if dq == d and q != p]
    if not others:
        return []

    users = []
    for u in context.perf_members[p]:
        status = context.avail[u].get(d)
        if status is None or not status.attends:
            continue
        if any(q in context.members_of[u] for q in others):
            users.append(u)
    return users


def recalculate_conflicts(
    context: Context,
    assignment: dict[int, int],
    rows: list[ScoredOption],
) -> list[ScoredOption]:
    """
    Overwrite conflict_count and conflicting_users on the assigned rows.

    The scorer only knows which members could clash; this recomputes the
    exact set against the final assignment. Rows are matched by id.
    """
    by_ids = {(row.performance_id, row.date_id): row for row in rows}
    for p, d in assignment.items():
        row = by_ids[(context.perf_ids[p], context.date_ids[d])]
        users = conflicting_users(context, assignment, p)
        row.conflicting_users = sorted(context.user_names[u] for u in users)
        row.conflict_count = len(users)
    return rows


def analyze_conflicts(event: Event, date_ids: list[int] | None = None) -> list[ConflictReport]:
    """
    Report, per date, the participants who could be double-booked.

    A participant is listed for a date when they answered available or maybe
    and belong to more than one performance. Only dates with at least one such
    participant are reported. `date_ids` restricts the analysis to those dates.
    """
    context = build_context(event)
    dates = sorted(event.dates, key=lambda d: d.id)
    performances = sorted(event.performances, key=lambda p: p.id)

    if date_ids:
        unknown = set(date_ids) - set(context.date_index)
        if unknown:
            raise InvalidInput(f"Unknown date ids: {sorted(unknown)}")
        wanted = set(date_ids)
        dates = [d for d in dates if d.id in wanted]

    reports: list[ConflictReport] = []
    for date in dates:
        d = context.date_index[date.id]
        users = [
            name
            for name, members, answers in zip(context.user_names, context.members_of, context.avail)
            if len(members) > 1 and d in answers and answers[d].attends
        ]
        if users:
            reports.append(
                ConflictReport(date=date, performances=performances, conflicting_users=users)
            )

    return reports
