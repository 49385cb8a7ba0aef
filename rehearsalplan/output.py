"""Output formatting for rehearsalplan."""

import csv
import io
from collections import defaultdict
from dataclasses import asdict

from rehearsalplan.models import ConflictReport, OptimizationResult, ScoredOption
from rehearsalplan.sessions import decode_session_id


def _original_id(row: ScoredOption, session_count: int) -> int:
    if session_count > 1:
        return decode_session_id(row.performance_id).original_id
    return row.performance_id


def format_results(result: OptimizationResult) -> str:
    """Format optimization results for display."""
    lines: list[str] = []

    if not result.assignment:
        lines.append("No assignments could be made.")
        lines.append("The event has no performances to schedule.")
        return "\n".join(lines)

    metrics = result.metrics
    lines.append("=== Suggested Schedule ===")
    lines.append(f"Total weighted score: {metrics.total_weighted_score:.1f}")
    lines.append(f"Conflicts: {metrics.total_conflicts}")
    lines.append(
        f"Scheduled: {metrics.scheduled_performances}/{metrics.performance_count}"
        f" ({metrics.computation_time_ms:.1f} ms)"
    )
    if result.session_count > 1:
        lines.append(f"Sessions per performance: {result.session_count}")
    lines.append("")

    # Sessions of one performance are listed together
    by_performance: dict[int, list[ScoredOption]] = defaultdict(list)
    for row in result.assignment:
        by_performance[_original_id(row, result.session_count)].append(row)

    for rows in by_performance.values():
        for row in rows:
            lines.append(f"{row.performance_name} -> {row.date_value}")
            lines.append(
                f"    available {row.available_count}, maybe {row.maybe_count},"
                f" unavailable {row.unavailable_count} (score {row.weighted_score:.1f})"
            )
            if row.conflicting_users:
                lines.append(f"    conflicts: {', '.join(row.conflicting_users)}")
        lines.append("")

    # Dates holding more than one performance
    by_date: dict[str, list[str]] = defaultdict(list)
    for row in result.assignment:
        by_date[row.date_value].append(row.performance_name)
    shared = {value: names for value, names in by_date.items() if len(names) > 1}
    if shared:
        lines.append("=== Shared Dates ===")
        for value, names in sorted(shared.items()):
            lines.append(f"{value}: {', '.join(names)}")

    return "\n".join(lines).rstrip("\n")


def format_assignment_csv(result: OptimizationResult) -> str:
    """Format the assignment rows as CSV for export."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(
        [
            "performance_id",
            "performance",
            "date_id",
            "date",
            "available",
            "maybe",
            "unavailable",
            "weighted_score",
            "conflicts",
            "conflicting_users",
        ]
    )
    for row in result.assignment:
        writer.writerow(
            [
                row.performance_id,
                row.performance_name,
                row.date_id,
                row.date_value,
                row.available_count,
                row.maybe_count,
                row.unavailable_count,
                f"{row.weighted_score:.1f}",
                row.conflict_count,
                ";".join(row.conflicting_users),
            ]
        )
    return buffer.getvalue().rstrip("\n")


def result_to_dict(result: OptimizationResult) -> dict:
    """JSON-compatible form of a result: the suggested schedule and its metrics."""
    data = {
        "suggested_schedule": [asdict(row) for row in result.assignment],
        "metrics": asdict(result.metrics),
    }
    if result.session_count > 1:
        data["session_count"] = result.session_count
    return data


def format_conflict_report(reports: list[ConflictReport]) -> str:
    """Format the per-date conflict analysis."""
    if not reports:
        return "No potential conflicts found."

    lines = ["=== Potential Conflicts ==="]
    for report in reports:
        lines.append(f"{report.date.value} ({len(report.conflicting_users)} participants):")
        for name in report.conflicting_users:
            lines.append(f"    - {name}")
    return "\n".join(lines)
