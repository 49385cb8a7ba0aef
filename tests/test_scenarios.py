"""End-to-end schedules for small, hand-checked events."""

import pytest

from rehearsalplan.config import OptimizerOptions
from rehearsalplan.errors import NoFeasibleAssignment
from rehearsalplan.normalize import build_context
from rehearsalplan.optimizer import compute_energy, optimize
from rehearsalplan.scoring import score_options
from rehearsalplan.sessions import decode_session_id
from tests.utils import make_event


def test_single_performance_single_date() -> None:
    event = make_event(["A"], ["d1"], [("u1", ["A"], {"d1": "available"})])

    result = optimize(event, OptimizerOptions(seed=1))

    assert len(result.assignment) == 1
    row = result.assignment[0]
    assert (row.performance_name, row.date_value) == ("A", "d1")
    assert row.available_count == 1
    assert row.maybe_count == 0
    assert row.weighted_score == 1.0
    assert row.conflict_count == 0


def test_shared_member_gets_separate_dates() -> None:
    everywhere = {"d1": "available", "d2": "available"}
    event = make_event(
        ["A", "B"],
        ["d1", "d2"],
        [("u1", ["A"], everywhere), ("u2", ["B"], everywhere), ("u3", ["A", "B"], everywhere)],
    )

    result = optimize(event, OptimizerOptions(seed=1))

    a, b = result.assignment
    assert a.date_id != b.date_id
    assert a.conflict_count == 0
    assert b.conflict_count == 0


def test_forced_overlap_reports_the_shared_member() -> None:
    event = make_event(["A", "B"], ["d1"], [("u1", ["A", "B"], {"d1": "available"})])

    result = optimize(event, OptimizerOptions(seed=1))

    assert [row.date_value for row in result.assignment] == ["d1", "d1"]
    for row in result.assignment:
        assert row.conflict_count == 1
        assert row.conflicting_users == ["u1"]
    assert result.metrics.total_conflicts == 2


def test_high_attendance_date_versus_conflict() -> None:
    # d1: ten available per performance, "shared" is in both.
    # d2: two available per performance, nobody shared.
    responses = [("shared", ["A", "B"], {"d1": "available", "d2": "unavailable"})]
    for i in range(9):
        responses.append((f"a{i}", ["A"], {"d1": "available", "d2": "available" if i < 2 else "unavailable"}))
        responses.append((f"b{i}", ["B"], {"d1": "available", "d2": "available" if i < 2 else "unavailable"}))
    event = make_event(["A", "B"], ["d1", "d2"], responses)
    context = build_context(event)
    scores = score_options(context)
    weights = OptimizerOptions()

    result = optimize(event, OptimizerOptions(seed=4))

    both_on_d1 = compute_energy({0: 0, 1: 0}, context, scores, weights)
    both_on_d2 = compute_energy({0: 1, 1: 1}, context, scores, weights)
    assert both_on_d1 == pytest.approx(15.0 - 20.0 + 2.0)
    assert result.energy <= min(both_on_d1, both_on_d2)
    # Splitting keeps one performance at full attendance with no conflict
    assert result.energy == pytest.approx(-12.0)
    assert {row.date_value for row in result.assignment} == {"d1", "d2"}
    assert all(row.conflict_count == 0 for row in result.assignment)


def test_sessions_land_on_different_dates() -> None:
    event = make_event(
        ["A"],
        ["d1", "d2", "d3"],
        [
            ("u1", ["A"], {"d1": "available", "d2": "available", "d3": "unavailable"}),
            ("u2", ["A"], {"d1": "available", "d2": "maybe", "d3": "available"}),
        ],
    )

    result = optimize(event, OptimizerOptions(sessions=2, seed=1))

    assert result.session_count == 2
    keys = [decode_session_id(row.performance_id) for row in result.assignment]
    assert [(k.original_id, k.session_index) for k in keys] == [(1, 1), (1, 2)]
    assert [row.performance_name for row in result.assignment] == [
        "A (Session 1)",
        "A (Session 2)",
    ]
    assert result.assignment[0].date_id != result.assignment[1].date_id
    assert result.metrics.performance_count == 2


def test_session_rows_scale_with_session_count() -> None:
    event = make_event(
        ["A", "B"],
        ["d1", "d2", "d3", "d4"],
        [("u1", ["A"], {"d1": "available"}), ("u2", ["A", "B"], {"d2": "maybe"})],
    )

    result = optimize(event, OptimizerOptions(sessions=3, seed=2))

    assert len(result.assignment) == 6
    for row in result.assignment:
        assert 1 <= decode_session_id(row.performance_id).session_index <= 3


def test_no_dates_is_infeasible() -> None:
    event = make_event(["A"], [], [("u1", ["A"], {})])

    with pytest.raises(NoFeasibleAssignment):
        optimize(event)
