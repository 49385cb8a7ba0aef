"""Helpers for building event snapshots in tests."""

import random

from rehearsalplan.models import Date, Event, Performance, Response


def make_event(
    performances: list[str],
    dates: list[str],
    responses: list[tuple[str, list[str], dict[str, str]]],
    event_id: str = "evt",
) -> Event:
    """
    Build an Event from titles and labels.

    Performances and dates get ids 1..n in the order given. Each response is
    (name, performance titles, {date label: status}).
    """
    perf_ids = {title: i for i, title in enumerate(performances, start=1)}
    date_ids = {value: i for i, value in enumerate(dates, start=1)}
    return Event(
        id=event_id,
        title=event_id,
        performances=tuple(Performance(id=i, title=t) for t, i in perf_ids.items()),
        dates=tuple(Date(id=i, value=v) for v, i in date_ids.items()),
        responses=tuple(
            Response(
                name=name,
                performances=tuple(perf_ids[t] for t in titles),
                answers={date_ids[v]: status for v, status in answers.items()},
            )
            for name, titles, answers in responses
        ),
    )


def random_event(seed: int, num_perfs: int = 4, num_dates: int = 3, num_users: int = 12) -> Event:
    """A random event with overlapping memberships and partial answers."""
    rng = random.Random(seed)
    performances = [f"P{i}" for i in range(num_perfs)]
    dates = [f"D{i}" for i in range(num_dates)]
    responses = []
    for u in range(num_users):
        titles = rng.sample(performances, rng.randint(1, min(3, num_perfs)))
        answers = {
            d: rng.choice(["available", "maybe", "unavailable"])
            for d in dates
            if rng.random() < 0.85
        }
        responses.append((f"user{u:02d}", titles, answers))
    return make_event(performances, dates, responses, event_id=f"random-{seed}")
