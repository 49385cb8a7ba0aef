"""Input normalization for rehearsalplan."""

from rehearsalplan.errors import InvalidInput
from rehearsalplan.models import Availability, Context, Event


def parse_status(status: str) -> Availability:
    """Map a raw answer string to an Availability, raising InvalidInput if unknown."""
    try:
        return Availability(status.strip().lower())
    except (AttributeError, ValueError):
        raise InvalidInput(f"Malformed availability status: {status!r}") from None


def build_context(event: Event) -> Context:
    """
    Convert an event snapshot into dense integer-indexed structures.

    Performances and dates are ordered by id and participants by name, so the
    same snapshot always yields the same indices. Raises InvalidInput if a
    response references an unknown performance or date id.
    """
    performances = sorted(event.performances, key=lambda p: p.id)
    dates = sorted(event.dates, key=lambda d: d.id)

    perf_ids = [p.id for p in performances]
    date_ids = [d.id for d in dates]
    if len(set(perf_ids)) != len(perf_ids):
        raise InvalidInput(f"Duplicate performance ids in event {event.id!r}")
    if len(set(date_ids)) != len(date_ids):
        raise InvalidInput(f"Duplicate date ids in event {event.id!r}")

    perf_index = {pid: i for i, pid in enumerate(perf_ids)}
    date_index = {did: i for i, did in enumerate(date_ids)}

    responses = sorted(event.responses, key=lambda r: r.name)
    user_names: list[str] = []
    members_of: list[frozenset[int]] = []
    avail: list[dict[int, Availability]] = []
    perf_members: list[list[int]] = [[] for _ in performances]

    for response in responses:
        if user_names and user_names[-1] == response.name:
            raise InvalidInput(f"Duplicate participant name: {response.name!r}")

        memberships: set[int] = set()
        for perf_id in response.performances:
            if perf_id not in perf_index:
                raise InvalidInput(
                    f"Response {response.name!r} references unknown performance {perf_id}"
                )
            memberships.add(perf_index[perf_id])

        answers: dict[int, Availability] = {}
        for date_id, status in response.answers.items():
            if date_id not in date_index:
                raise InvalidInput(
                    f"Response {response.name!r} references unknown date {date_id}"
                )
            answers[date_index[date_id]] = parse_status(status)

        u = len(user_names)
        user_names.append(response.name)
        members_of.append(frozenset(memberships))
        avail.append(answers)
        for p in sorted(memberships):
            perf_members[p].append(u)

    return Context(
        perf_ids=perf_ids,
        perf_index=perf_index,
        perf_titles=[p.title for p in performances],
        date_ids=date_ids,
        date_index=date_index,
        date_values=[d.value for d in dates],
        user_names=user_names,
        members_of=members_of,
        avail=avail,
        perf_members=perf_members,
    )
