"""YAML and CSV parsing for rehearsalplan."""

import csv
from dataclasses import replace
from pathlib import Path

import yaml

from rehearsalplan.errors import InvalidInput
from rehearsalplan.models import Date, Event, Performance, Response
from rehearsalplan.normalize import parse_status

# Column headers in response CSV exports
NAME_COLUMN = "Name"
PERFORMANCES_COLUMN = "Performances"
PERFORMANCE_SEPARATOR = ";"


def _require(entry: dict, key: str, where: str):
    if not isinstance(entry, dict) or key not in entry:
        raise InvalidInput(f"Missing {key!r} in {where}")
    return entry[key]


def _list(data: dict, key: str, where: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise InvalidInput(f"Expected a list for {key!r} in {where}")
    return value


def _as_int(value, where: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Expected an integer id in {where}, got {value!r}") from None


def parse_event_dict(data: dict) -> Event:
    """Build an Event from a decoded YAML/JSON mapping."""
    if not isinstance(data, dict):
        raise InvalidInput("Event data must be a mapping")

    dates = tuple(
        Date(id=_as_int(_require(entry, "id", "date"), "date"), value=str(_require(entry, "value", "date")))
        for entry in _list(data, "dates", "event")
    )
    performances = tuple(
        Performance(
            id=_as_int(_require(entry, "id", "performance"), "performance"),
            title=str(_require(entry, "title", "performance")),
            description=entry.get("description") or "",
        )
        for entry in _list(data, "performances", "event")
    )

    responses: list[Response] = []
    for entry in _list(data, "responses", "event"):
        name = str(_require(entry, "name", "response")).strip()
        if not name:
            raise InvalidInput("Response with an empty name")
        where = f"response {name!r}"
        perf_ids = tuple(_as_int(pid, where) for pid in _list(entry, "performances", where))
        raw_answers = entry.get("answers") or {}
        if not isinstance(raw_answers, dict):
            raise InvalidInput(f"Expected a mapping for 'answers' in {where}")
        answers = {_as_int(date_id, where): str(status) for date_id, status in raw_answers.items()}
        responses.append(Response(name=name, performances=perf_ids, answers=answers))

    return Event(
        id=str(data.get("id", "")),
        title=str(data.get("title", "")),
        description=data.get("description") or "",
        dates=dates,
        performances=performances,
        responses=tuple(responses),
    )


def parse_event_yaml(yaml_path: Path) -> Event:
    """Parse an event snapshot file (YAML, or JSON since YAML is a superset)."""
    with yaml_path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidInput(f"Malformed event file {yaml_path}: {e}") from e

    if not data:
        raise InvalidInput(f"Event file is empty: {yaml_path}")

    return parse_event_dict(data)


def parse_responses_csv(csv_path: Path, event: Event) -> Event:
    """
    Read participant responses from a form export and attach them to the event.

    The CSV has a Name column, a Performances column listing performance
    titles separated by ';', and one column per date value holding the
    answer. Empty cells mean no answer. Returns a copy of the event whose
    responses are replaced by the ones read.
    """
    perf_by_title = {p.title: p.id for p in event.performances}
    date_by_value = {d.value: d.id for d in event.dates}

    responses: list[Response] = []
    with csv_path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or []
        if NAME_COLUMN not in fieldnames:
            raise InvalidInput(f"Missing {NAME_COLUMN!r} column in {csv_path}")

        unknown = [
            col
            for col in fieldnames
            if col not in (NAME_COLUMN, PERFORMANCES_COLUMN) and col.strip() and col not in date_by_value
        ]
        if unknown:
            raise InvalidInput(f"Columns do not match any event date: {', '.join(unknown)}")

        for row in reader:
            name = (row.get(NAME_COLUMN) or "").strip()
            if not name:
                continue

            perf_ids: list[int] = []
            for title in (row.get(PERFORMANCES_COLUMN) or "").split(PERFORMANCE_SEPARATOR):
                title = title.strip()
                if not title:
                    continue
                if title not in perf_by_title:
                    raise InvalidInput(f"Response {name!r} lists unknown performance {title!r}")
                perf_ids.append(perf_by_title[title])

            answers: dict[int, str] = {}
            for value, date_id in date_by_value.items():
                raw = (row.get(value) or "").strip()
                if raw:
                    answers[date_id] = parse_status(raw).value

            responses.append(Response(name=name, performances=tuple(perf_ids), answers=answers))

    return replace(event, responses=tuple(responses))


def create_event_template(output_path: Path):
    """Create an example event YAML file."""
    template = {
        "id": "spring-concert",
        "title": "Spring Concert",
        "dates": [
            {"id": 1, "value": "2025-04-15 15:00-17:00"},
            {"id": 2, "value": "2025-04-16 15:00-17:00"},
        ],
        "performances": [
            {"id": 1, "title": "Opening Number"},
            {"id": 2, "title": "String Quartet"},
        ],
        "responses": [
            {
                "name": "alice",
                "performances": [1, 2],
                "answers": {1: "available", 2: "maybe"},
            }
        ],
    }

    header = """\
# Event file for rehearsalplan
# List candidate dates, performances and participant responses.
#
# Answer options:
#   - available
#   - maybe
#   - unavailable
# Dates a participant did not answer count as unknown.

"""

    with output_path.open("w", encoding="utf-8") as f:
        f.write(header)
        yaml.dump(template, f, default_flow_style=False, sort_keys=False)
