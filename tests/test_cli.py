import json
from pathlib import Path

import pytest

from rehearsalplan.cli import main

EVENT_YAML = """\
id: concert
title: Spring Concert
dates:
  - {id: 1, value: mon}
  - {id: 2, value: tue}
performances:
  - {id: 1, title: Choir}
  - {id: 2, title: Band}
responses:
  - name: alice
    performances: [1, 2]
    answers: {1: available, 2: available}
  - name: bob
    performances: [1]
    answers: {1: available, 2: maybe}
"""


@pytest.fixture
def event_file(tmp_path: Path) -> Path:
    path = tmp_path / "event.yaml"
    path.write_text(EVENT_YAML, encoding="utf-8")
    return path


def test_text_output(event_file: Path, capsys) -> None:
    assert main([str(event_file), "--seed", "3"]) == 0

    out = capsys.readouterr().out
    assert "=== Suggested Schedule ===" in out
    assert "Choir -> " in out
    assert "Band -> " in out


def test_json_output_is_reproducible(event_file: Path, capsys) -> None:
    main([str(event_file), "--seed", "3", "--format", "json"])
    first = json.loads(capsys.readouterr().out)
    main([str(event_file), "--seed", "3", "--format", "json"])
    second = json.loads(capsys.readouterr().out)

    assert first["suggested_schedule"] == second["suggested_schedule"]
    assert first["metrics"]["performance_count"] == 2


def test_sessions_and_config(event_file: Path, tmp_path: Path, capsys) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("optimizer:\n  max_iter: 50\n  seed: 1\n", encoding="utf-8")

    assert main([str(event_file), "--config", str(config), "--sessions", "2", "--format", "csv"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 5
    assert [line.split(",")[0] for line in lines[1:]] == ["101", "102", "201", "202"]


def test_analyze_conflicts(event_file: Path, capsys) -> None:
    assert main([str(event_file), "--analyze-conflicts", "--dates", "2"]) == 0

    out = capsys.readouterr().out
    assert "tue (1 participants)" in out
    assert "alice" in out
    assert "mon" not in out


def test_missing_event_file(tmp_path: Path, capsys) -> None:
    assert main([str(tmp_path / "nope.yaml")]) == 1
    assert "Event file not found" in capsys.readouterr().err


def test_invalid_event_reports_error(tmp_path: Path, capsys) -> None:
    path = tmp_path / "event.yaml"
    path.write_text(
        "id: e\ndates: []\nperformances: [{id: 1, title: A}]\nresponses: []\n", encoding="utf-8"
    )

    assert main([str(path)]) == 1
    assert "no candidate dates" in capsys.readouterr().err


def test_output_template(tmp_path: Path, capsys) -> None:
    path = tmp_path / "template.yaml"

    assert main(["--output-template", str(path)]) == 0
    assert path.exists()
    assert main([str(path), "--seed", "1"]) == 0


def test_malformed_yaml_reports_error(tmp_path: Path, capsys) -> None:
    path = tmp_path / "event.yaml"
    path.write_text("id: e\ndates: [{id: 1, value: mon}\n", encoding="utf-8")

    assert main([str(path)]) == 1
    assert "Malformed event file" in capsys.readouterr().err


def test_answers_must_be_a_mapping(tmp_path: Path, capsys) -> None:
    path = tmp_path / "event.yaml"
    path.write_text(
        "id: e\n"
        "dates: [{id: 1, value: mon}]\n"
        "performances: [{id: 1, title: A}]\n"
        "responses:\n"
        "  - name: alice\n"
        "    performances: [1]\n"
        "    answers: [available]\n",
        encoding="utf-8",
    )

    assert main([str(path)]) == 1
    assert "'answers'" in capsys.readouterr().err


def test_negative_seed_reports_error(event_file: Path, capsys) -> None:
    assert main([str(event_file), "--seed", "-1"]) == 1
    assert "seed must be a non-negative integer" in capsys.readouterr().err
