"""Tests for the command-line interface."""

import json

import pytest

from grade_spy.cli import main, scenarios_to_json
from grade_spy.events import DayEvent, ScoredItem


def test_cli_generated_class(tmp_path, capsys):
    """Test a generated class run finds the truth and writes both files."""
    report_file = tmp_path / "report.json"
    scenarios_file = tmp_path / "scenarios.json"
    main([
        "--group-size", "2",
        "--timeline-end", "2",
        "--categories", "2",
        "--seed", "3",
        "--save-report", str(report_file),
        "--save-scenarios", str(scenarios_file),
    ])

    out = capsys.readouterr().out
    assert "Disclosure Report" in out

    report = json.loads(report_file.read_text())
    assert report['ground_truth_found'] is True
    assert report['config']['max_concurrency'] == 1
    scenarios = json.loads(scenarios_file.read_text())
    assert len(scenarios) == report['n_scenarios']
    assert all(len(s) == 2 for s in scenarios)


def test_cli_csv_input(tmp_path, small_grades):
    """Test a grade table on disk is analysed as the group's truth."""
    grades_file = tmp_path / "grades.csv"
    small_grades.to_csv(grades_file, index=False)
    report_file = tmp_path / "report.json"
    scenarios_file = tmp_path / "scenarios.json"
    main([
        str(grades_file),
        "--group-size", "2",
        "--save-report", str(report_file),
        "--save-scenarios", str(scenarios_file),
    ])

    report = json.loads(report_file.read_text())
    assert report['n_scenarios'] == 1
    assert report['fully_disclosed'] is True
    assert report['ground_truth_found'] is True
    scenarios = json.loads(scenarios_file.read_text())
    histories = sorted(scenarios[0], key=lambda h: h[0]['items'][0]['value'])
    assert histories[1] == [
        {'period': 0, 'items': [{'category_id': 0, 'value': 9}]},
        {'period': 2, 'items': [{'category_id': 1, 'value': 4}]},
    ]


def test_cli_csv_group_size_from_members(tmp_path, small_grades):
    """Test a grade table without --group-size keeps its own member count."""
    grades_file = tmp_path / "grades.csv"
    small_grades.to_csv(grades_file, index=False)
    report_file = tmp_path / "report.json"
    main([str(grades_file), "--save-report", str(report_file)])

    report = json.loads(report_file.read_text())
    assert report['group_size'] == 2
    assert report['ground_truth_found'] is True


def test_cli_csv_group_size_pads_silent_members(tmp_path, small_grades):
    """Test an explicit --group-size adds members who never got a grade."""
    grades_file = tmp_path / "grades.csv"
    small_grades.to_csv(grades_file, index=False)
    report_file = tmp_path / "report.json"
    main([str(grades_file), "--group-size", "3", "--save-report", str(report_file)])

    report = json.loads(report_file.read_text())
    assert report['group_size'] == 3
    assert report['ground_truth_found'] is True


def test_scenarios_to_json_keeps_empty_days():
    """Test histories differing only in where the empty day falls stay distinct."""
    graded_0 = DayEvent.build(0, [ScoredItem(0, 0, 7)])
    graded_1 = DayEvent.build(1, [ScoredItem(1, 0, 7)])
    first = ((graded_0, DayEvent(1)),)
    second = ((DayEvent(0), graded_1),)

    out = scenarios_to_json([first, second])
    assert out[0] != out[1]
    assert out[0][0] == [
        {'period': 0, 'items': [{'category_id': 0, 'value': 7}]},
        {'period': 1, 'items': []},
    ]


def test_cli_config_file(tmp_path, capsys):
    """Test JSON config values reach the engine."""
    config_file = tmp_path / "engine.json"
    config_file.write_text(json.dumps({"prune_to_fixed_point": True, "max_scenarios": 1}))
    report_file = tmp_path / "report.json"
    main([
        "--group-size", "2", "--timeline-end", "1", "--categories", "2",
        "--config", str(config_file),
        "--save-report", str(report_file),
    ])
    report = json.loads(report_file.read_text())
    assert report['config']['prune_to_fixed_point'] is True
    assert report['n_scenarios'] == 1


def test_cli_bad_config(tmp_path, capsys):
    """Test unknown keys and bad values in the config stop the run."""
    config_file = tmp_path / "engine.json"
    config_file.write_text(json.dumps({"max_depth": 4}))
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(config_file)])
    assert exc_info.value.code == 1
    assert "unknown config keys" in capsys.readouterr().err

    config_file.write_text(json.dumps({"slots_per_category": 0}))
    with pytest.raises(SystemExit):
        main(["--config", str(config_file)])
    assert "slots_per_category" in capsys.readouterr().err


def test_cli_missing_input(tmp_path, capsys):
    """Test a missing grade table is reported on stderr."""
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "nope.csv")])
    assert exc_info.value.code == 1
    assert "not found" in capsys.readouterr().err
