"""
Tests for the command-line interface.
"""

from datetime import date, timedelta

import pytest
from typer.testing import CliRunner

from runplan.cli import app

runner = CliRunner()


@pytest.fixture
def db_url(tmp_path):
    """SQLite file database isolated per test."""
    return f"sqlite:///{tmp_path / 'cli.db'}"


def _generate(db_url, *extra):
    race_date = (date.today() + timedelta(days=70)).isoformat()
    return runner.invoke(
        app,
        [
            "generate",
            "--distance", "10k",
            "--level", "beginner",
            "--race-date", race_date,
            "--sessions", "3",
            "--vma", "12",
            "--race-name", "City 10k",
            "--db", db_url,
            *extra,
        ],
    )


def test_pace_command():
    """Test pace lookup."""
    result = runner.invoke(app, ["pace", "15", "100"])
    assert result.exit_code == 0
    assert "4'00\"" in result.output


def test_vma_half_cooper():
    """Test VMA estimation from a half-Cooper distance."""
    result = runner.invoke(app, ["vma", "--half-cooper", "1500"])
    assert result.exit_code == 0
    assert "15 km/h" in result.output


def test_vma_race_time():
    """Test VMA estimation from a race time."""
    result = runner.invoke(app, ["vma", "--race-distance", "10k", "--race-time", "50:00"])
    assert result.exit_code == 0
    assert "13.04 km/h" in result.output


def test_vma_without_test():
    """Test that a test result is required."""
    result = runner.invoke(app, ["vma"])
    assert result.exit_code == 1


def test_generate_and_show(db_url, tmp_path):
    """Test generating, saving and exporting a program as JSON."""
    output = tmp_path / "program.json"
    result = _generate(db_url, "--output", str(output))

    assert result.exit_code == 0
    assert "10-week program" in result.output
    assert output.exists()

    result = runner.invoke(app, ["show", "--week", "1", "--db", db_url])
    assert result.exit_code == 0


def test_show_without_program(db_url):
    """Test that commands needing a program fail cleanly."""
    result = runner.invoke(app, ["show", "--db", db_url])
    assert result.exit_code == 1
    assert "No active program" in result.output


def test_show_unknown_week(db_url):
    """Test that an unknown week number fails."""
    _generate(db_url)
    result = runner.invoke(app, ["show", "--week", "42", "--db", db_url])
    assert result.exit_code == 1


def test_complete_and_feedback(db_url):
    """Test tracking commands on the active program."""
    _generate(db_url)

    result = runner.invoke(app, ["complete", "w1-tuesday-interval", "--db", db_url])
    assert result.exit_code == 0
    assert "marked completed" in result.output

    result = runner.invoke(app, ["feedback", "w1-tuesday-interval", "hard", "--db", db_url])
    assert result.exit_code == 0

    result = runner.invoke(app, ["complete", "missing", "--db", db_url])
    assert result.exit_code == 1


def test_swap_command(db_url):
    """Test swapping two sessions of a week."""
    _generate(db_url)
    result = runner.invoke(
        app, ["swap", "1", "w1-tuesday-interval", "w1-monday-rest", "--db", db_url]
    )
    assert result.exit_code == 0


def test_exports(db_url, tmp_path):
    """Test ICS and TCX file exports."""
    _generate(db_url)
    ics = tmp_path / "week1.ics"
    tcx = tmp_path / "interval.tcx"

    result = runner.invoke(app, ["export-ics", "1", "--output", str(ics), "--db", db_url])
    assert result.exit_code == 0
    assert ics.read_text().startswith("BEGIN:VCALENDAR")

    result = runner.invoke(
        app, ["export-tcx", "w1-tuesday-interval", "--output", str(tcx), "--db", db_url]
    )
    assert result.exit_code == 0
    assert "TrainingCenterDatabase" in tcx.read_text()


def test_delete_and_history(db_url):
    """Test archiving then listing and clearing history."""
    _generate(db_url)

    result = runner.invoke(app, ["delete", "--db", db_url])
    assert result.exit_code == 0
    assert "archived" in result.output

    result = runner.invoke(app, ["history", "--db", db_url])
    assert result.exit_code == 0
    assert "City 10k" in result.output

    result = runner.invoke(app, ["history", "--clear", "--db", db_url])
    assert "Removed 1" in result.output
