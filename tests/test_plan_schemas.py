"""
Tests for Pydantic schema validation.

Ensures that program and configuration schemas validate data and enforce
their constraints.
"""

import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from runplan.plan_schemas import (
    AthleteLevel,
    BlockKind,
    Program,
    ProgramSettings,
    RaceDistance,
    RaceInfo,
    Session,
    SessionType,
    Week,
    WeekPhase,
    Weekday,
    WorkoutBlock,
)
from runplan.planner import generate_plan
from runplan.schemas import PeriodizationConfig, PlannerConfig

CONFIG_PATH = Path(__file__).resolve().parent.parent / "models" / "planner_config.json"


@pytest.fixture
def program():
    """Generated 6-week half marathon program."""
    settings = ProgramSettings(
        distance=RaceDistance.HALF_MARATHON,
        level=AthleteLevel.INTERMEDIATE,
        race_date=date(2026, 3, 1),
        sessions_per_week=4,
        vma=15.0,
        race_info=RaceInfo(name="Spring Half", race_date=date(2026, 3, 1), elevation_gain_m=120),
    )
    return generate_plan(
        settings,
        today=date(2026, 1, 16),
        now=datetime(2026, 1, 16, 7, 0, tzinfo=timezone.utc),
    )


def _rest_session(day: Weekday, week_number: int = 1) -> Session:
    return Session(
        id=f"w{week_number}-{day.value}-rest",
        day=day,
        session_type=SessionType.REST,
        title="Rest",
        structure=[WorkoutBlock(kind=BlockKind.INFO, details="Full rest day.")],
    )


# Program Schema Tests


def test_program_json_round_trip(program):
    """Test that a program survives JSON serialization unchanged."""
    restored = Program.model_validate_json(program.model_dump_json())
    assert restored == program


def test_program_rejects_week_count_mismatch(program):
    """Test that total_weeks must match the week list."""
    data = program.model_dump()
    data["total_weeks"] = program.total_weeks + 1

    with pytest.raises(ValidationError, match="Expected"):
        Program.model_validate(data)


def test_program_rejects_non_sequential_weeks(program):
    """Test that weeks must be numbered 1..N."""
    data = program.model_dump()
    data["weeks"][1]["week_number"] = 5

    with pytest.raises(ValidationError, match="sequential"):
        Program.model_validate(data)


def test_program_rejects_duplicate_session_ids(program):
    """Test that session ids must be unique across the program."""
    data = program.model_dump()
    data["weeks"][1]["sessions"][0]["id"] = data["weeks"][0]["sessions"][0]["id"]

    with pytest.raises(ValidationError, match="unique"):
        Program.model_validate(data)


def test_week_requires_seven_sessions():
    """Test that a week must hold one session per weekday."""
    sessions = [_rest_session(day) for day in list(Weekday)[:6]]

    with pytest.raises(ValidationError, match="7 sessions"):
        Week(
            week_number=1,
            title="Short",
            phase=WeekPhase.BUILD_UP,
            sessions=sessions,
            total_km=0,
            sessions_count=2,
        )


def test_week_rejects_duplicate_days():
    """Test that two sessions cannot share a day."""
    sessions = [_rest_session(day) for day in list(Weekday)[:6]]
    sessions.append(
        Session(
            id="w1-monday-extra",
            day=Weekday.MONDAY,
            session_type=SessionType.REST,
            title="Rest",
            structure=[WorkoutBlock(kind=BlockKind.INFO, details="Again")],
        )
    )

    with pytest.raises(ValidationError, match="same day"):
        Week(
            week_number=1,
            title="Doubled",
            phase=WeekPhase.BUILD_UP,
            sessions=sessions,
            total_km=0,
            sessions_count=2,
        )


def test_session_requires_structure():
    """Test that a session has at least one block."""
    with pytest.raises(ValidationError):
        Session(
            id="w1-monday-rest",
            day=Weekday.MONDAY,
            session_type=SessionType.REST,
            title="Rest",
            structure=[],
        )


def test_week_get_session(program):
    """Test day lookup within a week."""
    week = program.weeks[0]
    assert week.get_session(Weekday.SUNDAY).session_type == SessionType.LONG_RUN
    assert len(week.training_sessions()) == 4


def test_program_get_week(program):
    """Test week lookup by number."""
    assert program.get_week(1).week_number == 1
    assert program.get_week(0) is None
    assert program.get_week(program.total_weeks + 1) is None


def test_program_total_distance(program):
    """Test that the program distance sums weekly totals."""
    assert program.total_distance_km() == sum(w.total_km for w in program.weeks)
    assert program.total_distance_km() > 0


def test_race_info_rejects_negative_elevation():
    """Test that elevation gain cannot be negative."""
    with pytest.raises(ValidationError):
        RaceInfo(name="Downhill", race_date=date(2026, 5, 1), elevation_gain_m=-10)


def test_weekday_position():
    """Test Monday-first weekday positions."""
    assert Weekday.MONDAY.position == 0
    assert Weekday.SUNDAY.position == 6


def test_settings_accept_enum_values():
    """Test that settings validate from raw JSON values."""
    settings = ProgramSettings.model_validate(
        {
            "distance": "marathon",
            "level": "advanced",
            "race_date": "2026-10-04",
            "sessions_per_week": 5,
        }
    )
    assert settings.distance == RaceDistance.MARATHON
    assert settings.vma is None
    assert settings.race_name == ""


# Planner Config Tests


def test_config_loads_from_file():
    """Test that the shipped config file matches the built-in defaults."""
    config = PlannerConfig.from_file(CONFIG_PATH)

    assert config.fallback_vma == 14.0
    assert config.day_patterns[3] == [Weekday.TUESDAY, Weekday.THURSDAY, Weekday.SUNDAY]
    assert config.long_run.max_minutes[RaceDistance.MARATHON] == 180
    assert config.hills.elevation_thresholds_m[RaceDistance.HALF_MARATHON] == 300.0
    assert config == PlannerConfig()


def test_config_missing_file(tmp_path):
    """Test that a missing config file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        PlannerConfig.from_file(tmp_path / "missing.json")


def test_config_invalid_file(tmp_path):
    """Test that an invalid config raises ValueError."""
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"day_patterns": {"2": ["monday", "friday"]}}))

    with pytest.raises(ValueError, match="Invalid planner config"):
        PlannerConfig.from_file(path)


def test_config_rejects_repeated_days():
    """Test that a day pattern cannot repeat a day."""
    with pytest.raises(ValidationError):
        PlannerConfig(day_patterns={2: [Weekday.SUNDAY, Weekday.SUNDAY]})


def test_config_clamp_sessions():
    """Test the supported session range."""
    config = PlannerConfig()
    assert config.clamp_sessions(0) == 2
    assert config.clamp_sessions(4) == 4
    assert config.clamp_sessions(12) == 6


def test_config_training_days_fallback():
    """Test that counts without a pattern reuse the closest smaller one."""
    config = PlannerConfig()
    assert config.training_days(6) == config.training_days(5)
    assert config.training_days(1) == config.training_days(2)


def test_taper_factor_order():
    """Test that the last factor applies to race week."""
    periodization = PeriodizationConfig()
    assert periodization.taper_factor(0) == 0.4
    assert periodization.taper_factor(1) == 0.6
    assert periodization.taper_factor(5) == 0.6


def test_taper_factor_must_reduce_load():
    """Test that taper factors outside (0, 1) are rejected."""
    with pytest.raises(ValidationError):
        PeriodizationConfig(taper_factors=[1.2, 0.5])
