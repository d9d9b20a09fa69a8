"""
Tests for feedback-based intensity adaptation.
"""

from datetime import date, datetime, timezone

import pytest

from runplan.adaptation import IntensityAdvisor, adapt_program_intensity, suggested_vma
from runplan.plan_schemas import AthleteLevel, ProgramSettings, RaceDistance, SessionFeedback
from runplan.planner import generate_plan
from runplan.tracking import set_session_feedback, toggle_session_completed

SESSION_IDS = [
    "w1-tuesday-interval",
    "w1-thursday-tempo",
    "w1-sunday-long_run",
    "w2-tuesday-interval",
]


@pytest.fixture
def program():
    """Marathon program with a 12 km/h VMA."""
    settings = ProgramSettings(
        distance=RaceDistance.MARATHON,
        level=AthleteLevel.INTERMEDIATE,
        race_date=date(2026, 4, 12),
        sessions_per_week=3,
        vma=12.0,
    )
    return generate_plan(
        settings,
        today=date(2026, 1, 5),
        now=datetime(2026, 1, 5, 8, 30, tzinfo=timezone.utc),
    )


def _rate(program, ratings):
    """Complete and rate sessions in plan order."""
    for session_id, feedback in zip(SESSION_IDS, ratings):
        program = toggle_session_completed(program, session_id)
        program = set_session_feedback(program, session_id, feedback)
    return program


def test_no_feedback_no_reduction(program):
    """Test that a fresh program needs no adjustment."""
    advice = IntensityAdvisor(program).advise()

    assert not advice.reduce_intensity
    assert advice.hard_streak == 0
    assert advice.reviewed_sessions == []


def test_three_hard_sessions_trigger_reduction(program):
    """Test that three consecutive hard sessions recommend 5% less."""
    rated = _rate(program, [SessionFeedback.HARD] * 3)
    advice = IntensityAdvisor(rated).advise()

    assert advice.reduce_intensity
    assert advice.reduction_percent == 5.0
    assert advice.hard_streak == 3
    assert advice.reviewed_sessions == SESSION_IDS[:3]


def test_streak_broken_by_easier_session(program):
    """Test that only the latest sessions count."""
    rated = _rate(
        program,
        [SessionFeedback.HARD, SessionFeedback.HARD, SessionFeedback.HARD, SessionFeedback.MEDIUM],
    )
    advice = IntensityAdvisor(rated).advise()

    assert not advice.reduce_intensity
    assert advice.hard_streak == 0


def test_uncompleted_feedback_ignored(program):
    """Test that feedback on sessions not completed is ignored."""
    rated = program
    for session_id in SESSION_IDS[:3]:
        rated = set_session_feedback(rated, session_id, SessionFeedback.HARD)

    assert IntensityAdvisor(rated).rated_sessions() == []
    assert not IntensityAdvisor(rated).advise().reduce_intensity


def test_custom_window(program):
    """Test a shorter review window."""
    rated = _rate(program, [SessionFeedback.EASY, SessionFeedback.HARD, SessionFeedback.HARD])

    assert IntensityAdvisor(rated, window=2).advise().reduce_intensity
    assert not IntensityAdvisor(rated, window=3).advise().reduce_intensity


def test_invalid_window(program):
    """Test that the window must be positive."""
    with pytest.raises(ValueError):
        IntensityAdvisor(program, window=0)


def test_adapt_program_intensity(program):
    """Test that the VMA is reduced and rounded to one decimal."""
    adapted = adapt_program_intensity(program, 5)

    assert adapted.vma == 11.4
    assert program.vma == 12.0
    # Weeks are not regenerated
    assert adapted.weeks == program.weeks


def test_adapt_without_vma(program):
    """Test that programs without a VMA are returned unchanged."""
    no_vma = program.model_copy(update={"vma": None})
    adapted = adapt_program_intensity(no_vma, 5)

    assert adapted.vma is None
    assert adapted == no_vma


@pytest.mark.parametrize("reduction", [0, -5, 100, 150])
def test_adapt_rejects_invalid_reduction(program, reduction):
    """Test that reductions must lie strictly between 0 and 100%."""
    with pytest.raises(ValueError):
        adapt_program_intensity(program, reduction)


def test_suggested_vma(program):
    """Test the VMA shown alongside the advice."""
    rated = _rate(program, [SessionFeedback.HARD] * 3)
    advisor = IntensityAdvisor(rated)

    assert suggested_vma(rated, advisor.advise()) == 11.4
    assert suggested_vma(program, IntensityAdvisor(program).advise()) is None
