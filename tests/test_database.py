"""
Tests for program persistence.

Uses in-memory SQLite databases.
"""

from datetime import date, datetime, timezone

import pytest

from runplan.database import (
    ACTIVE_PROGRAM_KEY,
    DEFAULT_DATABASE_URL,
    ProgramStore,
    StoredDocument,
    get_database_url,
    init_database,
)
from runplan.plan_schemas import AthleteLevel, ProgramSettings, RaceDistance
from runplan.planner import generate_plan
from runplan.tracking import toggle_session_completed


@pytest.fixture
def db():
    """Fresh in-memory database session."""
    session = init_database("sqlite:///:memory:")
    yield session
    session.close()


@pytest.fixture
def store(db):
    return ProgramStore(db)


def _program(race_name: str, created: datetime):
    settings = ProgramSettings(
        distance=RaceDistance.HALF_MARATHON,
        level=AthleteLevel.ADVANCED,
        race_name=race_name,
        race_date=date(2026, 5, 3),
        sessions_per_week=4,
        vma=17.0,
    )
    return generate_plan(settings, today=created.date(), now=created)


@pytest.fixture
def program():
    return _program("Spring Half", datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc))


def test_load_active_empty(store):
    """Test that an empty store has no active program."""
    assert store.load_active() is None


def test_save_and_load_round_trip(store, program):
    """Test that a saved program loads back identical."""
    store.save_active(program)
    assert store.load_active() == program


def test_save_replaces_active_program(db, store, program):
    """Test that saving again replaces the whole document."""
    store.save_active(program)
    updated = toggle_session_completed(program, "w1-tuesday-interval")
    store.save_active(updated)

    assert db.query(StoredDocument).filter_by(key=ACTIVE_PROGRAM_KEY).count() == 1
    assert store.load_active() == updated


def test_delete_active_archives(store, program):
    """Test that deleting moves the program into history."""
    store.save_active(program)
    now = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    archived = store.delete_active(now)

    assert archived.archived_at == now
    assert store.load_active() is None
    history = store.history()
    assert len(history) == 1
    assert history[0].id == program.id
    assert history[0].archived_at == now


def test_delete_without_active_program(store):
    """Test that deleting nothing returns None."""
    assert store.delete_active() is None
    assert store.history() == []


def test_history_newest_first(store):
    """Test history ordering by archive time."""
    first = _program("First Half", datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc))
    second = _program("Second Half", datetime(2026, 1, 2, 10, 0, tzinfo=timezone.utc))

    store.save_active(first)
    store.delete_active(datetime(2026, 1, 10, tzinfo=timezone.utc))
    store.save_active(second)
    store.delete_active(datetime(2026, 1, 20, tzinfo=timezone.utc))

    assert [p.race_name for p in store.history()] == ["Second Half", "First Half"]


def test_clear_history(store, program):
    """Test that clearing history removes every archived program."""
    store.save_active(program)
    store.delete_active()

    assert store.clear_history() == 1
    assert store.history() == []


def test_database_url_from_environment(monkeypatch):
    """Test database URL resolution."""
    monkeypatch.delenv("RUNPLAN_DATABASE_URL", raising=False)
    assert get_database_url() == DEFAULT_DATABASE_URL

    monkeypatch.setenv("RUNPLAN_DATABASE_URL", "sqlite:///other.db")
    assert get_database_url() == "sqlite:///other.db"
