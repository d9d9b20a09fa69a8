"""
Program tracking operations.

Completion toggles, feedback tagging, drag-and-drop day swaps and archiving.
Each operation takes a Program and returns an updated copy; the input is
never modified, so callers persist the returned program as a whole.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from runplan.plan_schemas import Program, Session, SessionFeedback, Week

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """Raised when a session id does not exist in the program."""


class WeekNotFoundError(LookupError):
    """Raised when a week number is outside the program."""


def find_session(program: Program, session_id: str) -> Tuple[Week, Session]:
    """
    Locate a session by id.

    Returns:
        Tuple of (week, session)

    Raises:
        SessionNotFoundError: If no session carries this id
    """
    for week in program.weeks:
        for session in week.sessions:
            if session.id == session_id:
                return week, session
    raise SessionNotFoundError(f"Session not found: {session_id}")


def get_week(program: Program, week_number: int) -> Week:
    week = program.get_week(week_number)
    if week is None:
        raise WeekNotFoundError(
            f"Week {week_number} not found (program has {program.total_weeks} weeks)"
        )
    return week


def toggle_session_completed(program: Program, session_id: str) -> Program:
    """Flip the completion flag of one session."""
    updated = program.model_copy(deep=True)
    _, session = find_session(updated, session_id)
    session.completed = not session.completed
    return updated


def set_session_feedback(
    program: Program, session_id: str, feedback: Optional[SessionFeedback]
) -> Program:
    """Set (or clear, with None) the perceived difficulty of a session."""
    updated = program.model_copy(deep=True)
    _, session = find_session(updated, session_id)
    session.feedback = SessionFeedback(feedback) if feedback is not None else None
    return updated


def swap_session_days(
    program: Program, week_number: int, dragged_id: str, target_id: str
) -> Program:
    """
    Swap the days of two sessions of the same week.

    Mirrors a drag-and-drop: the dragged session takes the target's day and
    vice versa, then the week is re-sorted Monday first. Ids are kept, so
    each day still holds exactly one session.
    """
    updated = program.model_copy(deep=True)
    week = get_week(updated, week_number)
    if dragged_id == target_id:
        return updated

    sessions = {s.id: s for s in week.sessions}
    for session_id in (dragged_id, target_id):
        if session_id not in sessions:
            raise SessionNotFoundError(f"Session {session_id} is not in week {week_number}")

    dragged, target = sessions[dragged_id], sessions[target_id]
    dragged.day, target.day = target.day, dragged.day
    week.sessions.sort(key=lambda s: s.day.position)

    logger.debug("Week %d: swapped %s and %s", week_number, dragged_id, target_id)
    return updated


def archive_program(program: Program, now: Optional[datetime] = None) -> Program:
    """Return a read-only history copy stamped with its archive time."""
    archived = program.model_copy(deep=True)
    archived.archived_at = now or datetime.now(timezone.utc)
    return archived


def week_progress(week: Week) -> Tuple[int, int]:
    """
    Progress of a week for display.

    Returns:
        Tuple of (completed training sessions, configured sessions per week)
    """
    completed = sum(1 for s in week.sessions if s.completed and not s.is_rest)
    return completed, week.sessions_count


def program_progress(program: Program) -> float:
    """Share of training sessions completed across the program (0.0-1.0)."""
    training = [s for week in program.weeks for s in week.training_sessions()]
    if not training:
        return 0.0
    return sum(1 for s in training if s.completed) / len(training)
