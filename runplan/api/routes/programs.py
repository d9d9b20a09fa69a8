"""
Active Program API Routes

Endpoints for reading, tracking, exporting and archiving the active program.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from runplan.adaptation import IntensityAdvisor, adapt_program_intensity, suggested_vma
from runplan.api.models.requests import AdaptIntensityRequest, FeedbackRequest, SwapRequest
from runplan.api.models.responses import (
    AdviceResponse,
    HistoryResponse,
    WeekProgressResponse,
)
from runplan.database import ProgramStore, get_db_session
from runplan.exports import generate_ics, generate_tcx, session_start
from runplan.plan_schemas import Program
from runplan.tracking import (
    SessionNotFoundError,
    WeekNotFoundError,
    find_session,
    get_week,
    set_session_feedback,
    swap_session_days,
    toggle_session_completed,
    week_progress,
)

router = APIRouter()


def _require_active(store: ProgramStore) -> Program:
    program = store.load_active()
    if program is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active program",
        )
    return program


def _not_found(exc: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/programs/active", response_model=Program)
async def get_active_program(db: Session = Depends(get_db_session)) -> Program:
    """Return the active program."""
    return _require_active(ProgramStore(db))


@router.delete("/programs/active", response_model=Program)
async def delete_active_program(db: Session = Depends(get_db_session)) -> Program:
    """Archive the active program into history and clear it."""
    archived = ProgramStore(db).delete_active()
    if archived is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active program")
    return archived


@router.get("/programs/history", response_model=HistoryResponse)
async def get_history(db: Session = Depends(get_db_session)) -> HistoryResponse:
    """Archived programs, newest first."""
    programs = ProgramStore(db).history()
    return HistoryResponse(programs=programs, count=len(programs))


@router.post("/programs/active/sessions/{session_id}/toggle", response_model=Program)
async def toggle_session(session_id: str, db: Session = Depends(get_db_session)) -> Program:
    """Flip a session's completion flag."""
    store = ProgramStore(db)
    program = _require_active(store)
    try:
        updated = toggle_session_completed(program, session_id)
    except SessionNotFoundError as e:
        raise _not_found(e)
    store.save_active(updated)
    return updated


@router.put("/programs/active/sessions/{session_id}/feedback", response_model=Program)
async def put_feedback(
    session_id: str, request: FeedbackRequest, db: Session = Depends(get_db_session)
) -> Program:
    """Set or clear a session's feedback."""
    store = ProgramStore(db)
    program = _require_active(store)
    try:
        updated = set_session_feedback(program, session_id, request.feedback)
    except SessionNotFoundError as e:
        raise _not_found(e)
    store.save_active(updated)
    return updated


@router.post("/programs/active/weeks/{week_number}/swap", response_model=Program)
async def swap_days(
    week_number: int, request: SwapRequest, db: Session = Depends(get_db_session)
) -> Program:
    """Swap the days of two sessions within a week."""
    store = ProgramStore(db)
    program = _require_active(store)
    try:
        updated = swap_session_days(
            program, week_number, request.dragged_session_id, request.target_session_id
        )
    except (SessionNotFoundError, WeekNotFoundError) as e:
        raise _not_found(e)
    store.save_active(updated)
    return updated


@router.get("/programs/active/weeks/{week_number}/progress", response_model=WeekProgressResponse)
async def get_week_progress(
    week_number: int, db: Session = Depends(get_db_session)
) -> WeekProgressResponse:
    program = _require_active(ProgramStore(db))
    try:
        week = get_week(program, week_number)
    except WeekNotFoundError as e:
        raise _not_found(e)
    completed, count = week_progress(week)
    return WeekProgressResponse(week_number=week_number, completed=completed, sessions_count=count)


@router.get("/programs/active/advice", response_model=AdviceResponse)
async def get_advice(db: Session = Depends(get_db_session)) -> AdviceResponse:
    """Feedback-based intensity advice for the active program."""
    program = _require_active(ProgramStore(db))
    advice = IntensityAdvisor(program).advise()
    return AdviceResponse(advice=advice, suggested_vma=suggested_vma(program, advice))


@router.post("/programs/active/adapt", response_model=Program)
async def adapt_intensity(
    request: AdaptIntensityRequest, db: Session = Depends(get_db_session)
) -> Program:
    """Lower the active program's VMA."""
    store = ProgramStore(db)
    updated = adapt_program_intensity(_require_active(store), request.reduction_percent)
    store.save_active(updated)
    return updated


@router.get("/programs/active/weeks/{week_number}/ics")
async def export_week_ics(week_number: int, db: Session = Depends(get_db_session)) -> Response:
    """Download one week as an iCalendar file."""
    program = _require_active(ProgramStore(db))
    try:
        content = generate_ics(program, week_number)
    except WeekNotFoundError as e:
        raise _not_found(e)
    return Response(
        content=content,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="runplan_week_{week_number}.ics"'},
    )


@router.get("/programs/active/sessions/{session_id}/tcx")
async def export_session_tcx(session_id: str, db: Session = Depends(get_db_session)) -> Response:
    """Download one session as a TCX file for GPS watches."""
    program = _require_active(ProgramStore(db))
    try:
        week, session = find_session(program, session_id)
    except SessionNotFoundError as e:
        raise _not_found(e)
    content = generate_tcx(session, session_start(program, week.week_number, session))
    return Response(
        content=content,
        media_type="application/vnd.garmin.tcx+xml",
        headers={"Content-Disposition": f'attachment; filename="runplan_{session.id}.tcx"'},
    )
