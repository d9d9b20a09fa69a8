"""
Adaptive Intensity Module

Reads the feedback athletes leave on completed sessions to detect when the
program is too hard, and lowers the program VMA on request:
- Recent feedback streak (consecutive "hard" sessions)
- VMA reduction (no regeneration, new paces apply to the next program)
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from runplan.plan_schemas import Program, Session, SessionFeedback

logger = logging.getLogger(__name__)

DEFAULT_REDUCTION_PERCENT = 5.0


class IntensityAdvice(BaseModel):
    """Outcome of a feedback review."""

    reduce_intensity: bool = Field(..., description="Whether a reduction is recommended")
    reduction_percent: float = Field(0.0, ge=0, description="Recommended VMA reduction (%)")
    hard_streak: int = Field(..., ge=0, description="Consecutive recent hard sessions")
    reviewed_sessions: List[str] = Field(
        default_factory=list, description="Ids of the sessions the advice is based on"
    )
    message: str = Field(..., description="Human-readable explanation")


class IntensityAdvisor:
    """
    Detect a "too hard" pattern from session feedback.

    Looks at completed sessions carrying feedback, in program order, and
    recommends lowering intensity when the last `window` of them were all
    rated hard.
    """

    def __init__(
        self,
        program: Program,
        window: int = 3,
        reduction_percent: float = DEFAULT_REDUCTION_PERCENT,
    ):
        """
        Initialize advisor with the athlete's program.

        Args:
            program: Program whose sessions carry feedback
            window: Number of recent rated sessions that must all be hard
            reduction_percent: Reduction to recommend when triggered
        """
        if window < 1:
            raise ValueError("window must be at least 1")
        self.program = program
        self.window = window
        self.reduction_percent = reduction_percent

    def rated_sessions(self) -> List[Session]:
        """Completed sessions with feedback, oldest first."""
        return [
            session
            for week in self.program.weeks
            for session in week.sessions
            if session.completed and session.feedback is not None and not session.is_rest
        ]

    def hard_streak(self) -> int:
        """Number of consecutive hard ratings at the end of the rated sessions."""
        streak = 0
        for session in reversed(self.rated_sessions()):
            if session.feedback != SessionFeedback.HARD:
                break
            streak += 1
        return streak

    def advise(self) -> IntensityAdvice:
        rated = self.rated_sessions()
        streak = self.hard_streak()
        recent = [s.id for s in rated[-self.window:]]

        if streak >= self.window:
            logger.info(
                "Last %d rated sessions were hard, recommending a %.0f%% VMA reduction",
                streak,
                self.reduction_percent,
            )
            return IntensityAdvice(
                reduce_intensity=True,
                reduction_percent=self.reduction_percent,
                hard_streak=streak,
                reviewed_sessions=recent,
                message=(
                    f"Your last {streak} sessions felt hard. "
                    f"Lowering your VMA by {self.reduction_percent:g}% will ease the paces."
                ),
            )

        return IntensityAdvice(
            reduce_intensity=False,
            hard_streak=streak,
            reviewed_sessions=recent,
            message="Intensity looks right, keep going.",
        )


def adapt_program_intensity(program: Program, reduction_percent: float) -> Program:
    """
    Lower the program VMA by a percentage, rounded to one decimal.

    The weeks are left untouched; programs are never partially regenerated.
    Programs without a VMA are returned unchanged.
    """
    if not (0 < reduction_percent < 100):
        raise ValueError(f"Reduction must be between 0 and 100%, got {reduction_percent}")

    updated = program.model_copy(deep=True)
    if not updated.vma:
        return updated

    new_vma = round(updated.vma * (1 - reduction_percent / 100), 1)
    logger.info("Program %s VMA %.1f -> %.1f", program.id, updated.vma, new_vma)
    updated.vma = new_vma
    return updated


def suggested_vma(program: Program, advice: IntensityAdvice) -> Optional[float]:
    """VMA the athlete would get by following the advice, if any."""
    if not advice.reduce_intensity or not program.vma:
        return None
    return round(program.vma * (1 - advice.reduction_percent / 100), 1)
