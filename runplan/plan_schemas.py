"""
Data schemas for running programs.

This module contains Pydantic models for representing generated programs,
including program settings, weekly schedules, sessions and their workout blocks.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class RaceDistance(str, Enum):
    """Target race distances supported by the generator."""

    TEN_K = "10k"
    HALF_MARATHON = "half_marathon"
    MARATHON = "marathon"


class AthleteLevel(str, Enum):
    """Self-declared athlete level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Weekday(str, Enum):
    """Days of the week, Monday first."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def position(self) -> int:
        """Position in the canonical Monday-first order (0-6)."""
        return WEEKDAY_ORDER.index(self)


WEEKDAY_ORDER: List[Weekday] = list(Weekday)


class SessionType(str, Enum):
    """Types of training sessions."""

    ENDURANCE = "endurance"
    TEMPO = "tempo"
    INTERVAL = "interval"
    LONG_RUN = "long_run"
    HILL = "hill"
    REST = "rest"


class BlockKind(str, Enum):
    """Phases of a single session."""

    WARMUP = "warmup"
    MAIN_SET = "main_set"
    COOLDOWN = "cooldown"
    INFO = "info"


class SessionFeedback(str, Enum):
    """How hard the athlete found a completed session."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class WeekPhase(str, Enum):
    """Periodization phase of a week."""

    BUILD_UP = "build_up"  # First weeks, no race-pace work in the long run
    PROGRESSION = "progression"
    RECOVERY = "recovery"  # Assimilation week, reduced intensity
    TAPER = "taper"  # Final weeks before the race


class RaceInfo(BaseModel):
    """Metadata of the target race, when picked from a race listing."""

    name: str = Field(..., min_length=1, description="Official race name")
    race_date: date = Field(..., description="Race date")
    elevation_gain_m: float = Field(
        0.0, ge=0, description="Total positive elevation of the course (meters)"
    )


class ProgramSettings(BaseModel):
    """
    Caller-supplied settings for a new program.

    Range checks stay loose on purpose: the generator clamps sessions per week
    and falls back to a default VMA instead of refusing the input.
    """

    distance: RaceDistance = Field(..., description="Target race distance")
    level: AthleteLevel = Field(..., description="Athlete level")
    race_name: str = Field("", description="Name of the target race")
    race_date: date = Field(..., description="Date of the target race")
    sessions_per_week: int = Field(..., description="Requested training sessions per week")
    time_objective: str = Field("", description="Finish time objective label (e.g. '< 50min')")
    vma: Optional[float] = Field(None, description="Maximal aerobic speed in km/h")
    race_info: Optional[RaceInfo] = Field(None, description="Optional race metadata")


class WorkoutBlock(BaseModel):
    """A labeled phase within a session (warmup, main set, cooldown, note)."""

    kind: BlockKind = Field(..., description="Block kind")
    duration_minutes: Optional[int] = Field(None, ge=0, description="Block duration in minutes")
    distance_km: Optional[float] = Field(None, ge=0, description="Block distance in km")
    details: str = Field(..., description="Human-readable description, may embed paces")
    intensity_percent: Optional[float] = Field(
        None, gt=0, description="Target intensity as a percentage of VMA"
    )


class Session(BaseModel):
    """
    One training day.

    `completed` and `feedback` are owned by the application after generation;
    the generator always emits them unset.
    """

    id: str = Field(..., min_length=1, description="Stable identifier, unique within a program")
    day: Weekday = Field(..., description="Day of the week for this session")
    session_type: SessionType = Field(..., description="Type of session")
    title: str = Field(..., description="Short human title")
    structure: List[WorkoutBlock] = Field(
        ..., min_length=1, description="Blocks in execution order"
    )
    duration_minutes: Optional[int] = Field(None, ge=0, description="Estimated total duration")
    distance_km: Optional[int] = Field(None, ge=0, description="Estimated total distance")
    completed: bool = Field(False, description="Whether the athlete completed the session")
    feedback: Optional[SessionFeedback] = Field(None, description="Perceived difficulty")

    @property
    def is_rest(self) -> bool:
        return self.session_type == SessionType.REST


class Week(BaseModel):
    """
    Single week of a program.

    Holds exactly one session per weekday, including rest days.
    """

    week_number: int = Field(..., ge=1, description="Week number in the program (1-based)")
    title: str = Field(..., description="Title reflecting the periodization phase")
    phase: WeekPhase = Field(..., description="Periodization phase of the week")
    sessions: List[Session] = Field(..., description="Sessions ordered Monday first")
    total_km: int = Field(..., ge=0, description="Sum of session distance estimates")
    sessions_count: int = Field(
        ..., ge=1, description="Configured sessions per week (used for progress display)"
    )

    @field_validator("sessions")
    @classmethod
    def validate_one_session_per_day(cls, v: List[Session]) -> List[Session]:
        """Ensure the week holds exactly one session per canonical day."""
        days_used = [session.day for session in v]
        if len(days_used) != len(set(days_used)):
            raise ValueError("Cannot have multiple sessions on the same day")
        if len(v) != len(WEEKDAY_ORDER):
            raise ValueError(f"A week must contain {len(WEEKDAY_ORDER)} sessions, got {len(v)}")
        return v

    def get_session(self, day: Weekday) -> Session:
        """Return the session scheduled on the given day."""
        for session in self.sessions:
            if session.day == day:
                return session
        raise KeyError(day)

    def training_sessions(self) -> List[Session]:
        """Non-rest sessions of the week."""
        return [s for s in self.sessions if not s.is_rest]


class Program(BaseModel):
    """
    Complete multi-week program.

    Echoes the settings it was generated from. The week list is fixed at
    generation time; only session completion, feedback and day assignment
    change afterwards.
    """

    id: str = Field(..., min_length=1, description="Creation timestamp (ISO 8601)")
    distance: RaceDistance
    level: AthleteLevel
    race_name: str = ""
    race_date: date
    sessions_per_week: int
    time_objective: str = ""
    vma: Optional[float] = None
    race_info: Optional[RaceInfo] = None
    start_date: date = Field(..., description="Date the program was generated from")
    weeks: List[Week] = Field(..., min_length=1, description="All weeks of the program")
    total_weeks: int = Field(..., ge=1, description="Number of weeks, fixed at generation")
    archived_at: Optional[datetime] = Field(None, description="Set when moved to history")

    @model_validator(mode="after")
    def validate_weeks(self):
        """Ensure sequential week numbering and unique session ids."""
        if len(self.weeks) != self.total_weeks:
            raise ValueError(
                f"Expected {self.total_weeks} weeks but got {len(self.weeks)} weeks"
            )

        for i, week in enumerate(self.weeks, start=1):
            if week.week_number != i:
                raise ValueError(
                    f"Week numbering must be sequential. Expected week {i}, got week {week.week_number}"
                )

        ids = [s.id for week in self.weeks for s in week.sessions]
        if len(ids) != len(set(ids)):
            raise ValueError("Session identifiers must be unique within a program")

        return self

    def get_week(self, week_number: int) -> Optional[Week]:
        if 1 <= week_number <= len(self.weeks):
            return self.weeks[week_number - 1]
        return None

    def get_phase_breakdown(self) -> dict:
        """
        Get the number of weeks in each periodization phase.

        Returns:
            Dictionary mapping phase names to week counts.
        """
        phase_counts = {}
        for week in self.weeks:
            phase_name = week.phase.value
            phase_counts[phase_name] = phase_counts.get(phase_name, 0) + 1
        return phase_counts

    def total_distance_km(self) -> int:
        return sum(week.total_km for week in self.weeks)
