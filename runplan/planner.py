"""
Running program generator.

This module creates periodized multi-week programs based on:
- Race distance and athlete level (session content and progression)
- Time to race (plan length, recovery cycle, taper)
- VMA (every pace is a percentage of it)
- Course elevation (hill repeats for hilly races)
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from runplan.plan_schemas import (
    Program,
    ProgramSettings,
    Session,
    SessionType,
    Week,
    WeekPhase,
    Weekday,
    WEEKDAY_ORDER,
    WorkoutBlock,
)
from runplan.schemas import PlannerConfig
from runplan.workouts import WorkoutBuilder, estimate_session

logger = logging.getLogger(__name__)

WEEK_TITLES = {
    WeekPhase.BUILD_UP: "Base Building - Week {n}",
    WeekPhase.PROGRESSION: "Development Cycle - Week {n}",
    WeekPhase.RECOVERY: "Assimilation Week",
    WeekPhase.TAPER: "Taper (Until Race Day)",
}


class TrainingPlanGenerator:
    """
    Generates periodized running programs from program settings.

    The generator:
    1. Computes the plan length from today to race day (with a floor)
    2. Picks training days from the weekly session count
    3. Classifies each week (build-up, progression, recovery, taper)
    4. Builds each session's workout structure for its type and phase
    5. Estimates session duration/distance and weekly totals

    Generation is a pure function of the settings, the configuration and the
    injected current date.
    """

    def __init__(self, config: Optional[PlannerConfig] = None):
        """
        Initialize the plan generator.

        Args:
            config: Planner configuration (defaults apply when omitted)
        """
        self.config = config or PlannerConfig()

    def generate(
        self,
        settings: ProgramSettings,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Program:
        """
        Generate a complete program.

        Args:
            settings: Program settings chosen by the athlete
            today: Plan start date (defaults to the current date)
            now: Creation timestamp used as program id (defaults to the current time)

        Returns:
            Program with every week and session generated
        """
        now = now or datetime.now(timezone.utc)
        today = today or now.date()

        total_weeks = self.compute_total_weeks(settings.race_date, today)
        sessions_per_week = self.config.clamp_sessions(settings.sessions_per_week)
        training_days = self.config.training_days(sessions_per_week)
        vma = self.effective_vma(settings.vma)

        if sessions_per_week != settings.sessions_per_week:
            logger.warning(
                "Unsupported sessions per week %s, using %s",
                settings.sessions_per_week,
                sessions_per_week,
            )
        if len(training_days) < sessions_per_week:
            logger.warning(
                "Only %d training days scheduled for %s sessions per week",
                len(training_days),
                sessions_per_week,
            )

        builder = WorkoutBuilder(self.config, vma, settings.distance, settings.level)
        hills_enabled = self.hills_enabled(settings)

        weeks = [
            self._generate_week(
                week_number=i,
                total_weeks=total_weeks,
                training_days=training_days,
                sessions_per_week=sessions_per_week,
                builder=builder,
                hills_enabled=hills_enabled,
            )
            for i in range(1, total_weeks + 1)
        ]

        program = Program(
            id=now.isoformat(),
            distance=settings.distance,
            level=settings.level,
            race_name=settings.race_name,
            race_date=settings.race_date,
            sessions_per_week=settings.sessions_per_week,
            time_objective=settings.time_objective,
            vma=settings.vma,
            race_info=settings.race_info,
            start_date=today,
            weeks=weeks,
            total_weeks=total_weeks,
        )

        logger.info(
            "Generated %d-week %s program (%s, %d sessions/week, VMA %.1f)",
            total_weeks,
            settings.distance.value,
            settings.level.value,
            sessions_per_week,
            vma,
        )
        return program

    # ===== PLAN SHAPE =====

    def compute_total_weeks(self, race_date: date, today: date) -> int:
        """Whole weeks until race day, never below the configured minimum."""
        total_days = (race_date - today).days
        return max(self.config.periodization.min_weeks, total_days // 7)

    def effective_vma(self, vma: Optional[float]) -> float:
        if vma is None or vma <= 0:
            return self.config.fallback_vma
        return vma

    def hills_enabled(self, settings: ProgramSettings) -> bool:
        """Hill repeats are only worth it on courses climbing past the distance threshold."""
        if settings.race_info is None:
            return False
        threshold = self.config.hills.elevation_thresholds_m[settings.distance]
        return settings.race_info.elevation_gain_m > threshold

    def week_phase(self, week_number: int, total_weeks: int) -> WeekPhase:
        """
        Determine the periodization phase of a week.

        Taper wins over recovery: a recovery slot falling in the final weeks
        is tapered instead.
        """
        p = self.config.periodization
        if week_number > total_weeks - p.taper_weeks:
            return WeekPhase.TAPER
        if week_number % p.recovery_every == 0:
            return WeekPhase.RECOVERY
        if week_number <= p.build_up_weeks:
            return WeekPhase.BUILD_UP
        return WeekPhase.PROGRESSION

    def is_hill_week(self, week_number: int, phase: WeekPhase) -> bool:
        return (
            phase == WeekPhase.PROGRESSION
            and (week_number - 1) % self.config.hills.week_interval == 0
        )

    # ===== WEEKS =====

    def _generate_week(
        self,
        week_number: int,
        total_weeks: int,
        training_days: List[Weekday],
        sessions_per_week: int,
        builder: WorkoutBuilder,
        hills_enabled: bool,
    ) -> Week:
        phase = self.week_phase(week_number, total_weeks)
        logger.debug("Week %d/%d: %s", week_number, total_weeks, phase.value)

        sessions = []
        for day in WEEKDAY_ORDER:
            if day in training_days:
                session_type, title, blocks = self._plan_training_day(
                    day=day,
                    week_number=week_number,
                    total_weeks=total_weeks,
                    phase=phase,
                    training_days=training_days,
                    sessions_per_week=sessions_per_week,
                    builder=builder,
                    hills_enabled=hills_enabled,
                )
            else:
                session_type, title, blocks = SessionType.REST, "Rest", builder.rest()
            sessions.append(self._make_session(week_number, day, session_type, title, blocks, builder))

        sessions.sort(key=lambda s: s.day.position)

        return Week(
            week_number=week_number,
            title=WEEK_TITLES[phase].format(n=week_number),
            phase=phase,
            sessions=sessions,
            total_km=sum(s.distance_km or 0 for s in sessions),
            sessions_count=sessions_per_week,
        )

    def _plan_training_day(
        self,
        day: Weekday,
        week_number: int,
        total_weeks: int,
        phase: WeekPhase,
        training_days: List[Weekday],
        sessions_per_week: int,
        builder: WorkoutBuilder,
        hills_enabled: bool,
    ):
        """
        Pick the session type, title and blocks of a training day.

        Sunday holds the long run, the first training day the quality session,
        Thursday the tempo run (three sessions or more), Wednesday an easy run,
        and any other day a recovery jog.

        Returns:
            Tuple of (session_type, title, blocks)
        """
        is_recovery = phase == WeekPhase.RECOVERY
        is_taper = phase == WeekPhase.TAPER
        factor = self.config.periodization.taper_factor(total_weeks - week_number)

        if day == Weekday.SUNDAY:
            if is_taper:
                return SessionType.LONG_RUN, "Light Long Run", builder.taper_long_run(week_number, factor)
            with_race_pace = phase == WeekPhase.PROGRESSION and week_number % 2 == 0
            title = "Easy Long Run" if is_recovery else "The Long Run"
            return SessionType.LONG_RUN, title, builder.long_run(week_number, is_recovery, with_race_pace)

        if day == training_days[0]:
            if is_taper:
                return SessionType.TEMPO, "Race Pace Reminder", builder.taper_reminder(week_number, factor)
            if hills_enabled and self.is_hill_week(week_number, phase):
                return SessionType.HILL, "Hill Repeats", builder.hill(week_number)
            title = "Light VMA" if is_recovery else "VMA & Intensity"
            return SessionType.INTERVAL, title, builder.interval(week_number, is_recovery)

        if day == Weekday.THURSDAY and sessions_per_week >= 3:
            if is_taper:
                return SessionType.ENDURANCE, "Easy Run", builder.taper_easy(week_number, factor)
            if is_recovery:
                return SessionType.ENDURANCE, "Easy Run", builder.endurance(week_number, True)
            return SessionType.TEMPO, "Race Pace Work", builder.tempo(week_number)

        if day == Weekday.WEDNESDAY:
            if is_taper:
                return SessionType.ENDURANCE, "Easy Run", builder.taper_easy(week_number, factor)
            return SessionType.ENDURANCE, "Easy Run", builder.endurance(week_number, is_recovery)

        if is_taper:
            return (
                SessionType.ENDURANCE,
                "Recovery Jog",
                builder.taper_easy(week_number, factor, recovery_jog=True),
            )
        return (
            SessionType.ENDURANCE,
            "Recovery Jog",
            builder.endurance(week_number, is_recovery, recovery_jog=True),
        )

    def _make_session(
        self,
        week_number: int,
        day: Weekday,
        session_type: SessionType,
        title: str,
        blocks: List[WorkoutBlock],
        builder: WorkoutBuilder,
    ) -> Session:
        duration, distance = estimate_session(
            session_type, blocks, builder.vma, self.config.estimation
        )
        return Session(
            id=f"w{week_number}-{day.value}-{session_type.value}",
            day=day,
            session_type=session_type,
            title=title,
            structure=blocks,
            duration_minutes=duration,
            distance_km=distance,
        )


def generate_plan(
    settings: ProgramSettings,
    today: Optional[date] = None,
    config: Optional[PlannerConfig] = None,
    now: Optional[datetime] = None,
) -> Program:
    """
    Generate a program from settings.

    Convenience wrapper around TrainingPlanGenerator.generate; `today` is
    injectable so plans can be reproduced.
    """
    return TrainingPlanGenerator(config).generate(settings, today=today, now=now)
