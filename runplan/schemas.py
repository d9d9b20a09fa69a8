"""
Pydantic models for planner configuration.

This module gathers every heuristic constant of the plan generator:
- Periodization: plan length floor, recovery cycle, taper length and factors
- Session programming: long run, easy runs, hill repeats
- Estimation: default block durations and distance coefficients

Defaults reproduce the built-in behavior; a JSON file can override any of them.
"""

import json
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field, model_validator

from runplan.plan_schemas import (
    AthleteLevel,
    BlockKind,
    RaceDistance,
    SessionType,
    Weekday,
)


# ============================================================================
# Periodization
# ============================================================================


class PeriodizationConfig(BaseModel):
    """Week-level periodization constants."""

    min_weeks: int = Field(
        4, ge=1, le=12, description="Minimum plan length, applied when the race is near or past"
    )
    build_up_weeks: int = Field(
        2, ge=0, description="Opening weeks without race-pace work in the long run"
    )
    recovery_every: int = Field(
        4, ge=2, description="Every Nth week is an assimilation week (unless tapering)"
    )
    taper_weeks: int = Field(2, ge=1, le=3, description="Final weeks before the race")
    taper_factors: List[float] = Field(
        default_factory=lambda: [0.6, 0.4],
        min_length=1,
        description="Duration factor per taper week, the last entry applies to race week",
    )

    @model_validator(mode="after")
    def validate_taper_factors(self):
        """Factors must reduce load, never increase it."""
        for factor in self.taper_factors:
            if not (0.0 < factor < 1.0):
                raise ValueError(f"Taper factors must be in (0, 1), got {factor}")
        return self

    def taper_factor(self, weeks_to_race: int) -> float:
        """
        Duration factor for a taper week.

        Args:
            weeks_to_race: 0 for race week, 1 for the week before, ...

        Returns:
            Multiplier applied to nominal session durations
        """
        factors = self.taper_factors
        index = len(factors) - 1 - weeks_to_race
        return factors[max(0, min(index, len(factors) - 1))]


# ============================================================================
# Session programming
# ============================================================================


class LongRunConfig(BaseModel):
    """Progression of the Sunday long run."""

    base_minutes: Dict[AthleteLevel, int] = Field(
        default_factory=lambda: {
            AthleteLevel.BEGINNER: 50,
            AthleteLevel.INTERMEDIATE: 70,
            AthleteLevel.ADVANCED: 80,
        }
    )
    weekly_increment: Dict[AthleteLevel, int] = Field(
        default_factory=lambda: {
            AthleteLevel.BEGINNER: 5,
            AthleteLevel.INTERMEDIATE: 5,
            AthleteLevel.ADVANCED: 6,
        }
    )
    recovery_reduction: int = Field(15, ge=0, description="Minutes removed in recovery weeks")
    max_minutes: Dict[RaceDistance, int] = Field(
        default_factory=lambda: {
            RaceDistance.TEN_K: 90,
            RaceDistance.HALF_MARATHON: 130,
            RaceDistance.MARATHON: 180,
        }
    )
    race_pace_block_cap: int = Field(40, description="Longest race-pace block in minutes")
    race_pace_minutes_per_week: int = Field(3, description="Race-pace block growth per week index")


class EnduranceConfig(BaseModel):
    """Easy runs and recovery jogs."""

    base_minutes: Dict[AthleteLevel, int] = Field(
        default_factory=lambda: {
            AthleteLevel.BEGINNER: 40,
            AthleteLevel.INTERMEDIATE: 45,
            AthleteLevel.ADVANCED: 50,
        }
    )
    max_extra_minutes: int = Field(15, ge=0)
    recovery_jog_offset: int = Field(5, ge=0, description="Recovery jogs are this much shorter")


class HillConfig(BaseModel):
    """
    Hill repeat scheduling.

    Hills replace the interval session only when the course climbs more than
    the distance threshold, and only in every `week_interval`-th progression week.
    """

    elevation_thresholds_m: Dict[RaceDistance, float] = Field(
        default_factory=lambda: {
            RaceDistance.TEN_K: 150.0,
            RaceDistance.HALF_MARATHON: 300.0,
            RaceDistance.MARATHON: 500.0,
        }
    )
    week_interval: int = Field(2, ge=1)
    repetitions: Dict[AthleteLevel, int] = Field(
        default_factory=lambda: {
            AthleteLevel.BEGINNER: 6,
            AthleteLevel.INTERMEDIATE: 8,
            AthleteLevel.ADVANCED: 10,
        }
    )
    effort_seconds: Dict[AthleteLevel, int] = Field(
        default_factory=lambda: {
            AthleteLevel.BEGINNER: 45,
            AthleteLevel.INTERMEDIATE: 60,
            AthleteLevel.ADVANCED: 75,
        }
    )


# ============================================================================
# Estimation
# ============================================================================


DEFAULT_BLOCK_MINUTES: Dict[BlockKind, int] = {
    BlockKind.WARMUP: 20,
    BlockKind.MAIN_SET: 20,
    BlockKind.COOLDOWN: 20,
    BlockKind.INFO: 0,
}


class EstimationConfig(BaseModel):
    """Duration and distance estimation policy."""

    default_block_minutes: Dict[BlockKind, int] = Field(
        default_factory=lambda: dict(DEFAULT_BLOCK_MINUTES),
        description=(
            "Minutes counted for blocks without an explicit duration. "
            "Info blocks deviate from the 20-minute fallback and count 0"
        ),
    )
    distance_coefficients: Dict[SessionType, float] = Field(
        default_factory=lambda: {
            SessionType.ENDURANCE: 0.7,
            SessionType.LONG_RUN: 0.7,
            SessionType.TEMPO: 0.8,
            SessionType.INTERVAL: 0.8,
            SessionType.HILL: 0.8,
            SessionType.REST: 0.0,
        },
        description="Average fraction of VMA held over a whole session, by type",
    )


DEFAULT_DAY_PATTERNS: Dict[int, List[Weekday]] = {
    2: [Weekday.WEDNESDAY, Weekday.SUNDAY],
    3: [Weekday.TUESDAY, Weekday.THURSDAY, Weekday.SUNDAY],
    4: [Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.FRIDAY, Weekday.SUNDAY],
    5: [Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.SATURDAY, Weekday.SUNDAY],
}


class PlannerConfig(BaseModel):
    """Root configuration of the plan generator."""

    fallback_vma: float = Field(
        14.0, gt=0, description="VMA (km/h) used when the settings carry none"
    )
    min_sessions_per_week: int = Field(2, ge=2)
    max_sessions_per_week: int = Field(6, ge=2, le=7)
    day_patterns: Dict[int, List[Weekday]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_DAY_PATTERNS.items()},
        description="Training days keyed by sessions per week; larger counts use the largest key",
    )
    periodization: PeriodizationConfig = Field(default_factory=PeriodizationConfig)
    long_run: LongRunConfig = Field(default_factory=LongRunConfig)
    endurance: EnduranceConfig = Field(default_factory=EnduranceConfig)
    hills: HillConfig = Field(default_factory=HillConfig)
    estimation: EstimationConfig = Field(default_factory=EstimationConfig)

    @model_validator(mode="after")
    def validate_day_patterns(self):
        """Every pattern must end with Sunday, the long run day."""
        if not self.day_patterns:
            raise ValueError("At least one day pattern is required")
        for count, days in self.day_patterns.items():
            if len(days) != len(set(days)):
                raise ValueError(f"Day pattern for {count} sessions repeats a day")
            if not days or days[-1] != Weekday.SUNDAY:
                raise ValueError(f"Day pattern for {count} sessions must end on Sunday")
        if self.min_sessions_per_week > self.max_sessions_per_week:
            raise ValueError("min_sessions_per_week cannot exceed max_sessions_per_week")
        return self

    def clamp_sessions(self, sessions_per_week: int) -> int:
        """Clamp a requested session count into the supported range."""
        return max(self.min_sessions_per_week, min(self.max_sessions_per_week, sessions_per_week))

    def training_days(self, sessions_per_week: int) -> List[Weekday]:
        """
        Training days for a (clamped) session count.

        Counts without their own pattern use the closest smaller key, so
        six sessions reuse the five-day pattern.
        """
        keys = sorted(self.day_patterns)
        chosen = keys[0]
        for key in keys:
            if key <= sessions_per_week:
                chosen = key
        return list(self.day_patterns[chosen])

    @classmethod
    def from_file(cls, config_path: Path) -> "PlannerConfig":
        """
        Load planner configuration from a JSON file.

        Args:
            config_path: Path to the configuration JSON file

        Returns:
            PlannerConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the JSON is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Planner config file not found: {config_path}")

        with open(config_path, "r") as f:
            config_data = json.load(f)

        try:
            return cls(**config_data)
        except Exception as e:
            raise ValueError(f"Invalid planner config file: {e}")
