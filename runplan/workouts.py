"""
Workout structure synthesis.

Builds the ordered block list of each session type from the week index,
athlete level and VMA, and estimates session duration and distance.
"""

import math
from typing import List, Optional, Tuple

from runplan.pace import minutes_for_distance, pace_at, pace_range
from runplan.plan_schemas import (
    AthleteLevel,
    BlockKind,
    RaceDistance,
    SessionType,
    WorkoutBlock,
)
from runplan.schemas import EstimationConfig, PlannerConfig

# Percent-of-VMA bands
EASY_BAND = (65, 70)
RECOVERY_JOG_BAND = (60, 65)
TEMPO_BANDS = {
    RaceDistance.TEN_K: (83, 88),
    RaceDistance.HALF_MARATHON: (80, 85),
    RaceDistance.MARATHON: (75, 80),
}
RACE_PACE_PERCENT = {
    RaceDistance.TEN_K: 85,
    RaceDistance.HALF_MARATHON: 85,
    RaceDistance.MARATHON: 80,
}
RECOVERY_INTERVAL_PERCENT = 90

BASE_REPS = {
    AthleteLevel.BEGINNER: 6,
    AthleteLevel.INTERMEDIATE: 8,
    AthleteLevel.ADVANCED: 10,
}
KILOMETER_REPS = {
    AthleteLevel.BEGINNER: 3,
    AthleteLevel.INTERMEDIATE: 4,
    AthleteLevel.ADVANCED: 5,
}
MAX_EXTRA_REPS = 2


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_to_five(minutes: float, minimum: int = 15) -> int:
    return max(minimum, 5 * round_half_up(minutes / 5))


def _midpoint(band: Tuple[int, int]) -> float:
    return (band[0] + band[1]) / 2


# ============================================================================
# Estimation
# ============================================================================


def block_minutes(block: WorkoutBlock, estimation: Optional[EstimationConfig] = None) -> int:
    """
    Minutes a block counts for.

    Blocks without an explicit duration use the default-duration policy,
    so every consumer (estimates, device export) agrees on the same total.
    """
    if block.duration_minutes is not None:
        return block.duration_minutes
    estimation = estimation or EstimationConfig()
    return estimation.default_block_minutes.get(block.kind, 0)


def estimate_session(
    session_type: SessionType,
    blocks: List[WorkoutBlock],
    vma: float,
    estimation: Optional[EstimationConfig] = None,
) -> Tuple[Optional[int], Optional[int]]:
    """
    Estimate (duration_minutes, distance_km) for a session.

    Distance is a coarse average-pace estimate: duration times VMA times a
    per-type coefficient, rounded to the nearest kilometer. Rest sessions
    have neither.
    """
    if session_type == SessionType.REST:
        return None, None

    estimation = estimation or EstimationConfig()
    duration = sum(block_minutes(b, estimation) for b in blocks)
    coefficient = estimation.distance_coefficients.get(session_type, 0.7)
    distance = round_half_up((duration / 60) * vma * coefficient)
    return duration, distance


# ============================================================================
# Builders
# ============================================================================


class WorkoutBuilder:
    """
    Produces workout blocks for one athlete.

    Every method returns a fresh list of blocks in execution order.
    """

    def __init__(
        self,
        config: PlannerConfig,
        vma: float,
        distance: RaceDistance,
        level: AthleteLevel,
    ):
        self.config = config
        self.vma = vma
        self.distance = distance
        self.level = level

    # ----- helpers -----

    def _extra_reps(self, week: int) -> int:
        """One more repetition every recovery cycle, capped."""
        cycle = self.config.periodization.recovery_every
        return min(MAX_EXTRA_REPS, (week - 1) // cycle)

    def _run_minutes(self, percent: float, distance_km: float) -> float:
        return minutes_for_distance(self.vma, percent, distance_km)

    @property
    def race_pace_percent(self) -> int:
        return RACE_PACE_PERCENT[self.distance]

    # ----- interval -----

    def interval(self, week: int, is_recovery: bool) -> List[WorkoutBlock]:
        """
        VMA session: warmup, one main set, active-recovery note, cooldown.

        The main set rotates on the week index to avoid monotony:
        1 short repeats, 2 medium repeats, otherwise a pyramid (10k) or a
        fartlek (half marathon and marathon). Assimilation weeks keep a
        single light block.
        """
        warmup_minutes = 15 if is_recovery else 20
        warmup = WorkoutBlock(
            kind=BlockKind.WARMUP,
            duration_minutes=warmup_minutes,
            details=f"{warmup_minutes}' progressive jog + running drills",
        )
        cooldown = WorkoutBlock(
            kind=BlockKind.COOLDOWN,
            duration_minutes=10,
            details="10' very easy cooldown jog",
        )

        if is_recovery:
            core = WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=10,
                intensity_percent=RECOVERY_INTERVAL_PERCENT,
                details=(
                    f"10x 30\"/30\" at {RECOVERY_INTERVAL_PERCENT}% VMA "
                    f"({pace_at(self.vma, RECOVERY_INTERVAL_PERCENT)}/km). Stay relaxed."
                ),
            )
            return [warmup, core, cooldown]

        cycle_type = week % 4
        if self.distance == RaceDistance.TEN_K:
            core = self._ten_k_main_set(week, cycle_type)
        else:
            core = self._road_main_set(week, cycle_type)

        recovery_info = WorkoutBlock(
            kind=BlockKind.INFO,
            details="Active recovery: keep jogging between repetitions.",
        )
        return [warmup, core, recovery_info, cooldown]

    def _ten_k_main_set(self, week: int, cycle_type: int) -> WorkoutBlock:
        extra = self._extra_reps(week)

        if cycle_type == 1:
            reps = BASE_REPS[self.level] + extra
            percent = 100 if self.level == AthleteLevel.BEGINNER else 105
            return WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=2 * reps + 2,
                intensity_percent=percent,
                details=(
                    f"2x({reps}x 30\"/30\") at {percent}% VMA "
                    f"({pace_at(self.vma, percent)}/km). 2' recovery between sets."
                ),
            )

        if cycle_type == 2:
            reps = BASE_REPS[self.level] + extra
            effort = self._run_minutes(95, 0.4)
            return WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=round_half_up(reps * (effort + 1.25)),
                distance_km=round(reps * 0.4, 1),
                intensity_percent=95,
                details=f"{reps}x 400m at {pace_at(self.vma, 95)}/km. 1'15 recovery.",
            )

        if self.level == AthleteLevel.ADVANCED:
            steps = [200, 400, 600, 800, 600, 400, 200]
        else:
            steps = [200, 400, 600, 400, 200]
        total_km = sum(steps) / 1000
        ladder = "-".join(str(s) for s in steps)
        return WorkoutBlock(
            kind=BlockKind.MAIN_SET,
            duration_minutes=round_half_up(2 * self._run_minutes(100, total_km)),
            distance_km=total_km,
            intensity_percent=100,
            details=(
                f"Pyramid {ladder}m at {pace_at(self.vma, 100)}/km. "
                "Recovery equal to the effort time."
            ),
        )

    def _road_main_set(self, week: int, cycle_type: int) -> WorkoutBlock:
        extra = self._extra_reps(week)

        if cycle_type == 1:
            reps = BASE_REPS[self.level] + 2 + extra
            return WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=2 * reps,
                intensity_percent=100,
                details=(
                    f"{reps}x 1'/1' at 100% VMA ({pace_at(self.vma, 100)}/km). "
                    "Jog the recoveries."
                ),
            )

        if cycle_type == 2:
            reps = KILOMETER_REPS[self.level] + extra
            effort = self._run_minutes(92, 1.0)
            return WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=round_half_up(reps * (effort + 2)),
                distance_km=float(reps),
                intensity_percent=92,
                details=f"{reps}x 1000m at 10 km pace ({pace_at(self.vma, 92)}/km). 2' recovery.",
            )

        rounds = 1 if self.level == AthleteLevel.BEGINNER else 2
        pattern = "-".join(["3'-2'-1'"] * rounds)
        return WorkoutBlock(
            kind=BlockKind.MAIN_SET,
            duration_minutes=9 * rounds,
            intensity_percent=95,
            details=(
                f"Fartlek {pattern} fast at 95% VMA ({pace_at(self.vma, 95)}/km). "
                "1' jog between efforts."
            ),
        )

    # ----- tempo -----

    def tempo(self, week: int) -> List[WorkoutBlock]:
        """
        Race-specific tempo: long blocks on odd weeks, a continuous segment
        on even weeks. Both grow with the week index and are capped.
        """
        band = TEMPO_BANDS[self.distance]
        pace = pace_range(self.vma, *band)

        warmup = WorkoutBlock(
            kind=BlockKind.WARMUP,
            duration_minutes=15,
            details="15' jog + 3 strides",
        )
        cooldown = WorkoutBlock(
            kind=BlockKind.COOLDOWN,
            duration_minutes=10,
            details="10' easy cooldown jog",
        )

        if week % 2 != 0:
            block_time = min(20, 10 + week // 2)
            core = WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=2 * block_time + 2,
                intensity_percent=_midpoint(band),
                details=f"2x {block_time}' at target race pace ({pace}). 2' recovery.",
            )
        else:
            duration = min(40, 20 + week)
            core = WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=duration,
                intensity_percent=_midpoint(band),
                details=f"{duration}' continuous at target race pace ({pace}).",
            )

        return [warmup, core, cooldown]

    # ----- long run -----

    def long_run_minutes(self, week: int, is_recovery: bool) -> int:
        """Nominal long run duration, capped by race distance."""
        lr = self.config.long_run
        base = lr.base_minutes[self.level]
        if is_recovery:
            base -= lr.recovery_reduction
        increase = 0 if is_recovery else week * lr.weekly_increment[self.level]
        return min(base + increase, lr.max_minutes[self.distance])

    def long_run(self, week: int, is_recovery: bool, with_race_pace: bool) -> List[WorkoutBlock]:
        """
        Sunday long run.

        With `with_race_pace`, a race-pace block sits between an easy start
        and an easy finish; otherwise the whole run is one easy block.
        """
        lr = self.config.long_run
        current = self.long_run_minutes(week, is_recovery)
        easy_pace = pace_range(self.vma, *EASY_BAND)

        if not with_race_pace:
            return [
                WorkoutBlock(
                    kind=BlockKind.MAIN_SET,
                    duration_minutes=current,
                    intensity_percent=_midpoint(EASY_BAND),
                    details=f"Classic long run at a conversational effort ({easy_pace}).",
                )
            ]

        active = min(lr.race_pace_block_cap, week * lr.race_pace_minutes_per_week)
        percent = self.race_pace_percent
        return [
            WorkoutBlock(
                kind=BlockKind.WARMUP,
                duration_minutes=20,
                intensity_percent=_midpoint(EASY_BAND),
                details=f"20' easy endurance ({easy_pace}).",
            ),
            WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=active,
                intensity_percent=percent,
                details=f"{active}' at race pace ({pace_at(self.vma, percent)}/km).",
            ),
            WorkoutBlock(
                kind=BlockKind.COOLDOWN,
                duration_minutes=max(0, current - 20 - active),
                intensity_percent=_midpoint(EASY_BAND),
                details="Finish at an easy endurance effort.",
            ),
        ]

    # ----- hills -----

    def hill(self, week: int) -> List[WorkoutBlock]:
        """Hill repeats: N uphill efforts with a jog-down recovery twice as long."""
        hills = self.config.hills
        reps = hills.repetitions[self.level]
        effort = hills.effort_seconds[self.level]
        return [
            WorkoutBlock(
                kind=BlockKind.WARMUP,
                duration_minutes=20,
                details="20' easy jog + running drills",
            ),
            WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=round_half_up(reps * effort * 3 / 60),
                details=(
                    f"{reps}x {effort}\" uphill at a strong, steady effort. "
                    "Jog back down to recover."
                ),
            ),
            WorkoutBlock(
                kind=BlockKind.COOLDOWN,
                duration_minutes=15,
                details="15' easy cooldown jog on the flat",
            ),
        ]

    # ----- easy -----

    def endurance_minutes(self, week: int, is_recovery: bool, recovery_jog: bool = False) -> int:
        cfg = self.config.endurance
        extra = 0 if is_recovery else min(cfg.max_extra_minutes, 5 * ((week - 1) // 2))
        minutes = cfg.base_minutes[self.level] + extra
        if recovery_jog:
            minutes -= cfg.recovery_jog_offset
        return minutes

    def endurance(self, week: int, is_recovery: bool, recovery_jog: bool = False) -> List[WorkoutBlock]:
        minutes = self.endurance_minutes(week, is_recovery, recovery_jog)
        band = RECOVERY_JOG_BAND if recovery_jog else EASY_BAND
        if recovery_jog:
            details = f"{minutes}' very easy recovery jog ({pace_range(self.vma, *band)})."
        else:
            details = f"{minutes}' at easy endurance pace ({pace_range(self.vma, *band)})."
        return [
            WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=minutes,
                intensity_percent=_midpoint(band),
                details=details,
            )
        ]

    def rest(self) -> List[WorkoutBlock]:
        return [WorkoutBlock(kind=BlockKind.INFO, details="Full rest day.")]

    # ----- taper -----

    def taper_long_run(self, week: int, factor: float) -> List[WorkoutBlock]:
        minutes = round_to_five(self.long_run_minutes(week, False) * factor)
        return [
            WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=minutes,
                intensity_percent=_midpoint(EASY_BAND),
                details=(
                    f"{minutes}' light run ({pace_range(self.vma, *EASY_BAND)}). "
                    "Save your legs for race day."
                ),
            )
        ]

    def taper_easy(self, week: int, factor: float, recovery_jog: bool = False) -> List[WorkoutBlock]:
        minutes = round_to_five(self.endurance_minutes(week, False, recovery_jog) * factor)
        band = RECOVERY_JOG_BAND if recovery_jog else EASY_BAND
        return [
            WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=minutes,
                intensity_percent=_midpoint(band),
                details=f"{minutes}' easy maintenance jog ({pace_range(self.vma, *band)}).",
            )
        ]

    def taper_reminder(self, week: int, factor: float) -> List[WorkoutBlock]:
        """
        Short race-pace reminder sized as a share of the week's nominal tempo.

        Two repetitions before race week, one continuous segment in race
        week. Pace only sets the covered distance, never the duration.
        """
        percent = self.race_pace_percent
        pace = pace_at(self.vma, percent)
        nominal = sum(block_minutes(b, self.config.estimation) for b in self.tempo(week))
        total = round_to_five(nominal * factor, minimum=20)
        core_minutes = total - 15

        if factor > 0.5:
            rep = (core_minutes - 2) // 2
            race_minutes = 2 * rep
            core_details = f"2x {rep}' at race pace ({pace}/km). 2' jog."
        else:
            race_minutes = core_minutes
            core_details = f"{core_minutes}' at race pace ({pace}/km)."

        return [
            WorkoutBlock(
                kind=BlockKind.WARMUP,
                duration_minutes=10,
                details="10' easy jog",
            ),
            WorkoutBlock(
                kind=BlockKind.MAIN_SET,
                duration_minutes=core_minutes,
                distance_km=round(race_minutes / self._run_minutes(percent, 1.0), 1),
                intensity_percent=percent,
                details=core_details,
            ),
            WorkoutBlock(
                kind=BlockKind.COOLDOWN,
                duration_minutes=5,
                details="5' very easy cooldown jog",
            ),
        ]
