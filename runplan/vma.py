"""
VMA estimation from field tests.

Supports the three tests offered to athletes who don't know their VMA:
- Half-Cooper: distance covered in 6 minutes
- VAMEVAL: last completed stage of the incremental track test
- Race time: recent 5 km or 10 km result
"""

from enum import Enum


class RaceTestDistance(str, Enum):
    """Race distances accepted for VMA estimation."""

    FIVE_K = "5k"
    TEN_K = "10k"


# Share of VMA an athlete holds over each race distance
RACE_VMA_FRACTION = {
    RaceTestDistance.FIVE_K: (5000, 0.95),
    RaceTestDistance.TEN_K: (10000, 0.92),
}


def vma_from_half_cooper(distance_m: float) -> float:
    """
    Estimate VMA from a half-Cooper test.

    Running 6 minutes at VMA covers a tenth of the hourly speed, so
    distance / 100 gives km/h directly.
    """
    if distance_m <= 0:
        raise ValueError("Half-Cooper distance must be positive")
    return round(distance_m / 100, 2)


def vma_from_vameval(stage: int) -> float:
    """Estimate VMA from the last completed VAMEVAL stage (8 km/h + 0.5 km/h per stage)."""
    if stage <= 0:
        raise ValueError("VAMEVAL stage must be positive")
    return round(8 + 0.5 * stage, 2)


def vma_from_race_time(distance: RaceTestDistance, total_seconds: float) -> float:
    """
    Estimate VMA from a recent race result.

    Args:
        distance: Race distance (5k or 10k)
        total_seconds: Finish time in seconds

    Returns:
        Estimated VMA in km/h
    """
    if total_seconds <= 0:
        raise ValueError("Race time must be positive")

    distance_m, fraction = RACE_VMA_FRACTION[RaceTestDistance(distance)]
    speed_kmh = distance_m / total_seconds * 3.6
    return round(speed_kmh / fraction, 2)
