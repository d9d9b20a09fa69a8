"""
Pace computation from maximal aerobic speed (VMA).

All paces are expressed as a percentage of VMA and formatted as
minutes'seconds" per kilometer.
"""

import math
from typing import Optional

PACE_NOT_AVAILABLE = "N/A"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def pace_at(vma: Optional[float], percent: float) -> str:
    """
    Pace per kilometer when running at `percent` % of VMA.

    Args:
        vma: Maximal aerobic speed in km/h
        percent: Target intensity as a percentage of VMA (typically 60-105)

    Returns:
        Pace string such as 4'00", or "N/A" when the speed is not positive
    """
    if not vma or vma <= 0 or percent <= 0:
        return PACE_NOT_AVAILABLE

    speed = vma * (percent / 100)
    pace = 60 / speed
    minutes = math.floor(pace)
    seconds = _round_half_up((pace - minutes) * 60)
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}'{seconds:02d}\""


def pace_range(vma: Optional[float], low_percent: float, high_percent: float) -> str:
    """
    Pace range ordered fast to slow, e.g. 5'08" - 5'33"/km.

    The high percentage gives the faster pace and comes first.
    """
    return f"{pace_at(vma, high_percent)} - {pace_at(vma, low_percent)}/km"


def minutes_for_distance(vma: float, percent: float, distance_km: float) -> float:
    """Running time in minutes to cover `distance_km` at `percent` % of VMA."""
    speed = vma * (percent / 100)
    return distance_km / speed * 60
