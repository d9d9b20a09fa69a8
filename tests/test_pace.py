"""
Tests for pace computation.

Covers:
- Pace formatting from VMA and percentage
- Unavailable paces for missing or non-positive inputs
- Rounding carry into the minute
- Pace range ordering
"""

import pytest

from runplan.pace import PACE_NOT_AVAILABLE, minutes_for_distance, pace_at, pace_range


def test_pace_at_full_vma():
    """Test that 100% of 15 km/h is 4 minutes per km."""
    assert pace_at(15, 100) == "4'00\""


def test_pace_at_half_vma():
    """Test that 50% of 12 km/h is 10 minutes per km."""
    assert pace_at(12, 50) == "10'00\""


def test_pace_at_rounds_seconds():
    """Test that seconds are rounded to the nearest whole second."""
    # 60 / (14 * 0.70) = 6.1224 min -> 6'07"
    assert pace_at(14, 70) == "6'07\""
    # 60 / 14 = 4.2857 min -> 4'17"
    assert pace_at(14, 100) == "4'17\""


def test_pace_at_carries_sixty_seconds():
    """Test that 59.5+ seconds roll over into the next minute."""
    # 60 / 12.012 = 4.995 min -> 4'59.7" -> 5'00"
    assert pace_at(12.012, 100) == "5'00\""


@pytest.mark.parametrize(
    "vma,percent",
    [(0, 100), (-3, 100), (None, 100), (12, 0), (12, -10)],
)
def test_pace_at_not_available(vma, percent):
    """Test that non-positive inputs yield the N/A sentinel."""
    assert pace_at(vma, percent) == PACE_NOT_AVAILABLE


def test_pace_range_fast_first():
    """Test that the high percentage (faster pace) comes first."""
    assert pace_range(12, 65, 70) == "7'09\" - 7'42\"/km"


def test_pace_range_without_vma():
    """Test that a missing VMA gives N/A on both ends."""
    assert pace_range(None, 65, 70) == "N/A - N/A/km"


def test_minutes_for_distance():
    """Test running time for a distance at a percentage of VMA."""
    assert minutes_for_distance(12, 100, 1.0) == pytest.approx(5.0)
    assert minutes_for_distance(15, 100, 0.4) == pytest.approx(1.6)
