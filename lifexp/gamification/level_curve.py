"""
Level Curve

Pure mapping between cumulative XP and avatar level.

Leveling Curve:
- Advancing from level n to n+1 costs round(100 * 1.5^(n-1)) XP
  (100, 150, 225, 338, 506, ...)
- Level 100 is the cap: XP earned past it is kept as XP into the level
  but never raises the level further

Rounding is half-up so thresholds do not depend on banker's rounding.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List
import math

from lifexp.exceptions import ValidationError

BASE_XP = 100
GROWTH = 1.5
MAX_LEVEL = 100


@dataclass(frozen=True)
class LevelProgress:
    """Where a cumulative XP total sits on the curve"""
    level: int
    xp_into_level: int
    xp_to_next_level: int

    @property
    def is_max_level(self) -> bool:
        return self.level >= MAX_LEVEL


def _threshold(level: int) -> int:
    return math.floor(BASE_XP * GROWTH ** (level - 1) + 0.5)


def _build_cumulative_table() -> List[int]:
    # table[i] is the cumulative XP needed to reach level i + 1
    table = [0]
    for level in range(1, MAX_LEVEL):
        table.append(table[-1] + _threshold(level))
    return table


_CUMULATIVE_XP = _build_cumulative_table()


def _check_int(value, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field, value=value)


def xp_threshold(level: int) -> int:
    """
    XP needed to advance from `level` to `level + 1`

    Args:
        level: Current level (1 to MAX_LEVEL - 1)

    Example:
        >>> xp_threshold(1)
        100
        >>> xp_threshold(4)
        338
    """
    _check_int(level, "level")
    if level < 1 or level >= MAX_LEVEL:
        raise ValidationError(
            f"Level must be between 1 and {MAX_LEVEL - 1} to have a next threshold",
            field="level",
            value=level,
        )
    return _CUMULATIVE_XP[level] - _CUMULATIVE_XP[level - 1]


def xp_required_for_level(level: int) -> int:
    """Cumulative XP needed to reach `level` (0 for level 1)"""
    _check_int(level, "level")
    if level < 1 or level > MAX_LEVEL:
        raise ValidationError(
            f"Level must be between 1 and {MAX_LEVEL}", field="level", value=level
        )
    return _CUMULATIVE_XP[level - 1]


def level_from_total_xp(total_xp: int) -> LevelProgress:
    """
    Derive level from cumulative XP

    Monotonic non-decreasing in total_xp and never above MAX_LEVEL.

    Raises:
        ValidationError: total_xp is negative or not an integer

    Example:
        >>> level_from_total_xp(0)
        LevelProgress(level=1, xp_into_level=0, xp_to_next_level=100)
        >>> level_from_total_xp(260)
        LevelProgress(level=3, xp_into_level=10, xp_to_next_level=215)
    """
    _check_int(total_xp, "total_xp")
    if total_xp < 0:
        raise ValidationError("XP cannot be negative", field="total_xp", value=total_xp)

    level = bisect_right(_CUMULATIVE_XP, total_xp)
    xp_into_level = total_xp - _CUMULATIVE_XP[level - 1]

    if level >= MAX_LEVEL:
        return LevelProgress(level=MAX_LEVEL, xp_into_level=xp_into_level, xp_to_next_level=0)

    return LevelProgress(
        level=level,
        xp_into_level=xp_into_level,
        xp_to_next_level=_CUMULATIVE_XP[level] - total_xp,
    )


def total_xp_for(level: int, xp_into_level: int) -> int:
    """Inverse of level_from_total_xp: cumulative XP for a (level, xp) pair"""
    _check_int(xp_into_level, "xp_into_level")
    if xp_into_level < 0:
        raise ValidationError(
            "XP cannot be negative", field="xp_into_level", value=xp_into_level
        )
    return xp_required_for_level(level) + xp_into_level


def progress_to_next_level(total_xp: int) -> float:
    """Fraction (0.0 to 1.0) of the current level already earned"""
    progress = level_from_total_xp(total_xp)
    if progress.is_max_level:
        return 1.0
    span = progress.xp_into_level + progress.xp_to_next_level
    return progress.xp_into_level / span
