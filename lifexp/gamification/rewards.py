"""
Reward Calculator

Computes the XP paid for a single task completion.

XP Award Rules:
- Base reward: 10 XP per difficulty point (difficulty 1-10)
- Streak bonus: a share of the base reward that grows with the streak
    - daily: +15% per streak day, capped at +100% (reached at streak 7)
    - weekly: +12% per streak week, capped at +80% (reached at streak 7)
    - long-term: never earns a streak bonus
- Consistency bonus: flat 25 XP once the streak is longer than 3
- Early completion: +10% of base per whole day before the due date, up to +50%
- Difficulty bonus: +15% of base at difficulty 6-7, +25% at 8+
- Total is clamped to 1..999,999
"""

from datetime import datetime, tzinfo
from typing import Dict, NamedTuple, Optional
import logging
import math

from lifexp import config
from lifexp.exceptions import ValidationError
from lifexp.models.results import RewardBreakdown
from lifexp.models.task import MAX_DIFFICULTY, MIN_DIFFICULTY, Task, TaskType

logger = logging.getLogger(__name__)

XP_PER_DIFFICULTY = 10
MIN_REWARD = 1
MAX_REWARD = 999_999

CONSISTENCY_STREAK_THRESHOLD = 3
CONSISTENCY_BONUS_XP = 25

EARLY_BONUS_RATE_PER_DAY = 0.1
EARLY_BONUS_MAX_RATE = 0.5


class StreakBonusRule(NamedTuple):
    rate_per_streak: float
    cap: float


STREAK_BONUS_RULES: Dict[TaskType, StreakBonusRule] = {
    TaskType.DAILY: StreakBonusRule(rate_per_streak=0.15, cap=1.0),
    TaskType.WEEKLY: StreakBonusRule(rate_per_streak=0.12, cap=0.8),
    TaskType.LONG_TERM: StreakBonusRule(rate_per_streak=0.0, cap=0.0),
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _check_int(value, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field, value=value)


def compute_base_reward(difficulty: int) -> int:
    """
    Base XP for a task of the given difficulty

    Strictly increasing over 1..10.

    Raises:
        ValidationError: difficulty outside 1-10
    """
    _check_int(difficulty, "difficulty")
    if difficulty < MIN_DIFFICULTY or difficulty > MAX_DIFFICULTY:
        raise ValidationError(
            f"Difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}",
            field="difficulty",
            value=difficulty,
        )
    return difficulty * XP_PER_DIFFICULTY


def compute_streak_bonus(base_xp: int, streak_count: int, task_type: TaskType) -> int:
    """
    Extra XP earned for an ongoing streak

    Non-decreasing in streak_count and constant from
    streak_bonus_cap_streak(task_type) onward. A streak of 0 or 1 earns nothing.

    Args:
        base_xp: Base reward the bonus is a share of
        streak_count: Streak including the completion being rewarded
        task_type: Determines rate and cap
    """
    _check_int(base_xp, "base_xp")
    _check_int(streak_count, "streak_count")
    if base_xp <= 0:
        raise ValidationError("Base XP must be positive", field="base_xp", value=base_xp)
    if streak_count < 0:
        raise ValidationError(
            "Streak count cannot be negative", field="streak_count", value=streak_count
        )
    if streak_count <= 1:
        return 0

    rule = STREAK_BONUS_RULES[TaskType(task_type)]
    multiplier = min(streak_count * rule.rate_per_streak, rule.cap)
    return _round_half_up(base_xp * multiplier)


def streak_bonus_cap_streak(task_type: TaskType) -> Optional[int]:
    """Streak count at which the bonus stops growing (None if it never grows)"""
    rule = STREAK_BONUS_RULES[TaskType(task_type)]
    if rule.rate_per_streak <= 0:
        return None
    return max(2, math.ceil(rule.cap / rule.rate_per_streak - 1e-9))


def qualifies_for_consistency_bonus(streak_count: int) -> bool:
    return streak_count > CONSISTENCY_STREAK_THRESHOLD


def _as_local(moment: datetime, tz: tzinfo) -> datetime:
    # Naive datetimes are already local to the user, as in streak tracking
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment


def _early_completion_bonus(
    task: Task, completion_time: datetime, tz: Optional[tzinfo]
) -> int:
    if task.due_date is None:
        return 0
    due_date = task.due_date
    if (due_date.tzinfo is None) != (completion_time.tzinfo is None):
        tz = tz if tz is not None else config.default_tz()
        due_date = _as_local(due_date, tz)
        completion_time = _as_local(completion_time, tz)
    if completion_time >= due_date:
        return 0
    days_early = (due_date - completion_time).days
    if days_early <= 0:
        return 0
    bonus = _round_half_up(task.xp_reward * EARLY_BONUS_RATE_PER_DAY * days_early)
    return min(bonus, _round_half_up(task.xp_reward * EARLY_BONUS_MAX_RATE))


def _difficulty_bonus(task: Task) -> int:
    if task.difficulty >= 8:
        return _round_half_up(task.xp_reward * 0.25)
    if task.difficulty >= 6:
        return _round_half_up(task.xp_reward * 0.15)
    return 0


def compute_reward_breakdown(
    task: Task,
    streak_count: int,
    is_consistency_bonus: bool,
    completion_time: datetime,
    tz: Optional[tzinfo] = None,
) -> RewardBreakdown:
    """
    Itemised reward for completing `task`

    Args:
        task: Task being completed (its xp_reward is the base)
        streak_count: Streak including this completion
        is_consistency_bonus: Whether the caller requests the consistency bonus;
            it is only paid when the streak also qualifies
        completion_time: When the task was completed
        tz: Timezone a naive due date or completion time is local to, when
            the other side carries a timezone (defaults to DEFAULT_TIMEZONE)

    Returns:
        RewardBreakdown whose total is clamped to 1..999,999
    """
    base = task.xp_reward
    streak_bonus = compute_streak_bonus(base, streak_count, task.type)
    consistency_bonus = (
        CONSISTENCY_BONUS_XP
        if is_consistency_bonus and qualifies_for_consistency_bonus(streak_count)
        else 0
    )
    early_bonus = _early_completion_bonus(task, completion_time, tz)
    difficulty_bonus = _difficulty_bonus(task)

    raw_total = base + streak_bonus + consistency_bonus + early_bonus + difficulty_bonus
    total = max(MIN_REWARD, min(MAX_REWARD, raw_total))
    if total != raw_total:
        logger.debug(f"Clamped reward for task {task.id} from {raw_total} to {total}")

    return RewardBreakdown(
        base=base,
        streak_bonus=streak_bonus,
        consistency_bonus=consistency_bonus,
        early_completion_bonus=early_bonus,
        difficulty_bonus=difficulty_bonus,
        total=total,
    )


def compute_dynamic_reward(
    task: Task,
    streak_count: int,
    is_consistency_bonus: bool,
    completion_time: datetime,
    tz: Optional[tzinfo] = None,
) -> int:
    """Total XP for completing `task` (see compute_reward_breakdown)"""
    return compute_reward_breakdown(
        task, streak_count, is_consistency_bonus, completion_time, tz
    ).total
