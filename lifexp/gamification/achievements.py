"""
Achievement System

Evaluates achievement criteria against a stats snapshot and applies unlocks.

Features:
- Typed criteria (single stat comparisons, all-of / any-of composites)
- Progress 0-100 for locked achievements; progress may go down when a stat does
- Unlock is one-way: once unlocked, nothing changes progress or unlocked_at again
- Batch evaluation in ascending id order with per-achievement failure isolation
  and cooperative cancellation between achievements
"""

from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Protocol, Union
import asyncio
import logging
import math

from lifexp.exceptions import InvalidStateTransition, LifeXPError, ValidationError
from lifexp.models.achievement import (
    MAX_PROGRESS,
    Achievement,
    AchievementType,
    AllOfCriterion,
    AnyOfCriterion,
    BadgeTier,
    Comparator,
    Criteria,
    StatCriterion,
    category_criterion,
    level_criterion,
    streak_criterion,
    total_criterion,
    xp_milestone_criterion,
)
from lifexp.models.results import (
    AchievementEvaluation,
    AchievementFailure,
    AchievementUnlockResult,
    AchievementUpdate,
    BatchEvaluationResult,
)

logger = logging.getLogger(__name__)

Stats = Mapping[str, Union[bool, int, float]]


class CancelEvent(Protocol):
    """Anything with is_set(), e.g. threading.Event or asyncio.Event"""

    def is_set(self) -> bool: ...


# ============================================
# Criteria evaluation
# ============================================

def _stat_progress(criterion: StatCriterion, stats: Stats) -> int:
    threshold = criterion.threshold

    if isinstance(threshold, bool):
        value = stats.get(criterion.stat_key, False)
        if not isinstance(value, bool):
            raise ValidationError(
                f"Stat '{criterion.stat_key}' must be a boolean",
                field=criterion.stat_key,
                value=value,
            )
        return MAX_PROGRESS if value == threshold else 0

    value = stats.get(criterion.stat_key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"Stat '{criterion.stat_key}' must be numeric",
            field=criterion.stat_key,
            value=value,
        )
    if not math.isfinite(value) or not math.isfinite(threshold):
        raise ValidationError(
            f"Stat '{criterion.stat_key}' and its threshold must be finite",
            field=criterion.stat_key,
            value=value,
        )

    match criterion.comparator:
        case Comparator.GTE:
            satisfied = value >= threshold
        case Comparator.GT:
            satisfied = value > threshold
        case Comparator.LTE:
            satisfied = value <= threshold
        case Comparator.LT:
            satisfied = value < threshold
        case Comparator.EQ:
            satisfied = value == threshold

    if satisfied:
        return MAX_PROGRESS
    if criterion.comparator in (Comparator.GTE, Comparator.GT) and value > 0:
        # Partial credit toward an at-least threshold, never a full 100
        ratio = value * MAX_PROGRESS / threshold
        if not math.isfinite(ratio):
            return 0
        return min(MAX_PROGRESS - 1, math.floor(ratio))
    return 0


def criteria_progress(criteria: Criteria, stats: Stats) -> int:
    """Progress (0-100) of a criterion tree; 100 exactly when it is met"""
    match criteria:
        case StatCriterion():
            return _stat_progress(criteria, stats)
        case AllOfCriterion(clauses=clauses):
            scores = [criteria_progress(clause, stats) for clause in clauses]
            if all(score == MAX_PROGRESS for score in scores):
                return MAX_PROGRESS
            return min(MAX_PROGRESS - 1, sum(scores) // len(scores))
        case AnyOfCriterion(clauses=clauses):
            return max(criteria_progress(clause, stats) for clause in clauses)
    raise ValidationError(
        f"Unsupported criteria type: {type(criteria).__name__}", field="criteria"
    )


def evaluate(achievement: Achievement, stats: Stats) -> AchievementEvaluation:
    """
    Evaluate an achievement against a stats snapshot

    Pure. Unlocked achievements always report (100, True) without reading stats.
    Missing stats count as 0 / False.

    Raises:
        ValidationError: a stat has the wrong type for its criterion
    """
    if achievement.is_unlocked:
        return AchievementEvaluation(progress=MAX_PROGRESS, meets_unlock=True)

    progress = criteria_progress(achievement.criteria, stats)
    return AchievementEvaluation(progress=progress, meets_unlock=progress == MAX_PROGRESS)


# ============================================
# Progress and unlock
# ============================================

def update_progress(achievement: Achievement, new_progress: int, now: datetime) -> AchievementUpdate:
    """
    Set an achievement's progress, unlocking it at 100

    Progress may decrease. Unlocked achievements are returned untouched, so
    unlocked_at is never overwritten.

    Raises:
        ValidationError: new_progress outside 0-100
    """
    if isinstance(new_progress, bool) or not isinstance(new_progress, int):
        raise ValidationError("Progress must be an integer", field="progress", value=new_progress)
    if new_progress < 0 or new_progress > MAX_PROGRESS:
        raise ValidationError(
            f"Progress must be between 0 and {MAX_PROGRESS}",
            field="progress",
            value=new_progress,
        )

    if achievement.is_unlocked:
        return AchievementUpdate(achievement=achievement)

    if new_progress == MAX_PROGRESS:
        unlocked = achievement.model_copy(update={
            "progress": MAX_PROGRESS,
            "is_unlocked": True,
            "unlocked_at": now,
        })
        logger.info(
            f"User {achievement.user_id} unlocked achievement: {achievement.id} "
            f"({achievement.title})"
        )
        return AchievementUpdate(
            achievement=unlocked,
            unlock=AchievementUnlockResult(achievement=unlocked, timestamp=now),
        )

    if new_progress == achievement.progress:
        return AchievementUpdate(achievement=achievement)

    return AchievementUpdate(achievement=achievement.model_copy(update={"progress": new_progress}))


def unlock(achievement: Achievement, now: datetime) -> AchievementUnlockResult:
    """
    Unlock an achievement directly (e.g. special achievements granted by the caller)

    Raises:
        InvalidStateTransition: the achievement is already unlocked
    """
    if achievement.is_unlocked:
        raise InvalidStateTransition(
            f"Achievement {achievement.id} is already unlocked",
            entity="achievement",
            from_state="unlocked",
            to_state="unlocked",
            user_id=achievement.user_id,
        )
    update = update_progress(achievement, MAX_PROGRESS, now)
    return update.unlock


def apply_evaluation(achievement: Achievement, stats: Stats, now: datetime) -> AchievementUpdate:
    """Evaluate and apply the resulting progress in one step"""
    evaluation = evaluate(achievement, stats)
    return update_progress(achievement, evaluation.progress, now)


# ============================================
# Batch evaluation
# ============================================

def _evaluate_one(
    achievement: Achievement,
    stats: Stats,
    now: datetime,
    updated: List[Achievement],
    newly_unlocked: List[AchievementUnlockResult],
    failures: List[AchievementFailure],
) -> None:
    try:
        result = apply_evaluation(achievement, stats, now)
    except LifeXPError as e:
        failures.append(AchievementFailure(
            achievement_id=achievement.id,
            error_type=e.__class__.__name__,
            message=e.message,
        ))
        updated.append(achievement)
        return

    updated.append(result.achievement)
    if result.unlock is not None:
        newly_unlocked.append(result.unlock)


def _sorted_by_id(achievements: Iterable[Achievement]) -> List[Achievement]:
    return sorted(achievements, key=lambda a: a.id)


def batch_evaluate(
    achievements: Iterable[Achievement],
    stats: Stats,
    now: datetime,
    cancel_event: Optional[CancelEvent] = None,
) -> BatchEvaluationResult:
    """
    Evaluate achievements in ascending id order

    Each achievement's progress and unlock change together or not at all. An
    error evaluating one achievement is recorded in `failures` and the rest
    still run. `cancel_event` is checked before each achievement; once set,
    the remaining achievements are returned untouched.

    Returns:
        BatchEvaluationResult; `newly_unlocked` follows the same id order
    """
    ordered = _sorted_by_id(achievements)
    updated: List[Achievement] = []
    newly_unlocked: List[AchievementUnlockResult] = []
    failures: List[AchievementFailure] = []
    cancelled = False

    for index, achievement in enumerate(ordered):
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Achievement evaluation cancelled after {index} of {len(ordered)}")
            updated.extend(ordered[index:])
            cancelled = True
            break
        _evaluate_one(achievement, stats, now, updated, newly_unlocked, failures)

    return BatchEvaluationResult(
        achievements=updated,
        newly_unlocked=newly_unlocked,
        failures=failures,
        cancelled=cancelled,
    )


async def batch_evaluate_async(
    achievements: Iterable[Achievement],
    stats: Stats,
    now: datetime,
    cancel_event: Optional[CancelEvent] = None,
) -> BatchEvaluationResult:
    """
    batch_evaluate() that yields to the event loop between achievements

    Task cancellation can only land between two evaluations, never inside one.
    """
    ordered = _sorted_by_id(achievements)
    updated: List[Achievement] = []
    newly_unlocked: List[AchievementUnlockResult] = []
    failures: List[AchievementFailure] = []
    cancelled = False

    for index, achievement in enumerate(ordered):
        await asyncio.sleep(0)
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Achievement evaluation cancelled after {index} of {len(ordered)}")
            updated.extend(ordered[index:])
            cancelled = True
            break
        _evaluate_one(achievement, stats, now, updated, newly_unlocked, failures)

    return BatchEvaluationResult(
        achievements=updated,
        newly_unlocked=newly_unlocked,
        failures=failures,
        cancelled=cancelled,
    )


# ============================================
# Badge tiers and defaults
# ============================================

def _criteria_target(criteria: Criteria) -> float:
    if isinstance(criteria, StatCriterion) and not isinstance(criteria.threshold, bool):
        return criteria.threshold
    return 0


def badge_tier(achievement: Achievement) -> BadgeTier:
    """Badge tier shown for an achievement, from its type and target"""
    target = _criteria_target(achievement.criteria)

    match achievement.type:
        case AchievementType.STREAK:
            cutoffs = ((100, BadgeTier.LEGENDARY), (50, BadgeTier.EPIC), (20, BadgeTier.RARE), (7, BadgeTier.COMMON))
        case AchievementType.TOTAL:
            cutoffs = ((1000, BadgeTier.LEGENDARY), (500, BadgeTier.EPIC), (100, BadgeTier.RARE), (50, BadgeTier.COMMON))
        case AchievementType.MILESTONE | AchievementType.LEVEL:
            cutoffs = ((50, BadgeTier.LEGENDARY), (25, BadgeTier.EPIC), (10, BadgeTier.RARE), (5, BadgeTier.COMMON))
        case AchievementType.CATEGORY:
            return BadgeTier.RARE
        case AchievementType.SPECIAL:
            return BadgeTier.LEGENDARY

    for minimum, tier in cutoffs:
        if target >= minimum:
            return tier
    return BadgeTier.BRONZE


# (slug, title, description, type, criteria)
DEFAULT_ACHIEVEMENTS = [
    ("first_steps", "First Steps", "Complete your first task",
     AchievementType.TOTAL, total_criterion(1)),
    ("rookie_hustler", "Rookie Hustler", "Maintain a 7-day streak",
     AchievementType.STREAK, streak_criterion(7)),
    ("xp_hoarder", "XP Hoarder", "Complete 100 tasks",
     AchievementType.TOTAL, total_criterion(100)),
    ("level_up", "Level Up!", "Reach level 10",
     AchievementType.LEVEL, level_criterion(10)),
    ("health_warrior", "Health Warrior", "Complete 50 health tasks",
     AchievementType.CATEGORY, category_criterion("health", 50)),
    ("money_master", "Money Master", "Complete 50 finance tasks",
     AchievementType.CATEGORY, category_criterion("finance", 50)),
    ("work_hero", "Work Hero", "Complete 50 work tasks",
     AchievementType.CATEGORY, category_criterion("work", 50)),
    ("streak_master", "Streak Master", "Maintain a 30-day streak",
     AchievementType.STREAK, streak_criterion(30)),
    ("xp_millionaire", "XP Millionaire", "Earn 10,000 XP",
     AchievementType.MILESTONE, xp_milestone_criterion(10000)),
    ("legendary", "Legendary", "Reach level 50",
     AchievementType.LEVEL, level_criterion(50)),
]


def default_achievements(user_id: str) -> List[Achievement]:
    """Starting achievements for a new user, with ids '<user_id>:<slug>'"""
    return [
        Achievement(
            id=f"{user_id}:{slug}",
            user_id=user_id,
            title=title,
            description=description,
            type=achievement_type,
            criteria=criteria,
        )
        for slug, title, description, achievement_type, criteria in DEFAULT_ACHIEVEMENTS
    ]
