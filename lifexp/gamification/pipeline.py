"""
Task Completion Pipeline

Runs one task completion through every engine component in order:

1. Streak update (a repeat inside the same cadence unit stops here and
   reports the payout already recorded on the task)
2. Reward calculation
3. Avatar XP gain, then +1 to the task's primary attribute
4. Achievement evaluation against a stats snapshot taken after the XP gain

Pure: nothing is persisted; the caller saves the returned records.
"""

from datetime import datetime, tzinfo
from typing import Callable, Iterable, Mapping, Optional, Union
import logging

from lifexp.gamification.achievements import batch_evaluate
from lifexp.gamification.avatar_progression import apply_xp_gain, increase_attribute
from lifexp.gamification.rewards import compute_reward_breakdown
from lifexp.gamification.streaks import record_completion
from lifexp.models.achievement import Achievement
from lifexp.models.avatar import Avatar
from lifexp.models.results import CompletionResult, TaskCompletionOutcome
from lifexp.models.task import Task

logger = logging.getLogger(__name__)

PRIMARY_ATTRIBUTE_GAIN = 1

StatsProvider = Callable[[Task, Avatar], Mapping[str, Union[bool, int, float]]]


def process_task_completion(
    task: Task,
    avatar: Avatar,
    achievements: Iterable[Achievement],
    stats_provider: StatsProvider,
    completed_at: datetime,
    tz: Optional[tzinfo] = None,
) -> TaskCompletionOutcome:
    """
    Complete a task and collect every resulting change

    Args:
        task: Task being completed
        avatar: The task owner's avatar
        achievements: The owner's achievements
        stats_provider: Called once with the updated task and avatar to build
            the stats snapshot achievements are evaluated against
        completed_at: When the task was completed
        tz: Timezone for calendar-day decisions

    Returns:
        TaskCompletionOutcome holding replacement records. For a repeat
        completion `completion.counted` is False and avatar and achievements
        are returned unchanged.
    """
    achievements = list(achievements)
    streak = record_completion(task, completed_at, tz)

    if not streak.counted:
        logger.info(
            f"Task {task.id} already completed in this cadence unit; "
            f"reporting recorded reward of {task.last_xp_awarded} XP"
        )
        return TaskCompletionOutcome(
            task=streak.task,
            avatar=avatar,
            completion=CompletionResult(
                xp_awarded=task.last_xp_awarded,
                streak_bonus=task.last_streak_bonus,
                new_streak_count=task.streak_count,
                counted=False,
            ),
            streak=streak,
            achievements=sorted(achievements, key=lambda a: a.id),
        )

    reward = compute_reward_breakdown(
        streak.task,
        streak.streak_count,
        is_consistency_bonus=True,
        completion_time=completed_at,
        tz=tz,
    )
    completed_task = streak.task.model_copy(update={
        "last_xp_awarded": reward.total,
        "last_streak_bonus": reward.streak_bonus,
    })

    xp_gain = apply_xp_gain(avatar, reward.total)
    attribute_gain = increase_attribute(
        xp_gain.avatar, completed_task.primary_attribute, PRIMARY_ATTRIBUTE_GAIN
    )
    updated_avatar = attribute_gain.avatar

    stats = stats_provider(completed_task, updated_avatar)
    evaluation = batch_evaluate(achievements, stats, completed_at)

    logger.info(
        f"Task {task.id} completed by user {task.user_id}: +{reward.total} XP "
        f"(streak {streak.streak_count}, {len(evaluation.newly_unlocked)} achievement(s) unlocked)"
    )

    return TaskCompletionOutcome(
        task=completed_task,
        avatar=updated_avatar,
        completion=CompletionResult(
            xp_awarded=reward.total,
            streak_bonus=reward.streak_bonus,
            new_streak_count=streak.streak_count,
        ),
        streak=streak,
        level_up=xp_gain.level_up,
        attribute_gain=attribute_gain,
        unlocks=evaluation.newly_unlocked,
        achievements=evaluation.achievements,
        failures=tuple(evaluation.failures),
    )
