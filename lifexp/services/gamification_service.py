"""
GamificationService - Gamification Business Logic

Loads records from the stores, runs them through the engine and saves what
changed. All progression rules live in lifexp.gamification; this layer only
orchestrates I/O.
"""

import logging
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Mapping, Optional, Union

from lifexp.exceptions import NotFoundError
from lifexp.gamification import achievements as achievement_engine
from lifexp.gamification import goals as goal_manager
from lifexp.gamification.avatar_progression import apply_xp_gain
from lifexp.gamification.pipeline import process_task_completion
from lifexp.gamification.streaks import break_streak
from lifexp.models.achievement import Achievement
from lifexp.models.goal import Goal, GoalStatus
from lifexp.models.results import (
    BatchEvaluationResult,
    GoalTransitionResult,
    TaskCompletionOutcome,
    XpGainResult,
)
from lifexp.models.task import Task
from lifexp.stores import (
    AchievementStore,
    AvatarStore,
    GoalStore,
    StatsSnapshotProvider,
    TaskStore,
)

logger = logging.getLogger(__name__)


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - Task completion (streak, reward, XP, achievements)
    - Direct XP awards
    - Achievement evaluation
    - Goal progress and status changes

    Store errors (NotFoundError, ConcurrencyConflict) are propagated unchanged
    and nothing is retried; re-running an operation on freshly read records is
    safe because the engine is deterministic.
    """

    def __init__(
        self,
        task_store: TaskStore,
        avatar_store: AvatarStore,
        achievement_store: AchievementStore,
        goal_store: GoalStore,
        stats_provider: StatsSnapshotProvider,
        tz: Optional[tzinfo] = None,
    ):
        """
        Initialize GamificationService.

        Args:
            task_store: Task persistence
            avatar_store: Avatar persistence
            achievement_store: Achievement persistence
            goal_store: Goal persistence
            stats_provider: Builds the stats snapshot after a completion
            tz: Timezone for calendar-day decisions (default DEFAULT_TIMEZONE)
        """
        self.task_store = task_store
        self.avatar_store = avatar_store
        self.achievement_store = achievement_store
        self.goal_store = goal_store
        self.stats_provider = stats_provider
        self.tz = tz
        logger.debug("GamificationService initialized")

    async def complete_task(self, task_id: str, completed_at: datetime) -> TaskCompletionOutcome:
        """
        Complete a task and persist every resulting change.

        Args:
            task_id: Task to complete
            completed_at: When it was completed

        Returns:
            TaskCompletionOutcome from the completion pipeline. A repeat
            completion inside the same cadence unit saves nothing.
        """
        task = await self.task_store.get_by_id(task_id)
        avatar = await self.avatar_store.get_by_user_id(task.user_id)
        achievements = await self.achievement_store.get_by_user_id(task.user_id)

        outcome = process_task_completion(
            task,
            avatar,
            achievements,
            self.stats_provider,
            completed_at,
            self.tz,
        )

        if not outcome.completion.counted:
            logger.debug(f"Task {task_id} repeat completion, nothing to save")
            return outcome

        await self.task_store.save(outcome.task)
        await self.avatar_store.save(outcome.avatar)
        await self._save_changed_achievements(achievements, outcome.achievements)

        return outcome

    async def break_task_streak(self, task_id: str) -> Task:
        """Reset a task's streak to 0 (called by the scheduler on a missed unit)"""
        task = await self.task_store.get_by_id(task_id)
        updated = break_streak(task)
        if updated != task:
            await self.task_store.save(updated)
        return updated

    async def award_xp(self, user_id: str, amount: int) -> XpGainResult:
        """
        Award XP outside of a task completion (e.g. a completed goal).

        Returns:
            XpGainResult with the saved avatar
        """
        avatar = await self.avatar_store.get_by_user_id(user_id)
        result = apply_xp_gain(avatar, amount)
        if result.avatar != avatar:
            await self.avatar_store.save(result.avatar)
        return result

    async def evaluate_achievements(
        self,
        user_id: str,
        stats: Mapping[str, Union[bool, int, float]],
        now: datetime,
    ) -> BatchEvaluationResult:
        """Evaluate all of a user's achievements and save the ones that changed"""
        achievements = await self.achievement_store.get_by_user_id(user_id)
        result = await achievement_engine.batch_evaluate_async(achievements, stats, now)
        await self._save_changed_achievements(achievements, result.achievements)

        if result.newly_unlocked:
            logger.info(
                f"User {user_id} unlocked {len(result.newly_unlocked)} achievement(s): "
                f"{[u.achievement.id for u in result.newly_unlocked]}"
            )
        return result

    async def update_goal_progress(
        self,
        user_id: str,
        goal_id: str,
        progress: float,
        now: datetime,
    ) -> GoalTransitionResult:
        goal = await self._get_goal(user_id, goal_id)
        result = goal_manager.update_progress(goal, progress, now)
        if result.goal != goal:
            await self.goal_store.save(result.goal)
        return result

    async def update_goal_status(
        self,
        user_id: str,
        goal_id: str,
        status: GoalStatus,
        now: datetime,
    ) -> GoalTransitionResult:
        goal = await self._get_goal(user_id, goal_id)
        result = goal_manager.update_status(goal, status, now)
        await self.goal_store.save(result.goal)
        return result

    async def _get_goal(self, user_id: str, goal_id: str) -> Goal:
        goals = await self.goal_store.get_by_user_id(user_id)
        for goal in goals:
            if goal.id == goal_id:
                return goal
        raise NotFoundError(
            f"Goal {goal_id} not found for user {user_id}",
            record_type="goal",
            record_id=goal_id,
            user_id=user_id,
        )

    async def _save_changed_achievements(
        self,
        before: Iterable[Achievement],
        after: List[Achievement],
    ) -> None:
        originals: Dict[str, Achievement] = {a.id: a for a in before}
        for achievement in after:
            if originals.get(achievement.id) != achievement:
                await self.achievement_store.save(achievement)
