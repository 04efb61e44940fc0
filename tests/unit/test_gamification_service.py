"""Unit tests for GamificationService"""

import pytest
from unittest.mock import AsyncMock
from datetime import timedelta

from lifexp.exceptions import ConcurrencyConflict, InvalidStateTransition, NotFoundError
from lifexp.models import GoalStatus, StatKey
from lifexp.services import GamificationService
from lifexp.stores import AchievementStore, AvatarStore, GoalStore, StatsSnapshotProvider, TaskStore
from tests.fakes import (
    FakeStatsProvider,
    InMemoryAchievementStore,
    InMemoryAvatarStore,
    InMemoryGoalStore,
    InMemoryTaskStore,
)


@pytest.fixture
def stores(daily_task, avatar, ten_tasks_achievement, goal):
    return {
        "task_store": InMemoryTaskStore([daily_task]),
        "avatar_store": InMemoryAvatarStore([avatar]),
        "achievement_store": InMemoryAchievementStore([ten_tasks_achievement]),
        "goal_store": InMemoryGoalStore([goal]),
        "stats_provider": FakeStatsProvider({StatKey.TOTAL_TASKS_COMPLETED: 10}),
    }


@pytest.fixture
def service(stores):
    """Create GamificationService backed by in-memory stores"""
    return GamificationService(**stores)


def test_fakes_satisfy_store_protocols(stores):
    assert isinstance(stores["task_store"], TaskStore)
    assert isinstance(stores["avatar_store"], AvatarStore)
    assert isinstance(stores["achievement_store"], AchievementStore)
    assert isinstance(stores["goal_store"], GoalStore)
    assert isinstance(stores["stats_provider"], StatsSnapshotProvider)


# ============================================================================
# Task Completion
# ============================================================================

@pytest.mark.asyncio
async def test_complete_task_saves_changes(service, stores, daily_task, test_user_id, now):
    """Test completing a task persists task, avatar and unlocked achievement"""
    outcome = await service.complete_task(daily_task.id, now)

    assert outcome.completion.xp_awarded == 50
    assert stores["task_store"].tasks[daily_task.id].streak_count == 1
    assert stores["avatar_store"].avatars[test_user_id].current_xp == 50
    assert [a.id for a in stores["achievement_store"].saved] == ["ach-ten"]
    assert stores["achievement_store"].achievements["ach-ten"].is_unlocked


@pytest.mark.asyncio
async def test_repeat_completion_saves_nothing(service, stores, daily_task, now):
    await service.complete_task(daily_task.id, now)
    saved_before = len(stores["task_store"].saved)

    outcome = await service.complete_task(daily_task.id, now + timedelta(hours=1))

    assert not outcome.completion.counted
    assert outcome.completion.xp_awarded == 50
    assert len(stores["task_store"].saved) == saved_before


@pytest.mark.asyncio
async def test_missing_task_propagates_not_found(service, now):
    with pytest.raises(NotFoundError):
        await service.complete_task("no-such-task", now)


@pytest.mark.asyncio
async def test_concurrency_conflict_propagates(service, stores, daily_task, now):
    stores["task_store"].conflict_on_save = True
    with pytest.raises(ConcurrencyConflict):
        await service.complete_task(daily_task.id, now)


@pytest.mark.asyncio
async def test_break_task_streak(service, stores, daily_task, now):
    await service.complete_task(daily_task.id, now)

    task = await service.break_task_streak(daily_task.id)

    assert task.streak_count == 0
    assert stores["task_store"].tasks[daily_task.id].streak_count == 0


# ============================================================================
# XP & Achievements
# ============================================================================

@pytest.mark.asyncio
async def test_award_xp(service, stores, test_user_id):
    result = await service.award_xp(test_user_id, 150)

    assert result.leveled_up
    assert stores["avatar_store"].avatars[test_user_id].level == 2


@pytest.mark.asyncio
async def test_award_zero_xp_does_not_save(service, stores, test_user_id):
    await service.award_xp(test_user_id, 0)
    assert stores["avatar_store"].saved == []


@pytest.mark.asyncio
async def test_evaluate_achievements(service, stores, test_user_id, now):
    result = await service.evaluate_achievements(test_user_id, {StatKey.TOTAL_TASKS_COMPLETED: 4}, now)

    assert result.achievements[0].progress == 40
    assert stores["achievement_store"].achievements["ach-ten"].progress == 40


@pytest.mark.asyncio
async def test_evaluate_achievements_with_mock_store(avatar, ten_tasks_achievement, now):
    """Test only changed achievements are written back"""
    achievement_store = AsyncMock()
    achievement_store.get_by_user_id = AsyncMock(return_value=[ten_tasks_achievement])
    service = GamificationService(
        task_store=AsyncMock(),
        avatar_store=AsyncMock(),
        achievement_store=achievement_store,
        goal_store=AsyncMock(),
        stats_provider=FakeStatsProvider(),
    )

    await service.evaluate_achievements("user-1", {}, now)

    achievement_store.save.assert_not_called()


# ============================================================================
# Goals
# ============================================================================

@pytest.mark.asyncio
async def test_update_goal_progress(service, stores, goal, test_user_id, now):
    result = await service.update_goal_progress(test_user_id, goal.id, 1.0, now)

    assert result.new_status == GoalStatus.COMPLETED
    assert stores["goal_store"].goals[goal.id].status == GoalStatus.COMPLETED


@pytest.mark.asyncio
async def test_update_goal_status_invalid(service, stores, goal, test_user_id, now):
    await service.update_goal_status(test_user_id, goal.id, GoalStatus.CANCELLED, now)

    with pytest.raises(InvalidStateTransition):
        await service.update_goal_status(test_user_id, goal.id, GoalStatus.IN_PROGRESS, now)


@pytest.mark.asyncio
async def test_unknown_goal_raises_not_found(service, test_user_id, now):
    with pytest.raises(NotFoundError) as exc_info:
        await service.update_goal_progress(test_user_id, "goal-missing", 0.5, now)
    assert exc_info.value.record_id == "goal-missing"
