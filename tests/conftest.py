"""Global test fixtures for lifexp tests"""
import pytest
from datetime import datetime, timedelta, timezone

from lifexp.models import (
    Achievement,
    AchievementType,
    Avatar,
    Goal,
    GoalPriority,
    GoalStatus,
    Task,
    TaskCategory,
    TaskType,
)
from lifexp.models.achievement import total_criterion
from tests.fakes import (
    FakeStatsProvider,
    InMemoryAchievementStore,
    InMemoryAvatarStore,
    InMemoryGoalStore,
    InMemoryTaskStore,
)


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def now():
    """Monday 2024-01-15 09:00 UTC"""
    return datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


# ============================================================================
# Entity Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-1"


@pytest.fixture
def avatar(test_user_id):
    return Avatar.create(id="avatar-1", user_id=test_user_id)


@pytest.fixture
def daily_task(test_user_id):
    """Daily health task, difficulty 5 (50 XP base)"""
    return Task.create(
        id="task-daily",
        user_id=test_user_id,
        type=TaskType.DAILY,
        title="Morning run",
        category=TaskCategory.HEALTH,
        difficulty=5,
    )


@pytest.fixture
def weekly_task(test_user_id):
    return Task.create(
        id="task-weekly",
        user_id=test_user_id,
        type=TaskType.WEEKLY,
        title="Review budget",
        category=TaskCategory.FINANCE,
    )


@pytest.fixture
def ten_tasks_achievement(test_user_id):
    """'Complete 10 tasks' achievement"""
    return Achievement(
        id="ach-ten",
        user_id=test_user_id,
        title="Getting Going",
        type=AchievementType.TOTAL,
        criteria=total_criterion(10),
    )


@pytest.fixture
def goal(test_user_id, now):
    """In-progress goal due in 10 days"""
    return Goal(
        id="goal-1",
        user_id=test_user_id,
        title="Run a 10k",
        priority=GoalPriority.HIGH,
        status=GoalStatus.IN_PROGRESS,
        progress=0.4,
        deadline=now + timedelta(days=10),
        start_date=now - timedelta(days=5),
    )


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def task_store():
    return InMemoryTaskStore()


@pytest.fixture
def avatar_store():
    return InMemoryAvatarStore()


@pytest.fixture
def achievement_store():
    return InMemoryAchievementStore()


@pytest.fixture
def goal_store():
    return InMemoryGoalStore()


@pytest.fixture
def stats_provider():
    return FakeStatsProvider()
