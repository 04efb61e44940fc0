"""In-memory store implementations for service tests"""
from typing import Dict, List, Optional

from lifexp.exceptions import ConcurrencyConflict, NotFoundError
from lifexp.gamification.achievements import default_achievements
from lifexp.gamification.avatar_progression import avatar_total_xp
from lifexp.models import Achievement, Avatar, Goal, StatKey, Task
from lifexp.stores import TaskFilter


class InMemoryTaskStore:
    def __init__(self, tasks: Optional[List[Task]] = None):
        self.tasks: Dict[str, Task] = {t.id: t for t in tasks or []}
        self.saved: List[Task] = []
        self.conflict_on_save = False

    async def get_by_id(self, task_id: str) -> Task:
        if task_id not in self.tasks:
            raise NotFoundError(f"Task {task_id} not found", record_type="task", record_id=task_id)
        return self.tasks[task_id]

    async def save(self, task: Task) -> None:
        if self.conflict_on_save:
            raise ConcurrencyConflict(
                f"Task {task.id} changed since read", record_type="task", record_id=task.id
            )
        self.tasks[task.id] = task
        self.saved.append(task)

    async def list_by_user(self, user_id: str, task_filter: Optional[TaskFilter] = None) -> List[Task]:
        task_filter = task_filter or TaskFilter()
        return [t for t in self.tasks.values() if t.user_id == user_id and task_filter.matches(t)]


class InMemoryAvatarStore:
    def __init__(self, avatars: Optional[List[Avatar]] = None):
        self.avatars: Dict[str, Avatar] = {a.user_id: a for a in avatars or []}
        self.saved: List[Avatar] = []

    async def get_by_user_id(self, user_id: str) -> Avatar:
        if user_id not in self.avatars:
            raise NotFoundError(f"No avatar for {user_id}", record_type="avatar", record_id=user_id)
        return self.avatars[user_id]

    async def save(self, avatar: Avatar) -> None:
        self.avatars[avatar.user_id] = avatar
        self.saved.append(avatar)


class InMemoryAchievementStore:
    def __init__(self, achievements: Optional[List[Achievement]] = None):
        self.achievements: Dict[str, Achievement] = {a.id: a for a in achievements or []}
        self.saved: List[Achievement] = []

    async def get_by_user_id(self, user_id: str) -> List[Achievement]:
        return [a for a in self.achievements.values() if a.user_id == user_id]

    async def save(self, achievement: Achievement) -> None:
        self.achievements[achievement.id] = achievement
        self.saved.append(achievement)

    async def create_defaults(self, user_id: str) -> List[Achievement]:
        created = default_achievements(user_id)
        for achievement in created:
            self.achievements[achievement.id] = achievement
        return created


class InMemoryGoalStore:
    def __init__(self, goals: Optional[List[Goal]] = None):
        self.goals: Dict[str, Goal] = {g.id: g for g in goals or []}
        self.saved: List[Goal] = []

    async def get_by_user_id(self, user_id: str) -> List[Goal]:
        return [g for g in self.goals.values() if g.user_id == user_id]

    async def save(self, goal: Goal) -> None:
        self.goals[goal.id] = goal
        self.saved.append(goal)


class FakeStatsProvider:
    """Builds stats from the task and avatar, plus fixed extras"""

    def __init__(self, extra: Optional[Dict] = None):
        self.extra = dict(extra or {})
        self.calls = []

    def __call__(self, task: Task, avatar: Avatar):
        self.calls.append((task, avatar))
        stats = {
            StatKey.CURRENT_STREAK: task.streak_count,
            StatKey.LEVEL: avatar.level,
            StatKey.TOTAL_XP: avatar_total_xp(avatar),
        }
        stats.update(self.extra)
        return stats
