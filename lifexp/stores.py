"""
Store interfaces the service layer persists through

The engine itself never stores anything. Implementations must serialise
writes per entity id and may raise NotFoundError or ConcurrencyConflict;
the service propagates both unchanged.
"""
from __future__ import annotations

from typing import List, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict

from lifexp.models.achievement import Achievement
from lifexp.models.avatar import Avatar
from lifexp.models.goal import Goal
from lifexp.models.task import Task, TaskCategory, TaskType


class TaskFilter(BaseModel):
    """Optional narrowing for TaskStore.list_by_user; unset fields match anything"""
    model_config = ConfigDict(frozen=True)

    type: Optional[TaskType] = None
    category: Optional[TaskCategory] = None
    is_completed: Optional[bool] = None

    def matches(self, task: Task) -> bool:
        if self.type is not None and task.type != self.type:
            return False
        if self.category is not None and task.category != self.category:
            return False
        if self.is_completed is not None and task.is_completed != self.is_completed:
            return False
        return True


@runtime_checkable
class TaskStore(Protocol):
    async def get_by_id(self, task_id: str) -> Task:
        '''Raises NotFoundError when the task does not exist'''
        ...

    async def save(self, task: Task) -> None:
        ...

    async def list_by_user(self, user_id: str, task_filter: Optional[TaskFilter] = None) -> List[Task]:
        ...


@runtime_checkable
class AvatarStore(Protocol):
    async def get_by_user_id(self, user_id: str) -> Avatar:
        '''Raises NotFoundError when the user has no avatar'''
        ...

    async def save(self, avatar: Avatar) -> None:
        ...


@runtime_checkable
class AchievementStore(Protocol):
    async def get_by_user_id(self, user_id: str) -> List[Achievement]:
        ...

    async def save(self, achievement: Achievement) -> None:
        ...

    async def create_defaults(self, user_id: str) -> List[Achievement]:
        ...


@runtime_checkable
class GoalStore(Protocol):
    async def get_by_user_id(self, user_id: str) -> List[Goal]:
        ...

    async def save(self, goal: Goal) -> None:
        ...


@runtime_checkable
class StatsSnapshotProvider(Protocol):
    def __call__(self, task: Task, avatar: Avatar) -> Mapping[str, Union[bool, int, float]]:
        '''
        Stats achievements are evaluated against, taken after a completion's
        XP has been applied
        '''
        ...
