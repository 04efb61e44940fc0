"""Task models"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifexp.models.avatar import AttributeType

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10
MAX_STREAK_COUNT = 9999


class TaskType(str, Enum):
    """How often a task recurs"""
    DAILY = "daily"
    WEEKLY = "weekly"
    LONG_TERM = "long_term"


class TaskCategory(str, Enum):
    """Life area a task belongs to"""
    HEALTH = "health"
    FITNESS = "fitness"
    MINDFULNESS = "mindfulness"
    FINANCE = "finance"
    WORK = "work"
    LEARNING = "learning"
    SOCIAL = "social"
    CREATIVE = "creative"
    CUSTOM = "custom"


class StreakFrequency(str, Enum):
    """Cadence override for streak tracking (habit-style schedules)"""
    DAILY = "daily"
    WEEKLY = "weekly"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    CUSTOM = "custom"


_CATEGORY_ATTRIBUTES = {
    TaskCategory.HEALTH: AttributeType.STRENGTH,
    TaskCategory.FITNESS: AttributeType.STRENGTH,
    TaskCategory.MINDFULNESS: AttributeType.WISDOM,
    TaskCategory.FINANCE: AttributeType.WISDOM,
    TaskCategory.SOCIAL: AttributeType.WISDOM,
    TaskCategory.WORK: AttributeType.INTELLIGENCE,
    TaskCategory.LEARNING: AttributeType.INTELLIGENCE,
    TaskCategory.CREATIVE: AttributeType.INTELLIGENCE,
    TaskCategory.CUSTOM: AttributeType.INTELLIGENCE,
}

_DEFAULT_DIFFICULTY = {
    TaskType.DAILY: 3,
    TaskType.WEEKLY: 5,
    TaskType.LONG_TERM: 8,
}


class Task(BaseModel):
    """
    A completable task

    `xp_reward` is the base reward before bonuses. `last_xp_awarded` and
    `last_streak_bonus` record what the most recent counted completion paid
    out, so a repeated completion inside the same cadence unit can report it
    again without recomputing.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str = Field(default="", max_length=100)
    type: TaskType
    category: TaskCategory = TaskCategory.CUSTOM
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    xp_reward: int = Field(gt=0)
    is_completed: bool = False
    streak_count: int = Field(default=0, ge=0, le=MAX_STREAK_COUNT)
    last_completed_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    frequency: Optional[StreakFrequency] = None
    custom_interval_days: Optional[int] = Field(default=None, ge=1)
    last_xp_awarded: int = Field(default=0, ge=0)
    last_streak_bonus: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_custom_interval(self) -> "Task":
        """Custom frequency needs an interval to measure gaps against"""
        if self.frequency == StreakFrequency.CUSTOM and self.custom_interval_days is None:
            raise ValueError("custom_interval_days is required when frequency is 'custom'")
        return self

    @classmethod
    def create(
        cls,
        id: str,
        user_id: str,
        type: TaskType,
        title: str = "",
        category: TaskCategory = TaskCategory.CUSTOM,
        difficulty: Optional[int] = None,
        **kwargs,
    ) -> "Task":
        """
        New task with difficulty and base reward derived from its type

        Raises:
            ValidationError: difficulty outside 1-10
        """
        # Imported here: the gamification package imports these models
        from lifexp.gamification.rewards import compute_base_reward

        difficulty = difficulty if difficulty is not None else _DEFAULT_DIFFICULTY[type]
        base_xp = compute_base_reward(difficulty)
        if type == TaskType.WEEKLY:
            xp_reward = round(base_xp * 1.5)
        elif type == TaskType.LONG_TERM:
            xp_reward = base_xp * 2
        else:
            xp_reward = base_xp
        return cls(
            id=id,
            user_id=user_id,
            type=type,
            title=title,
            category=category,
            difficulty=difficulty,
            xp_reward=kwargs.pop("xp_reward", xp_reward),
            **kwargs,
        )

    @property
    def primary_attribute(self) -> AttributeType:
        """Attribute this task's category trains"""
        return _CATEGORY_ATTRIBUTES[self.category]
