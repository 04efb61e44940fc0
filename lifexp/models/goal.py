"""Goal models"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifexp.models.avatar import AttributeType


class GoalCategory(str, Enum):
    HEALTH = "health"
    FITNESS = "fitness"
    MINDFULNESS = "mindfulness"
    LEARNING = "learning"
    CAREER = "career"
    FINANCIAL = "financial"
    RELATIONSHIPS = "relationships"
    PERSONAL = "personal"
    CUSTOM = "custom"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def value_rank(self) -> int:
        """0 (low) to 3 (critical)"""
        return list(GoalPriority).index(self)


class GoalStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (GoalStatus.COMPLETED, GoalStatus.CANCELLED)


_CATEGORY_ATTRIBUTES = {
    GoalCategory.HEALTH: AttributeType.STRENGTH,
    GoalCategory.FITNESS: AttributeType.STRENGTH,
    GoalCategory.PERSONAL: AttributeType.STRENGTH,
    GoalCategory.MINDFULNESS: AttributeType.WISDOM,
    GoalCategory.RELATIONSHIPS: AttributeType.WISDOM,
    GoalCategory.LEARNING: AttributeType.INTELLIGENCE,
    GoalCategory.CAREER: AttributeType.INTELLIGENCE,
    GoalCategory.FINANCIAL: AttributeType.INTELLIGENCE,
    GoalCategory.CUSTOM: AttributeType.INTELLIGENCE,
}


class Goal(BaseModel):
    """A long-running goal with fractional progress"""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str = Field(default="", max_length=100)
    category: GoalCategory = GoalCategory.CUSTOM
    priority: GoalPriority = GoalPriority.MEDIUM
    status: GoalStatus = GoalStatus.NOT_STARTED
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    deadline: datetime
    start_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_completion_state(self) -> "Goal":
        """Completed goals are fully progressed and timestamped"""
        if self.status == GoalStatus.COMPLETED:
            if self.progress != 1.0:
                raise ValueError("completed goals must have progress 1.0")
            if self.completed_at is None:
                raise ValueError("completed goals must have completed_at")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def primary_attribute(self) -> AttributeType:
        return _CATEGORY_ATTRIBUTES[self.category]
