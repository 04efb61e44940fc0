"""Achievement models for gamification"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
import math
from typing import Annotated, Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError

from lifexp.exceptions import ValidationError

MAX_PROGRESS = 100


class AchievementType(str, Enum):
    """Achievement types"""
    STREAK = "streak"          # Consecutive completions
    TOTAL = "total"            # Total completion count
    MILESTONE = "milestone"    # Cumulative XP milestones
    CATEGORY = "category"      # Completions inside one category
    LEVEL = "level"            # Avatar level
    SPECIAL = "special"        # Composite or custom criteria


class BadgeTier(str, Enum):
    """Badge tiers shown for unlocked achievements"""
    BRONZE = "bronze"
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Comparator(str, Enum):
    GTE = "gte"
    GT = "gt"
    LTE = "lte"
    LT = "lt"
    EQ = "eq"


class StatKey:
    """Well-known keys of the stats snapshot"""
    TOTAL_TASKS_COMPLETED = "total_tasks_completed"
    CURRENT_STREAK = "current_streak"
    LONGEST_STREAK = "longest_streak"
    TOTAL_XP = "total_xp"
    LEVEL = "level"

    @staticmethod
    def category_completed(category: str) -> str:
        return f"{category}_tasks_completed"


StatValue = Union[bool, int, float]


class StatCriterion(BaseModel):
    """Compare one stat against a threshold"""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    kind: Literal["stat"] = "stat"
    stat_key: str = Field(min_length=1)
    comparator: Comparator = Comparator.GTE
    threshold: StatValue

    @model_validator(mode="after")
    def check_threshold(self) -> "StatCriterion":
        if isinstance(self.threshold, bool):
            if self.comparator != Comparator.EQ:
                raise ValueError("boolean thresholds only support the 'eq' comparator")
        elif not math.isfinite(self.threshold):
            raise ValueError("threshold must be a finite number")
        elif self.comparator in (Comparator.GTE, Comparator.GT) and self.threshold <= 0:
            raise ValueError("'gte'/'gt' thresholds must be positive")
        return self


class AllOfCriterion(BaseModel):
    """Every clause must hold"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["all_of"] = "all_of"
    clauses: List[Criteria] = Field(min_length=1)


class AnyOfCriterion(BaseModel):
    """At least one clause must hold"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["any_of"] = "any_of"
    clauses: List[Criteria] = Field(min_length=1)


Criteria = Annotated[
    Union[StatCriterion, AllOfCriterion, AnyOfCriterion],
    Field(discriminator="kind"),
]

AllOfCriterion.model_rebuild()
AnyOfCriterion.model_rebuild()

_criteria_adapter: TypeAdapter = TypeAdapter(Criteria)


def decode_criteria(blob: Mapping[str, Any]) -> Criteria:
    """
    Decode a stored criteria mapping into its typed form

    Called once at the store boundary; evaluation never re-parses.

    Raises:
        ValidationError: blob does not describe a valid criterion
    """
    try:
        return _criteria_adapter.validate_python(blob)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Malformed achievement criteria: {e.error_count()} error(s)",
            field="criteria",
            value=dict(blob) if isinstance(blob, Mapping) else blob,
            cause=e,
        )


def encode_criteria(criteria: Criteria) -> dict[str, Any]:
    """Plain mapping for a store to persist"""
    return criteria.model_dump(mode="json")


def streak_criterion(streak_length: int) -> StatCriterion:
    return StatCriterion(stat_key=StatKey.CURRENT_STREAK, threshold=streak_length)


def total_criterion(total_count: int) -> StatCriterion:
    return StatCriterion(stat_key=StatKey.TOTAL_TASKS_COMPLETED, threshold=total_count)


def category_criterion(category: str, count: int) -> StatCriterion:
    return StatCriterion(stat_key=StatKey.category_completed(category), threshold=count)


def level_criterion(level: int) -> StatCriterion:
    return StatCriterion(stat_key=StatKey.LEVEL, threshold=level)


def xp_milestone_criterion(total_xp: int) -> StatCriterion:
    return StatCriterion(stat_key=StatKey.TOTAL_XP, threshold=total_xp)


class Achievement(BaseModel):
    """A user's achievement with its progress toward unlock"""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str = ""
    description: str = ""
    type: AchievementType
    criteria: Criteria
    progress: int = Field(default=0, ge=0, le=MAX_PROGRESS)
    is_unlocked: bool = False
    unlocked_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_unlock_state(self) -> "Achievement":
        """Unlocked achievements are complete and timestamped; locked ones are not"""
        if self.is_unlocked:
            if self.progress != MAX_PROGRESS:
                raise ValueError("unlocked achievements must have progress 100")
            if self.unlocked_at is None:
                raise ValueError("unlocked achievements must have unlocked_at")
        elif self.unlocked_at is not None:
            raise ValueError("locked achievements cannot have unlocked_at")
        return self
