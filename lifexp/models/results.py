"""Result records returned by the gamification engine"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from lifexp.models.achievement import Achievement
from lifexp.models.avatar import AttributeType, Avatar
from lifexp.models.goal import Goal, GoalStatus
from lifexp.models.task import Task


# ============================================
# Rewards & Streaks
# ============================================

@dataclass(frozen=True)
class RewardBreakdown:
    """Every component of a completion reward; `total` is clamped"""
    base: int
    streak_bonus: int = 0
    consistency_bonus: int = 0
    early_completion_bonus: int = 0
    difficulty_bonus: int = 0
    total: int = 0


@dataclass(frozen=True)
class CompletionResult:
    """
    What a task completion paid out

    `counted` is False when the completion fell inside a cadence unit that was
    already rewarded; the XP figures then repeat the earlier payout.
    """
    xp_awarded: int
    streak_bonus: int
    new_streak_count: int
    counted: bool = True


class StreakOutcome(str, Enum):
    STARTED = "started"
    EXTENDED = "extended"
    RESET = "reset"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class StreakUpdate:
    task: Task
    outcome: StreakOutcome
    previous_streak: int
    streak_count: int

    @property
    def counted(self) -> bool:
        return self.outcome != StreakOutcome.UNCHANGED


# ============================================
# Avatar
# ============================================

@dataclass(frozen=True)
class LevelUpResult:
    previous_level: int
    new_level: int
    xp_gained: int
    attribute_increases: Dict[AttributeType, int] = field(default_factory=dict)
    new_unlocks: List[str] = field(default_factory=list)

    @property
    def levels_gained(self) -> int:
        return self.new_level - self.previous_level


@dataclass(frozen=True)
class XpGainResult:
    avatar: Avatar
    leveled_up: bool
    levels_gained: int
    attribute_increases: Dict[AttributeType, int] = field(default_factory=dict)
    new_unlocks: List[str] = field(default_factory=list)
    level_up: Optional[LevelUpResult] = None


@dataclass(frozen=True)
class AttributeGainResult:
    avatar: Avatar
    attribute: AttributeType
    previous_value: int
    new_value: int
    milestone_bonus: int = 0


# ============================================
# Achievements
# ============================================

@dataclass(frozen=True)
class AchievementEvaluation:
    progress: int
    meets_unlock: bool


@dataclass(frozen=True)
class AchievementUnlockResult:
    achievement: Achievement
    timestamp: datetime


@dataclass(frozen=True)
class AchievementUpdate:
    achievement: Achievement
    unlock: Optional[AchievementUnlockResult] = None


@dataclass(frozen=True)
class AchievementFailure:
    achievement_id: str
    error_type: str
    message: str


@dataclass(frozen=True)
class BatchEvaluationResult:
    """
    Outcome of evaluating a list of achievements

    `achievements` is in ascending id order and holds the updated record for
    every achievement evaluated, and the untouched record for any that failed
    or were skipped by cancellation.
    """
    achievements: List[Achievement]
    newly_unlocked: List[AchievementUnlockResult] = field(default_factory=list)
    failures: List[AchievementFailure] = field(default_factory=list)
    cancelled: bool = False


# ============================================
# Goals
# ============================================

@dataclass(frozen=True)
class GoalTransitionResult:
    goal: Goal
    previous_status: GoalStatus
    new_status: GoalStatus

    @property
    def status_changed(self) -> bool:
        return self.previous_status != self.new_status


# ============================================
# Task completion pipeline
# ============================================

@dataclass(frozen=True)
class TaskCompletionOutcome:
    """Every delta produced by one task completion"""
    task: Task
    avatar: Avatar
    completion: CompletionResult
    streak: StreakUpdate
    level_up: Optional[LevelUpResult] = None
    attribute_gain: Optional[AttributeGainResult] = None
    unlocks: List[AchievementUnlockResult] = field(default_factory=list)
    achievements: List[Achievement] = field(default_factory=list)
    failures: Tuple[AchievementFailure, ...] = ()
