"""Domain models for the gamification engine"""
from lifexp.models.avatar import Avatar, AttributeType, MAX_ATTRIBUTE_VALUE
from lifexp.models.task import Task, TaskType, TaskCategory, StreakFrequency
from lifexp.models.achievement import (
    Achievement,
    AchievementType,
    BadgeTier,
    Comparator,
    Criteria,
    StatCriterion,
    AllOfCriterion,
    AnyOfCriterion,
    StatKey,
    decode_criteria,
    encode_criteria,
)
from lifexp.models.goal import Goal, GoalCategory, GoalPriority, GoalStatus
from lifexp.models.results import (
    AchievementEvaluation,
    AchievementFailure,
    AchievementUnlockResult,
    AchievementUpdate,
    AttributeGainResult,
    BatchEvaluationResult,
    CompletionResult,
    GoalTransitionResult,
    LevelUpResult,
    RewardBreakdown,
    StreakOutcome,
    StreakUpdate,
    TaskCompletionOutcome,
    XpGainResult,
)

__all__ = [
    "Avatar",
    "AttributeType",
    "MAX_ATTRIBUTE_VALUE",
    "Task",
    "TaskType",
    "TaskCategory",
    "StreakFrequency",
    "Achievement",
    "AchievementType",
    "BadgeTier",
    "Comparator",
    "Criteria",
    "StatCriterion",
    "AllOfCriterion",
    "AnyOfCriterion",
    "StatKey",
    "decode_criteria",
    "encode_criteria",
    "Goal",
    "GoalCategory",
    "GoalPriority",
    "GoalStatus",
    "AchievementEvaluation",
    "AchievementFailure",
    "AchievementUnlockResult",
    "AchievementUpdate",
    "AttributeGainResult",
    "BatchEvaluationResult",
    "CompletionResult",
    "GoalTransitionResult",
    "LevelUpResult",
    "RewardBreakdown",
    "StreakOutcome",
    "StreakUpdate",
    "TaskCompletionOutcome",
    "XpGainResult",
]
