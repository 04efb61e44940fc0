"""
Gamification engine for LifeXP

This package implements the progression rules behind tasks, avatars,
achievements and goals:
- Level curve and XP rewards
- Cadence-aware streak tracking
- Avatar level-ups, attributes and item unlocks
- Achievement criteria evaluation
- Goal progress and status transitions

Every function is pure over immutable snapshots; persistence is the caller's job.
"""

from lifexp.gamification.level_curve import (
    LevelProgress,
    level_from_total_xp,
    progress_to_next_level,
    xp_required_for_level,
    xp_threshold,
)
from lifexp.gamification.rewards import (
    compute_base_reward,
    compute_dynamic_reward,
    compute_reward_breakdown,
    compute_streak_bonus,
)
from lifexp.gamification.streaks import break_streak, is_streak_broken, record_completion
from lifexp.gamification.avatar_progression import (
    apply_xp_gain,
    avatar_total_xp,
    increase_attribute,
    unlock_item,
)
from lifexp.gamification.achievements import (
    badge_tier,
    batch_evaluate,
    batch_evaluate_async,
    default_achievements,
    evaluate,
    unlock,
)
from lifexp.gamification.goals import update_progress as update_goal_progress
from lifexp.gamification.goals import update_status as update_goal_status
from lifexp.gamification.pipeline import process_task_completion

__all__ = [
    "LevelProgress",
    "level_from_total_xp",
    "progress_to_next_level",
    "xp_required_for_level",
    "xp_threshold",
    "compute_base_reward",
    "compute_dynamic_reward",
    "compute_reward_breakdown",
    "compute_streak_bonus",
    "break_streak",
    "is_streak_broken",
    "record_completion",
    "apply_xp_gain",
    "avatar_total_xp",
    "increase_attribute",
    "unlock_item",
    "badge_tier",
    "batch_evaluate",
    "batch_evaluate_async",
    "default_achievements",
    "evaluate",
    "unlock",
    "update_goal_progress",
    "update_goal_status",
    "process_task_completion",
]
