"""
Goal Progress

Status transitions and progress updates for long-running goals.

Transition Rules:
- not_started -> in_progress
- in_progress -> on_hold | completed | cancelled
- on_hold -> in_progress | cancelled
- completed and cancelled are terminal
- Reaching progress 1.0 completes the goal (also from on_hold)
"""

from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Optional
import logging
import math

from lifexp import config
from lifexp.exceptions import InvalidStateTransition, ValidationError
from lifexp.models.goal import Goal, GoalStatus
from lifexp.models.results import GoalTransitionResult

logger = logging.getLogger(__name__)

GOAL_PRIORITY_XP = 100
GOAL_PROGRESS_XP = 500

ALLOWED_TRANSITIONS: Dict[GoalStatus, FrozenSet[GoalStatus]] = {
    GoalStatus.NOT_STARTED: frozenset({GoalStatus.IN_PROGRESS}),
    GoalStatus.IN_PROGRESS: frozenset({
        GoalStatus.ON_HOLD,
        GoalStatus.COMPLETED,
        GoalStatus.CANCELLED,
    }),
    GoalStatus.ON_HOLD: frozenset({GoalStatus.IN_PROGRESS, GoalStatus.CANCELLED}),
    GoalStatus.COMPLETED: frozenset(),
    GoalStatus.CANCELLED: frozenset(),
}


def can_transition(from_status: GoalStatus, to_status: GoalStatus) -> bool:
    return GoalStatus(to_status) in ALLOWED_TRANSITIONS[GoalStatus(from_status)]


def _reject(goal: Goal, to_status: GoalStatus) -> InvalidStateTransition:
    return InvalidStateTransition(
        f"Goal {goal.id} cannot move from {goal.status.value} to {to_status.value}",
        entity="goal",
        from_state=goal.status.value,
        to_state=to_status.value,
        user_id=goal.user_id,
    )


def update_progress(goal: Goal, new_progress: float, now: datetime) -> GoalTransitionResult:
    """
    Set a goal's progress

    Args:
        goal: Current goal snapshot
        new_progress: Fraction complete, 0.0-1.0
        now: Timestamp used for start_date / completed_at

    Returns:
        GoalTransitionResult; progress of 1.0 completes the goal and any
        positive progress starts a not-started goal

    Raises:
        InvalidStateTransition: goal is completed or cancelled
        ValidationError: new_progress outside 0.0-1.0
    """
    if isinstance(new_progress, bool) or not isinstance(new_progress, (int, float)):
        raise ValidationError("Progress must be a number", field="progress", value=new_progress)
    if math.isnan(new_progress) or new_progress < 0.0 or new_progress > 1.0:
        raise ValidationError(
            "Progress must be between 0.0 and 1.0", field="progress", value=new_progress
        )
    if goal.is_terminal:
        raise InvalidStateTransition(
            f"Cannot update progress of {goal.status.value} goal {goal.id}",
            entity="goal",
            from_state=goal.status.value,
            to_state=goal.status.value,
            user_id=goal.user_id,
        )

    previous_status = goal.status
    updates = {"progress": float(new_progress)}

    if new_progress >= 1.0:
        updates.update(status=GoalStatus.COMPLETED, progress=1.0, completed_at=now)
        if goal.start_date is None:
            updates["start_date"] = now
    elif new_progress > 0.0 and goal.status == GoalStatus.NOT_STARTED:
        updates["status"] = GoalStatus.IN_PROGRESS
        if goal.start_date is None:
            updates["start_date"] = now

    updated = goal.model_copy(update=updates)

    if updated.status != previous_status:
        logger.info(
            f"Goal {goal.id} (user {goal.user_id}) {previous_status.value} → "
            f"{updated.status.value} at progress {updated.progress:.2f}"
        )

    return GoalTransitionResult(
        goal=updated,
        previous_status=previous_status,
        new_status=updated.status,
    )


def update_status(goal: Goal, new_status: GoalStatus, now: datetime) -> GoalTransitionResult:
    """
    Move a goal to a new status

    Raises:
        InvalidStateTransition: the move is not in ALLOWED_TRANSITIONS
            (self-transitions included)
    """
    new_status = GoalStatus(new_status)
    if not can_transition(goal.status, new_status):
        raise _reject(goal, new_status)

    updates = {"status": new_status}
    if new_status == GoalStatus.COMPLETED:
        updates.update(progress=1.0, completed_at=now)
    if new_status == GoalStatus.IN_PROGRESS and goal.start_date is None:
        updates["start_date"] = now

    updated = goal.model_copy(update=updates)
    logger.info(
        f"Goal {goal.id} (user {goal.user_id}) {goal.status.value} → {new_status.value}"
    )

    return GoalTransitionResult(
        goal=updated,
        previous_status=goal.status,
        new_status=new_status,
    )


def is_overdue(goal: Goal, now: datetime) -> bool:
    return not goal.is_terminal and now > goal.deadline


def is_due_soon(goal: Goal, now: datetime, window: Optional[timedelta] = None) -> bool:
    """Open goal whose deadline falls within `window` from now (default DUE_SOON_WINDOW)"""
    if window is None:
        window = config.DUE_SOON_WINDOW
    if goal.is_terminal or now > goal.deadline:
        return False
    return goal.deadline - now <= window


def days_until_deadline(goal: Goal, now: datetime) -> int:
    """Whole days left until the deadline, negative once it has passed"""
    return math.floor((goal.deadline - now) / timedelta(days=1))


def goal_xp_reward(goal: Goal) -> int:
    """XP a goal is worth: 100 per priority step above low plus up to 500 for progress"""
    return goal.priority.value_rank * GOAL_PRIORITY_XP + math.floor(
        goal.progress * GOAL_PROGRESS_XP + 0.5
    )
