"""
Streak Tracking

Decides whether a completion starts, extends, resets or leaves alone a task's
streak, based on the task's cadence.

Cadences:
- daily: next calendar day (plus grace hours past midnight)
- weekly: within 7 days (plus grace hours), once per ISO week
- weekdays: the next weekday, so Friday -> Monday keeps the streak
- weekends: the next weekend day, so Sunday -> Saturday keeps the streak
- custom: within `custom_interval_days`
- long-term: any later completion extends

Logic:
- First completion: streak = 1
- Same cadence unit as the last completion: no change at all
- Within the cadence window: streak + 1
- Past the window: streak resets to 1
- break_streak(): streak = 0 (scheduler detected a missed unit)
"""

from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Optional
import logging

from lifexp import config
from lifexp.exceptions import ValidationError
from lifexp.models.results import StreakOutcome, StreakUpdate
from lifexp.models.task import MAX_STREAK_COUNT, StreakFrequency, Task, TaskType

logger = logging.getLogger(__name__)


class Cadence(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    CUSTOM = "custom"
    LONG_TERM = "long_term"


_TYPE_CADENCE = {
    TaskType.DAILY: Cadence.DAILY,
    TaskType.WEEKLY: Cadence.WEEKLY,
    TaskType.LONG_TERM: Cadence.LONG_TERM,
}

_WINDOW_HOURS = {
    Cadence.DAILY: 24,
    Cadence.WEEKLY: 7 * 24,
}


def cadence_for(task: Task) -> Cadence:
    """Cadence a task's streak is measured against"""
    if task.frequency is not None:
        return Cadence(StreakFrequency(task.frequency).value)
    return _TYPE_CADENCE[task.type]


def _resolve_tz(tz: Optional[tzinfo]) -> tzinfo:
    return tz if tz is not None else config.default_tz()


def _as_aware(moment: datetime, tz: tzinfo) -> datetime:
    # Naive datetimes are already local to the user
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _same_unit(cadence: Cadence, last_day: date, new_day: date) -> bool:
    if cadence == Cadence.WEEKLY:
        return last_day.isocalendar()[:2] == new_day.isocalendar()[:2]
    return last_day == new_day


def _next_scheduled_day(cadence: Cadence, day: date) -> date:
    """First day after `day` on which a weekdays/weekends habit is due"""
    candidate = day + timedelta(days=1)
    if cadence == Cadence.WEEKDAYS:
        while candidate.weekday() >= 5:
            candidate += timedelta(days=1)
    else:
        while candidate.weekday() < 5:
            candidate += timedelta(days=1)
    return candidate


def _extends(
    cadence: Cadence,
    task: Task,
    last_moment: datetime,
    new_moment: datetime,
) -> bool:
    last_day = last_moment.date()
    new_day = new_moment.date()
    gap_days = (new_day - last_day).days

    match cadence:
        case Cadence.DAILY | Cadence.WEEKLY:
            window_days = _WINDOW_HOURS[cadence] // 24
            if gap_days <= window_days:
                return True
            if gap_days == window_days + 1:
                hours = (new_moment - last_moment).total_seconds() / 3600
                return hours <= _WINDOW_HOURS[cadence] + config.STREAK_GRACE_PERIOD_HOURS
            return False
        case Cadence.WEEKDAYS | Cadence.WEEKENDS:
            return new_day <= _next_scheduled_day(cadence, last_day)
        case Cadence.CUSTOM:
            return gap_days <= task.custom_interval_days
        case Cadence.LONG_TERM:
            return True


def record_completion(
    task: Task,
    completed_at: datetime,
    tz: Optional[tzinfo] = None,
) -> StreakUpdate:
    """
    Apply a completion event to a task's streak

    Args:
        task: Current task snapshot
        completed_at: When the completion happened
        tz: Timezone that defines calendar days (defaults to DEFAULT_TIMEZONE)

    Returns:
        StreakUpdate holding the replacement task. For an `unchanged` outcome
        the task is returned as-is, including its last_completed_date.

    Raises:
        ValidationError: completed_at is earlier than the last recorded completion
    """
    tz = _resolve_tz(tz)
    previous = task.streak_count

    if task.last_completed_date is None:
        outcome = StreakOutcome.STARTED
        new_streak = 1
    else:
        last_moment = _as_aware(task.last_completed_date, tz)
        new_moment = _as_aware(completed_at, tz)
        if new_moment < last_moment:
            raise ValidationError(
                "Completion cannot be earlier than the last recorded completion",
                field="completed_at",
                value=completed_at.isoformat(),
            )

        cadence = cadence_for(task)
        if _same_unit(cadence, last_moment.date(), new_moment.date()):
            logger.debug(
                f"Task {task.id} already completed this {cadence.value} unit; streak stays {previous}"
            )
            return StreakUpdate(
                task=task,
                outcome=StreakOutcome.UNCHANGED,
                previous_streak=previous,
                streak_count=previous,
            )

        if _extends(cadence, task, last_moment, new_moment):
            outcome = StreakOutcome.EXTENDED
            new_streak = min(previous + 1, MAX_STREAK_COUNT)
        else:
            outcome = StreakOutcome.RESET
            new_streak = 1
            logger.info(
                f"Streak reset for task {task.id} (user {task.user_id}). "
                f"Was {previous}, last completed {task.last_completed_date.isoformat()}"
            )

    updated = task.model_copy(update={
        "streak_count": new_streak,
        "last_completed_date": completed_at,
        "is_completed": True,
    })

    logger.debug(f"Task {task.id} streak {outcome.value}: {previous} → {new_streak}")

    return StreakUpdate(
        task=updated,
        outcome=outcome,
        previous_streak=previous,
        streak_count=new_streak,
    )


def break_streak(task: Task) -> Task:
    """Reset a task's streak to 0 unconditionally"""
    if task.streak_count:
        logger.info(f"Breaking streak of {task.streak_count} for task {task.id}")
    return task.model_copy(update={"streak_count": 0})


def is_streak_broken(task: Task, now: datetime, tz: Optional[tzinfo] = None) -> bool:
    """
    Whether a completion at `now` could no longer extend the streak

    Lets a scheduler decide when to call break_streak(); never mutates.
    """
    if task.streak_count == 0 or task.last_completed_date is None:
        return False

    tz = _resolve_tz(tz)
    cadence = cadence_for(task)
    last_moment = _as_aware(task.last_completed_date, tz)
    now_moment = _as_aware(now, tz)

    if now_moment <= last_moment or _same_unit(cadence, last_moment.date(), now_moment.date()):
        return False
    return not _extends(cadence, task, last_moment, now_moment)
