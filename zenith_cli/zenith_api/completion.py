"""
Completion engine: the state transition triggered by marking one task complete.

``complete_task`` is a pure function. It reads no clock, generates no ids and
performs no I/O; the caller runs it inside a store transaction and writes the
three artifacts back atomically.
"""
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional

from .data_models import Priority, Profile, Task, TaskPatch
from .errors import AlreadyCompleted
from .recurrence import advance

POINTS_BY_PRIORITY = {
    Priority.HIGH: 25,
    Priority.MEDIUM: 15,
    Priority.LOW: 10,
}
DEFAULT_POINTS = 10


class CompletionResult(NamedTuple):
    profile: Profile
    task_patch: TaskPatch
    spawned_task: Optional[Task]


def points_for(priority: Optional[Priority]) -> int:
    return POINTS_BY_PRIORITY.get(priority, DEFAULT_POINTS)


def calendar_day(ts: datetime, reference: datetime) -> date:
    """Calendar day of ``ts`` as seen from ``reference``'s timezone."""
    if ts.tzinfo is not None and reference.tzinfo is not None:
        ts = ts.astimezone(reference.tzinfo)
    return ts.date()


def next_streak(streak: int, last_completion: Optional[datetime], now: datetime) -> int:
    if last_completion is None:
        return 1
    today = calendar_day(now, now)
    last_day = calendar_day(last_completion, now)
    if last_day == today:
        # a second completion on the same day never double-counts
        return max(streak, 1)
    if last_day == today - timedelta(days=1):
        return streak + 1
    return 1


def spawn_next(task: Task, now: datetime) -> Optional[Task]:
    if task.recurrence is None or not task.recurrence.is_active:
        return None
    anchor = task.due_date if task.due_date is not None else now
    return replace(
        task,
        id=None,
        due_date=advance(anchor, task.recurrence),
        is_completed=False,
        completed_at=None,
        created_at=None,
        subtasks=[replace(s) for s in task.subtasks],
        tags=list(task.tags),
    )


def complete_task(profile: Profile, task: Task, now: datetime) -> CompletionResult:
    """Compute the new profile, the task patch and the next occurrence, if any."""
    if task.is_completed:
        raise AlreadyCompleted(task.id or task.title)

    new_points = profile.points + points_for(task.priority)

    new_profile = replace(
        profile,
        points=new_points,
        streak=next_streak(profile.streak, profile.last_completion_date, now),
        last_completion_date=now,
    )
    return CompletionResult(
        profile=new_profile,
        task_patch=TaskPatch(is_completed=True, completed_at=now),
        spawned_task=spawn_next(task, now),
    )
