"""Date arithmetic for recurring tasks."""
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from .data_models import Frequency, Recurrence


def _step(due: datetime, delta: relativedelta) -> datetime:
    if due.tzinfo is None:
        return due + delta
    # step on the local wall clock; the result takes the offset in force on its own date
    wall = due.astimezone().replace(tzinfo=None)
    return (wall + delta).astimezone()


def advance(due: datetime, recurrence: Recurrence) -> Optional[datetime]:
    """
    Return the due date of the next occurrence, or None when the rule does not recur.

    Steps keep the local time of day across DST changes. Month steps use
    relativedelta, which clamps to the last valid day of the target month:
    Jan 31 + 1 month is Feb 29 in 2024 and Feb 28 otherwise.
    """
    if recurrence is None or not recurrence.is_active:
        return None
    interval = max(1, recurrence.interval)
    if recurrence.frequency is Frequency.DAILY:
        return _step(due, relativedelta(days=interval))
    if recurrence.frequency is Frequency.WEEKLY:
        return _step(due, relativedelta(weeks=interval))
    if recurrence.frequency is Frequency.MONTHLY:
        return _step(due, relativedelta(months=interval))
    return None


def describe(recurrence: Optional[Recurrence]) -> str:
    if recurrence is None or not recurrence.is_active:
        return ""
    unit = {Frequency.DAILY: "day", Frequency.WEEKLY: "week", Frequency.MONTHLY: "month"}[recurrence.frequency]
    if recurrence.interval == 1:
        return f"every {unit}"
    return f"every {recurrence.interval} {unit}s"
