"""
Task views: dashboard filters, calendar markings, agenda and search.
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from icalendar import Calendar, Todo
from thefuzz import fuzz

from .data_models import Priority, Task


class TaskFilter(str, Enum):
    all = "all"
    today = "today"
    upcoming = "upcoming"
    completed = "completed"


UPCOMING_WINDOW = timedelta(days=7)


def local_time(ts: datetime) -> datetime:
    """``ts`` on the local clock; naive values are taken as local already."""
    return ts.astimezone()


def newest_first(tasks: Iterable[Task]) -> List[Task]:
    # tasks without a creation stamp sink to the end
    return sorted(tasks, key=lambda t: t.created_at.timestamp() if t.created_at else float("-inf"), reverse=True)


def filter_tasks(tasks: Iterable[Task], task_filter: TaskFilter, now: datetime) -> List[Task]:
    ordered = newest_first(tasks)
    if task_filter is TaskFilter.completed:
        return [t for t in ordered if t.is_completed]
    open_tasks = [t for t in ordered if not t.is_completed]
    now = local_time(now)
    if task_filter is TaskFilter.today:
        return [t for t in open_tasks if t.due_date and local_time(t.due_date).date() == now.date()]
    if task_filter is TaskFilter.upcoming:
        end = now + UPCOMING_WINDOW
        return [t for t in open_tasks if t.due_date and now <= local_time(t.due_date) <= end]
    return open_tasks


def marked_dates(tasks: Iterable[Task]) -> Dict[date, List[Optional[Priority]]]:
    """One entry per day with something due, listing the priorities due that day."""
    markings: Dict[date, List[Optional[Priority]]] = {}
    for task in tasks:
        if task.due_date is None:
            continue
        markings.setdefault(local_time(task.due_date).date(), []).append(task.priority)
    return dict(sorted(markings.items()))


def tasks_for_day(tasks: Iterable[Task], day: date) -> List[Task]:
    """Agenda for one day, open tasks first."""
    due = [t for t in tasks if t.due_date is not None and local_time(t.due_date).date() == day]
    return sorted(due, key=lambda t: t.is_completed)


def search_tasks(tasks: Iterable[Task], query: str, threshold: int = 70) -> List[Tuple[Task, int]]:
    """Fuzzy-match tasks on title and description, best match first."""
    query = query.lower().strip()
    scored = []
    for task in tasks:
        score = fuzz.partial_ratio(query, task.title.lower())
        if task.description:
            score = max(score, fuzz.partial_ratio(query, task.description.lower()))
        if score >= threshold:
            scored.append((task, score))
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


_ICS_PRIORITY = {Priority.HIGH: 1, Priority.MEDIUM: 5, Priority.LOW: 9}


def build_calendar(tasks: Iterable[Task]) -> Calendar:
    cal = Calendar()
    cal.add("prodid", "-//Zenith List//zenith-cli//EN")
    cal.add("version", "2.0")
    for task in tasks:
        if task.due_date is None:
            continue
        todo = Todo()
        todo.add("uid", f"{task.id}@zenith-list")
        todo.add("summary", task.title)
        if task.description:
            todo.add("description", task.description)
        todo.add("due", task.due_date)
        if task.priority in _ICS_PRIORITY:
            todo.add("priority", _ICS_PRIORITY[task.priority])
        if task.tags:
            todo.add("categories", task.tags)
        todo.add("status", "COMPLETED" if task.is_completed else "NEEDS-ACTION")
        if task.completed_at is not None:
            todo.add("completed", task.completed_at)
        cal.add_component(todo)
    return cal


def export_ics(tasks: Iterable[Task], path) -> int:
    """Write tasks with due dates as VTODO entries; returns how many were written."""
    cal = build_calendar(tasks)
    with open(path, "wb") as f:
        f.write(cal.to_ical())
    return len(cal.subcomponents)
