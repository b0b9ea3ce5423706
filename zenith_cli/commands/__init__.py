"""
Command handlers for the zenith CLI. Each ``handle_*`` takes a simple ``args``
object built by the typer layer.
"""
from typing import List

from ..zenith_api.data_models import Task
from ..zenith_api.errors import TaskNotFound, ZenithError
from ..zenith_api.task_operations import TaskService


def resolve_task_id(service: TaskService, ref: str) -> str:
    """Accept a full task id or an unambiguous prefix of one."""
    ref = (ref or "").strip()
    tasks: List[Task] = service.list_tasks()
    if any(t.id == ref for t in tasks):
        return ref
    matches = [t.id for t in tasks if ref and t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ZenithError(f"Task id prefix '{ref}' is ambiguous ({len(matches)} matches).")
    raise TaskNotFound(ref)
