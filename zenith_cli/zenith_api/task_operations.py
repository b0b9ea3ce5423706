"""Task-related operations for one user's Zenith data."""
import re
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..utils.logger import get_logger
from . import completion
from .data_models import (
    PROJECT_ICONS,
    Priority,
    Profile,
    Project,
    Recurrence,
    Subtask,
    Task,
)
from .errors import InvalidTaskError, SubtaskNotFound
from .store import MemoryStore, Transaction

log = get_logger(__name__)

_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
_EDITABLE_FIELDS = ("title", "description", "priority", "due_date", "recurrence", "tags", "project_id")


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise InvalidTaskError("Title is required.")
    return title


def _clean_tags(tags: Iterable[str]) -> List[str]:
    return sorted({t.strip() for t in tags if t and t.strip()})


def _check_recurrence(recurrence: Optional[Recurrence]) -> None:
    if recurrence is not None and recurrence.interval < 1:
        raise InvalidTaskError("Recurrence interval must be at least 1.")


class TaskService:
    """
    The calling layer around the store: validation, CRUD and the completion
    transaction, bound to a single user.
    """

    def __init__(self, store: MemoryStore, user_id: str, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.user_id = user_id
        self.clock = clock or store.now

    # ---------- profile ----------
    def create_profile(self, username: Optional[str] = None, email: Optional[str] = None) -> Profile:
        profile = Profile(username=username, email=email)
        self.store.create_profile(self.user_id, profile)
        log.info("Created profile for %s", self.user_id)
        return profile

    def get_profile(self) -> Profile:
        return self.store.get_profile(self.user_id)

    # ---------- tasks ----------
    def add_task(
        self,
        title: str,
        description: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
        due_date: Optional[datetime] = None,
        recurrence: Optional[Recurrence] = None,
        tags: Iterable[str] = (),
        project_id: Optional[str] = None,
    ) -> Task:
        _check_recurrence(recurrence)
        if project_id is not None:
            self.store.get_project(self.user_id, project_id)
        task = Task(
            id=None,
            title=_clean_title(title),
            description=description or None,
            priority=priority,
            due_date=due_date,
            recurrence=recurrence,
            tags=_clean_tags(tags),
            project_id=project_id,
        )
        return self.store.insert_task(self.user_id, task)

    def get_task(self, task_id: str) -> Task:
        return self.store.get_task(self.user_id, task_id)

    def list_tasks(self, project_id: Optional[str] = None) -> List[Task]:
        return self.store.list_tasks(self.user_id, project_id=project_id)

    def edit_task(self, task_id: str, **fields: Any) -> Task:
        unknown = set(fields) - set(_EDITABLE_FIELDS)
        if unknown:
            raise InvalidTaskError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
        task = self.get_task(task_id)
        if "title" in fields:
            fields["title"] = _clean_title(fields["title"])
        if "tags" in fields:
            fields["tags"] = _clean_tags(fields["tags"])
        if "recurrence" in fields:
            _check_recurrence(fields["recurrence"])
        if fields.get("project_id") is not None:
            self.store.get_project(self.user_id, fields["project_id"])
        updated = replace(task, **fields).to_dict()
        return self.store.patch_task(self.user_id, task_id, {k: updated[k] for k in fields})

    def delete_task(self, task_id: str) -> None:
        self.store.delete_task(self.user_id, task_id)

    def complete_task(self, task_id: str) -> completion.CompletionResult:
        """
        Complete a task inside one store transaction.

        The profile, the task patch and the next occurrence of a recurring task
        are written together; on a concurrent write the whole cycle is re-run
        from fresh reads by the store.
        """

        def _complete(txn: Transaction) -> completion.CompletionResult:
            profile = txn.get_profile(self.user_id)
            task = txn.get_task(self.user_id, task_id)
            result = completion.complete_task(profile, task, self.clock())
            txn.update_profile(self.user_id, result.profile)
            txn.patch_task(self.user_id, task_id, result.task_patch.to_dict())
            if result.spawned_task is not None:
                new_id = txn.insert_task(self.user_id, result.spawned_task)
                result = result._replace(spawned_task=replace(result.spawned_task, id=new_id))
            return result

        result = self.store.run_transaction(_complete)
        if result.spawned_task is not None:
            log.info("Spawned next occurrence %s of task %s", result.spawned_task.id, task_id)
        return result

    def reopen_task(self, task_id: str) -> Task:
        """Mark a task open again; points already awarded are kept."""
        self.get_task(task_id)
        return self.store.patch_task(self.user_id, task_id, {"is_completed": False, "completed_at": None})

    def toggle_task(self, task_id: str):
        task = self.get_task(task_id)
        if task.is_completed:
            return self.reopen_task(task_id)
        return self.complete_task(task_id)

    # ---------- subtasks ----------
    def add_subtask(self, task_id: str, title: str) -> Subtask:
        task = self.get_task(task_id)
        subtask = Subtask(id=self.store.new_id(), title=_clean_title(title))
        subtasks = [s.to_dict() for s in task.subtasks] + [subtask.to_dict()]
        self.store.patch_task(self.user_id, task_id, {"subtasks": subtasks})
        return subtask

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Subtask:
        task = self.get_task(task_id)
        toggled = None
        for s in task.subtasks:
            if s.id == subtask_id:
                s.is_completed = not s.is_completed
                toggled = s
        if toggled is None:
            raise SubtaskNotFound(task_id, subtask_id)
        self.store.patch_task(self.user_id, task_id, {"subtasks": [s.to_dict() for s in task.subtasks]})
        return toggled

    def delete_subtask(self, task_id: str, subtask_id: str) -> None:
        task = self.get_task(task_id)
        remaining = [s for s in task.subtasks if s.id != subtask_id]
        if len(remaining) == len(task.subtasks):
            raise SubtaskNotFound(task_id, subtask_id)
        self.store.patch_task(self.user_id, task_id, {"subtasks": [s.to_dict() for s in remaining]})

    # ---------- projects ----------
    def _check_project_style(self, icon: Optional[str], color: Optional[str]) -> None:
        if icon is not None and icon not in PROJECT_ICONS:
            raise InvalidTaskError(f"Unknown icon '{icon}'. Choose one of: {', '.join(PROJECT_ICONS)}")
        if color is not None and not _COLOR_RE.match(color):
            raise InvalidTaskError(f"Color must look like #RRGGBB, got '{color}'.")

    def add_project(self, name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Project:
        name = (name or "").strip()
        if not name:
            raise InvalidTaskError("Project name is required.")
        self._check_project_style(icon, color)
        project = Project(id=None, name=name)
        if icon:
            project.icon = icon
        if color:
            project.color = color.upper()
        return self.store.insert_project(self.user_id, project)

    def edit_project(
        self, project_id: str, name: Optional[str] = None, icon: Optional[str] = None, color: Optional[str] = None
    ) -> Project:
        fields: Dict[str, Any] = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise InvalidTaskError("Project name is required.")
            fields["name"] = name
        self._check_project_style(icon, color)
        if icon is not None:
            fields["icon"] = icon
        if color is not None:
            fields["color"] = color.upper()
        return self.store.patch_project(self.user_id, project_id, fields)

    def list_projects(self) -> List[Project]:
        return self.store.list_projects(self.user_id)

    def delete_project(self, project_id: str, cascade: bool = True) -> int:
        """
        Delete a project. With ``cascade`` its tasks go too, otherwise they are
        detached from it. Returns the number of tasks affected.
        """
        affected = self.store.delete_project_with_tasks(self.user_id, project_id, cascade=cascade)
        log.info("Deleted project %s (%d task(s) %s)", project_id, affected, "deleted" if cascade else "detached")
        return affected
