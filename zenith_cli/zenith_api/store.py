"""
Document store port for tasks, profiles and projects.

Documents live under per-user paths, the way the hosted backend lays them out:

    ("profile", user_id)
    ("task", user_id, task_id)
    ("project", user_id, project_id)

Every document carries a version that is bumped on each write (deletes
included). ``run_transaction`` gives ``fn`` a :class:`Transaction` that records
the version of everything it reads and buffers its writes; the commit succeeds
only if none of those versions moved in the meantime, otherwise the whole
callback is re-run from fresh reads.
"""
import copy
import threading
import time
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from ..utils.logger import get_logger
from .data_models import Profile, Project, Task, format_timestamp
from .errors import (
    ProfileExists,
    ProfileNotFound,
    ProjectNotFound,
    TaskNotFound,
    TransactionConflict,
)

log = get_logger(__name__)

Key = Tuple[str, ...]
T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5


def _profile_key(user_id: str) -> Key:
    return ("profile", user_id)


def _task_key(user_id: str, task_id: str) -> Key:
    return ("task", user_id, task_id)


def _project_key(user_id: str, project_id: str) -> Key:
    return ("project", user_id, project_id)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


class Transaction:
    """Read/write handle passed to ``run_transaction`` callbacks."""

    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._reads: Dict[Key, int] = {}
        self._writes: List[Tuple[Key, Optional[Dict[str, Any]]]] = []

    def _read(self, key: Key) -> Optional[Dict[str, Any]]:
        for written_key, data in reversed(self._writes):
            if written_key == key:
                return copy.deepcopy(data)
        version, data = self._store._snapshot(key)
        self._reads.setdefault(key, version)
        return data

    def _write(self, key: Key, data: Optional[Dict[str, Any]]) -> None:
        self._writes.append((key, copy.deepcopy(data)))

    def get_profile(self, user_id: str) -> Profile:
        data = self._read(_profile_key(user_id))
        if data is None:
            raise ProfileNotFound(user_id)
        return Profile.from_dict(data)

    def update_profile(self, user_id: str, profile: Profile) -> None:
        self._write(_profile_key(user_id), profile.to_dict())

    def get_task(self, user_id: str, task_id: str) -> Task:
        data = self._read(_task_key(user_id, task_id))
        if data is None:
            raise TaskNotFound(task_id)
        return Task.from_dict(data)

    def patch_task(self, user_id: str, task_id: str, fields: Dict[str, Any]) -> None:
        key = _task_key(user_id, task_id)
        current = self._read(key)
        if current is None:
            raise TaskNotFound(task_id)
        current.update(fields)
        self._write(key, current)

    def insert_task(self, user_id: str, task: Task) -> str:
        task_id = self._store.new_id()
        data = task.to_dict()
        data["id"] = task_id
        data["created_at"] = format_timestamp(self._store.now())
        self._write(_task_key(user_id, task_id), data)
        return task_id


class MemoryStore:
    """In-process document store with optimistic transactions."""

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = 0.0,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.now = clock or _local_now
        self.new_id = id_factory or _new_id
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self._docs: Dict[Key, Dict[str, Any]] = {}
        self._versions: Dict[Key, int] = {}
        self._lock = threading.RLock()

    # ---------- low level ----------
    def _snapshot(self, key: Key) -> Tuple[int, Optional[Dict[str, Any]]]:
        with self._lock:
            data = self._docs.get(key)
            return self._versions.get(key, 0), copy.deepcopy(data)

    def _apply(self, key: Key, data: Optional[Dict[str, Any]]) -> None:
        if data is None:
            self._docs.pop(key, None)
        else:
            self._docs[key] = data
        self._versions[key] = self._versions.get(key, 0) + 1

    def _persist(self) -> None:
        """Hook for durable subclasses; called after every successful write."""

    def _commit(self, txn: Transaction) -> None:
        with self._lock:
            for key, version in txn._reads.items():
                current = self._versions.get(key, 0)
                if current != version:
                    raise TransactionConflict(
                        f"{'/'.join(key)} changed during transaction (read v{version}, now v{current})"
                    )
            for key, data in txn._writes:
                self._apply(key, data)
            if txn._writes:
                self._persist()

    def _scan(self, kind: str, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(data)
                for key, data in self._docs.items()
                if key[0] == kind and key[1] == user_id
            ]

    # ---------- transactions ----------
    def run_transaction(self, fn: Callable[[Transaction], T], max_attempts: Optional[int] = None) -> T:
        """
        Run ``fn`` inside an optimistic transaction and return its result.

        Conflicts re-run ``fn`` against fresh reads, at most ``max_attempts``
        times in total; the last conflict propagates. Any other exception raised
        by ``fn`` aborts immediately without writing anything.
        """
        attempts = max(1, max_attempts or self.max_attempts)
        attempt = 0
        while True:
            attempt += 1
            txn = Transaction(self)
            result = fn(txn)
            try:
                self._commit(txn)
            except TransactionConflict as e:
                if attempt >= attempts:
                    log.error("Transaction failed after %d attempts: %s", attempts, e)
                    raise
                log.warning("Transaction conflict (attempt %d/%d), retrying: %s", attempt, attempts, e)
                if self.retry_delay:
                    time.sleep(self.retry_delay * attempt)
                continue
            return result

    # ---------- profiles ----------
    def get_profile(self, user_id: str) -> Profile:
        _, data = self._snapshot(_profile_key(user_id))
        if data is None:
            raise ProfileNotFound(user_id)
        return Profile.from_dict(data)

    def create_profile(self, user_id: str, profile: Profile) -> Profile:
        key = _profile_key(user_id)
        with self._lock:
            if key in self._docs:
                raise ProfileExists(user_id)
            self._apply(key, profile.to_dict())
            self._persist()
        return profile

    def patch_profile(self, user_id: str, fields: Dict[str, Any]) -> Profile:
        key = _profile_key(user_id)
        with self._lock:
            data = self._docs.get(key)
            if data is None:
                raise ProfileNotFound(user_id)
            data = {**data, **fields}
            self._apply(key, data)
            self._persist()
        return Profile.from_dict(data)

    # ---------- tasks ----------
    def get_task(self, user_id: str, task_id: str) -> Task:
        _, data = self._snapshot(_task_key(user_id, task_id))
        if data is None:
            raise TaskNotFound(task_id)
        return Task.from_dict(data)

    def list_tasks(self, user_id: str, project_id: Optional[str] = None) -> List[Task]:
        tasks = [Task.from_dict(d) for d in self._scan("task", user_id)]
        if project_id is not None:
            tasks = [t for t in tasks if t.project_id == project_id]
        return tasks

    def insert_task(self, user_id: str, task: Task) -> Task:
        data = task.to_dict()
        data["id"] = self.new_id()
        data["created_at"] = format_timestamp(self.now())
        with self._lock:
            self._apply(_task_key(user_id, data["id"]), data)
            self._persist()
        return Task.from_dict(data)

    def patch_task(self, user_id: str, task_id: str, fields: Dict[str, Any]) -> Task:
        key = _task_key(user_id, task_id)
        with self._lock:
            data = self._docs.get(key)
            if data is None:
                raise TaskNotFound(task_id)
            data = {**data, **fields}
            self._apply(key, data)
            self._persist()
        return Task.from_dict(data)

    def delete_task(self, user_id: str, task_id: str) -> None:
        key = _task_key(user_id, task_id)
        with self._lock:
            if key not in self._docs:
                raise TaskNotFound(task_id)
            self._apply(key, None)
            self._persist()

    def delete_tasks_where(self, user_id: str, predicate: Callable[[Task], bool]) -> int:
        """Delete every matching task of ``user_id`` as one batch; returns the count."""
        with self._lock:
            doomed = [
                key for key, data in self._docs.items()
                if key[0] == "task" and key[1] == user_id and predicate(Task.from_dict(data))
            ]
            for key in doomed:
                self._apply(key, None)
            if doomed:
                self._persist()
        return len(doomed)

    def patch_tasks_where(self, user_id: str, predicate: Callable[[Task], bool], fields: Dict[str, Any]) -> int:
        with self._lock:
            matched = [
                key for key, data in self._docs.items()
                if key[0] == "task" and key[1] == user_id and predicate(Task.from_dict(data))
            ]
            for key in matched:
                self._apply(key, {**self._docs[key], **fields})
            if matched:
                self._persist()
        return len(matched)

    # ---------- projects ----------
    def get_project(self, user_id: str, project_id: str) -> Project:
        _, data = self._snapshot(_project_key(user_id, project_id))
        if data is None:
            raise ProjectNotFound(project_id)
        return Project.from_dict(data)

    def list_projects(self, user_id: str) -> List[Project]:
        return sorted(
            (Project.from_dict(d) for d in self._scan("project", user_id)),
            key=lambda p: p.name.lower(),
        )

    def insert_project(self, user_id: str, project: Project) -> Project:
        data = project.to_dict()
        data["id"] = self.new_id()
        with self._lock:
            self._apply(_project_key(user_id, data["id"]), data)
            self._persist()
        return Project.from_dict(data)

    def patch_project(self, user_id: str, project_id: str, fields: Dict[str, Any]) -> Project:
        key = _project_key(user_id, project_id)
        with self._lock:
            data = self._docs.get(key)
            if data is None:
                raise ProjectNotFound(project_id)
            data = {**data, **fields}
            self._apply(key, data)
            self._persist()
        return Project.from_dict(data)

    def delete_project(self, user_id: str, project_id: str) -> None:
        key = _project_key(user_id, project_id)
        with self._lock:
            if key not in self._docs:
                raise ProjectNotFound(project_id)
            self._apply(key, None)
            self._persist()

    def delete_project_with_tasks(self, user_id: str, project_id: str, cascade: bool = True) -> int:
        """
        Delete a project and, in the same locked batch, delete its tasks
        (``cascade``) or detach them. Returns the number of tasks affected.
        """
        key = _project_key(user_id, project_id)
        in_project = lambda t: t.project_id == project_id  # noqa: E731
        with self._lock:
            if key not in self._docs:
                raise ProjectNotFound(project_id)
            if cascade:
                affected = self.delete_tasks_where(user_id, in_project)
            else:
                affected = self.patch_tasks_where(user_id, in_project, {"project_id": None})
            self.delete_project(user_id, project_id)
        return affected

    # ---------- bulk ----------
    def dump(self) -> Dict[str, Any]:
        """Nested ``{"users": {user_id: {...}}}`` view of every document."""
        users: Dict[str, Dict[str, Any]] = {}
        with self._lock:
            for key, data in self._docs.items():
                kind, user_id = key[0], key[1]
                bucket = users.setdefault(user_id, {"profile": None, "tasks": {}, "projects": {}})
                if kind == "profile":
                    bucket["profile"] = copy.deepcopy(data)
                else:
                    bucket[f"{kind}s"][key[2]] = copy.deepcopy(data)
        return {"version": 1, "users": users}

    def load(self, payload: Dict[str, Any]) -> None:
        with self._lock:
            self._docs.clear()
            for user_id, bucket in (payload.get("users") or {}).items():
                if bucket.get("profile") is not None:
                    self._apply(_profile_key(user_id), dict(bucket["profile"]))
                for task_id, data in (bucket.get("tasks") or {}).items():
                    self._apply(_task_key(user_id, task_id), {**data, "id": task_id})
                for project_id, data in (bucket.get("projects") or {}).items():
                    self._apply(_project_key(user_id, project_id), {**data, "id": project_id})
