import json
import threading

import pytest

from zenith_cli.utils.data_loading import JsonFileStore, load_store_file
from zenith_cli.zenith_api.data_models import Priority, Profile, Project, Task
from zenith_cli.zenith_api.errors import (
    ProfileExists,
    ProfileNotFound,
    ProjectNotFound,
    StoreError,
    TaskNotFound,
    TransactionConflict,
)
from zenith_cli.zenith_api.store import MemoryStore
from zenith_cli.zenith_api.task_operations import TaskService


class InterferingStore(MemoryStore):
    """Runs ``interference`` right before the next ``times`` commits."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interference = None
        self.times = 0

    def _commit(self, txn):
        if self.times > 0:
            self.times -= 1
            self.interference()
        super()._commit(txn)


def _add_points(user_id, delta):
    def fn(txn):
        profile = txn.get_profile(user_id)
        profile.points += delta
        txn.update_profile(user_id, profile)
        return profile.points
    return fn


class TestMemoryStore:
    def test_profile_roundtrip(self, store):
        store.create_profile("u1", Profile(username="ann"))
        assert store.get_profile("u1").username == "ann"
        with pytest.raises(ProfileExists):
            store.create_profile("u1", Profile())

    def test_missing_profile(self, store):
        with pytest.raises(ProfileNotFound):
            store.get_profile("nobody")

    def test_insert_task_assigns_id_and_created_at(self, store, clock):
        task = store.insert_task("u1", Task(id=None, title="Read"))
        assert task.id == "id001"
        assert task.created_at == clock.now

    def test_tasks_are_scoped_per_user(self, store):
        store.insert_task("u1", Task(id=None, title="Mine"))
        store.insert_task("u2", Task(id=None, title="Theirs"))
        assert [t.title for t in store.list_tasks("u1")] == ["Mine"]

    def test_delete_missing_task(self, store):
        with pytest.raises(TaskNotFound):
            store.delete_task("u1", "nope")


class TestRunTransaction:
    def test_commit_applies_writes(self, store):
        store.create_profile("u1", Profile(points=10))
        assert store.run_transaction(_add_points("u1", 5)) == 15
        assert store.get_profile("u1").points == 15

    def test_conflict_reruns_from_fresh_read(self, clock):
        store = InterferingStore(clock=clock)
        store.create_profile("u1", Profile(points=10))
        store.interference = lambda: store.patch_profile("u1", {"points": 500})
        store.times = 1

        assert store.run_transaction(_add_points("u1", 25)) == 525
        assert store.get_profile("u1").points == 525

    def test_gives_up_after_max_attempts(self, clock):
        store = InterferingStore(clock=clock, max_attempts=3)
        store.create_profile("u1", Profile())
        store.interference = lambda: store.patch_profile("u1", {"streak": 1})
        store.times = 10
        calls = []

        def fn(txn):
            calls.append(1)
            return _add_points("u1", 15)(txn)

        with pytest.raises(TransactionConflict):
            store.run_transaction(fn)
        assert len(calls) == 3
        assert store.get_profile("u1").points == 0

    def test_callback_errors_are_not_retried(self, store):
        calls = []

        def fn(txn):
            calls.append(1)
            return txn.get_profile("ghost")

        with pytest.raises(ProfileNotFound):
            store.run_transaction(fn)
        assert calls == [1]

    def test_failed_callback_writes_nothing(self, store):
        store.create_profile("u1", Profile(points=10))

        def fn(txn):
            _add_points("u1", 50)(txn)
            txn.get_task("u1", "missing")

        with pytest.raises(TaskNotFound):
            store.run_transaction(fn)
        assert store.get_profile("u1").points == 10

    def test_reads_see_own_writes(self, store):
        store.create_profile("u1", Profile(points=1))

        def fn(txn):
            _add_points("u1", 1)(txn)
            return txn.get_profile("u1").points

        assert store.run_transaction(fn) == 2


class TestConcurrentCompletion:
    def test_interleaved_completion_is_not_lost(self, clock):
        store = InterferingStore(clock=clock)
        service = TaskService(store, "u1")
        service.create_profile()
        high = service.add_task("Ship release", priority=Priority.HIGH)
        medium = service.add_task("Write notes", priority=Priority.MEDIUM)

        store.interference = lambda: service.complete_task(medium.id)
        store.times = 1
        service.complete_task(high.id)

        assert service.get_profile().points == 40
        assert service.get_task(high.id).is_completed
        assert service.get_task(medium.id).is_completed

    def test_threads_completing_different_tasks(self, clock):
        store = MemoryStore(clock=clock, max_attempts=100)
        service = TaskService(store, "u1")
        service.create_profile()
        tasks = [service.add_task(f"Task {i}", priority=Priority.LOW) for i in range(8)]
        barrier = threading.Barrier(len(tasks))
        errors = []

        def worker(task_id):
            barrier.wait()
            try:
                service.complete_task(task_id)
            except Exception as e:  # surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(t.id,)) for t in tasks]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert service.get_profile().points == 10 * len(tasks)


class TestProjectCascade:
    def test_cascade_holds_the_store_lock(self, clock):
        outcome = {}

        class RacingStore(MemoryStore):
            def delete_tasks_where(self, user_id, predicate):
                def rival():
                    try:
                        self.delete_project(user_id, project.id)
                        outcome["rival"] = "deleted"
                    except ProjectNotFound:
                        outcome["rival"] = "not found"

                thread = threading.Thread(target=rival)
                thread.start()
                thread.join(timeout=0.2)
                outcome["blocked"] = thread.is_alive()
                outcome["thread"] = thread
                return super().delete_tasks_where(user_id, predicate)

        store = RacingStore(clock=clock)
        project = store.insert_project("u1", Project(id=None, name="Garden"))
        store.insert_task("u1", Task(id=None, title="Weed", project_id=project.id))

        assert store.delete_project_with_tasks("u1", project.id) == 1
        outcome["thread"].join()
        assert outcome["blocked"] is True
        assert outcome["rival"] == "not found"
        assert store.list_tasks("u1") == []

    def test_detach_keeps_tasks(self, store):
        project = store.insert_project("u1", Project(id=None, name="Garden"))
        task = store.insert_task("u1", Task(id=None, title="Weed", project_id=project.id))

        assert store.delete_project_with_tasks("u1", project.id, cascade=False) == 1
        assert store.get_task("u1", task.id).project_id is None
        with pytest.raises(ProjectNotFound):
            store.get_project("u1", project.id)


class TestJsonFileStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert load_store_file(tmp_path / "none.json") == {"version": 1, "users": {}}

    def test_writes_survive_reload(self, tmp_path):
        path = tmp_path / "data" / "zenith.json"
        store = JsonFileStore(path)
        service = TaskService(store, "u1")
        service.create_profile(username="ann")
        task = service.add_task("Plan trip", tags=["travel"])
        service.complete_task(task.id)

        reloaded = TaskService(JsonFileStore(path), "u1")
        assert reloaded.get_profile().points == 15
        assert reloaded.get_task(task.id).is_completed
        assert reloaded.get_task(task.id).tags == ["travel"]

        raw = json.loads(path.read_text())
        assert task.id in raw["users"]["u1"]["tasks"]

    def test_invalid_json_raises_store_error(self, tmp_path):
        path = tmp_path / "zenith.json"
        path.write_text("{not json")
        with pytest.raises(StoreError):
            JsonFileStore(path)

    def test_schema_violation_raises_store_error(self, tmp_path):
        path = tmp_path / "zenith.json"
        path.write_text(json.dumps({"version": 1, "users": {"u1": {"profile": {"points": -5}}}}))
        with pytest.raises(StoreError):
            load_store_file(path)

    def test_task_list_form_is_accepted(self, tmp_path):
        path = tmp_path / "zenith.json"
        path.write_text(json.dumps({"users": {"u1": {"tasks": [{"id": "a1", "title": "Old"}]}}}))
        store = JsonFileStore(path)
        assert store.get_task("u1", "a1").title == "Old"
