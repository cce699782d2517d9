"""
Store tests.

Tests for:
- InMemoryStore (reference implementation)
- RedisStore against a mocked Redis client

Run with:
    pytest tests/test_store.py -v
"""

import threading
import pytest
import redis
from datetime import timedelta
from unittest.mock import MagicMock

from taskforce.clients.redis_store import RedisStore
from taskforce.clients.store_client import METRICS_RETAINED
from taskforce.errors import ConcurrentUpdateError, StoreError, TaskNotFound, WorkerNotFound
from taskforce.models.task import PerformanceMetric
from tests.conftest import FIXED_NOW, make_task, make_worker


# ============================================================================
# InMemoryStore Tests
# ============================================================================

class TestInMemoryWorkers:
    """Tests for worker documents in the in-memory store."""

    def test_missing_worker(self, store):
        with pytest.raises(WorkerNotFound):
            store.get_worker("nobody")

    def test_returns_copies(self, store):
        """Test callers cannot mutate stored documents."""
        store.create_worker(make_worker("alice", ["react"]))

        fetched = store.get_worker("alice")
        fetched.skills.append("hacked")

        assert store.get_worker("alice").skills == ["react"]

    def test_update_bumps_version(self, store):
        store.create_worker(make_worker("alice"))

        updated = store.update_worker("alice", {"role": "QA Engineer"})

        assert updated.role == "QA Engineer"
        assert updated.version == 1

    def test_version_conflict(self, store):
        store.create_worker(make_worker("alice"))
        store.update_worker("alice", {"role": "QA Engineer"}, expected_version=0)

        with pytest.raises(ConcurrentUpdateError) as exc_info:
            store.update_worker("alice", {"role": "Data Engineer"}, expected_version=0)

        assert exc_info.value.actual_version == 1
        assert store.get_worker("alice").role == "QA Engineer"

    def test_counter_not_updatable_directly(self, store):
        store.create_worker(make_worker("alice"))
        with pytest.raises(StoreError):
            store.update_worker("alice", {"active_tasks": 5})

    def test_increment_floors_at_zero(self, store):
        store.create_worker(make_worker("alice", active_tasks=1))

        assert store.increment_worker_field("alice", "active_tasks", 2) == 3
        assert store.increment_worker_field("alice", "active_tasks", -5) == 0
        assert store.get_worker("alice").active_tasks == 0

    def test_increment_keeps_version(self, store):
        store.create_worker(make_worker("alice"))
        store.increment_worker_field("alice", "active_tasks", 1)
        assert store.get_worker("alice").version == 0

    def test_increment_unknown_field(self, store):
        store.create_worker(make_worker("alice"))
        with pytest.raises(StoreError):
            store.increment_worker_field("alice", "version", 1)

    def test_concurrent_increments(self, store):
        store.create_worker(make_worker("alice"))

        threads = [
            threading.Thread(target=store.increment_worker_field, args=("alice", "active_tasks", 1))
            for _ in range(50)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_worker("alice").active_tasks == 50

    def test_list_by_manager(self, store):
        store.create_worker(make_worker("alice", manager_id="m1"))
        store.create_worker(make_worker("bob", manager_id="m2"))
        assert [w.id for w in store.list_workers_by_manager("m1")] == ["alice"]


class TestInMemoryTasks:
    """Tests for task documents and metrics."""

    def test_task_crud(self, store):
        store.create_task(make_task())

        updated = store.update_task("task-1", {"actual_hours": 7})
        assert updated.actual_hours == 7
        assert updated.updated_at is not None

        store.delete_task("task-1")
        with pytest.raises(TaskNotFound):
            store.get_task("task-1")
        with pytest.raises(TaskNotFound):
            store.delete_task("task-1")

    def test_manager_tasks_newest_first(self, store):
        store.create_task(make_task(id="old", created_at=FIXED_NOW - timedelta(days=1)))
        store.create_task(make_task(id="new", created_at=FIXED_NOW))
        assert [t.id for t in store.list_tasks_by_manager("manager-1")] == ["new", "old"]

    def test_metrics_newest_first(self, store):
        for i in range(3):
            store.create_performance_metric(PerformanceMetric(task_id=f"t{i}", employee_id="alice", score=60 + i))

        metrics = store.list_performance_metrics("alice", limit=2)

        assert [m.task_id for m in metrics] == ["t2", "t1"]

    def test_metrics_trimmed_to_retained(self, store):
        for i in range(METRICS_RETAINED + 5):
            store.create_performance_metric(PerformanceMetric(task_id=f"t{i}", employee_id="alice", score=80))

        metrics = store.list_performance_metrics("alice", limit=METRICS_RETAINED + 5)

        assert len(metrics) == METRICS_RETAINED
        assert metrics[0].task_id == f"t{METRICS_RETAINED + 4}"


# ============================================================================
# RedisStore Tests
# ============================================================================

@pytest.fixture
def mock_redis():
    """Mock Redis client backed by a dict for GET."""
    client = MagicMock()
    client.data = {}
    client.get.side_effect = lambda key: client.data.get(key)
    return client


@pytest.fixture
def redis_store(mock_redis, settings):
    return RedisStore(client=mock_redis, key_prefix="tf", settings=settings)


class TestRedisStore:
    """Tests for RedisStore with a mocked client."""

    def test_get_worker_merges_counter(self, redis_store, mock_redis):
        worker = make_worker("alice", ["react"])
        mock_redis.data["tf:worker:alice"] = worker.model_dump_json(exclude={"active_tasks"})
        mock_redis.data["tf:worker:alice:active_tasks"] = "2"

        loaded = redis_store.get_worker("alice")

        assert loaded.skills == ["react"]
        assert loaded.active_tasks == 2

    def test_get_missing_worker(self, redis_store):
        with pytest.raises(WorkerNotFound):
            redis_store.get_worker("ghost")

    def test_redis_error_becomes_store_error(self, redis_store, mock_redis):
        mock_redis.get.side_effect = redis.ConnectionError("down")
        with pytest.raises(StoreError):
            redis_store.get_worker("alice")

    def test_create_worker_indexes_manager(self, redis_store, mock_redis):
        pipe = mock_redis.pipeline.return_value

        redis_store.create_worker(make_worker("alice", active_tasks=1, manager_id="m1"))

        pipe.set.assert_any_call("tf:worker:alice:active_tasks", 1)
        pipe.sadd.assert_called_once_with("tf:manager:m1:workers", "alice")
        pipe.execute.assert_called_once()

    def test_increment_uses_script(self, redis_store, mock_redis):
        script = MagicMock(return_value=0)
        mock_redis.register_script.return_value = script
        mock_redis.exists.return_value = 1

        assert redis_store.increment_worker_field("alice", "active_tasks", -1) == 0
        script.assert_called_once_with(keys=["tf:worker:alice:active_tasks"], args=[-1])

    def test_increment_missing_worker(self, redis_store, mock_redis):
        mock_redis.exists.return_value = 0
        with pytest.raises(WorkerNotFound):
            redis_store.increment_worker_field("ghost", "active_tasks", 1)

    def test_watch_error_is_conflict(self, redis_store, mock_redis):
        """Test a transaction aborted by WATCH surfaces as ConcurrentUpdateError."""
        worker = make_worker("alice")
        pipe = MagicMock()
        pipe.get.side_effect = lambda key: {
            "tf:worker:alice": worker.model_dump_json(exclude={"active_tasks"}),
        }.get(key)
        pipe.execute.side_effect = redis.WatchError("changed")
        mock_redis.pipeline.return_value.__enter__.return_value = pipe

        with pytest.raises(ConcurrentUpdateError):
            redis_store.update_worker("alice", {"role": "QA Engineer"}, expected_version=0)

    def test_stale_version_is_conflict(self, redis_store, mock_redis):
        worker = make_worker("alice").model_copy(update={"version": 4})
        pipe = MagicMock()
        pipe.get.side_effect = lambda key: {
            "tf:worker:alice": worker.model_dump_json(exclude={"active_tasks"}),
        }.get(key)
        mock_redis.pipeline.return_value.__enter__.return_value = pipe

        with pytest.raises(ConcurrentUpdateError):
            redis_store.update_worker("alice", {"role": "QA Engineer"}, expected_version=3)
        pipe.execute.assert_not_called()

    def test_metrics_trimmed(self, redis_store, mock_redis):
        pipe = mock_redis.pipeline.return_value

        redis_store.create_performance_metric(PerformanceMetric(task_id="t1", employee_id="alice", score=80))

        pipe.ltrim.assert_called_once_with("tf:metrics:alice", 0, METRICS_RETAINED - 1)
