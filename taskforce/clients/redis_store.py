"""
Redis-backed document store.

Layout (all keys under settings.redis_key_prefix):
    <prefix>:worker:<id>                 JSON worker document (without counters)
    <prefix>:worker:<id>:<counter>       integer counter (active_tasks)
    <prefix>:manager:<id>:workers        set of worker ids
    <prefix>:task:<id>                   JSON task document
    <prefix>:manager:<id>:tasks          set of task ids created by the manager
    <prefix>:employee:<id>:tasks         set of task ids assigned to the worker
    <prefix>:metrics:<worker id>         list of JSON metrics, newest first

Versioned worker updates use WATCH/MULTI so a concurrent writer makes the
transaction fail instead of silently overwriting. Counters are changed with
a Lua script that increments and floors at zero in one step.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import redis

from taskforce.clients.store_client import (
    COUNTER_FIELDS,
    METRICS_RETAINED,
    TaskforceStore,
    _check_counter_updates,
    apply_task_updates,
    apply_worker_updates,
)
from taskforce.config.settings import Settings, get_settings
from taskforce.errors import ConcurrentUpdateError, StoreError, TaskNotFound, WorkerNotFound
from taskforce.models.task import PerformanceMetric, Task
from taskforce.models.worker import Worker

logger = logging.getLogger(__name__)

INCREMENT_FLOOR_ZERO = """
local value = redis.call('INCRBY', KEYS[1], ARGV[1])
if value < 0 then
    redis.call('SET', KEYS[1], 0)
    value = 0
end
return value
"""


class RedisStore(TaskforceStore):
    """TaskforceStore on top of a single Redis database."""

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        key_prefix: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize Redis store.

        Args:
            client: Pre-built Redis client (decode_responses=True expected)
            key_prefix: Namespace for every key
            settings: Settings to build the client from when none is given
        """
        settings = settings or get_settings()
        self.key_prefix = key_prefix or settings.redis_key_prefix
        self._settings = settings
        self._redis = client
        self._increment = None

    def _get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            settings = self._settings
            try:
                self._redis = redis.Redis(
                    host=settings.redis_host,
                    port=settings.redis_port,
                    db=settings.redis_db,
                    password=settings.redis_password,
                    decode_responses=True,
                    socket_timeout=settings.redis_socket_timeout,
                )
                self._redis.ping()
                logger.info(f"Connected to Redis at {settings.redis_host}:{settings.redis_port}")
            except redis.RedisError as e:
                self._redis = None
                logger.error(f"Failed to connect to Redis: {e}")
                raise StoreError(f"Redis unavailable: {e}") from e
        return self._redis

    def _key(self, *parts: str) -> str:
        return ":".join((self.key_prefix,) + parts)

    def _worker_key(self, worker_id: str) -> str:
        return self._key("worker", worker_id)

    def _counter_key(self, worker_id: str, field: str) -> str:
        return self._key("worker", worker_id, field)

    def _task_key(self, task_id: str) -> str:
        return self._key("task", task_id)

    # Workers

    def _load_worker(self, conn, worker_id: str, raw: Optional[str]) -> Worker:
        if raw is None:
            raise WorkerNotFound(worker_id)
        data = json.loads(raw)
        for field in COUNTER_FIELDS:
            data[field] = int(conn.get(self._counter_key(worker_id, field)) or 0)
        return Worker.model_validate(data)

    @staticmethod
    def _dump_worker(worker: Worker) -> str:
        return worker.model_dump_json(exclude=set(COUNTER_FIELDS))

    def get_worker(self, worker_id: str) -> Worker:
        try:
            conn = self._get_redis()
            return self._load_worker(conn, worker_id, conn.get(self._worker_key(worker_id)))
        except redis.RedisError as e:
            raise StoreError(f"Failed to read worker {worker_id}: {e}") from e

    def create_worker(self, worker: Worker) -> Worker:
        try:
            conn = self._get_redis()
            pipe = conn.pipeline()
            pipe.set(self._worker_key(worker.id), self._dump_worker(worker))
            for field in COUNTER_FIELDS:
                pipe.set(self._counter_key(worker.id, field), getattr(worker, field))
            if worker.manager_id:
                pipe.sadd(self._key("manager", worker.manager_id, "workers"), worker.id)
            pipe.execute()
            logger.debug(f"Stored worker: {worker.id}")
            return worker
        except redis.RedisError as e:
            raise StoreError(f"Failed to create worker {worker.id}: {e}") from e

    def update_worker(
        self,
        worker_id: str,
        updates: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Worker:
        _check_counter_updates(updates)
        key = self._worker_key(worker_id)
        try:
            conn = self._get_redis()
            with conn.pipeline() as pipe:
                pipe.watch(key)
                current = self._load_worker(pipe, worker_id, pipe.get(key))
                if expected_version is not None and current.version != expected_version:
                    raise ConcurrentUpdateError(worker_id, expected_version, current.version)
                updated = apply_worker_updates(current, updates)

                pipe.multi()
                pipe.set(key, self._dump_worker(updated))
                if "manager_id" in updates and updates["manager_id"] != current.manager_id:
                    if current.manager_id:
                        pipe.srem(self._key("manager", current.manager_id, "workers"), worker_id)
                    if updated.manager_id:
                        pipe.sadd(self._key("manager", updated.manager_id, "workers"), worker_id)
                pipe.execute()
                return updated
        except redis.WatchError:
            logger.warning(f"Concurrent write detected for worker {worker_id}")
            raise ConcurrentUpdateError(
                worker_id, expected_version if expected_version is not None else -1, -1
            )
        except redis.RedisError as e:
            raise StoreError(f"Failed to update worker {worker_id}: {e}") from e

    def list_workers_by_manager(self, manager_id: str) -> List[Worker]:
        try:
            conn = self._get_redis()
            ids = sorted(conn.smembers(self._key("manager", manager_id, "workers")))
            workers = []
            for worker_id in ids:
                try:
                    workers.append(self._load_worker(conn, worker_id, conn.get(self._worker_key(worker_id))))
                except WorkerNotFound:
                    logger.warning(f"Manager index references missing worker {worker_id}")
            return workers
        except redis.RedisError as e:
            raise StoreError(f"Failed to list workers for {manager_id}: {e}") from e

    def increment_worker_field(self, worker_id: str, field: str, delta: int) -> int:
        if field not in COUNTER_FIELDS:
            raise StoreError(f"Not a counter field: {field}")
        try:
            conn = self._get_redis()
            if not conn.exists(self._worker_key(worker_id)):
                raise WorkerNotFound(worker_id)
            if self._increment is None:
                self._increment = conn.register_script(INCREMENT_FLOOR_ZERO)
            return int(self._increment(keys=[self._counter_key(worker_id, field)], args=[delta]))
        except redis.RedisError as e:
            raise StoreError(f"Failed to increment {field} for {worker_id}: {e}") from e

    # Tasks

    def create_task(self, task: Task) -> Task:
        try:
            pipe = self._get_redis().pipeline()
            pipe.set(self._task_key(task.id), task.model_dump_json())
            if task.created_by:
                pipe.sadd(self._key("manager", task.created_by, "tasks"), task.id)
            pipe.sadd(self._key("employee", task.assigned_to, "tasks"), task.id)
            pipe.execute()
            return task
        except redis.RedisError as e:
            raise StoreError(f"Failed to create task {task.id}: {e}") from e

    def get_task(self, task_id: str) -> Task:
        try:
            raw = self._get_redis().get(self._task_key(task_id))
        except redis.RedisError as e:
            raise StoreError(f"Failed to read task {task_id}: {e}") from e
        if raw is None:
            raise TaskNotFound(task_id)
        return Task.model_validate_json(raw)

    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Task:
        updated = apply_task_updates(self.get_task(task_id), updates)
        try:
            self._get_redis().set(self._task_key(task_id), updated.model_dump_json())
            return updated
        except redis.RedisError as e:
            raise StoreError(f"Failed to update task {task_id}: {e}") from e

    def delete_task(self, task_id: str) -> None:
        task = self.get_task(task_id)
        try:
            pipe = self._get_redis().pipeline()
            pipe.delete(self._task_key(task_id))
            if task.created_by:
                pipe.srem(self._key("manager", task.created_by, "tasks"), task_id)
            pipe.srem(self._key("employee", task.assigned_to, "tasks"), task_id)
            pipe.execute()
        except redis.RedisError as e:
            raise StoreError(f"Failed to delete task {task_id}: {e}") from e

    def _load_tasks(self, index_key: str) -> List[Task]:
        conn = self._get_redis()
        tasks = []
        for task_id in conn.smembers(index_key):
            raw = conn.get(self._task_key(task_id))
            if raw is not None:
                tasks.append(Task.model_validate_json(raw))
        return tasks

    def list_tasks_by_manager(self, manager_id: str) -> List[Task]:
        try:
            tasks = self._load_tasks(self._key("manager", manager_id, "tasks"))
        except redis.RedisError as e:
            raise StoreError(f"Failed to list tasks for manager {manager_id}: {e}") from e
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    def list_tasks_by_employee(self, employee_id: str) -> List[Task]:
        try:
            tasks = self._load_tasks(self._key("employee", employee_id, "tasks"))
        except redis.RedisError as e:
            raise StoreError(f"Failed to list tasks for employee {employee_id}: {e}") from e
        return sorted(tasks, key=lambda t: t.created_at)

    # Performance metrics

    def create_performance_metric(self, metric: PerformanceMetric) -> PerformanceMetric:
        key = self._key("metrics", metric.employee_id)
        try:
            pipe = self._get_redis().pipeline()
            pipe.lpush(key, metric.model_dump_json())
            pipe.ltrim(key, 0, METRICS_RETAINED - 1)
            pipe.execute()
            return metric
        except redis.RedisError as e:
            raise StoreError(f"Failed to record metric for {metric.employee_id}: {e}") from e

    def list_performance_metrics(self, worker_id: str, limit: int = 50) -> List[PerformanceMetric]:
        try:
            raw_items = self._get_redis().lrange(self._key("metrics", worker_id), 0, limit - 1)
        except redis.RedisError as e:
            raise StoreError(f"Failed to list metrics for {worker_id}: {e}") from e
        return [PerformanceMetric.model_validate_json(raw) for raw in raw_items]
