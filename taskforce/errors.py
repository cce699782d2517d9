"""Exception hierarchy for the Taskforce engine."""

from typing import Optional


class TaskforceError(Exception):
    """Base class for all Taskforce errors."""


class AdvisoryUnavailable(TaskforceError):
    """The advisory model could not be reached or returned no usable reply."""


class MalformedResponse(TaskforceError):
    """Advisory text did not contain a parseable JSON object."""

    def __init__(self, message: str, raw: Optional[str] = None):
        self.excerpt = (raw or "")[:200]
        super().__init__(f"{message}: {self.excerpt!r}" if self.excerpt else message)


class NoWorkersAvailable(TaskforceError):
    """An assignment was requested against an empty worker pool."""


class WorkerNotFound(TaskforceError):
    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker not found: {worker_id}")


class TaskNotFound(TaskforceError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class InvalidTaskTransition(TaskforceError):
    """A status change was requested that the task lifecycle does not allow."""


class ConcurrentUpdateError(TaskforceError):
    """A versioned write lost against a concurrent writer."""

    def __init__(self, worker_id: str, expected_version: int, actual_version: int):
        self.worker_id = worker_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Worker {worker_id} changed concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )


class StoreError(TaskforceError):
    """The document store failed for a reason other than a missing document."""
