"""Keyed persistence for tasks and task lists."""

import logging
import threading
from typing import Callable

from todo_sync.errors import IntegrityError, NotFoundError
from todo_sync.tasks.models import Task, TaskList
from todo_sync.utils.storage import StorageManager

logger = logging.getLogger(__name__)


class TaskStore:
    """Stores tasks in a JSON document, indexed by local ID and remote ID.

    Every read-modify-write cycle runs under a single re-entrant lock, which
    makes ``find_or_create_by_remote_id`` atomic within the process.
    """

    DOCUMENT = "tasks"

    def __init__(self, storage: StorageManager) -> None:
        """Initialize task store.

        Args:
            storage: StorageManager that owns the data directory.
        """
        self.storage = storage
        self._lock = threading.RLock()

    def _load(self) -> dict[str, Task]:
        data = self.storage.load_document(self.DOCUMENT)
        return {
            task_id: Task.model_validate(item)
            for task_id, item in data.get("tasks", {}).items()
        }

    def _dump(self, tasks: dict[str, Task]) -> None:
        self.storage.save_document(
            self.DOCUMENT,
            {"tasks": {task_id: task.to_api_dict() for task_id, task in tasks.items()}},
        )

    def get(self, task_id: str) -> Task:
        """Get a task by local ID.

        Raises:
            NotFoundError: If no task has this ID.
        """
        with self._lock:
            task = self._load().get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def find_by_remote_id(self, remote_id: str) -> Task | None:
        """Find the task mirrored to a remote task.

        Raises:
            IntegrityError: If more than one task holds the remote ID.
        """
        with self._lock:
            matches = [t for t in self._load().values() if t.remote_id == remote_id]
        if len(matches) > 1:
            ids = ", ".join(t.id for t in matches)
            logger.error(f"Remote ID {remote_id} is held by several tasks: {ids}")
            raise IntegrityError(f"Remote ID {remote_id} is held by several tasks: {ids}")
        return matches[0] if matches else None

    def save(self, task: Task) -> Task:
        """Insert or replace a task.

        Raises:
            IntegrityError: If another task already holds the task's remote ID,
                or the stored task is linked to a different remote ID.
        """
        with self._lock:
            tasks = self._load()
            existing = tasks.get(task.id)
            if existing and existing.remote_id and existing.remote_id != task.remote_id:
                raise IntegrityError(
                    f"Task {task.id} is linked to remote task {existing.remote_id}, "
                    f"refusing to relink it to {task.remote_id}"
                )
            if task.remote_id:
                for other in tasks.values():
                    if other.id != task.id and other.remote_id == task.remote_id:
                        raise IntegrityError(
                            f"Remote ID {task.remote_id} already belongs to task {other.id}"
                        )
            tasks[task.id] = task
            self._dump(tasks)
        logger.debug(f"Saved task {task.id} (remote {task.remote_id})")
        return task

    def find_or_create_by_remote_id(
        self,
        remote_id: str,
        factory: Callable[[], Task],
    ) -> tuple[Task, bool]:
        """Atomically find the task for a remote ID or create it.

        Args:
            remote_id: Remote task ID.
            factory: Builds the task to store when none exists.

        Returns:
            The task and whether it was created.
        """
        with self._lock:
            task = self.find_by_remote_id(remote_id)
            if task is not None:
                return task, False
            task = factory()
            if task.remote_id != remote_id:
                raise IntegrityError(
                    f"Factory built task with remote ID {task.remote_id}, expected {remote_id}"
                )
            return self.save(task), True

    def all(self) -> list[Task]:
        """Get all tasks."""
        with self._lock:
            return list(self._load().values())

    def uncompleted(self) -> list[Task]:
        """Get all tasks that are not completed."""
        return [task for task in self.all() if not task.is_completed]


class TaskListStore:
    """Stores task lists in a JSON document."""

    DOCUMENT = "task_lists"

    def __init__(self, storage: StorageManager) -> None:
        self.storage = storage
        self._lock = threading.RLock()

    def _load(self) -> dict[str, TaskList]:
        data = self.storage.load_document(self.DOCUMENT)
        return {
            list_id: TaskList.model_validate(item)
            for list_id, item in data.get("task_lists", {}).items()
        }

    def get(self, list_id: str) -> TaskList:
        """Get a task list by ID.

        Raises:
            NotFoundError: If no list has this ID.
        """
        with self._lock:
            task_list = self._load().get(list_id)
        if task_list is None:
            raise NotFoundError("task list", list_id)
        return task_list

    def save(self, task_list: TaskList) -> TaskList:
        """Insert or replace a task list."""
        with self._lock:
            lists = self._load()
            lists[task_list.id] = task_list
            self.storage.save_document(
                self.DOCUMENT,
                {"task_lists": {list_id: item.model_dump() for list_id, item in lists.items()}},
            )
        return task_list

    def all(self) -> list[TaskList]:
        """Get all task lists."""
        with self._lock:
            return list(self._load().values())
