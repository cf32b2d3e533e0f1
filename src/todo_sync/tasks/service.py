"""Local task mutations mirrored to Todoist."""

import logging

from todo_sync.errors import (
    RemoteCloseError,
    RemoteRejectedError,
    RemoteTransientError,
    RemoteUnavailableError,
    TodoSyncError,
)
from todo_sync.tasks.models import NewTaskInput, Task, TaskUpdateInput, utc_now
from todo_sync.tasks.ports import RemoteMirror
from todo_sync.tasks.store import TaskStore
from todo_sync.tasks.task_lists import TaskListService

logger = logging.getLogger(__name__)


class TaskService:
    """Creates and updates tasks, mirroring every change to the remote side."""

    def __init__(
        self,
        tasks: TaskStore,
        task_lists: TaskListService,
        remote: RemoteMirror,
    ) -> None:
        """Initialize task service.

        Args:
            tasks: Task persistence.
            task_lists: Task list service used to resolve list references.
            remote: Remote mirror receiving create/update/close calls.
        """
        self.tasks = tasks
        self.task_lists = task_lists
        self.remote = remote

    def get(self, task_id: str) -> Task:
        """Get a task by ID.

        Raises:
            NotFoundError: If the task does not exist.
        """
        return self.tasks.get(task_id)

    def create(self, new_task: NewTaskInput) -> Task:
        """Create a task and its remote mirror.

        Nothing is stored locally unless the remote task was created.

        Args:
            new_task: Task details.

        Returns:
            The stored, linked task.

        Raises:
            RemoteUnavailableError: If the remote task could not be created.
        """
        task = Task(
            name=new_task.name,
            is_completed=new_task.is_completed,
            due_date=new_task.due_date or utc_now(),
        )
        self._link(task)
        task = self.tasks.save(task)
        logger.info(f"Created task {task.id} linked to remote task {task.remote_id}")
        return task

    def update(self, task_update: TaskUpdateInput) -> Task:
        """Update a task and mirror the change.

        The remote content update and the remote close are two separate
        calls. When the close fails, the local task is already saved as
        completed and ``RemoteCloseError`` is raised so only the close step
        has to be re-driven (see ``retry_close``).

        Args:
            task_update: New task values and an optional task list reference.

        Returns:
            The stored task.

        Raises:
            NotFoundError: If the task does not exist.
            RemoteNotFoundError: If the remote task no longer exists.
            RemoteUnavailableError: If the remote update failed.
            RemoteCloseError: If the remote close failed after the update.
        """
        task = self.tasks.get(task_update.id)
        task.name = task_update.name
        task.is_completed = task_update.is_completed
        task.due_date = task_update.due_date

        if task.is_linked:
            try:
                self.remote.update(task.remote_id, task.name)
            except (RemoteTransientError, RemoteRejectedError) as e:
                logger.error(f"Error updating task {task.id} in Todoist: {e}")
                raise RemoteUnavailableError(f"Could not update remote task {task.remote_id}: {e}") from e
        else:
            logger.warning(f"Task {task.id} has no remote task yet, creating one")
            self._link(task)

        if task_update.task_list is not None:
            task.task_list_id = self.task_lists.resolve(task_update.task_list)

        task = self.tasks.save(task)
        logger.info(f"Updated task {task.id}")

        if task.is_completed:
            self._close(task)
        return task

    def retry_close(self, task_id: str) -> Task:
        """Re-drive the remote close of a completed task.

        Raises:
            NotFoundError: If the task does not exist.
            TodoSyncError: If the task is not completed or not linked.
            RemoteCloseError: If the close failed again.
        """
        task = self.tasks.get(task_id)
        if not task.is_completed or not task.is_linked:
            raise TodoSyncError(f"Task {task_id} is not a completed, linked task")
        self._close(task)
        return task

    def _link(self, task: Task) -> None:
        """Create the remote task and record its ID on the local task."""
        try:
            remote_task = self.remote.create(task.name)
        except (RemoteTransientError, RemoteRejectedError) as e:
            logger.error(f"Error creating task in Todoist: {e}")
            raise RemoteUnavailableError(f"Could not create remote task: {e}") from e
        task.remote_id = remote_task.id

    def _close(self, task: Task) -> None:
        try:
            self.remote.close(task.remote_id)
        except TodoSyncError as e:
            logger.error(f"Error closing task {task.id} in Todoist: {e}")
            raise RemoteCloseError(task, e) from e
        logger.info(f"Closed remote task {task.remote_id}")
