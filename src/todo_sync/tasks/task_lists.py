"""Task list management."""

import logging

from todo_sync.tasks.models import NewTaskListInput, TaskList, TaskListInput, TaskListUpdateInput
from todo_sync.tasks.store import TaskListStore

logger = logging.getLogger(__name__)


class TaskListService:
    """Creates, renames and resolves task lists."""

    def __init__(self, store: TaskListStore) -> None:
        """Initialize task list service.

        Args:
            store: Task list persistence.
        """
        self.store = store

    def create(self, new_list: NewTaskListInput) -> TaskList:
        """Create a task list.

        Names are not deduplicated, two lists may share a name.
        """
        task_list = self.store.save(TaskList(name=new_list.name))
        logger.info(f"Created task list {task_list.id} ({task_list.name})")
        return task_list

    def update(self, list_update: TaskListUpdateInput) -> TaskList:
        """Rename a task list.

        Raises:
            NotFoundError: If the list does not exist.
        """
        task_list = self.store.get(list_update.id)
        task_list.name = list_update.name
        return self.store.save(task_list)

    def get(self, list_id: str) -> TaskList:
        """Get a task list by ID."""
        return self.store.get(list_id)

    def all(self) -> list[TaskList]:
        """Get all task lists."""
        return self.store.all()

    def resolve(self, list_input: TaskListInput) -> str:
        """Resolve a task list reference, creating the list when no ID is given.

        A reference with an ID is trusted as-is; its existence is not checked
        and the store is not touched.

        Args:
            list_input: Either ``{id}`` for an existing list or ``{name}`` for
                a new one.

        Returns:
            The ID of the referenced or newly created task list.
        """
        if list_input.id:
            return list_input.id
        return self.create(NewTaskListInput(name=list_input.name)).id
