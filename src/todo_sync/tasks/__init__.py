"""Local tasks, task lists and outbound mirroring."""

from todo_sync.tasks.models import (
    NewTaskInput,
    NewTaskListInput,
    Task,
    TaskList,
    TaskListInput,
    TaskListUpdateInput,
    TaskUpdateInput,
)
from todo_sync.tasks.service import TaskService
from todo_sync.tasks.store import TaskListStore, TaskStore
from todo_sync.tasks.task_lists import TaskListService

__all__ = [
    "NewTaskInput",
    "NewTaskListInput",
    "Task",
    "TaskList",
    "TaskListInput",
    "TaskListService",
    "TaskListStore",
    "TaskListUpdateInput",
    "TaskService",
    "TaskStore",
    "TaskUpdateInput",
]
