"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from todo_sync.config import Config, TodoistSettings
from todo_sync.errors import RemoteNotFoundError
from todo_sync.tasks import TaskListService, TaskListStore, TaskService, TaskStore
from todo_sync.todoist import TodoistClient, TodoistTask
from todo_sync.utils import StorageManager


class FakeTodoist:
    """In-memory stand-in for the Todoist API."""

    def __init__(self) -> None:
        self.remote_tasks: dict[str, TodoistTask] = {}
        self.fetch_calls: list[str] = []
        self._next_id = 100

    def add(self, remote_id: str, content: str, is_completed: bool = False) -> TodoistTask:
        task = TodoistTask(id=remote_id, content=content, is_completed=is_completed)
        self.remote_tasks[remote_id] = task
        return task

    def fetch(self, remote_id: str) -> TodoistTask:
        self.fetch_calls.append(remote_id)
        if remote_id not in self.remote_tasks:
            raise RemoteNotFoundError(f"Todoist resource not found: /tasks/{remote_id}", status_code=404)
        return self.remote_tasks[remote_id]

    def create(self, content: str) -> TodoistTask:
        self._next_id += 1
        return self.add(str(self._next_id), content)


@pytest.fixture
def temp_config_dir() -> Path:
    """Create a temporary configuration directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_manager(temp_config_dir: Path) -> StorageManager:
    """Create a storage manager with temporary directory."""
    return StorageManager(temp_config_dir)


@pytest.fixture
def config(temp_config_dir: Path) -> Config:
    """Create a config instance with temporary directory."""
    return Config(temp_config_dir)


@pytest.fixture
def todoist_settings() -> TodoistSettings:
    """Settings with no backoff delay so retries run instantly."""
    return TodoistSettings(
        api_token="test_token",
        base_url="https://todoist.test/rest/v2",
        max_attempts=3,
        backoff_base=0,
    )


@pytest.fixture
def task_store(storage_manager: StorageManager) -> TaskStore:
    """Create a task store."""
    return TaskStore(storage_manager)


@pytest.fixture
def task_list_store(storage_manager: StorageManager) -> TaskListStore:
    """Create a task list store."""
    return TaskListStore(storage_manager)


@pytest.fixture
def task_list_service(task_list_store: TaskListStore) -> TaskListService:
    """Create a task list service."""
    return TaskListService(task_list_store)


@pytest.fixture
def mock_remote() -> MagicMock:
    """Create a mock Todoist client."""
    remote = MagicMock(spec=TodoistClient)
    remote.create.return_value = TodoistTask(id="R1", content="created")
    remote.update.return_value = TodoistTask(id="R1", content="updated")
    remote.close.return_value = None
    return remote


@pytest.fixture
def task_service(
    task_store: TaskStore,
    task_list_service: TaskListService,
    mock_remote: MagicMock,
) -> TaskService:
    """Create a task service backed by the mock Todoist client."""
    return TaskService(tasks=task_store, task_lists=task_list_service, remote=mock_remote)


@pytest.fixture
def fake_todoist() -> FakeTodoist:
    """Create an in-memory Todoist."""
    return FakeTodoist()
