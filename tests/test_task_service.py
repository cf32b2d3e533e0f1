"""Tests for the outbound task service and task lists."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, call

import pytest
from pydantic import ValidationError

from todo_sync.errors import (
    NotFoundError,
    RemoteCloseError,
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteTransientError,
    RemoteUnavailableError,
    TodoSyncError,
)
from todo_sync.tasks import (
    NewTaskInput,
    NewTaskListInput,
    Task,
    TaskListInput,
    TaskListService,
    TaskListStore,
    TaskListUpdateInput,
    TaskService,
    TaskStore,
    TaskUpdateInput,
)
from todo_sync.todoist import TodoistTask

DUE = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _update(task_id: str = "7", **overrides) -> TaskUpdateInput:
    values = {"id": task_id, "name": "Ship", "is_completed": False, "due_date": DUE}
    values.update(overrides)
    return TaskUpdateInput(**values)


@pytest.fixture
def linked_task(task_store: TaskStore) -> Task:
    """A stored task already mirrored to remote task R7."""
    return task_store.save(Task(id="7", name="Draft", remote_id="R7"))


class TestCreate:
    """Test TaskService.create."""

    def test_create_links_remote_task(
        self, task_service: TaskService, task_store: TaskStore, mock_remote: MagicMock
    ) -> None:
        """Test that the remote ID returned by Todoist is stored on the task."""
        mock_remote.create.return_value = TodoistTask(id="R55", content="Buy milk")

        task = task_service.create(NewTaskInput(name="Buy milk"))

        mock_remote.create.assert_called_once_with("Buy milk")
        assert task.remote_id == "R55"
        assert task_store.get(task.id).remote_id == "R55"

    def test_create_defaults(self, task_service: TaskService) -> None:
        """Test default completion flag and due date."""
        before = datetime.now(timezone.utc)

        task = task_service.create(NewTaskInput(name="Buy milk"))

        assert task.is_completed is False
        assert task.due_date >= before

    def test_create_keeps_given_due_date(self, task_service: TaskService) -> None:
        """Test that an explicit due date is kept."""
        task = task_service.create(NewTaskInput(name="Buy milk", due_date=DUE, is_completed=True))

        assert task.due_date == DUE
        assert task.is_completed is True

    @pytest.mark.parametrize(
        "error",
        [RemoteTransientError("down", status_code=503), RemoteRejectedError("bad", status_code=401)],
    )
    def test_create_remote_failure_stores_nothing(
        self,
        task_service: TaskService,
        task_store: TaskStore,
        mock_remote: MagicMock,
        error: Exception,
    ) -> None:
        """Test that no unlinked task is left behind when Todoist fails."""
        mock_remote.create.side_effect = error

        with pytest.raises(RemoteUnavailableError) as exc_info:
            task_service.create(NewTaskInput(name="Buy milk"))

        assert exc_info.value.__cause__ is error
        assert task_store.all() == []


class TestUpdate:
    """Test TaskService.update."""

    def test_update_missing_task(self, task_service: TaskService, mock_remote: MagicMock) -> None:
        """Test that an unknown ID raises NotFoundError and touches nothing remote."""
        with pytest.raises(NotFoundError):
            task_service.update(_update("missing"))

        mock_remote.update.assert_not_called()

    def test_update_overwrites_fields(
        self,
        task_service: TaskService,
        task_store: TaskStore,
        mock_remote: MagicMock,
        linked_task: Task,
    ) -> None:
        """Test that local fields are overwritten and the content mirrored."""
        task = task_service.update(_update(name="Ship it"))

        mock_remote.update.assert_called_once_with("R7", "Ship it")
        assert task.name == "Ship it"
        assert task.due_date == DUE
        assert task_store.get("7").name == "Ship it"

    def test_update_not_completed_does_not_close(
        self, task_service: TaskService, mock_remote: MagicMock, linked_task: Task
    ) -> None:
        """Test that an open task triggers no close call."""
        task_service.update(_update(is_completed=False))

        mock_remote.close.assert_not_called()

    def test_update_completed_closes_once(
        self, task_service: TaskService, mock_remote: MagicMock, linked_task: Task
    ) -> None:
        """Test that completing a task closes the remote task exactly once, after the update."""
        task_service.update(_update(is_completed=True))

        mock_remote.close.assert_called_once_with("R7")
        assert mock_remote.method_calls[-2:] == [call.update("R7", "Ship"), call.close("R7")]

    def test_remote_id_is_stable(
        self, task_service: TaskService, mock_remote: MagicMock, linked_task: Task
    ) -> None:
        """Test that updates never change the remote ID."""
        mock_remote.update.return_value = TodoistTask(id="OTHER", content="Ship")

        task = task_service.update(_update(is_completed=True))

        assert task.remote_id == "R7"

    def test_update_with_new_task_list(
        self,
        task_service: TaskService,
        task_list_service: TaskListService,
        task_store: TaskStore,
        mock_remote: MagicMock,
        linked_task: Task,
    ) -> None:
        """Test completing a task and attaching it to a brand-new list."""
        task = task_service.update(
            _update(is_completed=True, task_list=TaskListInput(name="Work"))
        )

        lists = task_list_service.all()
        assert [task_list.name for task_list in lists] == ["Work"]
        assert task.task_list_id == lists[0].id
        assert task_store.get("7").task_list_id == lists[0].id
        assert task_store.get("7").is_completed is True
        mock_remote.close.assert_called_once_with("R7")

    def test_update_with_existing_task_list_is_trusted(
        self,
        task_service: TaskService,
        task_list_store: TaskListStore,
        linked_task: Task,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that an ID-only list reference is attached without touching the store."""
        lookups = MagicMock(side_effect=AssertionError("task list store consulted"))
        monkeypatch.setattr(task_list_store, "get", lookups)
        monkeypatch.setattr(task_list_store, "save", lookups)

        task = task_service.update(_update(task_list={"id": "L1"}))

        assert task.task_list_id == "L1"
        assert task_list_store.all() == []
        lookups.assert_not_called()


    def test_update_remote_transient_failure(
        self,
        task_service: TaskService,
        task_store: TaskStore,
        mock_remote: MagicMock,
        linked_task: Task,
    ) -> None:
        """Test that a failed remote update leaves the local task untouched."""
        mock_remote.update.side_effect = RemoteTransientError("down", status_code=503)

        with pytest.raises(RemoteUnavailableError):
            task_service.update(_update(name="Ship it", is_completed=True))

        assert task_store.get("7").name == "Draft"
        mock_remote.close.assert_not_called()

    def test_update_remote_task_gone(
        self, task_service: TaskService, mock_remote: MagicMock, linked_task: Task
    ) -> None:
        """Test that a deleted remote task surfaces as RemoteNotFoundError."""
        mock_remote.update.side_effect = RemoteNotFoundError("gone", status_code=404)

        with pytest.raises(RemoteNotFoundError):
            task_service.update(_update())

    def test_close_failure_keeps_update(
        self,
        task_service: TaskService,
        task_store: TaskStore,
        mock_remote: MagicMock,
        linked_task: Task,
    ) -> None:
        """Test that a failed close reports separately and keeps the saved update."""
        mock_remote.close.side_effect = RemoteTransientError("down", status_code=503)

        with pytest.raises(RemoteCloseError) as exc_info:
            task_service.update(_update(name="Ship it", is_completed=True))

        assert exc_info.value.task.id == "7"
        stored = task_store.get("7")
        assert stored.name == "Ship it"
        assert stored.is_completed is True
        mock_remote.update.assert_called_once_with("R7", "Ship it")

    def test_update_unlinked_task_links_it(
        self, task_service: TaskService, task_store: TaskStore, mock_remote: MagicMock
    ) -> None:
        """Test that a task without remote ID gets mirrored on update."""
        task_store.save(Task(id="7", name="Draft"))
        mock_remote.create.return_value = TodoistTask(id="R70", content="Ship")

        task = task_service.update(_update())

        mock_remote.create.assert_called_once_with("Ship")
        mock_remote.update.assert_not_called()
        assert task.remote_id == "R70"


class TestRetryClose:
    """Test TaskService.retry_close."""

    def test_retry_close(
        self, task_service: TaskService, task_store: TaskStore, mock_remote: MagicMock
    ) -> None:
        """Test re-driving the close step alone."""
        task_store.save(Task(id="7", name="Ship", remote_id="R7", is_completed=True))

        task_service.retry_close("7")

        mock_remote.close.assert_called_once_with("R7")
        mock_remote.update.assert_not_called()

    def test_retry_close_open_task(
        self, task_service: TaskService, mock_remote: MagicMock, linked_task: Task
    ) -> None:
        """Test that an open task cannot be closed this way."""
        with pytest.raises(TodoSyncError):
            task_service.retry_close("7")

        mock_remote.close.assert_not_called()


class TestTaskListService:
    """Test TaskListService."""

    def test_resolve_without_id_always_creates(self, task_list_service: TaskListService) -> None:
        """Test that lists are never deduplicated by name."""
        first = task_list_service.resolve(TaskListInput(name="Work"))
        second = task_list_service.resolve(TaskListInput(name="Work"))

        assert first != second
        assert sorted(task_list.id for task_list in task_list_service.all()) == sorted([first, second])

    def test_resolve_with_id(self, task_list_service: TaskListService) -> None:
        """Test that a reference with an ID is returned as-is."""
        assert task_list_service.resolve(TaskListInput(id="L9")) == "L9"
        assert task_list_service.all() == []

    def test_reference_needs_id_or_name(self) -> None:
        """Test that a list reference without ID must name the new list."""
        assert TaskListInput(id="L1").name is None

        with pytest.raises(ValidationError):
            TaskListInput()
        with pytest.raises(ValidationError):
            TaskListInput(name="")


    def test_rename(self, task_list_service: TaskListService) -> None:
        """Test renaming a list."""
        task_list = task_list_service.create(NewTaskListInput(name="Work"))

        renamed = task_list_service.update(TaskListUpdateInput(id=task_list.id, name="Office"))

        assert renamed.name == "Office"
        assert task_list_service.get(task_list.id).name == "Office"

    def test_rename_missing(self, task_list_service: TaskListService) -> None:
        """Test renaming an unknown list."""
        with pytest.raises(NotFoundError):
            task_list_service.update(TaskListUpdateInput(id="nope", name="Office"))
