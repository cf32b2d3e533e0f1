"""Pydantic models for local tasks and task lists."""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def new_id() -> str:
    """Generate a new local entity ID."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(timezone.utc)


class TaskList(BaseModel):
    """Named grouping of tasks. Local only, never mirrored."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)


class Task(BaseModel):
    """A unit of work, optionally mirrored to a Todoist task."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    is_completed: bool = Field(default=False, alias="isCompleted")
    due_date: datetime = Field(default_factory=utc_now, alias="dueDate")
    remote_id: str | None = Field(default=None, alias="remoteId")
    task_list_id: str | None = Field(default=None, alias="taskListId")

    @property
    def is_linked(self) -> bool:
        """Whether the task is mirrored to a remote task."""
        return self.remote_id is not None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to the JSON representation served to clients."""
        return self.model_dump(mode="json", by_alias=True)


class NewTaskInput(BaseModel):
    """Input for creating a task."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    is_completed: bool = Field(default=False, alias="isCompleted")
    due_date: datetime | None = Field(default=None, alias="dueDate")


class TaskListInput(BaseModel):
    """Reference to an existing list (``id``) or a list to create (``name``)."""

    id: str | None = None
    name: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def require_name_for_new_list(self) -> "TaskListInput":
        if not self.id and self.name is None:
            raise ValueError("name is required when no list id is given")
        return self


class TaskUpdateInput(BaseModel):
    """Input for updating a task."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(min_length=1)
    is_completed: bool = Field(alias="isCompleted")
    due_date: datetime = Field(alias="dueDate")
    task_list: TaskListInput | None = Field(default=None, alias="taskList")


class NewTaskListInput(BaseModel):
    """Input for creating a task list."""

    name: str = Field(min_length=1)


class TaskListUpdateInput(BaseModel):
    """Input for renaming a task list."""

    id: str
    name: str = Field(min_length=1)
