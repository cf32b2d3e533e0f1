"""Pydantic models for Todoist API responses."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TodoistTask(BaseModel):
    """Todoist task model."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    content: str
    is_completed: bool = Field(default=False, alias="isCompleted")
    project_id: str | None = Field(default=None, alias="projectId")
    url: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")

    @field_validator("id", "project_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        """Todoist ids are strings, older payloads send integers."""
        if isinstance(value, int):
            return str(value)
        return value
