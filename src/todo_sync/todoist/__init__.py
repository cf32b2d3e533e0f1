"""Todoist API integration."""

from todo_sync.todoist.client import TodoistClient
from todo_sync.todoist.models import TodoistTask

__all__ = ["TodoistClient", "TodoistTask"]
