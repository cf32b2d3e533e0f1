"""Capabilities consumed by the sync engine.

The engine reads remote tasks and reads and writes local tasks through these
protocols only; it never holds the task service or the concrete client.
"""

from typing import Callable, Protocol

from todo_sync.tasks.models import Task
from todo_sync.todoist.models import TodoistTask


class RemoteSource(Protocol):
    """Remote reads used by the sync engine."""

    def fetch(self, remote_id: str) -> TodoistTask: ...


class LocalTaskLookup(Protocol):
    """Local task access used by the sync engine."""

    def find_by_remote_id(self, remote_id: str) -> Task | None: ...

    def save(self, task: Task) -> Task: ...

    def find_or_create_by_remote_id(
        self,
        remote_id: str,
        factory: Callable[[], Task],
    ) -> tuple[Task, bool]: ...
