"""Sync engine applying Todoist webhook events to local tasks."""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from todo_sync.errors import RemoteNotFoundError, TodoSyncError
from todo_sync.sync.events import EventType, WebhookEvent
from todo_sync.sync.ports import LocalTaskLookup, RemoteSource
from todo_sync.tasks.models import Task
from todo_sync.todoist.models import TodoistTask

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """What applying an event did to the local task store."""

    CREATED = "created"
    UPDATED = "updated"
    DISCARDED = "discarded"
    IGNORED = "ignored"


class SyncOutcome:
    """Result of applying one webhook event."""

    def __init__(self, event: WebhookEvent, action: SyncAction, task: Task | None = None) -> None:
        self.event = event
        self.action = action
        self.task = task

    def __str__(self) -> str:
        task_id = self.task.id if self.task else "-"
        return f"{self.event.event_name} {self.event.remote_task_id}: {self.action.value} (task {task_id})"


class KeyedLock:
    """Hands out one lock per key, dropping locks nobody holds or waits for."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]


class SyncEngine:
    """Applies inbound Todoist events to the local task store.

    Event content is never trusted: the task is re-fetched from Todoist and
    the fetched values overwrite the local ones, so duplicate or reordered
    deliveries converge on the same state. Events for the same remote ID are
    serialized; unrelated IDs are processed concurrently. This path never
    writes to Todoist.
    """

    def __init__(
        self,
        remote: RemoteSource,
        tasks: LocalTaskLookup,
        create_missing: bool = True,
    ) -> None:
        """Initialize sync engine.

        Args:
            remote: Source of authoritative remote task content.
            tasks: Local task lookup and persistence.
            create_missing: Whether updated/completed events for an unknown
                remote ID create the local task (True) or are discarded.
        """
        self.remote = remote
        self.tasks = tasks
        self.create_missing = create_missing
        self._locks = KeyedLock()

    def apply_remote_event(self, event: WebhookEvent) -> SyncOutcome:
        """Apply a webhook event.

        Args:
            event: Parsed webhook event.

        Returns:
            The outcome, holding the resulting task unless discarded or ignored.

        Raises:
            TodoSyncError: If fetching or persisting failed; the event should be redelivered.
        """
        event_type = event.event_type
        if event_type is None:
            logger.info(f"Ignoring unsupported event {event.event_name} for remote task {event.remote_task_id}")
            return SyncOutcome(event, SyncAction.IGNORED)

        with self._locks.hold(event.remote_task_id):
            try:
                outcome = self._apply(event, event_type)
            except TodoSyncError as e:
                logger.error(
                    f"Failed to apply {event.event_name} for remote task {event.remote_task_id}: {e}"
                )
                raise

        logger.info(f"Applied {outcome}")
        return outcome

    def _apply(self, event: WebhookEvent, event_type: EventType) -> SyncOutcome:
        remote_id = event.remote_task_id
        try:
            remote_task = self.remote.fetch(remote_id)
        except RemoteNotFoundError:
            logger.info(f"Remote task {remote_id} no longer exists, discarding {event.event_name}")
            return SyncOutcome(event, SyncAction.DISCARDED)

        task = self.tasks.find_by_remote_id(remote_id)
        if task is not None:
            return SyncOutcome(event, SyncAction.UPDATED, self._overwrite(task, remote_task))

        if event_type is not EventType.ADDED and not self.create_missing:
            logger.warning(f"No local task for remote task {remote_id}, discarding {event.event_name}")
            return SyncOutcome(event, SyncAction.DISCARDED)

        if event_type is not EventType.ADDED:
            logger.warning(f"No local task for remote task {remote_id} on {event.event_name}, creating it")

        task, created = self.tasks.find_or_create_by_remote_id(
            remote_id,
            lambda: Task(
                name=remote_task.content,
                is_completed=remote_task.is_completed,
                remote_id=remote_id,
            ),
        )
        if not created:
            # Another writer stored it between the lookup and the create
            return SyncOutcome(event, SyncAction.UPDATED, self._overwrite(task, remote_task))
        return SyncOutcome(event, SyncAction.CREATED, task)

    def _overwrite(self, task: Task, remote_task: TodoistTask) -> Task:
        task.name = remote_task.content
        task.is_completed = remote_task.is_completed
        return self.tasks.save(task)
