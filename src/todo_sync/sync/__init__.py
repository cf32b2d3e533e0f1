"""Synchronization of Todoist webhook events into local tasks."""

from todo_sync.sync.engine import KeyedLock, SyncAction, SyncEngine, SyncOutcome
from todo_sync.sync.events import EventType, WebhookEvent, parse_event, verify_signature

__all__ = [
    "EventType",
    "KeyedLock",
    "SyncAction",
    "SyncEngine",
    "SyncOutcome",
    "WebhookEvent",
    "parse_event",
    "verify_signature",
]
