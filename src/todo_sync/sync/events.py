"""Parsing and validation of Todoist webhook deliveries."""

import base64
import hashlib
import hmac
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from todo_sync.errors import InvalidEventError

SIGNATURE_HEADER = "X-Todoist-Hmac-SHA256"


class EventType(str, Enum):
    """Webhook events the sync engine acts on."""

    ADDED = "item:added"
    UPDATED = "item:updated"
    COMPLETED = "item:completed"


class EventData(BaseModel):
    """The part of ``event_data`` the sync engine trusts: the task ID only."""

    model_config = ConfigDict(extra="ignore")

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("task id must not be empty")
        return value


class WebhookEvent(BaseModel):
    """A webhook delivery reduced to its event name and remote task ID."""

    model_config = ConfigDict(extra="ignore")

    event_name: str
    event_data: EventData

    @property
    def remote_task_id(self) -> str:
        return self.event_data.id

    @property
    def event_type(self) -> EventType | None:
        """The event type, or None for events the engine does not handle."""
        try:
            return EventType(self.event_name)
        except ValueError:
            return None


def parse_event(payload: Any) -> WebhookEvent:
    """Validate a decoded webhook payload.

    Args:
        payload: Decoded JSON body.

    Returns:
        The parsed event.

    Raises:
        InvalidEventError: If the payload lacks an event name or task ID.
    """
    if not isinstance(payload, dict):
        raise InvalidEventError("Webhook payload must be a JSON object")
    try:
        return WebhookEvent.model_validate(payload)
    except ValidationError as e:
        raise InvalidEventError(f"Invalid webhook payload: {e}") from e


def compute_signature(body: bytes, secret: str) -> str:
    """Compute the base64 HMAC-SHA256 signature Todoist sends with a delivery."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_signature(body: bytes, signature: str | None, secret: str) -> None:
    """Check a delivery's signature.

    Raises:
        InvalidEventError: If the signature is missing or does not match.
    """
    if not signature:
        raise InvalidEventError(f"Missing {SIGNATURE_HEADER} header")
    if not hmac.compare_digest(compute_signature(body, secret), signature):
        raise InvalidEventError("Webhook signature does not match")
