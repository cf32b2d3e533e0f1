"""Todoist API client."""

import logging
import time
import uuid
from typing import Any

import httpx

from todo_sync.config import TodoistSettings
from todo_sync.errors import (
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteTransientError,
)
from todo_sync.todoist.models import TodoistTask

logger = logging.getLogger(__name__)

# Throttling is treated like a server fault: back off and try again
TRANSIENT_STATUS_CODES = {429}

# Todoist drops a write it has already applied under the same request ID
REQUEST_ID_HEADER = "X-Request-Id"


class TodoistClient:
    """Client for the Todoist REST API.

    Implements the remote half of the mirror: fetch, create, update and close
    of a single task. Transport failures are classified into
    ``RemoteTransientError`` (retried with exponential backoff),
    ``RemoteNotFoundError`` and ``RemoteRejectedError`` (never retried).
    """

    def __init__(
        self,
        settings: TodoistSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Todoist client.

        Args:
            settings: Connection settings carrying the API token.
            transport: Optional httpx transport (used by tests).
        """
        self.settings = settings
        self.client = httpx.Client(
            base_url=settings.base_url,
            headers={
                "Authorization": f"Bearer {settings.api_token}",
                "Accept": "application/json",
            },
            timeout=settings.timeout,
            transport=transport,
        )

    def fetch(self, remote_id: str) -> TodoistTask:
        """Get a task.

        Args:
            remote_id: Todoist task ID.

        Returns:
            The task as currently stored by Todoist.

        Raises:
            RemoteNotFoundError: If the task does not exist.
            RemoteTransientError: If retries are exhausted.
            RemoteRejectedError: If Todoist refuses the request.
        """
        response = self._request("GET", f"/tasks/{remote_id}")
        return self._parse_task(response)

    def create(self, content: str) -> TodoistTask:
        """Create a task.

        Args:
            content: Task content (its display name).

        Returns:
            The created task with the ID assigned by Todoist.
        """
        response = self._write("/tasks", json={"content": content})
        return self._parse_task(response)

    def update(self, remote_id: str, content: str) -> TodoistTask:
        """Update a task's content.

        Args:
            remote_id: Todoist task ID.
            content: New content.

        Returns:
            The updated task.

        Raises:
            RemoteNotFoundError: If the task no longer exists.
        """
        response = self._write(f"/tasks/{remote_id}", json={"content": content})
        return self._parse_task(response)

    def close(self, remote_id: str) -> None:
        """Mark a task as completed.

        Args:
            remote_id: Todoist task ID.

        Raises:
            RemoteNotFoundError: If the task no longer exists.
        """
        self._write(f"/tasks/{remote_id}/close")

    def _write(self, url: str, **kwargs: Any) -> httpx.Response:
        """POST with one request ID shared by every retry of this write."""
        headers = {REQUEST_ID_HEADER: str(uuid.uuid4())}
        return self._request("POST", url, headers=headers, **kwargs)

    def _parse_task(self, response: httpx.Response) -> TodoistTask:
        """Parse a task response body.

        Raises:
            RemoteRejectedError: If the body is not a valid task.
        """
        try:
            return TodoistTask(**response.json())
        except (ValueError, TypeError) as e:
            raise RemoteRejectedError(
                f"Unexpected Todoist response for {response.request.url.path}: {e}",
                status_code=response.status_code,
            ) from e

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            RemoteTransientError: If every attempt failed transiently.
        """
        attempt = 1
        while True:
            try:
                return self._send(method, url, **kwargs)
            except RemoteTransientError as e:
                if attempt >= self.settings.max_attempts:
                    logger.error(f"{method} {url} failed after {attempt} attempts: {e}")
                    raise
                delay = min(
                    self.settings.backoff_base * 2 ** (attempt - 1),
                    self.settings.backoff_max,
                )
                logger.warning(
                    f"{method} {url} failed (attempt {attempt}/{self.settings.max_attempts}): {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                time.sleep(delay)
                attempt += 1

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a single request and classify the outcome."""
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteTransientError(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            raise RemoteTransientError(f"Transport error: {e}") from e

        status = response.status_code
        if status == 404:
            raise RemoteNotFoundError(f"Todoist resource not found: {url}", status_code=status)
        if status >= 500 or status in TRANSIENT_STATUS_CODES:
            raise RemoteTransientError(f"Todoist returned {status}", status_code=status)
        if status >= 400:
            raise RemoteRejectedError(
                f"Todoist rejected request with {status}: {response.text}",
                status_code=status,
            )
        return response

    def close_client(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "TodoistClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close_client()
