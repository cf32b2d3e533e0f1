"""Configuration management for the todo synchronizer."""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from todo_sync.utils.storage import StorageManager

TOKEN_ENV_VAR = "TODOIST_API_TOKEN"
WEBHOOK_SECRET_ENV_VAR = "TODOIST_WEBHOOK_SECRET"


class TodoistSettings(BaseModel):
    """Connection settings for the Todoist REST API."""

    api_token: str
    base_url: str = "https://api.todoist.com/rest/v2"
    timeout: float = Field(default=10.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    backoff_base: float = Field(default=0.5, ge=0)
    backoff_max: float = Field(default=8.0, ge=0)


class ServerSettings(BaseModel):
    """Webhook server settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    webhook_secret: str | None = None


class SyncSettings(BaseModel):
    """Inbound synchronization policy."""

    create_missing_on_update: bool = True


class Config:
    """Manages application settings and credentials."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            config_dir: Directory for storing configuration.
        """
        self.storage = StorageManager(config_dir)
        self._settings = self.storage.load_settings()

    def get_settings(self) -> dict[str, Any]:
        """Get the raw settings dictionary."""
        return self._settings

    def update_section(self, section: str, values: dict[str, Any]) -> None:
        """Merge values into a settings section and persist them.

        Args:
            section: Section name ("todoist", "server" or "sync").
            values: Values to merge.
        """
        self._settings.setdefault(section, {}).update(values)
        self.storage.save_settings(self._settings)

    def get_api_token(self) -> str | None:
        """Get the Todoist API token.

        The environment variable wins over the stored token.
        """
        return os.environ.get(TOKEN_ENV_VAR) or self.storage.get_token("todoist")

    def todoist_settings(self) -> TodoistSettings:
        """Build Todoist connection settings.

        Raises:
            ValueError: If no API token is configured.
        """
        token = self.get_api_token()
        if not token:
            raise ValueError(
                f"Todoist API token not configured. Run 'todo-sync configure' or set {TOKEN_ENV_VAR}."
            )
        return TodoistSettings(api_token=token, **self._settings.get("todoist", {}))

    def server_settings(self) -> ServerSettings:
        """Build webhook server settings."""
        values = dict(self._settings.get("server", {}))
        secret = os.environ.get(WEBHOOK_SECRET_ENV_VAR) or self.storage.get_token("todoist_webhook")
        if secret:
            values["webhook_secret"] = secret
        return ServerSettings(**values)

    def sync_settings(self) -> SyncSettings:
        """Build inbound synchronization settings."""
        return SyncSettings(**self._settings.get("sync", {}))
