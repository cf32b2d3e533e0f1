"""Utility modules for the todo synchronizer."""

from todo_sync.utils.logging import get_logger, setup_logging
from todo_sync.utils.storage import StorageManager

__all__ = ["get_logger", "setup_logging", "StorageManager"]
