"""Keep a local task list in sync with Todoist."""

__version__ = "0.1.0"
