"""Command-line interface for the todo synchronizer."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from todo_sync import __version__
from todo_sync.config import Config
from todo_sync.errors import RemoteCloseError, TodoSyncError
from todo_sync.server import create_app
from todo_sync.sync import SyncEngine
from todo_sync.tasks import (
    NewTaskInput,
    NewTaskListInput,
    Task,
    TaskListInput,
    TaskListService,
    TaskListStore,
    TaskListUpdateInput,
    TaskService,
    TaskStore,
    TaskUpdateInput,
)
from todo_sync.todoist import TodoistClient
from todo_sync.utils import get_logger, setup_logging

app = typer.Typer(help="Keep a local task list in sync with Todoist")
console = Console()
logger = get_logger(__name__)

CONFIG_DIR_OPTION = typer.Option(
    None,
    "--config-dir",
    help="Configuration directory. Defaults to ~/.todo-sync/",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose logging.")


def _load_config(config_dir: Optional[Path], verbose: bool = False) -> Config:
    setup_logging(
        log_level=logging.DEBUG if verbose else logging.INFO,
        config_dir=config_dir,
    )
    return Config(config_dir)


def _open_client(config: Config) -> TodoistClient:
    try:
        return TodoistClient(config.todoist_settings())
    except ValueError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1)


def _task_list_service(config: Config) -> TaskListService:
    return TaskListService(TaskListStore(config.storage))


def _task_service(config: Config, client: TodoistClient) -> TaskService:
    return TaskService(
        tasks=TaskStore(config.storage),
        task_lists=_task_list_service(config),
        remote=client,
    )


def _parse_due(due: Optional[str]) -> Optional[datetime]:
    if not due:
        return None
    try:
        parsed = datetime.fromisoformat(due)
    except ValueError:
        console.print("[red]Invalid date format. Use YYYY-MM-DD or an ISO 8601 timestamp[/red]")
        raise typer.Exit(code=1)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _print_tasks(title: str, tasks: list[Task]) -> None:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Done", style="green")
    table.add_column("Due")
    table.add_column("Todoist ID", style="yellow")
    table.add_column("List")

    for task in sorted(tasks, key=lambda t: t.due_date):
        table.add_row(
            task.id,
            task.name,
            "✓" if task.is_completed else "",
            task.due_date.strftime("%Y-%m-%d %H:%M"),
            task.remote_id or "-",
            task.task_list_id or "-",
        )

    console.print(table)


def _report_error(e: TodoSyncError) -> None:
    logger.error(str(e))
    console.print(f"[red]✗ {e}[/red]")
    raise typer.Exit(code=1)


@app.command()
def configure(config_dir: Optional[Path] = CONFIG_DIR_OPTION) -> None:
    """Store the Todoist API token and webhook secret."""
    config = _load_config(config_dir)
    storage = config.storage

    console.print("[bold cyan]Todo Sync Configuration[/bold cyan]")
    token = Prompt.ask("Enter your Todoist API token", password=True)
    storage.set_token("todoist", token)
    console.print("[green]✓ Todoist API token saved[/green]")

    secret = Prompt.ask(
        "Enter your Todoist app client secret for webhook verification (optional)",
        password=True,
        default="",
        show_default=False,
    )
    if secret:
        storage.set_token("todoist_webhook", secret)
        console.print("[green]✓ Webhook secret saved[/green]")

    console.print("\n[green]Configuration complete![/green]")
    console.print("Run 'todo-sync serve' to start receiving Todoist webhooks.")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address. Defaults to settings."),
    port: Optional[int] = typer.Option(None, "--port", help="Port. Defaults to settings."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run the webhook server that applies Todoist events to local tasks."""
    config = _load_config(config_dir, verbose)
    server_settings = config.server_settings()
    sync_settings = config.sync_settings()

    with _open_client(config) as client:
        engine = SyncEngine(
            remote=client,
            tasks=TaskStore(config.storage),
            create_missing=sync_settings.create_missing_on_update,
        )
        web_app = create_app(engine, webhook_secret=server_settings.webhook_secret)
        if not server_settings.webhook_secret:
            logger.warning("No webhook secret configured, deliveries are not verified")

        logger.info(f"Todo Sync v{__version__} listening for Todoist webhooks")
        uvicorn.run(
            web_app,
            host=host or server_settings.host,
            port=port or server_settings.port,
            log_config=None,
        )


@app.command()
def add(
    name: str = typer.Argument(..., help="Task name."),
    completed: bool = typer.Option(False, "--completed", help="Create the task as completed."),
    due: Optional[str] = typer.Option(None, "--due", help="Due date (ISO 8601). Defaults to now."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Create a task and mirror it to Todoist."""
    config = _load_config(config_dir, verbose)
    due_date = _parse_due(due)

    with _open_client(config) as client:
        service = _task_service(config, client)
        try:
            task = service.create(NewTaskInput(name=name, is_completed=completed, due_date=due_date))
        except TodoSyncError as e:
            _report_error(e)

    console.print(f"[green]✓ Created task {task.id} (Todoist {task.remote_id})[/green]")


@app.command()
def update(
    task_id: str = typer.Argument(..., help="Local task ID."),
    name: Optional[str] = typer.Option(None, "--name", help="New name. Defaults to the current name."),
    completed: bool = typer.Option(False, "--completed", help="Mark the task as completed."),
    due: Optional[str] = typer.Option(None, "--due", help="Due date (ISO 8601). Defaults to the current one."),
    list_id: Optional[str] = typer.Option(None, "--list-id", help="Attach to an existing task list."),
    list_name: Optional[str] = typer.Option(None, "--list-name", help="Attach to a new task list with this name."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Update a task and mirror the change to Todoist."""
    config = _load_config(config_dir, verbose)
    due_date = _parse_due(due)

    with _open_client(config) as client:
        service = _task_service(config, client)
        try:
            current = service.get(task_id)
            task_list = None
            if list_id:
                task_list = TaskListInput(id=list_id)
            elif list_name:
                task_list = TaskListInput(name=list_name)

            task = service.update(
                TaskUpdateInput(
                    id=task_id,
                    name=name or current.name,
                    is_completed=completed or current.is_completed,
                    due_date=due_date or current.due_date,
                    task_list=task_list,
                )
            )
        except RemoteCloseError as e:
            console.print(f"[yellow]Task {e.task.id} updated, but closing it in Todoist failed.[/yellow]")
            console.print(f"Run: todo-sync close {e.task.id}")
            raise typer.Exit(code=1)
        except TodoSyncError as e:
            _report_error(e)

    console.print(f"[green]✓ Updated task {task.id}[/green]")


@app.command()
def close(
    task_id: str = typer.Argument(..., help="Local task ID."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Retry closing a completed task in Todoist."""
    config = _load_config(config_dir, verbose)

    with _open_client(config) as client:
        try:
            task = _task_service(config, client).retry_close(task_id)
        except TodoSyncError as e:
            _report_error(e)

    console.print(f"[green]✓ Closed Todoist task {task.remote_id}[/green]")


@app.command()
def tasks(
    open_only: bool = typer.Option(False, "--open", help="Only show tasks that are not completed."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """List local tasks."""
    config = _load_config(config_dir)
    store = TaskStore(config.storage)
    found = store.uncompleted() if open_only else store.all()

    if not found:
        console.print("[yellow]No tasks yet.[/yellow]")
        return
    _print_tasks("Open Tasks" if open_only else "Tasks", found)


@app.command()
def lists(config_dir: Optional[Path] = CONFIG_DIR_OPTION) -> None:
    """List task lists."""
    config = _load_config(config_dir)
    task_lists = _task_list_service(config).all()

    if not task_lists:
        console.print("[yellow]No task lists yet.[/yellow]")
        return

    table = Table(title="Task Lists")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="magenta")
    for task_list in task_lists:
        table.add_row(task_list.id, task_list.name)
    console.print(table)


@app.command("list-create")
def list_create(
    name: str = typer.Argument(..., help="Task list name."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """Create a task list."""
    config = _load_config(config_dir)
    task_list = _task_list_service(config).create(NewTaskListInput(name=name))
    console.print(f"[green]✓ Created task list {task_list.id} ({task_list.name})[/green]")


@app.command("list-rename")
def list_rename(
    list_id: str = typer.Argument(..., help="Task list ID."),
    name: str = typer.Argument(..., help="New name."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """Rename a task list."""
    config = _load_config(config_dir)
    try:
        task_list = _task_list_service(config).update(TaskListUpdateInput(id=list_id, name=name))
    except TodoSyncError as e:
        _report_error(e)

    console.print(f"[green]✓ Renamed task list {task_list.id} to {task_list.name}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"Todo Sync v{__version__}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
