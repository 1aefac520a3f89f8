"""
Main CLI entry point for tasklog.

This module provides the command-line interface using typer.
"""

import logging
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from ..core.summary import TaskSummary
from ..core.task_logger import TaskLogger, UpdateTarget
from ..db.models import Task, TaskTime, WorkDate
from ..db.schema import OpenMode
from ..exceptions import TaskLogError
from ..utils.config import get_config_manager
from ..utils.formatting import format_duration_hhmm, format_optional_time

# Create the main typer app
app = typer.Typer(
    name="tasklog",
    help="tasklog: log the tasks of your working day",
    add_completion=False,
)

# Initialize consoles for rich output
console = Console()
err_console = Console(stderr=True)


def get_task_logger(mode: OpenMode = OpenMode.READ_WRITE) -> TaskLogger:
    """Open the task logger on the configured database."""
    config = get_config_manager()
    return TaskLogger(
        config.get_db_path(), mode=mode, break_time_name=config.get_break_time_name()
    )


def _parse_time(value: Optional[str]) -> Optional[TaskTime]:
    return TaskTime.parse_from_str_hhmm(value) if value is not None else None


def _confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes or not get_config_manager().should_confirm_destructive():
        return True
    return Confirm.ask(prompt, default=False)


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Reinitialize the database if it already exists"
    ),
) -> None:
    """Initialize a database or reinitialize an existing one."""
    try:
        task_logger = get_task_logger(OpenMode.READ_WRITE_CREATE)
        if force and task_logger.is_initialized():
            if not _confirm("All logged tasks will be lost. Continue?", False):
                console.print("[dim]Operation canceled[/dim]")
                return

        if task_logger.initialize(force=force):
            console.print(f"[green]✓[/green] Database created: {task_logger.db_path}")
        else:
            console.print(f"Database already exists: {task_logger.db_path}")
            console.print("[dim]Use --force to recreate[/dim]")
    except TaskLogError as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def register(task_name: str = typer.Argument(..., help="Task name to register")) -> None:
    """Register a task name."""
    try:
        get_task_logger().register_name(task_name)
        console.print(f"[green]✓[/green] Registered: [bold]{task_name}[/bold]")
    except TaskLogError as e:
        console.print(f"[red]Error registering task: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def unregister(
    task_name: str = typer.Argument(..., help="Task name to unregister"),
) -> None:
    """Unregister a task name."""
    try:
        get_task_logger().unregister_name(task_name)
        console.print(f"[green]✓[/green] Unregistered: [bold]{task_name}[/bold]")
    except TaskLogError as e:
        console.print(f"[red]Error unregistering task: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def tasks() -> None:
    """Show registered task names."""
    try:
        names = get_task_logger(OpenMode.READ_ONLY).list_names()
    except TaskLogError as e:
        console.print(f"[red]Error showing tasks: {e}[/red]")
        raise typer.Exit(1)

    if not names:
        console.print("[dim]No task names registered[/dim]")
        return

    table = Table(show_edge=False, box=None)
    table.add_column("No", justify="right", style="bold")
    table.add_column("Task")
    for seq_num, name in names:
        table.add_row(str(seq_num), name)
    console.print(table)


@app.command()
def start(
    task_number: Optional[int] = typer.Argument(
        None, help="Task number in the task name list"
    ),
    break_time: bool = typer.Option(False, "--break", "-b", help="Start a break time"),
    time: Optional[str] = typer.Option(None, "--time", "-t", help="Start time, HHMM"),
) -> None:
    """Start a task, ending the current one."""
    if break_time and task_number is not None:
        console.print("[red]Give either a task number or --break, not both[/red]")
        raise typer.Exit(1)

    try:
        ended, started = get_task_logger().start_task(
            task_number=task_number, is_break_time=break_time, time=_parse_time(time)
        )
    except TaskLogError as e:
        console.print(f"[red]Error starting task: {e}[/red]")
        raise typer.Exit(1)

    if ended is not None:
        console.print(
            f"[yellow]{ended.name} ended at {format_optional_time(ended.end_time)}[/yellow]"
        )
    console.print(
        f"[green]✓[/green] [bold]{started.name}[/bold] started at "
        f"{started.start_time.to_string_hhmm()}"
    )


@app.command()
def end(
    time: Optional[str] = typer.Option(None, "--time", "-t", help="End time, HHMM"),
) -> None:
    """End the current task."""
    try:
        ended = get_task_logger().end_task(_parse_time(time))
    except TaskLogError as e:
        console.print(f"[red]Error ending task: {e}[/red]")
        raise typer.Exit(1)

    if ended is None:
        console.print("[yellow]No task to end[/yellow]")
        return

    console.print(
        f"[green]✓[/green] [bold]{ended.name}[/bold] ended at "
        f"{format_optional_time(ended.end_time)}"
    )


@app.command("list")
def list_tasks(
    show_all: bool = typer.Option(
        False, "--all", "-a", help="Show all task logs instead of one day"
    ),
    date: Optional[str] = typer.Option(
        None, "--date", "-d", help="Working date, YYYY-MM-DD or YYYYMMDD"
    ),
) -> None:
    """List logged tasks with a summary of the day."""
    try:
        working_date = WorkDate.parse_from_str(date) if date else WorkDate.today()
        task_logger = get_task_logger(OpenMode.READ_ONLY)
        entries = task_logger.list_tasks(working_date, show_all=show_all)
        summary = None if show_all else task_logger.summarize(working_date)
    except TaskLogError as e:
        console.print(f"[red]Error listing tasks: {e}[/red]")
        raise typer.Exit(1)

    _print_task_list(entries)
    if summary is not None:
        console.print()
        _print_summary(summary)


@app.command()
def update(
    task_number: int = typer.Argument(..., help="Task number in today's task list"),
    target: UpdateTarget = typer.Argument(..., help="Field to update"),
    value: str = typer.Argument(..., help="New value; HHMM for start and end"),
) -> None:
    """Update a logged task of today."""
    try:
        updated = get_task_logger().update_task(task_number, target, value)
    except TaskLogError as e:
        console.print(f"[red]Error updating task: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] Updated task {task_number}: [bold]{updated.name}[/bold] "
        f"{updated.start_time.to_string_hhmm()} - {format_optional_time(updated.end_time)}"
    )


@app.command()
def delete(
    task_number: int = typer.Argument(..., help="Task number in today's task list"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a logged task of today."""
    try:
        task_logger = get_task_logger()
        task = task_logger.get_task_by_seq(task_number)

        err_console.print(
            f'"{task.name}" started at {task.working_date} '
            f"{task.start_time.to_string_hhmm()}"
        )
        if not _confirm("Really delete?", yes):
            console.print("[dim]Operation canceled[/dim]")
            return

        task_logger.delete_task(task_number)
        console.print(f"[green]✓[/green] Task {task_number} deleted")
    except TaskLogError as e:
        console.print(f"[red]Error deleting task: {e}[/red]")
        raise typer.Exit(1)


@app.command("show-manager")
def show_manager() -> None:
    """Show the current task pointer for debugging."""
    err_console.print(
        "[bold red]Warning[/bold red]: This command shows the internal status "
        "for debugging the application.\n"
    )
    try:
        current = get_task_logger(OpenMode.READ_ONLY).get_current_task()
    except TaskLogError as e:
        console.print(f"[red]Error reading current task: {e}[/red]")
        raise typer.Exit(1)

    table = Table(show_header=False, show_edge=False, pad_edge=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Task ID", str(current.task_id) if current.task_id is not None else "")
    table.add_row("Task", current.task_name or "")
    table.add_row("Started", str(current.start_time) if current.start_time else "")
    console.print(table)


@app.command("reset-manager")
def reset_manager(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Reset the current task pointer for debugging."""
    err_console.print(
        "[bold red]Warning[/bold red]: This operation can be dangerous. "
        "It may break your database.\n"
    )
    if not _confirm("Do you wish to continue?", yes):
        console.print("[dim]Operation canceled[/dim]")
        return

    try:
        get_task_logger().reset_current_task()
    except TaskLogError as e:
        console.print(f"[red]Error resetting current task: {e}[/red]")
        raise typer.Exit(1)
    console.print("Manager has been reset.")


@app.command()
def version() -> None:
    """Show tasklog version information."""
    from .. import __version__

    console.print(f"tasklog version {__version__}")


def _print_task_list(entries: List[Tuple[int, Task]]) -> None:
    """Print logged tasks as a table."""
    table = Table(show_edge=False, box=None, header_style="bold")
    table.add_column("Date")
    table.add_column("No", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Duration", justify="right")
    table.add_column("Task")

    for seq_num, task in entries:
        table.add_row(
            str(task.working_date),
            str(seq_num),
            task.start_time.to_string_hhmm(),
            format_optional_time(task.end_time),
            task.duration_hhmm(),
            task.name,
        )
    console.print(table)


def _print_summary(summary: TaskSummary) -> None:
    """Print the summary of a working date."""
    console.print("[bold]Summary[/bold]")

    total = Table(header_style="bold")
    total.add_column("Start")
    total.add_column("End")
    total.add_column("Duration", justify="right")
    total.add_row(
        summary.start.to_string_hhmm(),
        summary.end.to_string_hhmm(),
        format_duration_hhmm(summary.duration_total),
    )
    console.print(total)

    durations = Table(header_style="bold")
    durations.add_column("Task")
    durations.add_column("Duration", justify="right")
    for name in sorted(summary.duration_by_name):
        durations.add_row(name, format_duration_hhmm(summary.duration_by_name[name]))
    console.print(durations)

    breaks = Table(header_style="bold")
    breaks.add_column("Break")
    if summary.break_times:
        for task in summary.break_times:
            breaks.add_row(
                f"{task.start_time.to_string_hhmm()} - {format_optional_time(task.end_time)}"
            )
    else:
        breaks.add_row("NA")
    console.print(breaks)


def version_callback(value: bool) -> None:
    """Version callback that prints version and exits."""
    if value:
        version()
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    tasklog: log the tasks of your working day.

    Working days start at 05:00, so late night work belongs to the day before.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


if __name__ == "__main__":
    app()
