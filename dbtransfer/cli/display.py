"""Rich display functions for the dbtransfer CLI."""

from typing import Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dbtransfer.connectors.connection import mask_connection_string
from dbtransfer.core.models import (
    DataTransferTask,
    DestinationProfile,
    MultiTaskTransferResult,
    TaskProgressEvent,
)

console = Console()


def display_error(message: str) -> None:
    console.print(f"❌ [bold red]Error:[/bold red] {escape(message)}")


def display_task_progress(event: TaskProgressEvent) -> None:
    status = "[green]✓[/green]" if event.task_succeeded else "[red]✗[/red]"
    console.print(
        f"{status} [{event.completed_tasks}/{event.total_tasks}] "
        f"[cyan]{escape(event.task_name)}[/cyan]"
    )


def display_tasks(
    tasks: List[DataTransferTask],
    destinations: Dict[str, DestinationProfile],
    default_destination: str,
) -> None:
    """Display configured tasks and where each one writes."""
    console.print(
        f"📡 [bold blue]Default destination:[/bold blue] "
        f"{escape(mask_connection_string(default_destination))}"
    )

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Task", style="cyan")
    table.add_column("Query", style="white", overflow="ellipsis", max_width=50)
    table.add_column("Table", style="white")
    table.add_column("Destination", style="white")
    table.add_column("Transform", style="white")

    for task in tasks:
        key = task.destination_server_key
        if not key:
            destination = "default"
        elif key in destinations:
            destination = destinations[key].describe()
        else:
            destination = f"[yellow]{escape(key)} (missing, uses default)[/yellow]"
        table.add_row(
            escape(task.name),
            escape(" ".join(task.source_query.split())),
            escape(task.destination_table),
            destination,
            "yes" if task.enable_transform else "no",
        )

    console.print(table)


def display_run_summary(result: MultiTaskTransferResult) -> None:
    """Display per-task results followed by the overall outcome."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Task", style="cyan")
    table.add_column("Status", style="white")
    table.add_column("Records", style="white", justify="right")
    table.add_column("Duration", style="white", justify="right")
    table.add_column("Error", style="red")

    for task_result in result.task_results:
        status = (
            "[green]succeeded[/green]"
            if task_result.is_success
            else f"[red]failed ({task_result.failed_stage})[/red]"
        )
        table.add_row(
            escape(task_result.task_name),
            status,
            f"{task_result.processed_records}/{task_result.total_records}",
            f"{task_result.duration.total_seconds():.2f}s",
            escape(task_result.error_message or ""),
        )

    console.print(table)

    if result.is_success:
        console.print(
            f"✅ [bold green]{result.summary()}[/bold green] "
            f"in {result.duration.total_seconds():.2f}s"
        )
    else:
        console.print(f"❌ [bold red]{escape(result.summary())}[/bold red]")
