#!/usr/bin/env python3
"""dbtransfer CLI.

Loads a YAML configuration, runs its transfer tasks in order and prints a
summary. The process exits with 0 when every task succeeded and 1
otherwise.
"""

from typing import List, Optional

import typer

from dbtransfer.cli.display import (
    console,
    display_error,
    display_run_summary,
    display_task_progress,
    display_tasks,
)
from dbtransfer.config import TransferSettings, load_settings
from dbtransfer.connectors import create_source_connector
from dbtransfer.core.events import TransferEvents
from dbtransfer.core.orchestrator import TransferPipeline
from dbtransfer.core.transform import identity_transform, load_transform
from dbtransfer.exceptions import ConfigurationError
from dbtransfer.logging import (
    configure_logging,
    get_logger,
    parse_level,
    suppress_third_party_loggers,
)

logger = get_logger(__name__)

app = typer.Typer(
    name="dbtransfer",
    help="Copy query results from a source database into destination tables",
    add_completion=False,
)

DEFAULT_CONFIG_PATH = "transfer.yml"


def _load_settings_or_exit(config: str) -> TransferSettings:
    try:
        return load_settings(config)
    except ConfigurationError as e:
        display_error(str(e))
        raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        from dbtransfer import __version__

        console.print(f"dbtransfer v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """dbtransfer CLI - copy tables between databases, task by task."""


@app.command()
def run(
    config: str = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to the YAML configuration"
    ),
    mock: Optional[bool] = typer.Option(
        None,
        "--mock/--live",
        help="Override the configured source (mock data or live database)",
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, help="Rows per INSERT statement"
    ),
    task: Optional[List[str]] = typer.Option(
        None, "--task", "-t", help="Run only the named task (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    """Run the configured transfer tasks."""
    settings = _load_settings_or_exit(config)

    configure_logging(
        verbose=verbose,
        quiet=quiet,
        log_file=settings.log_file,
        level=parse_level(settings.log_level),
    )
    suppress_third_party_loggers()

    if mock is not None:
        settings.use_mock_source = mock
    if batch_size is not None:
        settings.batch_size = batch_size

    tasks = settings.tasks
    if task:
        unknown = [name for name in task if name not in {t.name for t in tasks}]
        if unknown:
            display_error(f"Unknown task(s): {', '.join(unknown)}")
            raise typer.Exit(code=1)
        tasks = [t for t in tasks if t.name in task]

    try:
        transform = (
            load_transform(settings.transform) if settings.transform else identity_transform
        )
        source = create_source_connector(
            use_mock=settings.use_mock_source,
            connection_string=settings.source_connection_string,
            query_timeout=settings.query_timeout_seconds,
            mock_delay=settings.mock_delay_seconds,
        )
    except ValueError as e:
        display_error(str(e))
        raise typer.Exit(code=1)

    pipeline = TransferPipeline(
        source=source,
        default_destination=settings.destination_connection_string,
        destinations=settings.destinations,
        batch_size=settings.batch_size,
        transform=transform,
        events=TransferEvents(on_task_progress=display_task_progress),
        source_description=(
            "mock" if settings.use_mock_source else settings.source_connection_string
        ),
    )
    result = pipeline.run(tasks)
    display_run_summary(result)

    if not result.is_success:
        raise typer.Exit(code=1)


@app.command("tasks")
def list_tasks(
    config: str = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to the YAML configuration"
    ),
) -> None:
    """List the configured tasks and their destinations."""
    settings = _load_settings_or_exit(config)
    display_tasks(
        settings.tasks, settings.destinations, settings.destination_connection_string
    )


if __name__ == "__main__":
    app()
