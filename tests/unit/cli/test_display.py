"""Tests for CLI display functions."""

import datetime
import io
from unittest.mock import patch

from rich.console import Console

from dbtransfer.cli.display import (
    display_error,
    display_run_summary,
    display_task_progress,
    display_tasks,
)
from dbtransfer.core.models import (
    DataTransferTask,
    DestinationProfile,
    TaskProgressEvent,
    TransferResult,
    create_multi_task_result,
)


class TestDisplayFunctions:
    """Test Rich display functions for behavioral outcomes."""

    def setup_method(self):
        self.console_output = io.StringIO()
        self.console = Console(file=self.console_output, width=120, legacy_windows=False)

    def get_output(self) -> str:
        return self.console_output.getvalue()

    def test_display_error_escapes_markup(self):
        with patch("dbtransfer.cli.display.console", self.console):
            display_error("bad value [sqlite3.OperationalError]")
        assert "bad value [sqlite3.OperationalError]" in self.get_output()

    def test_display_task_progress(self):
        with patch("dbtransfer.cli.display.console", self.console):
            display_task_progress(TaskProgressEvent("wards", 2, 3, False))
        output = self.get_output()
        assert "[2/3]" in output
        assert "wards" in output

    def test_display_tasks(self):
        tasks = [
            DataTransferTask("wards", "SELECT *\n  FROM WARDS", "wards"),
            DataTransferTask(
                "sales", "SELECT * FROM SALES", "sales", destination_server_key="reports"
            ),
            DataTransferTask(
                "staff", "SELECT * FROM STAFF", "staff", destination_server_key="gone"
            ),
        ]
        profiles = {
            "reports": DestinationProfile("reports", "pg", "dw", "etl", "secret")
        }
        with patch("dbtransfer.cli.display.console", self.console):
            display_tasks(tasks, profiles, "Host=pg;Database=dw;Password=secret")

        output = self.get_output()
        assert "Password=****" in output
        assert "secret" not in output
        assert "SELECT * FROM WARDS" in output
        assert "reports (pg:5432/dw)" in output
        assert "gone (missing, uses default)" in output

    def test_names_are_not_read_as_markup(self):
        tasks = [DataTransferTask("[red]x", "SELECT 1", "[bold]t")]
        result = create_multi_task_result(
            [TransferResult("[red]x", True, 1, 1)],
            total_tasks=1,
            duration=datetime.timedelta(seconds=1),
        )
        with patch("dbtransfer.cli.display.console", self.console):
            display_tasks(tasks, {}, "sqlite:///dest.db")
            display_run_summary(result)

        output = self.get_output()
        assert output.count("[red]x") == 2
        assert "[bold]t" in output

    def test_display_run_summary(self):
        result = create_multi_task_result(
            [
                TransferResult("wards", True, 4, 4),
                TransferResult(
                    "sales",
                    False,
                    72,
                    10,
                    error_message="disk full",
                    failed_stage="writing",
                ),
            ],
            total_tasks=2,
            duration=datetime.timedelta(seconds=1.5),
        )
        with patch("dbtransfer.cli.display.console", self.console):
            display_run_summary(result)

        output = self.get_output()
        assert "failed (writing)" in output
        assert "10/72" in output
        assert "1 of 2 tasks failed" in output
        assert "sales: disk full" in output
