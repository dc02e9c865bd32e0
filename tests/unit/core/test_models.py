"""Tests for transfer tasks, profiles, events and results."""

import datetime
import logging

import pytest

from dbtransfer.core.models import (
    DataTransferTask,
    DestinationProfile,
    LogEvent,
    MultiTaskTransferResult,
    ProgressEvent,
    TransferResult,
    create_multi_task_result,
)


class TestDataTransferTask:
    def test_from_dict(self):
        task = DataTransferTask.from_dict(
            {
                "name": " wards ",
                "source_query": "SELECT * FROM WARDS",
                "destination_table": "wards",
                "destination_server_key": "reports",
                "enable_transform": True,
            }
        )
        assert task == DataTransferTask(
            name="wards",
            source_query="SELECT * FROM WARDS",
            destination_table="wards",
            destination_server_key="reports",
            enable_transform=True,
        )

    def test_from_dict_defaults(self):
        task = DataTransferTask.from_dict(
            {"name": "a", "source_query": "SELECT 1", "destination_table": "a"}
        )
        assert task.destination_server_key is None
        assert task.enable_transform is False

    def test_from_dict_missing_fields(self):
        with pytest.raises(ValueError, match="source_query, destination_table"):
            DataTransferTask.from_dict({"name": "a", "source_query": "  "})

    def test_is_immutable(self):
        task = DataTransferTask("a", "SELECT 1", "a")
        with pytest.raises(AttributeError):
            task.name = "b"


class TestDestinationProfile:
    def test_from_dict_defaults(self):
        profile = DestinationProfile.from_dict(
            "reports", {"host": "pg", "database": "dw", "username": "etl"}
        )
        assert profile.port == 5432
        assert profile.ssl_mode == "prefer"
        assert profile.connect_timeout == 10
        assert profile.password == ""

    def test_to_url(self):
        profile = DestinationProfile(
            key="reports",
            host="pg",
            database="dw",
            username="etl",
            password="secret",
            port=6543,
        )
        url = profile.to_url()
        assert (url.host, url.port, url.database) == ("pg", 6543, "dw")
        assert url.password == "secret"
        assert url.query == {"sslmode": "prefer", "connect_timeout": "10"}
        assert profile.describe() == "reports (pg:6543/dw)"

    def test_from_dict_missing_fields(self):
        with pytest.raises(ValueError, match="host, database"):
            DestinationProfile.from_dict("reports", {"username": "etl"})

    def test_from_dict_bad_port(self):
        with pytest.raises(ValueError):
            DestinationProfile.from_dict(
                "reports",
                {"host": "pg", "database": "dw", "username": "etl", "port": "x"},
            )


def test_progress_event_percentage():
    assert ProgressEvent("a", 200, 50).percentage == 25.0
    assert ProgressEvent("a", 0, 0).percentage == 0.0


def test_log_event_str():
    assert str(LogEvent(logging.INFO, "hello", "task")) == "[task] hello"
    assert str(LogEvent(logging.INFO, "hello")) == "hello"
    assert LogEvent(logging.WARNING, "x").level_name == "WARNING"


class TestTransferResult:
    def test_success(self):
        result = TransferResult("a", True, total_records=10, processed_records=10)
        assert result.error_message is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"is_success": True, "total_records": 10, "processed_records": 5},
            {"is_success": True, "error_message": "boom"},
            {"is_success": False},
            {
                "is_success": False,
                "total_records": 1,
                "processed_records": 2,
                "error_message": "boom",
            },
        ],
    )
    def test_invariants(self, kwargs):
        with pytest.raises(ValueError):
            TransferResult("a", **kwargs)


def _ok(name, records=1):
    return TransferResult(name, True, total_records=records, processed_records=records)


def _failed(name, message="boom"):
    return TransferResult(name, False, total_records=3, error_message=message)


class TestMultiTaskTransferResult:
    def test_all_succeeded(self):
        result = create_multi_task_result(
            [_ok("a", 2), _ok("b", 3)], total_tasks=2, duration=datetime.timedelta(0)
        )
        assert result.is_success
        assert result.completed_tasks == 2
        assert result.total_records_processed == 5
        assert result.summary() == "All 2 tasks succeeded (5 records)"

    def test_success_is_and_of_tasks(self):
        result = create_multi_task_result(
            [_ok("a"), _failed("b", "table locked"), _ok("c")],
            total_tasks=3,
            duration=datetime.timedelta(0),
        )
        assert not result.is_success
        assert result.completed_tasks == 3
        assert [r.task_name for r in result.failed_tasks] == ["b"]
        assert [r.task_name for r in result.succeeded_tasks] == ["a", "c"]
        assert result.summary() == "1 of 3 tasks failed\n  - b: table locked"

    def test_run_fatal(self):
        result = create_multi_task_result(
            [], total_tasks=0, duration=datetime.timedelta(0), error_message="no tasks"
        )
        assert not result.is_success
        assert result.summary() == "Run aborted: no tasks"

    def test_empty_run_succeeds(self):
        result = create_multi_task_result([], 0, datetime.timedelta(0))
        assert result.is_success
        assert result.task_results == ()

    def test_is_immutable(self):
        result = MultiTaskTransferResult(True, 0, 0, 0)
        with pytest.raises(AttributeError):
            result.is_success = False
