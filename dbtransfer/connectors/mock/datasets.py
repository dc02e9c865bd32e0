"""Synthetic hospital datasets served by the mock source connector.

Random columns use a fixed seed, so a dataset has the same shape and the
same values every time it is generated for a given reference time.
"""

import datetime
import random
from typing import Callable, List, Tuple

import pandas as pd

from dbtransfer.connectors.buffer import ColumnDescriptor, RuntimeType, TabularBuffer

RANDOM_SEED = 42

INT = RuntimeType.INT
BIGINT = RuntimeType.BIGINT
TEXT = RuntimeType.TEXT
TIMESTAMP = RuntimeType.TIMESTAMP


def _columns(*specs: Tuple[str, RuntimeType]) -> List[ColumnDescriptor]:
    return [ColumnDescriptor(name, runtime_type) for name, runtime_type in specs]


def departments(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("ID", INT), ("CODE", TEXT), ("NAME", TEXT), ("DISPLAY_ORDER", INT),
        ("CREATED_AT", TIMESTAMP),
    )
    rows = [
        (1, "INT", "Internal Medicine", 1, _months_ago(now, 12)),
        (2, "SUR", "Surgery", 2, _months_ago(now, 12)),
        (3, "PED", "Pediatrics", 3, _months_ago(now, 11)),
        (4, "ORT", "Orthopedics", 4, _months_ago(now, 10)),
        (5, "DER", "Dermatology", 5, _months_ago(now, 9)),
    ]
    return TabularBuffer(columns, rows)


def doctors(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("CODE", TEXT), ("NAME", TEXT), ("DEPARTMENT_CODE", TEXT),
        ("DISPLAY_ORDER", INT), ("CREATED_AT", TIMESTAMP),
    )
    rows = [
        ("D001", "Taro Tanaka", "INT", 1, _months_ago(now, 10)),
        ("D002", "Hanako Suzuki", "INT", 2, _months_ago(now, 9)),
        ("D003", "Jiro Sato", "SUR", 3, _months_ago(now, 8)),
        ("D004", "Saburo Takahashi", "PED", 4, _months_ago(now, 7)),
        ("D005", "Shiro Yamamoto", "ORT", 5, _months_ago(now, 6)),
        ("D006", "Goro Watanabe", "DER", 6, _months_ago(now, 5)),
    ]
    return TabularBuffer(columns, rows)


def wards(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("ID", INT), ("CODE", TEXT), ("NAME", TEXT), ("CAPACITY", INT),
        ("DISPLAY_ORDER", INT), ("CREATED_AT", TIMESTAMP),
    )
    rows = [
        (1, "W01", "General Ward A", 50, 1, _months_ago(now, 12)),
        (2, "W02", "General Ward B", 40, 2, _months_ago(now, 12)),
        (3, "ICU", "Intensive Care Unit", 10, 3, _months_ago(now, 12)),
        (4, "W03", "Pediatric Ward", 30, 4, _months_ago(now, 11)),
    ]
    return TabularBuffer(columns, rows)


def staff(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("ID", TEXT), ("NAME", TEXT), ("JOB_TYPE_CODE", TEXT), ("CREATED_AT", TIMESTAMP),
    )
    rows = [
        ("S001", "Nurse A", "01", _months_ago(now, 10)),
        ("S002", "Nurse B", "01", _months_ago(now, 9)),
        ("S003", "Pharmacist A", "02", _months_ago(now, 8)),
        ("S004", "Radiographer A", "03", _months_ago(now, 7)),
        ("S005", "Lab Technician A", "04", _months_ago(now, 6)),
    ]
    return TabularBuffer(columns, rows)


def permissions(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(("JOB_TYPE_CODE", TEXT), ("JOB_TYPE_NAME", TEXT), ("LEVEL", INT))
    rows = [
        ("01", "Nurse", 2),
        ("02", "Pharmacist", 2),
        ("03", "Radiographer", 2),
        ("04", "Lab Technician", 2),
        ("05", "Clerk", 1),
    ]
    return TabularBuffer(columns, rows)


def outpatient_records(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("ID", INT), ("DATE", TIMESTAMP), ("DEPARTMENT_ID", INT),
        ("NEW_PATIENTS_COUNT", INT), ("RETURNING_PATIENTS_COUNT", INT),
        ("CREATED_AT", TIMESTAMP),
    )
    rng = random.Random(RANDOM_SEED)
    base_date = _midnight(now) - datetime.timedelta(days=30)
    buffer = TabularBuffer(columns)
    for day in range(30):
        date = base_date + datetime.timedelta(days=day)
        for department_id in range(1, 6):
            buffer.append_row(
                (
                    day * 5 + department_id,
                    date,
                    department_id,
                    rng.randrange(5, 20),
                    rng.randrange(20, 50),
                    date,
                )
            )
    return buffer


def inpatient_records(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("ID", INT), ("DATE", TIMESTAMP), ("WARD_ID", INT), ("DEPARTMENT_ID", INT),
        ("CURRENT_PATIENT_COUNT", INT), ("NEW_ADMISSION_COUNT", INT),
        ("DISCHARGE_COUNT", INT), ("TRANSFER_OUT_COUNT", INT),
        ("TRANSFER_IN_COUNT", INT), ("CREATED_AT", TIMESTAMP),
    )
    rng = random.Random(RANDOM_SEED)
    base_date = _midnight(now) - datetime.timedelta(days=30)
    buffer = TabularBuffer(columns)
    for day in range(30):
        date = base_date + datetime.timedelta(days=day)
        for ward_id in range(1, 5):
            buffer.append_row(
                (
                    day * 4 + ward_id,
                    date,
                    ward_id,
                    rng.randrange(1, 6),
                    rng.randrange(30, 50),
                    rng.randrange(0, 5),
                    rng.randrange(0, 5),
                    rng.randrange(0, 3),
                    rng.randrange(0, 3),
                    date,
                )
            )
    return buffer


def sales(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(
        ("DOCTOR_CODE", TEXT), ("YEAR_MONTH", TEXT), ("OUTPATIENT_SALES", BIGINT),
        ("INPATIENT_SALES", BIGINT), ("UPDATED_AT", TIMESTAMP),
    )
    rng = random.Random(RANDOM_SEED)
    doctor_codes = ["D001", "D002", "D003", "D004", "D005", "D006"]
    today = _midnight(now)
    buffer = TabularBuffer(columns)
    for month in range(12):
        target_month = _months_ago(today, month)
        year_month = target_month.strftime("%Y-%m")
        for doctor_code in doctor_codes:
            buffer.append_row(
                (
                    doctor_code,
                    year_month,
                    rng.randrange(1_000_000, 5_000_000),
                    rng.randrange(2_000_000, 8_000_000),
                    target_month,
                )
            )
    return buffer


def messages(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(("ID", INT), ("CONTENT", TEXT), ("CREATED_AT", TIMESTAMP))
    rows = [
        (1, "Scheduled system maintenance", now - datetime.timedelta(days=7)),
        (2, "Introduction of the new electronic medical record system", now - datetime.timedelta(days=5)),
        (3, "Holiday clinic schedule", now - datetime.timedelta(days=3)),
        (4, "Strengthened infection control measures", now - datetime.timedelta(days=1)),
    ]
    return TabularBuffer(columns, rows)


def generic(now: datetime.datetime) -> TabularBuffer:
    columns = _columns(("ID", INT), ("NAME", TEXT), ("CREATED_AT", TIMESTAMP))
    rows = [
        (1, "Sample data 1", now),
        (2, "Sample data 2", now),
        (3, "Sample data 3", now),
    ]
    return TabularBuffer(columns, rows)


def _midnight(moment: datetime.datetime) -> datetime.datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _months_ago(moment: datetime.datetime, months: int) -> datetime.datetime:
    return (pd.Timestamp(moment) - pd.DateOffset(months=months)).to_pydatetime()


# Checked in order; the first keyword found in the upper-cased query wins.
DATASETS: List[Tuple[str, Callable[[datetime.datetime], TabularBuffer]]] = [
    ("DEPARTMENTS", departments),
    ("DOCTORS", doctors),
    ("WARDS", wards),
    ("STAFF", staff),
    ("PERMISSIONS", permissions),
    ("OUTPATIENT_RECORDS", outpatient_records),
    ("INPATIENT_RECORDS", inpatient_records),
    ("SALES", sales),
    ("MESSAGES", messages),
]


def match_dataset(query: str) -> Tuple[str, Callable[[datetime.datetime], TabularBuffer]]:
    """Pick the dataset whose keyword appears in ``query`` (case-insensitive)."""
    upper_query = query.upper()
    for keyword, factory in DATASETS:
        if keyword in upper_query:
            return keyword, factory
    return "GENERIC", generic
