"""
Parse the seat-usage CSV export into user and metric records.

The export is read with Spark (all columns as strings); everything after that
is plain Python over row mappings so it can be tested without a session.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from pyspark.sql import SparkSession

from seat_usage.enums import SourceColumn
from seat_usage.errors import SourceFileError
from seat_usage.ingest.records import MetricKey, MetricRecord, UserRecord
from seat_usage.logger import LOGGER

SourceRow = Mapping[str, str | None]

_NUMBER_NOISE = str.maketrans("", "", '",')

# Unity Catalog volume paths look local but are only mounted on the cluster.
_VOLUME_PREFIX = "/Volumes/"


@dataclass(frozen=True)
class ParsedExport:
    """Deduplicated records ready for upsert."""

    users: tuple[UserRecord, ...]
    metrics: tuple[MetricRecord, ...]
    rows_read: int
    rows_skipped: int = 0


# ---------- field parsing ----------


def parse_number(value: str | None) -> int:
    """
    Parse a counter such as `"1,234"`; quotes and thousands separators are stripped.

    Empty or unparseable values count as 0. Fractions are truncated.
    """
    cleaned = (value or "").translate(_NUMBER_NOISE).strip()
    if not cleaned:
        return 0
    try:
        return int(cleaned)
    except ValueError:
        pass
    try:
        number = float(cleaned)
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def truncate_date(value: str | None) -> str | None:
    """Drop a trailing time component: '2024-01-31 00:00:00' -> '2024-01-31'. Empty -> None."""
    text = (value or "").strip()
    if not text:
        return None
    return text.split(" ")[0]


# ---------- rows ----------


def validate_headers(headers: Sequence[str]) -> None:
    """Raise SourceFileError when any expected export header is missing."""
    present = set(headers)
    missing = [column.value for column in SourceColumn if column.value not in present]
    if missing:
        raise SourceFileError(f"CSV export is missing column(s): {', '.join(missing)}")


def parse_row(row: SourceRow) -> tuple[UserRecord, MetricRecord]:
    """Map one export row onto a user and a metric record."""
    seat_id = (row.get(SourceColumn.SEAT_ID) or "").strip()
    user = UserRecord(id=seat_id, name=(row.get(SourceColumn.SEAT_HOLDER_NAME) or "").strip())
    metric = MetricRecord(
        seat_id=seat_id,
        profiles_viewed=parse_number(row.get(SourceColumn.PROFILES_VIEWED)),
        profiles_saved_to_project=parse_number(row.get(SourceColumn.PROFILES_SAVED_TO_PROJECT)),
        inmails_sent=parse_number(row.get(SourceColumn.INMAILS_SENT)),
        inmails_accepted=parse_number(row.get(SourceColumn.INMAILS_ACCEPTED)),
        inmails_declined=parse_number(row.get(SourceColumn.INMAILS_DECLINED)),
        start_date=truncate_date(row.get(SourceColumn.START_DATE)),
        end_date=truncate_date(row.get(SourceColumn.END_DATE)),
    )
    return user, metric


def deduplicate_users(users: Iterable[UserRecord]) -> tuple[UserRecord, ...]:
    """One record per id; the first occurrence wins."""
    by_id: dict[str, UserRecord] = {}
    for user in users:
        by_id.setdefault(user.id, user)
    return tuple(by_id.values())


def deduplicate_metrics(metrics: Iterable[MetricRecord]) -> tuple[MetricRecord, ...]:
    """One record per (seat_id, start_date, end_date); the first occurrence wins."""
    by_key: dict[MetricKey, MetricRecord] = {}
    for metric in metrics:
        by_key.setdefault(metric.key, metric)
    return tuple(by_key.values())


def parse_rows(rows: Iterable[SourceRow]) -> ParsedExport:
    """Parse every row and deduplicate. Rows without a seat id are skipped."""
    users: list[UserRecord] = []
    metrics: list[MetricRecord] = []
    rows_read = 0
    rows_skipped = 0
    for rows_read, row in enumerate(rows, start=1):
        user, metric = parse_row(row)
        if not user.id:
            rows_skipped += 1
            LOGGER.warning("Skipping row %d: no seat id", rows_read)
            continue
        users.append(user)
        metrics.append(metric)

    return ParsedExport(
        users=deduplicate_users(users),
        metrics=deduplicate_metrics(metrics),
        rows_read=rows_read,
        rows_skipped=rows_skipped,
    )


# ---------- reading ----------


def is_local_path(csv_path: str) -> bool:
    """
    True when `csv_path` names a file on the local filesystem.

    URIs such as `dbfs:/...` or `abfss://...` and `/Volumes/...` paths are
    resolved by Spark; a single-letter scheme is a Windows drive.
    """
    if csv_path.startswith(_VOLUME_PREFIX):
        return False
    return len(urlsplit(csv_path).scheme) <= 1


def read_csv_rows(spark: SparkSession, csv_path: str) -> list[dict[str, str | None]]:
    """Read the export as string columns and return its rows as dicts."""
    if is_local_path(csv_path) and not Path(csv_path).is_file():
        raise SourceFileError(f"CSV export not found: {csv_path}")

    LOGGER.info("Reading CSV export %s", csv_path)
    df = spark.read.options(header=True, inferSchema=False, multiLine=True, escape='"').csv(
        csv_path
    )
    validate_headers(df.columns)
    rows = [row.asDict() for row in df.collect()]
    LOGGER.info("Read %d row(s) from %s", len(rows), csv_path)
    return rows
