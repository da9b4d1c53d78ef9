"""
MERGE upserts for users and metrics.

- Users: match on id; matched rows get the latest name, others are inserted.
- Metrics: match on (seat_id, start_date, end_date); only new periods are inserted.

Records are sent in batches of bound VALUES rows. Callers pass deduplicated
records: a MERGE source must not hold two rows for the same key.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

from seat_usage.errors import MergeExecutionError, QueryExecutionError
from seat_usage.execute.ports import QueryExecutor
from seat_usage.ingest.records import (
    METRIC_COLUMNS,
    METRIC_KEY_COLUMNS,
    USER_COLUMNS,
    USER_KEY_COLUMNS,
    MetricRecord,
    UserRecord,
)
from seat_usage.logger import LOGGER
from seat_usage.sql import Statement, sql_merge_values

DEFAULT_BATCH_SIZE = 1000

_T = TypeVar("_T")

_USER_COLUMN_NAMES = tuple(column.name for column in USER_COLUMNS)
_METRIC_COLUMN_NAMES = tuple(column.name for column in METRIC_COLUMNS)
_METRIC_CASTS = {"start_date": "TIMESTAMP", "end_date": "TIMESTAMP"}


def batched(items: Sequence[_T], size: int) -> Iterator[Sequence[_T]]:
    """Yield consecutive slices of at most `size` items."""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def upsert_users(
    executor: QueryExecutor,
    qualified_table: str,
    users: Sequence[UserRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Merge users into `qualified_table`; returns the number of source rows sent."""
    LOGGER.info("Upserting users into %s ...", qualified_table)
    if not users:
        LOGGER.info("No users found to upsert.")
        return 0

    for batch in batched(users, batch_size):
        statement = sql_merge_values(
            qualified_table,
            columns=_USER_COLUMN_NAMES,
            key_columns=USER_KEY_COLUMNS,
            rows=[user.as_row() for user in batch],
            update_columns=("name",),
        )
        _run_merge(executor, statement, qualified_table)
    LOGGER.info("Upserted %d user(s).", len(users))
    return len(users)


def upsert_metrics(
    executor: QueryExecutor,
    qualified_table: str,
    metrics: Sequence[MetricRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Insert metrics for periods not yet present in `qualified_table`; returns rows sent."""
    LOGGER.info("Upserting metrics into %s ...", qualified_table)
    if not metrics:
        LOGGER.info("No metrics found to upsert.")
        return 0

    for batch in batched(metrics, batch_size):
        statement = sql_merge_values(
            qualified_table,
            columns=_METRIC_COLUMN_NAMES,
            key_columns=METRIC_KEY_COLUMNS,
            rows=[metric.as_row() for metric in batch],
            casts=_METRIC_CASTS,
        )
        _run_merge(executor, statement, qualified_table)
    LOGGER.info("Upserted %d metric row(s).", len(metrics))
    return len(metrics)


def _run_merge(executor: QueryExecutor, statement: Statement, qualified_table: str) -> None:
    try:
        executor.execute(statement.sql, statement.binds)
    except QueryExecutionError as error:
        raise MergeExecutionError(
            f"MERGE into {qualified_table} failed: {error}", sql=statement.sql
        ) from error
