"""
End-to-end load of a seat-usage export.

Flow (one pass):
  1) Resolve the users and metrics tables (creating a new version on schema change).
  2) Parse and deduplicate the export rows.
  3) MERGE users, then metrics, into the resolved tables.

Any failure aborts the load; there is no partial-success reporting.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pyspark.sql import SparkSession

from seat_usage.config import LoaderConfig
from seat_usage.execute.ports import QueryExecutor
from seat_usage.execute.spark_executor import SparkQueryExecutor
from seat_usage.identifiers import quote_table_name
from seat_usage.ingest.parser import SourceRow, parse_rows, read_csv_rows
from seat_usage.ingest.records import METRIC_COLUMNS, USER_COLUMNS
from seat_usage.ingest.upsert import upsert_metrics, upsert_users
from seat_usage.logger import LOGGER
from seat_usage.versioning.manager import VersionedTableManager


@dataclass(frozen=True)
class LoadResult:
    """Resolved tables and the number of rows merged into each."""

    users_table: str
    metrics_table: str
    users_upserted: int
    metrics_upserted: int


def load(rows: Iterable[SourceRow], executor: QueryExecutor, config: LoaderConfig) -> LoadResult:
    """Resolve target tables, then upsert the parsed rows into them."""
    manager = VersionedTableManager(
        executor,
        catalog_name=config.catalog_name,
        max_attempts=config.max_create_attempts,
    )
    users_table = manager.get_or_create_versioned_table(
        config.schema_name, config.users_base_name, USER_COLUMNS
    )
    metrics_table = manager.get_or_create_versioned_table(
        config.schema_name, config.metrics_base_name, METRIC_COLUMNS
    )

    LOGGER.info("Parsing export rows ...")
    export = parse_rows(rows)
    LOGGER.info(
        "Parsed %d row(s): %d user(s), %d metric row(s), %d skipped",
        export.rows_read,
        len(export.users),
        len(export.metrics),
        export.rows_skipped,
    )

    users_upserted = upsert_users(
        executor,
        quote_table_name(config.schema_name, users_table, config.catalog_name),
        export.users,
    )
    metrics_upserted = upsert_metrics(
        executor,
        quote_table_name(config.schema_name, metrics_table, config.catalog_name),
        export.metrics,
    )
    return LoadResult(
        users_table=users_table,
        metrics_table=metrics_table,
        users_upserted=users_upserted,
        metrics_upserted=metrics_upserted,
    )


def run(config: LoaderConfig, spark: SparkSession) -> LoadResult:
    """Read the CSV export named in `config` and load it through Spark SQL."""
    rows = read_csv_rows(spark, config.csv_path)
    result = load(rows, SparkQueryExecutor(spark), config)
    LOGGER.info(
        "Load complete: users -> %s, metrics -> %s", result.users_table, result.metrics_table
    )
    return result
