"""
Spark SQL adapter for the QueryExecutor port.

Statements run eagerly (`collect()`) so failures surface at the call site, not
lazily on first use of a DataFrame.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from py4j.protocol import Py4JJavaError
from pyspark.errors import PySparkException
from pyspark.sql import SparkSession

from seat_usage.errors import QueryExecutionError, TableAlreadyExistsError
from seat_usage.execute.ports import RowMapping
from seat_usage.logger import LOGGER

_ALREADY_EXISTS_ERROR_CLASSES = frozenset(
    {"TABLE_OR_VIEW_ALREADY_EXISTS", "TABLE_ALREADY_EXISTS", "DELTA_TABLE_ALREADY_EXISTS"}
)


def _error_class(error: PySparkException) -> str | None:
    """Return the Spark error class/condition, whichever this PySpark version exposes."""
    for getter in ("getCondition", "getErrorClass"):
        method = getattr(error, getter, None)
        if method is not None:
            value = method()
            if value:
                return str(value)
    return None


def is_already_exists_error(error: PySparkException) -> bool:
    """True when Spark rejected a CREATE because the table is already there."""
    error_class = _error_class(error)
    if error_class is not None:
        return error_class.split(".")[0] in _ALREADY_EXISTS_ERROR_CLASSES
    return "already exists" in str(error).lower()


class SparkQueryExecutor:
    """Run parameterised SQL through a SparkSession."""

    def __init__(self, spark: SparkSession) -> None:
        self.spark = spark

    def execute(self, sql: str, binds: Sequence[Any] | None = None) -> list[RowMapping]:
        args = list(binds) if binds else None
        LOGGER.debug("Executing SQL with %d bind value(s): %s", len(args or ()), sql.strip())
        try:
            rows = self.spark.sql(sql, args=args).collect()
        except PySparkException as error:
            if is_already_exists_error(error):
                raise TableAlreadyExistsError(str(error), sql=sql) from error
            LOGGER.error("Query failed: %s", type(error).__name__)
            raise QueryExecutionError(str(error), sql=sql) from error
        except Py4JJavaError as error:
            LOGGER.error("Query failed in the JVM: %s", type(error).__name__)
            raise QueryExecutionError(str(error), sql=sql) from error
        return [row.asDict() for row in rows]
