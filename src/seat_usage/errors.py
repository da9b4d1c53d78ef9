"""
Exception hierarchy for the loader.

- QueryExecutionError and its subclasses wrap failures raised by the warehouse
  while running a statement; they keep the offending SQL for logging.
- ConfigurationError and SourceFileError cover problems detected before any
  statement is sent.

Nothing in the loader catches these to downgrade them; a failure aborts the run.
"""

from __future__ import annotations


class SeatUsageError(Exception):
    """Base class for every error raised by the loader."""


class ConfigurationError(SeatUsageError):
    """Required configuration is missing or invalid."""


class SourceFileError(SeatUsageError):
    """The CSV export is missing or lacks required headers."""


class QueryExecutionError(SeatUsageError):
    """A statement failed in the warehouse."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


class CatalogReadError(QueryExecutionError):
    """An information_schema query failed."""


class DdlExecutionError(QueryExecutionError):
    """A CREATE TABLE statement failed."""


class TableAlreadyExistsError(DdlExecutionError):
    """CREATE TABLE failed because another writer created the table first."""


class MergeExecutionError(QueryExecutionError):
    """A MERGE upsert failed."""
