"""Read table names and column layouts from information_schema."""

from __future__ import annotations

from seat_usage.errors import CatalogReadError, QueryExecutionError
from seat_usage.execute.ports import QueryExecutor, RowMapping
from seat_usage.sql import Statement, sql_select_columns_for_table, sql_select_tables_with_prefix
from seat_usage.versioning.models import LiveColumn


class CatalogReader:
    """Read-only catalog access used by version resolution."""

    def __init__(self, executor: QueryExecutor, catalog_name: str | None = None) -> None:
        self._executor = executor
        self.catalog_name = catalog_name

    # ---------- public ----------

    def list_candidate_tables(self, schema_name: str, base_name: str) -> list[str]:
        """
        Every table in `schema_name` whose name starts with `base_name`, ordered by name.

        May include names such as `users2` for base `users`; version parsing
        filters those out.
        """
        statement = sql_select_tables_with_prefix(schema_name, base_name, self.catalog_name)
        rows = self._read(statement)
        return [self._value(row, "table_name") for row in rows]

    def read_columns(self, schema_name: str, table_name: str) -> list[LiveColumn]:
        """Columns of one table in ordinal position order (empty if the table is absent)."""
        statement = sql_select_columns_for_table(schema_name, table_name, self.catalog_name)
        rows = self._read(statement)
        return [
            LiveColumn(name=self._value(row, "column_name"), data_type=self._value(row, "data_type"))
            for row in rows
        ]

    # ---------- helpers ----------

    def _read(self, statement: Statement) -> list[RowMapping]:
        try:
            return self._executor.execute(statement.sql, statement.binds)
        except CatalogReadError:
            raise
        except QueryExecutionError as error:
            raise CatalogReadError(f"Catalog query failed: {error}", sql=statement.sql) from error

    @staticmethod
    def _value(row: RowMapping, column: str) -> str:
        """Fetch `column` from a row, tolerating catalogs that upper-case result keys."""
        if column in row:
            return row[column]
        return row[column.upper()]
