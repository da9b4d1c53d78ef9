"""
Versioned table manager.

Flow (one resolution):
  1) List the tables whose name starts with the base name.
  2) Pick the highest recognised version (`base` = 0, `base_vN` = N).
  3) No version found → create `base`.
  4) Compare the latest version's live columns with the desired columns:
     equal → reuse it; different → create `base_v{latest + 1}`.

Tables are never altered: every schema change yields a new, higher version.

CREATE TABLE runs without IF NOT EXISTS. If another writer created the same
name between our read and our write, the executor raises
TableAlreadyExistsError and resolution starts over from step 1. Two diverging
schemas never share a version.
"""

from __future__ import annotations

from collections.abc import Sequence

from seat_usage.constants import DEFAULT_MAX_CREATE_ATTEMPTS
from seat_usage.errors import DdlExecutionError, QueryExecutionError, TableAlreadyExistsError
from seat_usage.execute.ports import QueryExecutor
from seat_usage.identifiers import TableIdentity
from seat_usage.logger import LOGGER
from seat_usage.sql import sql_create_table
from seat_usage.versioning.catalog import CatalogReader
from seat_usage.versioning.comparator import columns_match
from seat_usage.versioning.models import ColumnDefinition, Resolution, ResolutionReason
from seat_usage.versioning.resolver import pick_latest


class VersionedTableManager:
    """Resolve a base name to a physical table whose schema matches, creating one if needed."""

    def __init__(
        self,
        executor: QueryExecutor,
        catalog_name: str | None = None,
        max_attempts: int = DEFAULT_MAX_CREATE_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._executor = executor
        self._catalog = CatalogReader(executor, catalog_name=catalog_name)
        self.catalog_name = catalog_name
        self.max_attempts = max_attempts

    # ----- public API -----

    def get_or_create_versioned_table(
        self,
        schema_name: str,
        base_name: str,
        desired_columns: Sequence[ColumnDefinition],
    ) -> str:
        """Return the name of the table to load into."""
        return self.resolve(schema_name, base_name, desired_columns).table_name

    def resolve(
        self,
        schema_name: str,
        base_name: str,
        desired_columns: Sequence[ColumnDefinition],
    ) -> Resolution:
        """Resolve (and create if needed) the table for `base_name`, reporting how."""
        if not desired_columns:
            raise ValueError(f"Cannot resolve table '{base_name}' with no desired columns.")

        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._resolve_once(schema_name, base_name, desired_columns)
            except TableAlreadyExistsError:
                if attempt == self.max_attempts:
                    raise
                LOGGER.warning(
                    "Table for '%s.%s' was created concurrently; re-resolving (attempt %d of %d)",
                    schema_name,
                    base_name,
                    attempt + 1,
                    self.max_attempts,
                )
        raise AssertionError("unreachable")  # pragma: no cover

    # ----- steps -----

    def _resolve_once(
        self,
        schema_name: str,
        base_name: str,
        desired_columns: Sequence[ColumnDefinition],
    ) -> Resolution:
        candidates = self._catalog.list_candidate_tables(schema_name, base_name)
        latest = pick_latest(base_name, candidates)

        if latest is None:
            initial = TableIdentity(schema_name, base_name, 0, self.catalog_name)
            self._create(initial, desired_columns)
            LOGGER.info("Created initial table %s.%s", schema_name, initial.table_name)
            return Resolution(initial.table_name, 0, ResolutionReason.CREATED_INITIAL)

        latest_name, latest_version = latest
        live_columns = self._catalog.read_columns(schema_name, latest_name)
        if columns_match(live_columns, desired_columns):
            LOGGER.info("Reusing table %s.%s (version %d)", schema_name, latest_name, latest_version)
            return Resolution(latest_name, latest_version, ResolutionReason.REUSED)

        successor = TableIdentity(schema_name, base_name, latest_version + 1, self.catalog_name)
        self._create(successor, desired_columns)
        LOGGER.info(
            "Schema of %s.%s differs from desired columns; created %s.%s",
            schema_name,
            latest_name,
            schema_name,
            successor.table_name,
        )
        return Resolution(
            successor.table_name, successor.version, ResolutionReason.SCHEMA_MISMATCH
        )

    def _create(self, identity: TableIdentity, desired_columns: Sequence[ColumnDefinition]) -> None:
        statement = sql_create_table(
            identity.schema_name, identity.table_name, desired_columns, identity.catalog_name
        )
        try:
            self._executor.execute(statement.sql, statement.binds)
        except DdlExecutionError:
            raise
        except QueryExecutionError as error:
            raise DdlExecutionError(
                f"Failed to create table {identity.table_name}: {error}", sql=statement.sql
            ) from error


def get_or_create_versioned_table(
    executor: QueryExecutor,
    schema_name: str,
    base_name: str,
    desired_columns: Sequence[ColumnDefinition],
    catalog_name: str | None = None,
) -> str:
    """Convenience wrapper around `VersionedTableManager.get_or_create_versioned_table`."""
    manager = VersionedTableManager(executor, catalog_name=catalog_name)
    return manager.get_or_create_versioned_table(schema_name, base_name, desired_columns)
