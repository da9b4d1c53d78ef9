"""
SQL statement builders for catalog reads, table creation and MERGE upserts.

All functions return a `Statement`: SQL text with positional `?` markers plus
the values to bind, in order.

Design guarantees
- Deterministic, side-effect free generation.
- Values are always bound, never inlined; identifiers are always quoted.
- No business rules: the versioning and ingestion layers decide what to run.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from seat_usage.identifiers import quote_identifier, quote_table_name
from seat_usage.versioning.models import ColumnDefinition

_LIKE_SPECIAL_CHARACTERS = ("\\", "%", "_")


@dataclass(frozen=True)
class Statement:
    """SQL text and its positional bind values."""

    sql: str
    binds: tuple[Any, ...] = ()


def escape_like_pattern(value: str) -> str:
    """Escape LIKE wildcards so `value` only matches itself."""
    escaped = value
    for character in _LIKE_SPECIAL_CHARACTERS:
        escaped = escaped.replace(character, f"\\{character}")
    return escaped


def _information_schema(catalog_name: str | None) -> str:
    if catalog_name:
        return f"{quote_identifier(catalog_name)}.information_schema"
    return "information_schema"


def _scope_filter(catalog_name: str | None, schema_name: str) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    binds: list[Any] = []
    if catalog_name:
        clauses.append("lower(table_catalog) = lower(?)")
        binds.append(catalog_name)
    clauses.append("lower(table_schema) = lower(?)")
    binds.append(schema_name)
    return " AND ".join(clauses), binds


# ---------- catalog reads ----------


def sql_select_tables_with_prefix(
    schema_name: str,
    prefix: str,
    catalog_name: str | None = None,
) -> Statement:
    """Tables in the schema whose name starts with `prefix` (case-insensitive), ordered by name."""
    scope_sql, binds = _scope_filter(catalog_name, schema_name)
    binds.append(f"{escape_like_pattern(prefix)}%")
    sql = f"""
      SELECT table_name AS table_name
      FROM {_information_schema(catalog_name)}.tables
      WHERE {scope_sql}
        AND table_name ILIKE ?
      ORDER BY table_name
    """
    return Statement(sql=sql, binds=tuple(binds))


def sql_select_columns_for_table(
    schema_name: str,
    table_name: str,
    catalog_name: str | None = None,
) -> Statement:
    """(column_name, data_type) rows for one table, in ordinal position order."""
    scope_sql, binds = _scope_filter(catalog_name, schema_name)
    binds.append(table_name)
    sql = f"""
      SELECT
        column_name AS column_name,
        data_type   AS data_type
      FROM {_information_schema(catalog_name)}.columns
      WHERE {scope_sql}
        AND lower(table_name) = lower(?)
      ORDER BY ordinal_position
    """
    return Statement(sql=sql, binds=tuple(binds))


# ---------- DDL ----------


def render_column_definition(column: ColumnDefinition) -> str:
    """Render: `name` TYPE [constraints]"""
    return f"{quote_identifier(column.name)} {column.type.strip()}"


def sql_create_table(
    schema_name: str,
    table_name: str,
    columns: Sequence[ColumnDefinition],
    catalog_name: str | None = None,
) -> Statement:
    """
    CREATE TABLE ... (...) USING DELTA.

    No IF NOT EXISTS: an existing table must raise so the caller can
    re-resolve the version.
    """
    if not columns:
        raise ValueError("CREATE TABLE requires at least one column.")
    quoted = quote_table_name(schema_name, table_name, catalog_name)
    columns_sql = ", ".join(render_column_definition(column) for column in columns)
    return Statement(sql=f"CREATE TABLE {quoted} ({columns_sql}) USING DELTA")


# ---------- DML ----------


def sql_merge_values(
    qualified_target: str,
    columns: Sequence[str],
    key_columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    update_columns: Sequence[str] = (),
    casts: Mapping[str, str] | None = None,
) -> Statement:
    """
    MERGE INTO target USING (VALUES (?, ...), ...) AS source (...).

    - `key_columns` build the ON clause with null-safe equality (`<=>`), so
      rows with a NULL key part still match on re-load.
    - `update_columns` (optional) produce WHEN MATCHED THEN UPDATE SET ...;
      without them matched rows are left untouched.
    - `casts` maps a column to a SQL type wrapped around its marker, e.g.
      {"start_date": "TIMESTAMP"} renders `CAST(? AS TIMESTAMP)`.
    """
    if not rows:
        raise ValueError("MERGE requires at least one source row.")
    if not key_columns:
        raise ValueError("MERGE requires at least one key column.")
    unknown = [c for c in (*key_columns, *update_columns) if c not in columns]
    if unknown:
        raise ValueError(f"MERGE columns not in source: {unknown}")

    casts = casts or {}
    markers = [f"CAST(? AS {casts[c]})" if c in casts else "?" for c in columns]
    row_sql = f"({', '.join(markers)})"

    binds: list[Any] = []
    for row in rows:
        if len(row) != len(columns):
            raise ValueError(f"Expected {len(columns)} values per row, got {len(row)}")
        binds.extend(row)

    quoted_columns = [quote_identifier(c) for c in columns]
    on_sql = " AND ".join(
        f"target.{quote_identifier(c)} <=> source.{quote_identifier(c)}" for c in key_columns
    )

    parts = [
        f"MERGE INTO {qualified_target} AS target",
        f"USING (VALUES {', '.join([row_sql] * len(rows))}) AS source ({', '.join(quoted_columns)})",
        f"ON {on_sql}",
    ]
    if update_columns:
        set_sql = ", ".join(
            f"target.{quote_identifier(c)} = source.{quote_identifier(c)}" for c in update_columns
        )
        parts.append(f"WHEN MATCHED THEN UPDATE SET {set_sql}")
    source_columns = ", ".join(f"source.{c}" for c in quoted_columns)
    parts.append(
        f"WHEN NOT MATCHED THEN INSERT ({', '.join(quoted_columns)}) VALUES ({source_columns})"
    )
    return Statement(sql="\n".join(parts), binds=tuple(binds))
