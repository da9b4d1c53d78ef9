"""
Identifier utilities for versioned tables.

This module defines:
- Canonical table identity dataclass: TableIdentity.
- Helpers to quote and format qualified names.
- The version naming convention: `base` for version 0, `base_v<N>` otherwise.

Conventions:
- Verbs: quote_*, format_*.
- Identifiers are quoted with backticks, embedded backticks doubled.
"""

from __future__ import annotations

from dataclasses import dataclass

from seat_usage.constants import VERSION_SUFFIX


# -----------------------------
# Core name data structure
# -----------------------------


@dataclass(frozen=True)
class TableIdentity:
    """A physical table within a family of schema-evolved versions."""

    schema_name: str
    base_name: str
    version: int = 0
    catalog_name: str | None = None

    def __post_init__(self) -> None:
        if self.version < 0:
            raise ValueError(f"Table version must be non-negative, got {self.version}")

    @property
    def table_name(self) -> str:
        """Physical table name: `base` or `base_v<N>`."""
        return format_versioned_table_name(self.base_name, self.version)

    @property
    def qualified_name(self) -> str:
        """Backticked `[catalog.]schema.table`."""
        return quote_table_name(self.schema_name, self.table_name, self.catalog_name)


# -----------------------------
# String helpers
# -----------------------------


def quote_identifier(identifier: str) -> str:
    """Quote a single SQL identifier using backticks, doubling any embedded backticks."""
    text = str(identifier)
    return f"`{text.replace('`', '``')}`"


def quote_qualified_name(*parts: str) -> str:
    """
    Return a dot-delimited, backticked qualified name from the provided parts.

    Examples:
        quote_qualified_name("catalog", "schema", "table")
        -> "`catalog`.`schema`.`table`"

    Rules:
    - Reject None or empty parts.
    - Strips surrounding backticks on inputs to avoid double-quoting.
    """
    if not parts:
        raise ValueError("At least one name part must be provided.")

    cleaned_parts: list[str] = []
    for raw_part in parts:
        if raw_part is None:
            raise ValueError("Qualified name parts must not be None.")
        part = str(raw_part).strip()
        if part.startswith("`") and part.endswith("`") and len(part) >= 2:
            part = part[1:-1]
        if part == "":
            raise ValueError("Qualified name parts must not be empty.")
        cleaned_parts.append(quote_identifier(part))
    return ".".join(cleaned_parts)


def quote_table_name(schema_name: str, table_name: str, catalog_name: str | None = None) -> str:
    """Backticked `schema.table`, prefixed with the catalog when one is given."""
    if catalog_name:
        return quote_qualified_name(catalog_name, schema_name, table_name)
    return quote_qualified_name(schema_name, table_name)


def format_versioned_table_name(base_name: str, version: int) -> str:
    """Return `base_name` for version 0 and `base_name_v<version>` otherwise."""
    if version < 0:
        raise ValueError(f"Table version must be non-negative, got {version}")
    if version == 0:
        return base_name
    return f"{base_name}{VERSION_SUFFIX}{version}"
