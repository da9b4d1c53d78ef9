"""
Execution port.

- QueryExecutor: protocol for anything that can run a SQL statement with
  positional bind values and return its rows (Spark SQL, fakes, etc.)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypeAlias

RowMapping: TypeAlias = dict[str, Any]


class QueryExecutor(Protocol):
    """
    Run one statement and return its rows as column-name → value mappings.

    Implementations raise `QueryExecutionError` (or a subclass) on failure and
    `TableAlreadyExistsError` when a CREATE TABLE loses to an existing table.
    """

    def execute(self, sql: str, binds: Sequence[Any] | None = None) -> list[RowMapping]: ...
