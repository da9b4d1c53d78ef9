"""Value types for versioned table resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    """
    A desired column.

    `type` is the DDL fragment written into CREATE TABLE as-is, so it may carry
    constraints (e.g. "STRING NOT NULL PRIMARY KEY").
    """

    name: str
    type: str


@dataclass(frozen=True, slots=True)
class LiveColumn:
    """Observed column as reported by information_schema.columns."""

    name: str
    data_type: str


class ResolutionReason(StrEnum):
    CREATED_INITIAL = "created_initial"
    REUSED = "reused"
    SCHEMA_MISMATCH = "schema_mismatch"


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving a base name to a physical table."""

    table_name: str
    version: int
    reason: ResolutionReason

    @property
    def created(self) -> bool:
        return self.reason is not ResolutionReason.REUSED
