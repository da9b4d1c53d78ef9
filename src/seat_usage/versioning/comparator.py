"""Ordered schema equality between a live table and desired columns."""

from __future__ import annotations

from collections.abc import Sequence

from seat_usage.versioning.models import ColumnDefinition, LiveColumn
from seat_usage.versioning.types import base_type, normalize_type


def column_matches(live: LiveColumn, desired: ColumnDefinition) -> bool:
    """Names equal case-insensitively and types equal after normalisation."""
    if live.name.lower() != desired.name.lower():
        return False
    return normalize_type(live.data_type) == normalize_type(base_type(desired.type))


def columns_match(
    live_columns: Sequence[LiveColumn],
    desired_columns: Sequence[ColumnDefinition],
) -> bool:
    """
    Return True only when both sides have the same columns in the same order.

    There is no notion of a compatible superset: an extra, missing, renamed,
    retyped or reordered column is a mismatch.
    """
    if len(live_columns) != len(desired_columns):
        return False
    return all(
        column_matches(live, desired) for live, desired in zip(live_columns, desired_columns)
    )
