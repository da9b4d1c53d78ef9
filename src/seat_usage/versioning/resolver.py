"""
Version parsing over a family of physical tables.

A family shares a base name: `users` is version 0, `users_v1` version 1, and so
on. Names that merely share the prefix (`users2`, `users_archive`) are not
members and resolve to -1.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from seat_usage.constants import VERSION_SUFFIX

UNRECOGNIZED_VERSION = -1


def resolve_version(base_name: str, table_name: str) -> int:
    """
    Return the version encoded in `table_name` for the family `base_name`.

    0 for the bare base name, N for `base_name_vN`, -1 for anything else.
    Comparison is case-insensitive.
    """
    if table_name.lower() == base_name.lower():
        return 0
    pattern = rf"{re.escape(base_name)}{re.escape(VERSION_SUFFIX)}([0-9]+)"
    match = re.fullmatch(pattern, table_name, flags=re.IGNORECASE)
    if match is None:
        return UNRECOGNIZED_VERSION
    return int(match.group(1))


def pick_latest(base_name: str, table_names: Iterable[str]) -> tuple[str, int] | None:
    """
    Return (table name, version) for the highest version in `table_names`.

    Unrecognised names are ignored; on equal versions the first name seen wins.
    Returns None when no name belongs to the family.
    """
    best: tuple[str, int] | None = None
    for table_name in table_names:
        version = resolve_version(base_name, table_name)
        if version == UNRECOGNIZED_VERSION:
            continue
        if best is None or version > best[1]:
            best = (table_name, version)
    return best
