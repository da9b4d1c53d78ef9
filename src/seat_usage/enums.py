"""Enumerations used throughout the loader."""

from enum import StrEnum


class SourceColumn(StrEnum):
    """Header names in the seat-usage CSV export."""

    SEAT_ID = "Seat id"
    SEAT_HOLDER_NAME = "Seat holder name"
    PROFILES_VIEWED = "Profiles viewed"
    PROFILES_SAVED_TO_PROJECT = "Profiles saved to project"
    INMAILS_SENT = "InMails sent"
    INMAILS_ACCEPTED = "InMails accepted"
    INMAILS_DECLINED = "InMails declined"
    START_DATE = "Start date"
    END_DATE = "End date"


class ColumnType(StrEnum):
    """Column types declared for the loaded tables."""

    STRING = "STRING"
    INTEGER = "INTEGER"
    TIMESTAMP = "TIMESTAMP"
    STRING_PRIMARY_KEY = "STRING NOT NULL PRIMARY KEY"
